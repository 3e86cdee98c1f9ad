"""
候補収集（OCR全行を1回走査して型別の候補を集める）

氏名ラベル（アンカー）の位置を先に特定し、ふりがな・氏名候補には
アンカー近傍かどうかを付与する。ふりがなは氏名欄の上に印字されるため、
上方向の窓を広めに取る。
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from config.manager import get_intake_settings

from ..models import Candidate, CandidatePool
from ..security.logger import SecurityLogger
from .field_classifiers import (
    extract_birth_date,
    extract_phone,
    extract_postal_code,
    is_valid_address,
    is_valid_furigana,
    is_valid_name,
    match_full_address,
    match_partial_address,
)
from .text_utils import normalize_text, remove_whitespace, split_lines, strip_label
from .vocabulary import get_address_vocab

logger = logging.getLogger(__name__)

_LEADING_POSTAL_RE = re.compile(r"^〒?\s*\d{3}-?\d{4}\s*")


def _address_text(line: str, label: str) -> str:
    """住所行から先頭の項目ラベルと郵便番号を除く"""
    text = strip_label(line, label)
    return _LEADING_POSTAL_RE.sub("", text) or line


def find_name_anchor(lines: List[str], label: str) -> Optional[int]:
    """氏名ラベルを含む最初の行番号（見つからなければ None）"""
    for index, line in enumerate(lines):
        if label and label in line:
            return index
    return None


def is_near_anchor(index: int, anchor: Optional[int], window: Dict[str, int]) -> bool:
    """アンカー未検出なら常に True、検出済みなら窓内かどうか"""
    if anchor is None:
        return True
    return anchor - int(window.get("before", 0)) <= index <= anchor + int(window.get("after", 0))


def collect_candidates(text: str, settings: Optional[Dict[str, Any]] = None) -> CandidatePool:
    """OCRテキストから型別の候補一式を収集（例外は送出しない前提の純粋処理）"""
    settings = settings or get_intake_settings()
    windows = settings["anchor_windows"]
    address_label = get_address_vocab().label

    lines = split_lines(normalize_text(text or ""))
    pool = CandidatePool(lines=lines)
    pool.anchor_index = find_name_anchor(lines, settings["name_anchor_label"])
    if pool.anchor_index is not None:
        logger.debug("Found name field label at line %d", pool.anchor_index)

    for index, line in enumerate(lines):
        if is_valid_furigana(line):
            pool.furiganas.append(
                Candidate(
                    text=remove_whitespace(line),
                    line_index=index,
                    is_near_anchor=is_near_anchor(index, pool.anchor_index, windows["furigana"]),
                    line=line,
                )
            )

        name_like = is_valid_name(line)
        if name_like:
            pool.names.append(
                Candidate(
                    text=line,
                    line_index=index,
                    is_near_anchor=is_near_anchor(index, pool.anchor_index, windows["name"]),
                )
            )

        if is_valid_address(line):
            pool.add_address(_address_text(line, address_label), index, "classifier")
        partial = match_partial_address(line)
        if partial:
            pool.add_address(partial, index, "partial_pattern")
        full = match_full_address(line)
        if full:
            pool.add_address(full, index, "full_pattern")

        phone = extract_phone(line)
        if phone:
            pool.phones.append(phone)

        postal_code = extract_postal_code(line)
        if postal_code:
            pool.postal_codes.append(postal_code)

        if pool.birth_date is None:
            pool.birth_date = extract_birth_date(line)

        # 氏名以外の漢字名は紹介者である可能性が高い
        if name_like:
            pool.referral_persons.append(line)

    SecurityLogger.safe_log_debug(
        "Collected candidates",
        {
            "name": [c.text for c in pool.names],
            "furigana": [c.text for c in pool.furiganas],
            "address": [a.text for a in pool.addresses],
            "phone": pool.phones,
            "postal_code": pool.postal_codes,
        },
    )
    return pool
