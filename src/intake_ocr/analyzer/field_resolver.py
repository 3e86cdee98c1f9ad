"""
候補の解決（ふりがな/氏名のペアリングと単一項目の選択）

ふりがなは氏名の1〜2行上に印字されるため、その位置関係にある
ふりがな/氏名の組を最優先で採用する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.manager import get_intake_settings

from ..models import Candidate, CandidatePool

logger = logging.getLogger(__name__)


@dataclass
class ResolvedFields:
    """ヒューリスティックで選ばれた各項目（未確定なら None）"""

    name: Optional[Candidate] = None
    furigana: Optional[Candidate] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    postal_code: Optional[str] = None
    referral_person: Optional[str] = None


def find_adjacent_pair(
    furiganas: Sequence[Candidate],
    names: Sequence[Candidate],
    max_gap: int = 2,
) -> Optional[Tuple[Candidate, Candidate]]:
    """ふりがなの1〜max_gap行下にある氏名との組を文書順で探す"""
    for furigana in furiganas:
        for name in names:
            gap = name.line_index - furigana.line_index
            if 1 <= gap <= max_gap:
                return furigana, name
    return None


def pick_single(candidates: Sequence[Candidate]) -> Optional[Candidate]:
    """アンカー近傍を優先し、なければ文書順の先頭"""
    for candidate in candidates:
        if candidate.is_near_anchor:
            return candidate
    return candidates[0] if candidates else None


def resolve_name_pair(
    pool: CandidatePool, max_gap: int = 2
) -> Tuple[Optional[Candidate], Optional[Candidate]]:
    """(furigana, name) を決定"""
    near_furiganas = [c for c in pool.furiganas if c.is_near_anchor]
    near_names = [c for c in pool.names if c.is_near_anchor]

    pair = find_adjacent_pair(near_furiganas, near_names, max_gap)
    if pair:
        logger.debug("Found furigana/name pair near name field")
        return pair

    pair = find_adjacent_pair(pool.furiganas, pool.names, max_gap)
    if pair:
        logger.debug("Found furigana/name pair from all candidates")
        return pair

    return pick_single(pool.furiganas), pick_single(pool.names)


def pick_referral_person(
    referral_candidates: Sequence[str],
    name: Optional[str],
    fallback: str = "last",
) -> Optional[str]:
    """紹介者候補から氏名と異なるものを選ぶ

    氏名が未確定の場合は fallback に従う（既定 'last'：紹介者の記載は
    本人の氏名より後に現れやすいため末尾の候補を採る）。
    """
    if not referral_candidates:
        return None
    if name:
        for candidate in referral_candidates:
            if candidate != name:
                return candidate
        return None
    if fallback == "first":
        return referral_candidates[0]
    if fallback == "last":
        return referral_candidates[-1]
    return None


def enforce_referral_invariant(
    name: Optional[str],
    referral_person: Optional[str],
    referral_candidates: Sequence[str],
) -> Optional[str]:
    """紹介者が氏名と同一なら候補から選び直し、なければ破棄"""
    if not referral_person or not name or referral_person != name:
        return referral_person
    for candidate in referral_candidates:
        if candidate != name:
            return candidate
    return None


def _first(values: List[Any]) -> Optional[Any]:
    return values[0] if values else None


def resolve_fields(pool: CandidatePool, settings: Optional[Dict[str, Any]] = None) -> ResolvedFields:
    settings = settings or get_intake_settings()
    furigana, name = resolve_name_pair(pool, settings.get("pairing_max_line_gap", 2))

    resolved = ResolvedFields(
        name=name,
        furigana=furigana,
        address=_first([a.text for a in pool.addresses]),
        phone=_first(pool.phones),
        postal_code=_first(pool.postal_codes),
    )
    resolved.referral_person = pick_referral_person(
        pool.referral_persons,
        name.text if name else None,
        settings.get("referral_fallback", "last"),
    )
    return resolved
