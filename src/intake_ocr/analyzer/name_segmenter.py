from __future__ import annotations

"""氏名の姓/名分割（辞書の最長一致と文字数フォールバック）。"""

import logging
import re
from typing import Iterable, NamedTuple, Optional

from .vocabulary import get_surname_dictionary

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"[\s　・]+")


class NameParts(NamedTuple):
    last_name: str
    first_name: str


def _longest_prefix(full_name: str, surnames: Iterable[str]) -> str:
    matched = ""
    for surname in surnames:
        if surname and full_name.startswith(surname) and len(surname) > len(matched):
            matched = surname
    return matched


def separate_full_name(full_name: str, surnames: Optional[Iterable[str]] = None) -> NameParts:
    """フルネームを姓と名に分割する（例外を送出しない）。

    優先順:
    1) 空白・中点などの明示的な区切りがあれば最初の区切りで分割
    2) 姓辞書の最長前方一致（残りが空でない場合のみ）
    3) 先頭2文字を姓とする
    4) 先頭1文字を姓とする
    5) 2文字未満ならそのまま姓、名は空

    surnames を省略した場合は設定の漢字姓辞書を使う。
    """
    if not full_name or not full_name.strip():
        return NameParts(full_name or "", "")
    name = full_name.strip()

    parts = [p for p in _DELIMITER_RE.split(name) if p]
    if len(parts) >= 2:
        return NameParts(parts[0], " ".join(parts[1:]))

    if surnames is None:
        surnames = get_surname_dictionary().kanji()
    matched = _longest_prefix(name, surnames)
    if matched and len(name) > len(matched):
        logger.debug("Matched surname from dictionary (length=%d)", len(matched))
        return NameParts(matched, name[len(matched):])

    if len(name) >= 3:
        return NameParts(name[:2], name[2:])
    if len(name) >= 2:
        return NameParts(name[:1], name[1:])

    return NameParts(name, "")


def separate_furigana(furigana: str) -> NameParts:
    """ふりがなを姓/名に分割（姓辞書の読みで最長一致）"""
    return separate_full_name(furigana, get_surname_dictionary().readings())
