"""
ふりがなの補完候補

編集フォームで姓・名が入力されたときに、読み辞書からふりがなを提案する。
辞書にない漢字は空文字にする（ふりがな欄に漢字を入れない）。
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, NamedTuple, Optional

from .text_utils import HIRAGANA_CHARS, has_katakana, is_hiragana_only, katakana_to_hiragana
from .vocabulary import get_reading_map

logger = logging.getLogger(__name__)

_NON_HIRAGANA_RE = re.compile(rf"[^{HIRAGANA_CHARS}\s]")


class FuriganaSuggestion(NamedTuple):
    last_name_furigana: str
    first_name_furigana: str
    full_furigana: str


def _to_hiragana(part: str, readings: Mapping[str, str]) -> str:
    if not part:
        return ""
    if is_hiragana_only(part):
        return part
    reading = readings.get(part, "")
    if not reading and has_katakana(part):
        reading = katakana_to_hiragana(part)
    return reading


def generate_furigana(
    last_name: str,
    first_name: str,
    readings: Optional[Mapping[str, str]] = None,
) -> FuriganaSuggestion:
    """姓・名それぞれのふりがなと、空白区切りの全体ふりがなを返す"""
    readings = readings if readings is not None else get_reading_map()
    last = _to_hiragana((last_name or "").strip(), readings)
    first = _to_hiragana((first_name or "").strip(), readings)
    full = " ".join(p for p in (last, first) if p)
    return FuriganaSuggestion(last, first, full)


def filter_hiragana_only(text: str) -> str:
    """ひらがなと空白以外を取り除く（ふりがな欄の入力フィルタ）"""
    return _NON_HIRAGANA_RE.sub("", text or "")
