"""
項目別の字句判定器

1行の文字列が氏名・ふりがな・住所・電話番号・郵便番号として妥当かを判定する
純粋関数群。状態を持たず、参照するのは不変のテンプレート語彙のみ。
テンプレート語彙に一致する行は形状が合っていてもすべての判定で不採用。
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from .text_utils import HIRAGANA_CHARS, KANJI_CHARS, remove_whitespace
from .vocabulary import get_address_vocab, get_source_keyword_table, get_template_vocab
from ..utils.formatters import format_phone_number, format_postal_code

FURIGANA_LABEL = "ふりがな"

NAME_RE = re.compile(rf"^[{KANJI_CHARS}]{{2,4}}$")
FURIGANA_RE = re.compile(rf"^[{HIRAGANA_CHARS}ー\s　]+$")
MOBILE_PHONE_RE = re.compile(r"^0[789]0-\d{4}-\d{4}$")
LANDLINE_PHONE_RE = re.compile(r"^0\d{1,3}-\d{2,4}-\d{4}$")

# 行内の電話番号らしき数字列（区切りはハイフン/空白/なし）
PHONE_CANDIDATE_RE = re.compile(r"(?<![\d-])(\d{2,4}[-\s]?\d{2,4}[-\s]?\d{4})(?!\d)")
POSTAL_CODE_RE = re.compile(r"(?:〒\s*)?(?<![\d-])(\d{3}-\d{4}|\d{7})(?![\d-])")
BIRTH_DATE_RE = re.compile(r"(19\d{2}|20\d{2})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日")
ADDRESS_NUMBER_RE = re.compile(r"\d+[-ー]\d+[-ー]\d+")

_MIN_FURIGANA_CHARS = 3


def _is_template(text: str) -> bool:
    return text.strip() in get_template_vocab()


def is_valid_name(line: str) -> bool:
    """漢字2〜4文字の連続で、テンプレート語彙でない場合に True"""
    text = (line or "").strip()
    if not text or _is_template(text):
        return False
    # 「口店頭」のようにチェック記号（の誤読）が付いた選択肢ラベルも除外
    markers = get_source_keyword_table().checkbox_markers
    label = text.lstrip(markers) if markers else text
    if label != text and (not label or _is_template(label)):
        return False
    return NAME_RE.match(text) is not None


def is_valid_furigana(line: str) -> bool:
    """ひらがな3文字以上（内部の空白は許容・文字数に含めない）"""
    text = (line or "").strip()
    if not text or text == FURIGANA_LABEL or _is_template(text):
        return False
    if FURIGANA_RE.match(text) is None:
        return False
    return len(remove_whitespace(text)) >= _MIN_FURIGANA_CHARS


def is_valid_phone(text: str) -> bool:
    """携帯（0X0-XXXX-XXXX）または固定電話（0X-XXXX-XXXX 等）の形式か"""
    value = (text or "").strip()
    return bool(MOBILE_PHONE_RE.match(value) or LANDLINE_PHONE_RE.match(value))


def is_valid_address(line: str) -> bool:
    """住所として妥当かを判定

    OCRでは住所の一部が欠落しやすいため、{都道府県, 市区町村/主要都市, 番地}
    のうち2要素が揃えば住所とみなす。
    """
    text = (line or "").strip()
    vocab = get_address_vocab()
    if len(text) < vocab.min_length or _is_template(text):
        return False

    has_prefecture = any(ch in text for ch in vocab.prefecture_suffixes)
    has_city = any(ch in text for ch in vocab.city_suffixes) or any(
        city in text for city in vocab.major_cities
    )
    has_number = ADDRESS_NUMBER_RE.search(text) is not None

    return (
        (has_prefecture and has_city)
        or (has_city and has_number)
        or (has_prefecture and has_number)
    )


def _partial_address_re() -> "re.Pattern[str]":
    vocab = get_address_vocab()
    city = re.escape(vocab.city_suffixes)
    return re.compile(
        rf"[{KANJI_CHARS}{HIRAGANA_CHARS}ァ-ヶ]*[{city}][^\s、。]*\d+[-ー]\d+[-ー]\d+"
    )


def _full_address_re() -> "re.Pattern[str]":
    vocab = get_address_vocab()
    pref = re.escape(vocab.prefecture_suffixes)
    city = re.escape(vocab.city_suffixes)
    body = rf"{KANJI_CHARS}{HIRAGANA_CHARS}ァ-ヶ"
    return re.compile(rf"[{body}]*[{pref}][{body}]+[{city}][{body}]*\d*")


def match_partial_address(line: str) -> Optional[str]:
    """市区町村名＋番地（例: 福島区福島5-1-5）の部分住所を抽出"""
    m = _partial_address_re().search(line or "")
    return m.group(0) if m else None


def match_full_address(line: str) -> Optional[str]:
    """都道府県＋市区町村（＋番地の先頭）の住所を抽出"""
    m = _full_address_re().search(line or "")
    return m.group(0) if m else None


def matches_phone_pattern(line: str) -> bool:
    return PHONE_CANDIDATE_RE.search(line or "") is not None


def extract_phone(line: str) -> Optional[str]:
    """行から電話番号を抽出し、妥当な形式のものだけを返す"""
    for m in PHONE_CANDIDATE_RE.finditer(line or ""):
        raw = re.sub(r"\s", "", m.group(1))
        if "-" not in raw:
            raw = format_phone_number(raw)
        if is_valid_phone(raw):
            return raw
    return None


def extract_postal_code(line: str) -> Optional[str]:
    """郵便番号（DDD-DDDD / DDDDDDD）を抽出

    同じ行が電話番号パターンにも一致する場合は採用しない。
    """
    text = (line or "").strip()
    if matches_phone_pattern(text):
        return None
    m = POSTAL_CODE_RE.search(text)
    if not m:
        return None
    return format_postal_code(m.group(1))


def extract_birth_date(line: str) -> Optional[Tuple[int, int, int]]:
    m = BIRTH_DATE_RE.search(line or "")
    if not m:
        return None
    year, month, day = (int(g) for g in m.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return year, month, day
