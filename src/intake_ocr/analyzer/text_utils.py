"""文字列ユーティリティ（各判定器で共有する文字種判定・行分割）

OCR結果の正規化や文字種変換など、判定器・検出器の双方から使う
軽量関数をまとめる。
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List

# 文字種の範囲（正規表現の文字クラス内で使用）
KANJI_CHARS = "一-鿿々"
HIRAGANA_CHARS = "ぁ-ゖ"
KATAKANA_CHARS = "ァ-ヶ"

_KATAKANA_RE = re.compile(rf"[{KATAKANA_CHARS}]")
_WHITESPACE_RE = re.compile(r"[\s　]+")


def normalize_text(text: str) -> str:
    """OCR文字列を NFKC 正規化（全角数字・全角ハイフン・全角英字を半角へ）"""
    if not text:
        return ""
    return unicodedata.normalize("NFKC", text)


def split_lines(text: str) -> List[str]:
    """改行で分割し、前後空白を除いた空でない行のリストを返す"""
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def remove_whitespace(s: str) -> str:
    return _WHITESPACE_RE.sub("", s or "")


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """大文字小文字を区別しない部分一致（日本語はそのまま比較）"""
    if not text:
        return False
    lowered = text.lower()
    return any(k and k.lower() in lowered for k in keywords)


def strip_label(line: str, label: str) -> str:
    """行頭の項目ラベル（例: 『住所』）と区切り記号を除去"""
    if not line or not label or not line.startswith(label):
        return line
    rest = line[len(label):]
    return rest.lstrip(" 　:：")


def katakana_to_hiragana(s: str) -> str:
    """カタカナをひらがなに変換（長音記号などはそのまま）"""
    if not s:
        return ""
    return "".join(
        chr(ord(ch) - 0x60) if "ァ" <= ch <= "ヶ" else ch for ch in s
    )


def has_katakana(s: str) -> bool:
    return bool(s) and _KATAKANA_RE.search(s) is not None


def is_hiragana_only(s: str) -> bool:
    """ひらがなと空白のみで構成されるか（空文字は True）"""
    return re.fullmatch(rf"[{HIRAGANA_CHARS}\s　]*", s or "") is not None
