"""
解析用の不変語彙

テンプレート語彙・姓辞書・来店きっかけキーワード・住所語彙を
config/ の JSON から一度だけ読み込み、不変オブジェクトとして共有する。
実行中に変更されることはない。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional, Pattern, Tuple

from config.manager import (
    get_address_patterns,
    get_name_dictionary,
    get_source_keywords,
    get_template_vocabulary,
)

from ..utils.error_handler import load_config_safe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateVocabulary:
    """印字済みの定型文言（項目ラベル・選択肢・説明文）"""

    words: FrozenSet[str]

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and text.strip() in self.words

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.words))

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class SurnameEntry:
    kanji: str
    reading: str


@dataclass(frozen=True)
class SurnameDictionary:
    """頻度順の姓辞書"""

    entries: Tuple[SurnameEntry, ...]

    def kanji(self) -> Tuple[str, ...]:
        return tuple(e.kanji for e in self.entries if e.kanji)

    def readings(self) -> Tuple[str, ...]:
        return tuple(e.reading for e in self.entries if e.reading)


@dataclass(frozen=True)
class AddressVocabulary:
    prefecture_suffixes: str
    city_suffixes: str
    major_cities: Tuple[str, ...]
    label: str
    min_length: int


@dataclass(frozen=True)
class ChannelRule:
    source_type: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class LiteralCombination:
    all_of: Tuple[str, ...]
    source_type: str
    referral_person: Optional[str] = None


@dataclass(frozen=True)
class SourceKeywords:
    """来店きっかけ判定の語彙（判定順序を含む）"""

    checkbox_markers: str
    misread_storefront_line: str
    storefront_keywords: Tuple[str, ...]
    instagram_keywords: Tuple[str, ...]
    instagram_store_qualifiers: Tuple[str, ...]
    instagram_personal_qualifiers: Tuple[str, ...]
    instagram_account_pattern: Pattern[str]
    channels: Tuple[ChannelRule, ...]
    referral_keyword: str
    referral_person_patterns: Tuple[Pattern[str], ...]
    fallback_referral_pattern_count: int
    fallback_literal_combinations: Tuple[LiteralCombination, ...]
    fallback_instagram_keywords: Tuple[str, ...]

    def has_marker(self, line: str) -> bool:
        return any(m in line for m in self.checkbox_markers)


def _tuple_of_str(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(str(v) for v in values if str(v))


def _build_template_vocabulary(cfg: Dict[str, Any]) -> TemplateVocabulary:
    words = set(_tuple_of_str(cfg.get("reserved_words")))
    words.update(_tuple_of_str(cfg.get("boilerplate_phrases")))
    return TemplateVocabulary(frozenset(w.strip() for w in words if w.strip()))


def _build_surname_dictionary(cfg: Dict[str, Any]) -> SurnameDictionary:
    entries = []
    for item in cfg.get("surnames", []) or []:
        if not isinstance(item, dict):
            continue
        kanji = str(item.get("kanji") or "").strip()
        reading = str(item.get("reading") or "").strip()
        if kanji:
            entries.append(SurnameEntry(kanji, reading))
    return SurnameDictionary(tuple(entries))


def _build_reading_map(cfg: Dict[str, Any]) -> Mapping[str, str]:
    readings: Dict[str, str] = {}
    for section in ("surnames", "given_names"):
        for item in cfg.get(section, []) or []:
            if not isinstance(item, dict):
                continue
            kanji = str(item.get("kanji") or "").strip()
            reading = str(item.get("reading") or "").strip()
            if kanji and reading and kanji not in readings:
                readings[kanji] = reading
    return MappingProxyType(readings)


def _build_address_vocabulary(cfg: Dict[str, Any]) -> AddressVocabulary:
    return AddressVocabulary(
        prefecture_suffixes=str(cfg.get("prefecture_suffixes") or "都道府県"),
        city_suffixes=str(cfg.get("city_suffixes") or "市区町村"),
        major_cities=_tuple_of_str(cfg.get("major_cities")),
        label=str(cfg.get("address_label") or "住所"),
        min_length=int(cfg.get("min_length", 4)),
    )


def _build_source_keywords(cfg: Dict[str, Any]) -> SourceKeywords:
    channels = tuple(
        ChannelRule(str(c.get("source_type")), _tuple_of_str(c.get("keywords")))
        for c in cfg.get("channels", []) or []
        if isinstance(c, dict) and c.get("source_type")
    )
    combos = tuple(
        LiteralCombination(
            all_of=_tuple_of_str(c.get("all_of")),
            source_type=str(c.get("source_type")),
            referral_person=c.get("referral_person"),
        )
        for c in cfg.get("fallback_literal_combinations", []) or []
        if isinstance(c, dict) and c.get("all_of") and c.get("source_type")
    )
    patterns = tuple(re.compile(p) for p in _tuple_of_str(cfg.get("referral_person_patterns")))
    return SourceKeywords(
        checkbox_markers=str(cfg.get("checkbox_markers") or ""),
        misread_storefront_line=str(cfg.get("misread_storefront_line") or ""),
        storefront_keywords=_tuple_of_str(cfg.get("storefront_keywords")),
        instagram_keywords=_tuple_of_str(cfg.get("instagram_keywords")),
        instagram_store_qualifiers=_tuple_of_str(cfg.get("instagram_store_qualifiers")),
        instagram_personal_qualifiers=_tuple_of_str(cfg.get("instagram_personal_qualifiers")),
        instagram_account_pattern=re.compile(str(cfg.get("instagram_account_pattern") or r"(?!x)x")),
        channels=channels,
        referral_keyword=str(cfg.get("referral_keyword") or "ご紹介"),
        referral_person_patterns=patterns,
        fallback_referral_pattern_count=int(cfg.get("fallback_referral_pattern_count", 2)),
        fallback_literal_combinations=combos,
        fallback_instagram_keywords=_tuple_of_str(cfg.get("fallback_instagram_keywords")),
    )


@lru_cache(maxsize=1)
def get_template_vocab() -> TemplateVocabulary:
    cfg = load_config_safe(get_template_vocabulary, {}, "template_vocabulary", critical=True)
    vocab = _build_template_vocabulary(cfg)
    logger.info(f"Loaded template vocabulary: {len(vocab)} entries")
    return vocab


@lru_cache(maxsize=1)
def get_surname_dictionary() -> SurnameDictionary:
    cfg = load_config_safe(get_name_dictionary, {}, "name_dictionary", critical=True)
    return _build_surname_dictionary(cfg)


@lru_cache(maxsize=1)
def get_reading_map() -> Mapping[str, str]:
    """漢字 → ひらがな読みの辞書（姓・名共通）"""
    cfg = load_config_safe(get_name_dictionary, {}, "name_dictionary", critical=True)
    return _build_reading_map(cfg)


@lru_cache(maxsize=1)
def get_address_vocab() -> AddressVocabulary:
    cfg = load_config_safe(get_address_patterns, {}, "address_patterns", critical=True)
    return _build_address_vocabulary(cfg)


@lru_cache(maxsize=1)
def get_source_keyword_table() -> SourceKeywords:
    cfg = load_config_safe(get_source_keywords, {}, "source_keywords", critical=True)
    return _build_source_keywords(cfg)


def clear_vocabulary_cache() -> None:
    """設定ディレクトリ差し替え時（テスト等）に読み込み済み語彙を破棄"""
    for fn in (
        get_template_vocab,
        get_surname_dictionary,
        get_reading_map,
        get_address_vocab,
        get_source_keyword_table,
    ):
        fn.cache_clear()


def preload_vocabulary() -> None:
    """全語彙を読み込む（設定不備を ConfigLoadError として早期に検出）"""
    get_template_vocab()
    get_surname_dictionary()
    get_reading_map()
    get_address_vocab()
    get_source_keyword_table()
