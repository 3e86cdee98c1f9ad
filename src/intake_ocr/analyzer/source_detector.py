"""
来店きっかけ検出

OCR ではチェックボックスの読み取りが不安定なため、チェック記号の検出と
選択肢文言の一致を組み合わせて判定する。記号のある行を上から順に調べ、
最初に分類できた行で走査を打ち切る（最初の一致が優先）。
記号行で分類できなかった場合のみ、全文に対するフォールバック判定を行う。
"""

from __future__ import annotations

import logging
from typing import Optional

from ..models import SourceDetectionResult, SourceType
from .text_utils import contains_any, normalize_text, split_lines
from .vocabulary import SourceKeywords, get_source_keyword_table

logger = logging.getLogger(__name__)


def _extract_instagram_account(text: str, kw: SourceKeywords) -> Optional[str]:
    m = kw.instagram_account_pattern.search(text)
    return m.group(1) if m else None


def _extract_referral_person(text: str, kw: SourceKeywords, limit: Optional[int] = None) -> Optional[str]:
    """『ご紹介（○○様）』等の括弧書きから紹介者名を抽出（先勝ち）"""
    patterns = kw.referral_person_patterns
    if limit is not None:
        patterns = patterns[:limit]
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def _classify_marked_line(line: str, text: str, kw: SourceKeywords) -> Optional[SourceDetectionResult]:
    """チェック記号のある1行を判定。分類できなければ None"""
    # 『口店頭』は Instagram 側のチェックが店頭の記号として誤読される既知パターン
    if kw.misread_storefront_line and line == kw.misread_storefront_line:
        if contains_any(text, kw.instagram_keywords):
            logger.debug("Detected instagram_personal from misread storefront line")
            return SourceDetectionResult(
                source_type=SourceType.INSTAGRAM_PERSONAL,
                instagram_account=_extract_instagram_account(text, kw),
                detected_by="checkbox",
            )
        return SourceDetectionResult(source_type=SourceType.STOREFRONT, detected_by="checkbox")

    if any(k in line for k in kw.storefront_keywords):
        return SourceDetectionResult(source_type=SourceType.STOREFRONT, detected_by="checkbox")

    if contains_any(line, kw.instagram_keywords):
        if any(q in line for q in kw.instagram_store_qualifiers):
            return SourceDetectionResult(source_type=SourceType.INSTAGRAM_STORE, detected_by="checkbox")
        if any(q in line for q in kw.instagram_personal_qualifiers):
            return SourceDetectionResult(
                source_type=SourceType.INSTAGRAM_PERSONAL,
                instagram_account=_extract_instagram_account(text, kw),
                detected_by="checkbox",
            )
        # 明示がなければお店のアカウント
        return SourceDetectionResult(source_type=SourceType.INSTAGRAM_STORE, detected_by="checkbox")

    for rule in kw.channels:
        if contains_any(line, rule.keywords):
            source_type = SourceType.from_value(rule.source_type)
            if source_type is None:
                logger.warning(f"Unknown source_type in channel config: {rule.source_type}")
                continue
            return SourceDetectionResult(source_type=source_type, detected_by="checkbox")

    if kw.referral_keyword and kw.referral_keyword in line:
        return SourceDetectionResult(
            source_type=SourceType.REFERRAL,
            referral_person=_extract_referral_person(text, kw),
            detected_by="checkbox",
        )

    return None


def _fallback_detection(text: str, kw: SourceKeywords) -> SourceDetectionResult:
    """記号行で判定できなかった場合の全文判定"""
    for combo in kw.fallback_literal_combinations:
        if all(token in text for token in combo.all_of):
            source_type = SourceType.from_value(combo.source_type)
            if source_type is not None:
                logger.debug("Fallback detection: literal combination")
                return SourceDetectionResult(
                    source_type=source_type,
                    referral_person=combo.referral_person,
                    detected_by="fallback",
                )

    if kw.referral_keyword and kw.referral_keyword in text:
        person = _extract_referral_person(text, kw, limit=kw.fallback_referral_pattern_count)
        if person:
            logger.debug("Fallback detection: referral with parenthesized name")
            return SourceDetectionResult(
                source_type=SourceType.REFERRAL,
                referral_person=person,
                detected_by="fallback",
            )

    if contains_any(text, kw.fallback_instagram_keywords):
        logger.debug("Fallback detection: instagram_store")
        return SourceDetectionResult(source_type=SourceType.INSTAGRAM_STORE, detected_by="fallback")

    return SourceDetectionResult()


def detect_source_type(text: str, keywords: Optional[SourceKeywords] = None) -> SourceDetectionResult:
    """OCR全文から来店きっかけ・Instagramアカウント・紹介者を検出"""
    kw = keywords or get_source_keyword_table()
    text = normalize_text(text or "")

    for index, line in enumerate(split_lines(text)):
        if not kw.has_marker(line):
            continue
        result = _classify_marked_line(line, text, kw)
        if result is not None:
            logger.debug(
                "Source type detected at line %d: %s",
                index,
                result.source_type.value if result.source_type else None,
            )
            return result

    return _fallback_detection(text, kw)
