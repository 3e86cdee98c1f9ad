"""
レコード組み立て（OCRテキスト → 顧客レコード）

候補収集・解決、来店きっかけ検出、姓名分割の結果を1件のレコードへまとめる。
優先順位は「設定済みの全文一致（既知サンプル帳票向け）」>「候補解決」>
「来店きっかけのフォールバック判定」。
どの項目も独立に欠損し得る。欠損は人による確認・入力が必要という意味で、
エラーではない。
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Dict, Optional

from config.manager import get_intake_settings
from utils.datetime_utils import now_jst

from ..models import NAME_PLACEHOLDER, StructuredRecord
from ..security.logger import SecurityLogger
from .candidate_collector import collect_candidates
from .field_resolver import enforce_referral_invariant, resolve_fields
from .name_segmenter import separate_full_name, separate_furigana
from .source_detector import detect_source_type
from .text_utils import normalize_text

logger = logging.getLogger(__name__)

# 全文一致で上書きできる項目
OVERRIDABLE_FIELDS = (
    "name",
    "furigana",
    "address",
    "phone",
    "postal_code",
    "referral_person",
    "instagram_account",
)


def _match_literal_rule(rule: Dict[str, Any], text: str) -> Optional[str]:
    for token in rule.get("match_any", []) or []:
        if token and token in text:
            return token
    pattern = rule.get("pattern")
    if pattern:
        try:
            m = re.search(pattern, text)
        except re.error as e:
            logger.warning(f"Invalid literal override pattern for {rule.get('field')}: {e}")
            return None
        if m:
            return m.group(0)
    return None


def apply_literal_overrides(values: Dict[str, Any], text: str, rules: Any) -> Dict[str, Any]:
    """設定された全文一致ルールを適用（項目ごとに最初に一致したルールが有効）"""
    applied = set()
    for rule in rules or []:
        if not isinstance(rule, dict):
            continue
        field_name = rule.get("field")
        if field_name not in OVERRIDABLE_FIELDS or field_name in applied:
            continue
        value = _match_literal_rule(rule, text)
        if value is None:
            continue
        if rule.get("unless_equals_name") and value == values.get("name"):
            continue
        values[field_name] = value
        applied.add(field_name)
        logger.debug("Literal override applied: %s", field_name)
    return values


def detect_scalp_sensitivity(text: str, settings: Dict[str, Any]) -> Optional[bool]:
    """否定の回答とアレルギー/頭皮の設問語が共に現れれば False（それ以外は未確定）"""
    cfg = settings.get("scalp_sensitivity") or {}
    negatives = cfg.get("negative_keywords") or []
    topics = cfg.get("topic_keywords") or []
    if any(n in text for n in negatives) and any(t in text for t in topics):
        return False
    return None


def _attach_name_parts(values: Dict[str, Any], furigana_line: Optional[str]) -> None:
    name = values.get("name")
    if name:
        parts = separate_full_name(name)
        if parts.last_name and parts.first_name:
            values["last_name"] = parts.last_name
            values["first_name"] = parts.first_name

    furigana = values.get("furigana")
    if furigana:
        parts = separate_furigana(furigana_line or furigana)
        if parts.last_name and parts.first_name:
            values["last_name_furigana"] = parts.last_name
            values["first_name_furigana"] = parts.first_name


def parse_ocr_text(text: str, settings: Optional[Dict[str, Any]] = None) -> StructuredRecord:
    """OCRテキストを解析して部分的なレコードを返す（氏名の代替値は入れない）"""
    settings = settings or get_intake_settings()
    normalized = normalize_text(text or "")

    pool = collect_candidates(normalized, settings)
    resolved = resolve_fields(pool, settings)

    values: Dict[str, Any] = {}
    if pool.birth_date:
        values["birth_year"], values["birth_month"], values["birth_day"] = pool.birth_date
    if resolved.name:
        values["name"] = resolved.name.text
    furigana_line = None
    if resolved.furigana:
        values["furigana"] = resolved.furigana.text
        furigana_line = resolved.furigana.source_line
    for key in ("address", "phone", "postal_code", "referral_person"):
        value = getattr(resolved, key)
        if value:
            values[key] = value

    detection = detect_source_type(normalized)
    if detection.source_type:
        values["source_type"] = detection.source_type
        if detection.instagram_account:
            values["instagram_account"] = detection.instagram_account
    if detection.referral_person:
        values["referral_person"] = detection.referral_person

    before_override = values.get("furigana")
    apply_literal_overrides(values, normalized, settings.get("literal_overrides"))
    if values.get("furigana") != before_override:
        furigana_line = None

    values["referral_person"] = enforce_referral_invariant(
        values.get("name"), values.get("referral_person"), pool.referral_persons
    )

    _attach_name_parts(values, furigana_line)

    sensitivity = detect_scalp_sensitivity(normalized, settings)
    if sensitivity is not None:
        values["has_scalp_sensitivity"] = sensitivity

    return StructuredRecord(**{k: v for k, v in values.items() if v is not None})


def reconcile(raw_text: str, settings: Optional[Dict[str, Any]] = None) -> StructuredRecord:
    """OCRテキストから顧客レコードを再構成する（例外を送出しない）

    氏名が得られなかった場合は代替値を入れ、name_is_placeholder を立てる。
    """
    try:
        settings = settings or get_intake_settings()
        placeholder = settings.get("name_placeholder") or NAME_PLACEHOLDER
    except Exception as e:
        logger.error(f"Failed to load intake settings, using defaults: {e}")
        settings, placeholder = None, NAME_PLACEHOLDER

    try:
        record = parse_ocr_text(raw_text, settings)
    except Exception:
        # 解析失敗は全項目欠損として扱い、人による入力に委ねる
        logger.exception("OCR text reconciliation failed")
        record = StructuredRecord()

    if not record.name:
        record = replace(record, name=placeholder, name_is_placeholder=True)
        if record.referral_person == record.name:
            record = replace(record, referral_person=None)

    SecurityLogger.safe_log_debug("Reconciled record", record.to_dict())
    return record


def build_debug_view(raw_text: str, record: Optional[StructuredRecord] = None) -> Dict[str, Any]:
    """OCR生テキストと解析結果を並べた確認用データ"""
    record = record if record is not None else reconcile(raw_text)
    return {
        "extracted_text": raw_text or "",
        "parsed_data": record.to_dict(),
        "name_is_placeholder": record.name_is_placeholder,
        "processed_at": now_jst().isoformat(),
    }
