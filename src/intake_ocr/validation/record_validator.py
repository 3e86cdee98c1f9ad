"""
顧客レコード妥当性検証

OCR結果を人が確認・修正した後、保存前にレコードの必須項目と値の範囲を検証する。
OCR直後の部分的なレコードは validate_partial で検証する（必須項目なし）。
"""

import logging
import re
from typing import Any, Dict, List

from utils.datetime_utils import now_jst

from ..models import NAME_PLACEHOLDER, SourceType

logger = logging.getLogger(__name__)

_HIRAGANA_RE = re.compile(r"^[ぁ-ゖー\s　]+$")
_POSTAL_CODE_RE = re.compile(r"^\d{3}-?\d{4}$")
_PHONE_RE = re.compile(r"^0\d{1,3}-?\d{2,4}-?\d{4}$")


class RecordValidator:
    """顧客レコード妥当性検証クラス"""

    # 保存時の必須項目とエラーメッセージ
    REQUIRED_FIELDS = {
        'furigana': 'ふりがなは必須です',
        'name': '氏名は必須です',
        'last_name': '姓は必須です',
        'first_name': '名は必須です',
        'last_name_furigana': '姓のふりがなは必須です',
        'first_name_furigana': '名のふりがなは必須です',
        'postal_code': '郵便番号は必須です',
        'phone': '電話番号は必須です',
        'birth_year': '生年は必須です',
        'birth_month': '生月は必須です',
        'birth_day': '生日は必須です',
        'source_type': '来店きっかけを選択してください',
    }

    # 数値項目の制約（max が None の場合は実行時に決定）
    CONSTRAINTS = {
        'birth_year': {'min': 1900, 'max': None, 'type': int},
        'birth_month': {'min': 1, 'max': 12, 'type': int},
        'birth_day': {'min': 1, 'max': 31, 'type': int},
    }

    FURIGANA_FIELDS = ('furigana', 'last_name_furigana', 'first_name_furigana')

    @staticmethod
    def _is_blank(value: Any) -> bool:
        return value is None or (isinstance(value, str) and not value.strip())

    @staticmethod
    def _validate_values(record: Dict[str, Any]) -> List[str]:
        errors = []

        for field_name, constraints in RecordValidator.CONSTRAINTS.items():
            value = record.get(field_name)
            if value is None:
                continue

            # 型チェック（bool は int のサブクラスなので除外）
            if isinstance(value, bool):
                errors.append(f"Invalid type for {field_name}: expected {constraints['type'].__name__}")
                continue
            if not isinstance(value, constraints['type']):
                try:
                    value = constraints['type'](value)
                except (ValueError, TypeError):
                    errors.append(f"Invalid type for {field_name}: expected {constraints['type'].__name__}")
                    continue

            max_value = constraints['max'] if constraints['max'] is not None else now_jst().year
            if value < constraints['min']:
                errors.append(f"{field_name} must be >= {constraints['min']}, got {value}")
            if value > max_value:
                errors.append(f"{field_name} must be <= {max_value}, got {value}")

        source_type = record.get('source_type')
        if source_type is not None and SourceType.from_value(source_type) is None:
            errors.append(f"Invalid source_type: {source_type}")

        for field_name in RecordValidator.FURIGANA_FIELDS:
            value = record.get(field_name)
            if isinstance(value, str) and value.strip() and not _HIRAGANA_RE.match(value.strip()):
                errors.append(f"{field_name} must be hiragana only")

        postal_code = record.get('postal_code')
        if isinstance(postal_code, str) and postal_code.strip() and not _POSTAL_CODE_RE.match(postal_code.strip()):
            errors.append("Invalid postal_code format: expected 123-4567")

        phone = record.get('phone')
        if isinstance(phone, str) and phone.strip() and not _PHONE_RE.match(phone.strip()):
            errors.append("Invalid phone format")

        referral_person = record.get('referral_person')
        if referral_person and referral_person == record.get('name'):
            errors.append("referral_person must differ from name")

        return errors

    @staticmethod
    def validate(record: Dict[str, Any]) -> List[str]:
        """
        保存前のレコードを検証

        Args:
            record: 検証対象のレコード辞書（StructuredRecord.to_dict() の形）

        Returns:
            List[str]: エラーメッセージのリスト（エラーなしの場合は空リスト）
        """
        if not isinstance(record, dict):
            return ['record must be a dict']

        errors = []
        for field_name, message in RecordValidator.REQUIRED_FIELDS.items():
            if RecordValidator._is_blank(record.get(field_name)):
                errors.append(message)

        # 代替値のままの氏名は確認漏れとして扱う
        if record.get('name') == NAME_PLACEHOLDER:
            errors.append('氏名を確認してください（OCRで読み取れませんでした）')

        errors.extend(RecordValidator._validate_values(record))

        if errors:
            logger.debug(f"Record validation failed with {len(errors)} errors")
        return errors

    @staticmethod
    def validate_partial(record: Dict[str, Any]) -> List[str]:
        """OCR直後の部分レコードを検証（欠損は許容）"""
        if not isinstance(record, dict):
            return ['record must be a dict']
        return RecordValidator._validate_values(record)
