"""
セキュリティ強化ロガー

顧客レコード（氏名・ふりがな・住所・電話番号など）のログ出力時マスキング機能を提供
"""

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)


class SecurityLogger:
    """セキュリティ強化されたロガー"""

    # マスキング対象の機密フィールド
    SENSITIVE_FIELDS = [
        'name', 'furigana', 'last_name', 'first_name',
        'last_name_furigana', 'first_name_furigana',
        'address', 'postal_code', 'phone',
        'birth_year', 'birth_month', 'birth_day',
        'instagram_account', 'referral_person',
    ]

    @classmethod
    def mask_sensitive_data(cls, data: Any) -> Any:
        """機密データをマスキング"""
        if isinstance(data, dict):
            masked = {}
            for key, value in data.items():
                if str(key).lower() in cls.SENSITIVE_FIELDS:
                    if isinstance(value, str) and value:
                        masked[key] = cls._mask_value(value)
                    elif isinstance(value, list):
                        masked[key] = [
                            cls._mask_value(v) if isinstance(v, str) else '***MASKED***'
                            for v in value
                        ]
                    else:
                        masked[key] = '***MASKED***'
                else:
                    masked[key] = cls.mask_sensitive_data(value)
            return masked
        elif isinstance(data, list):
            return [cls.mask_sensitive_data(item) for item in data]
        elif isinstance(data, str):
            # 電話番号、郵便番号、個人名らしき文字列のマスキング
            if cls._looks_like_phone(data):
                return cls._mask_phone(data)
            elif cls._looks_like_japanese_name(data):
                return cls._mask_japanese_name(data)
        return data

    @classmethod
    def _mask_value(cls, value: str) -> str:
        # 最初の1文字と最後の1文字以外をマスク
        if len(value) <= 2:
            return '*' * len(value)
        return value[0] + '*' * (len(value) - 2) + value[-1]

    @classmethod
    def _looks_like_phone(cls, text: str) -> bool:
        """電話番号・郵便番号らしき文字列かどうか"""
        return bool(re.match(r'^〒?[\d\-\(\)\+\s]+$', text)) and len(text) >= 7

    @classmethod
    def _mask_phone(cls, phone: str) -> str:
        """電話番号をマスキング"""
        if len(phone) <= 4:
            return '*' * len(phone)
        return phone[:2] + '*' * (len(phone) - 4) + phone[-2:]

    @classmethod
    def _looks_like_japanese_name(cls, text: str) -> bool:
        """日本語の名前らしき文字列かどうか"""
        return bool(re.search(r'[぀-ゟ゠-ヿ一-鿿]', text)) and len(text) <= 10

    @classmethod
    def _mask_japanese_name(cls, name: str) -> str:
        """日本語名をマスキング"""
        if len(name) <= 1:
            return '*'
        elif len(name) == 2:
            return name[0] + '*'
        else:
            return name[0] + '*' * (len(name) - 2) + name[-1]

    @classmethod
    def safe_log_info(cls, message: str, data: Any = None):
        """安全なINFOログ出力"""
        if data is not None:
            logger.info(f"{message}: {cls.mask_sensitive_data(data)}")
        else:
            logger.info(message)

    @classmethod
    def safe_log_debug(cls, message: str, data: Any = None):
        """安全なDEBUGログ出力"""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        if data is not None:
            logger.debug(f"{message}: {cls.mask_sensitive_data(data)}")
        else:
            logger.debug(message)

    @classmethod
    def safe_log_warning(cls, message: str, data: Any = None):
        """安全なWARNINGログ出力"""
        if data is not None:
            logger.warning(f"{message}: {cls.mask_sensitive_data(data)}")
        else:
            logger.warning(message)
