"""
ログサニタイゼーション

問診票の個人情報（電話番号・郵便番号・住所・紹介者名など）がログへ
そのまま出力されることを防ぐ
"""

import re
import logging
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class LogSanitizer:
    """ログサニタイゼーションクラス"""

    def __init__(self):
        """初期化"""
        self.sensitive_patterns = [
            # 電話番号（区切りあり/なし）
            (r"(?<!\d)0\d{1,3}[-\s]?\d{2,4}[-\s]?\d{4}(?!\d)", r"***-****-****"),

            # 郵便番号
            (r"〒?\s*(?<!\d)\d{3}-\d{4}(?!\d)", r"〒***-****"),

            # 住所（市区町村名＋番地）
            (r"[一-鿿々ぁ-んァ-ヶ]*[都道府県市区町村][^\s、。]*\d+[-ー]\d+(?:[-ー]\d+)?", r"***住所***"),

            # 生年月日
            (r"(19|20)\d{2}\s*年\s*\d{1,2}\s*月\s*\d{1,2}\s*日", r"****年**月**日"),

            # 敬称付きの人名（『田中花子様』『ご紹介（田中花子様）』）
            (r"[一-鿿々ぁ-んァ-ヶ]{1,4}\s*[一-鿿々ぁ-んァ-ヶ]{0,4}(?=\s*(さん|様|氏|殿))", r"***NAME_REDACTED***"),

            # Instagram アカウント
            (r"(誰のアカウント[→\s]*)[^\s]+", r"\1***ACCOUNT_REDACTED***"),
            (r"@[A-Za-z0-9._]{2,30}", r"@***ACCOUNT_REDACTED***"),

            # JSON 形式の個人情報キー
            (
                r'(?i)("(?:name|furigana|last_name|first_name|address|phone|postal_code|referral_person|instagram_account)"\s*:\s*")([^"]+)(")',
                r"\1***REDACTED***\3",
            ),
        ]

        # 正規表現パターンをコンパイル済みオブジェクトとしてキャッシュ
        self._compiled_patterns = []
        for pattern, replacement in self.sensitive_patterns:
            try:
                self._compiled_patterns.append((re.compile(pattern), replacement))
            except re.error as e:
                logger.warning(f"Failed to compile regex pattern '{pattern}': {e}")

        # 値を完全にマスクするキー名
        self.mask_completely = [
            "NAME", "FURIGANA", "ADDRESS", "PHONE", "POSTAL",
            "REFERRAL", "INSTAGRAM", "EXTRACTED_TEXT", "OCR_TEXT",
            "氏名", "ふりがな", "住所", "電話",
        ]

    def sanitize_string(self, text: str) -> str:
        """
        文字列から機密情報を除去

        Args:
            text: サニタイズ対象の文字列

        Returns:
            str: サニタイズ済み文字列
        """
        if not isinstance(text, str):
            return str(text)

        sanitized = text
        for compiled_pattern, replacement in self._compiled_patterns:
            try:
                sanitized = compiled_pattern.sub(replacement, sanitized)
            except Exception as e:
                logger.warning(f"Error applying compiled sanitization pattern: {e}")
                continue
        return sanitized

    def sanitize_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        辞書から機密情報を除去

        Args:
            data: サニタイズ対象の辞書

        Returns:
            Dict[str, Any]: サニタイズ済み辞書
        """
        if not isinstance(data, dict):
            return data

        sanitized = {}
        for key, value in data.items():
            if any(sensitive in str(key).upper() for sensitive in self.mask_completely):
                sanitized[key] = "***REDACTED***"
                continue

            if isinstance(value, dict):
                sanitized[key] = self.sanitize_dict(value)
            elif isinstance(value, list):
                sanitized[key] = self.sanitize_list(value)
            elif isinstance(value, str):
                sanitized[key] = self.sanitize_string(value)
            else:
                sanitized[key] = value
        return sanitized

    def sanitize_list(self, data: List[Any]) -> List[Any]:
        """リストから機密情報を除去"""
        if not isinstance(data, list):
            return data

        sanitized = []
        for item in data:
            if isinstance(item, dict):
                sanitized.append(self.sanitize_dict(item))
            elif isinstance(item, list):
                sanitized.append(self.sanitize_list(item))
            elif isinstance(item, str):
                sanitized.append(self.sanitize_string(item))
            else:
                sanitized.append(item)
        return sanitized

    def sanitize_log_record(self, record: logging.LogRecord) -> None:
        """
        LogRecordの内容をサニタイズ

        Args:
            record: ログレコード
        """
        try:
            record.msg = self.sanitize_string(str(record.getMessage()))
            record.args = ()
        except Exception as e:
            # サニタイズ処理でエラーが発生した場合、元のレコードはそのままにしてエラーログを出力
            logger.warning(f"Error sanitizing log record: {e}")


class SanitizingHandler(logging.Handler):
    """サニタイゼーション機能付きハンドラー"""

    def __init__(self, handler: logging.Handler):
        super().__init__()
        self.handler = handler
        self.sanitizer = LogSanitizer()

        # 元のハンドラーの設定を継承
        self.setLevel(handler.level)
        if handler.formatter:
            self.setFormatter(handler.formatter)

    def emit(self, record: logging.LogRecord):
        try:
            record_copy = logging.makeLogRecord(record.__dict__)
            self.sanitizer.sanitize_log_record(record_copy)
            self.handler.emit(record_copy)
        except Exception as e:
            logger.warning(f"Error in sanitizing handler: {e}")
            self.handler.emit(record)


# グローバルサニタイザーインスタンス
global_sanitizer = LogSanitizer()


def sanitize_for_log(data: Union[str, Dict, List, Any]) -> Union[str, Dict, List, Any]:
    """
    ログ出力用のデータサニタイゼーション便利関数

    Args:
        data: サニタイズ対象のデータ

    Returns:
        Union[str, Dict, List, Any]: サニタイズ済みデータ
    """
    if isinstance(data, str):
        return global_sanitizer.sanitize_string(data)
    elif isinstance(data, dict):
        return global_sanitizer.sanitize_dict(data)
    elif isinstance(data, list):
        return global_sanitizer.sanitize_list(data)
    else:
        return data


def setup_sanitized_logging(logger_name: Optional[str] = None) -> logging.Logger:
    """
    サニタイゼーション機能付きロガーをセットアップ

    Args:
        logger_name: ロガー名（Noneの場合はルートロガー）

    Returns:
        logging.Logger: 設定済みロガー
    """
    target_logger = logging.getLogger(logger_name)

    # 既存ハンドラーをサニタイゼーション機能付きに置き換え
    original_handlers = target_logger.handlers[:]
    target_logger.handlers.clear()

    for handler in original_handlers:
        if isinstance(handler, SanitizingHandler):
            target_logger.addHandler(handler)
            continue
        target_logger.addHandler(SanitizingHandler(handler))

    return target_logger
