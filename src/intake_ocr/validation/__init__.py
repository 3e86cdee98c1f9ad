"""
レコード検証モジュール

保存前の顧客レコード妥当性検証機能を提供
"""

from .record_validator import RecordValidator

__all__ = ['RecordValidator']
