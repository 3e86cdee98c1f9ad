#!/usr/bin/env python3
"""
DateTime Utilities

問診票レコードの処理時刻・出力ファイル名に使う日本時間（JST）の
ユーティリティ関数。
"""

import logging
from datetime import datetime, timezone, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

# 日本標準時タイムゾーン
JST = timezone(timedelta(hours=9))


def now_jst() -> datetime:
    """
    現在時刻を日本標準時（JST）で取得

    Returns:
        datetime: JSTの現在時刻
    """
    return datetime.now(JST)


def to_jst(dt: datetime) -> datetime:
    """
    datetime を JST に変換

    タイムゾーン情報がない場合は UTC とみなす（警告ログ出力）。
    """
    if not isinstance(dt, datetime):
        raise TypeError(f"Unsupported type for datetime conversion: {type(dt)}")
    if dt.tzinfo is None:
        logger.warning(f"Assuming UTC timezone for naive datetime object: {dt}")
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(JST)


def format_jst_timestamp(dt: Optional[datetime] = None) -> str:
    """
    CSV出力用の処理日時文字列（YYYY/MM/DD HH:MM:SS）

    Args:
        dt: 対象日時（省略時は現在時刻）
    """
    jst_dt = to_jst(dt) if dt is not None else now_jst()
    return jst_dt.strftime('%Y/%m/%d %H:%M:%S')


def export_file_stamp(dt: Optional[datetime] = None) -> str:
    """出力ファイル名に付ける日付（YYYY-MM-DD）"""
    jst_dt = to_jst(dt) if dt is not None else now_jst()
    return jst_dt.strftime('%Y-%m-%d')
