"""
顧客レコードのCSV出力

ヘッダー行には日本語の表示名を使い、来店きっかけは表示ラベルに変換する。
Excelで文字化けしないよう utf-8-sig で書き出す。
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from utils.datetime_utils import format_jst_timestamp

from ..models import SourceType, StructuredRecord

logger = logging.getLogger(__name__)

# (カラム名, 表示名)
CSV_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("source_file", "元ファイル名"),
    ("name", "氏名"),
    ("furigana", "ふりがな"),
    ("last_name", "姓"),
    ("first_name", "名"),
    ("last_name_furigana", "姓（ふりがな）"),
    ("first_name_furigana", "名（ふりがな）"),
    ("postal_code", "郵便番号"),
    ("address", "住所"),
    ("phone", "電話番号"),
    ("birth_year", "生年"),
    ("birth_month", "生月"),
    ("birth_day", "生日"),
    ("source_type", "来店きっかけ"),
    ("instagram_account", "Instagramアカウント"),
    ("referral_person", "ご紹介者"),
    ("has_scalp_sensitivity", "アレルギー有無"),
    ("needs_review", "要確認"),
    ("processed_at", "処理日時"),
)


def _display_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if key == "source_type":
        source_type = SourceType.from_value(value)
        return source_type.label if source_type else str(value)
    if key == "has_scalp_sensitivity":
        return "あり" if value else "なし"
    if isinstance(value, bool):
        return "○" if value else ""
    return str(value)


def record_to_row(
    record: StructuredRecord,
    source_file: str = "",
    processed_at: Optional[str] = None,
) -> Dict[str, str]:
    """1件のレコードをCSV行（カラム名 → 表示値）に変換"""
    data = record.to_dict()
    data["source_file"] = source_file
    data["needs_review"] = record.name_is_placeholder
    data["processed_at"] = processed_at or format_jst_timestamp()
    return {key: _display_value(key, data.get(key)) for key, _ in CSV_COLUMNS}


def write_records_csv(
    rows: Sequence[Tuple[str, StructuredRecord]],
    stream: io.TextIOBase,
) -> int:
    """
    (元ファイル名, レコード) の列をCSVとして書き込む

    Returns:
        int: 書き込んだデータ行数
    """
    fieldnames = [key for key, _ in CSV_COLUMNS]
    writer = csv.DictWriter(stream, fieldnames=fieldnames)

    # ヘッダー行は日本語表示名を書き込む
    writer.writerow({key: display for key, display in CSV_COLUMNS})

    processed_at = format_jst_timestamp()
    count = 0
    for source_file, record in rows:
        writer.writerow(record_to_row(record, source_file, processed_at))
        count += 1
    return count


def export_records_to_csv(
    rows: Sequence[Tuple[str, StructuredRecord]],
    output_csv_path: Union[str, Path],
) -> Optional[Path]:
    """
    レコードをCSVファイルへ出力

    Args:
        rows: (元ファイル名, レコード) のリスト
        output_csv_path: 出力するCSVファイルのパス

    Returns:
        出力したパス（対象がない場合は None）

    Raises:
        OSError: 書き込みに失敗した場合
    """
    logger.info(f"CSVエクスポート処理を開始します。対象件数: {len(rows)}")
    if not rows:
        logger.info("CSVエクスポートの対象となるレコードがないため、処理を終了します。")
        return None

    path = Path(output_csv_path)
    try:
        with open(path, "w", newline="", encoding="utf-8-sig") as f:
            count = write_records_csv(rows, f)
    except OSError as e:
        logger.error(f"CSVファイルの書き込み中にエラーが発生しました: {path}, エラー: {e}")
        raise

    logger.info(f"CSVファイルを正常に出力しました: {path} ({count}件)")
    return path


def records_to_csv_string(rows: List[Tuple[str, StructuredRecord]]) -> str:
    """標準出力向けにCSV文字列を返す"""
    buffer = io.StringIO()
    write_records_csv(rows, buffer)
    return buffer.getvalue()
