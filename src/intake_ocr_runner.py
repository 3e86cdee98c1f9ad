#!/usr/bin/env python3
"""
Intake OCR Runner

OCRで得た問診票テキストファイルを読み込み、顧客レコードへ再構成して
JSON または CSV で出力する。

想定起動:
  python src/intake_ocr_runner.py ocr_text/*.txt \
    [--format json|csv] [--output result.json] [--debug-view]
  cat scan.txt | python src/intake_ocr_runner.py -
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from config.manager import use_config_dir
from intake_ocr.analyzer.record_assembler import build_debug_view, reconcile
from intake_ocr.analyzer.vocabulary import clear_vocabulary_cache, preload_vocabulary
from intake_ocr.export.csv_exporter import export_records_to_csv, records_to_csv_string
from intake_ocr.models import StructuredRecord
from intake_ocr.security.log_sanitizer import setup_sanitized_logging
from intake_ocr.security.logger import SecurityLogger
from intake_ocr.utils.error_handler import ConfigLoadError
from intake_ocr.utils.performance_monitor import BatchPerformanceMonitor
from intake_ocr.utils.text_reader import read_ocr_text_file

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = setup_sanitized_logging(__name__)

STDIN_MARKER = '-'


def _read_input(source: str) -> str:
    if source == STDIN_MARKER:
        return sys.stdin.read()
    return read_ocr_text_file(source)


def process_sources(
    sources: List[str],
    monitor: Optional[BatchPerformanceMonitor] = None,
) -> List[Tuple[str, str, StructuredRecord]]:
    """入力ごとに (入力名, 生テキスト, レコード) を返す（読めない入力はスキップ）"""
    results = []
    for source in sources:
        try:
            raw_text = _read_input(source)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read input {source}: {e}")
            if monitor:
                monitor.record(source, 0.0, success=False)
            continue

        if monitor:
            with monitor.measure(source):
                record = reconcile(raw_text)
        else:
            record = reconcile(raw_text)

        if record.name_is_placeholder:
            SecurityLogger.safe_log_warning(f"Name not recognized, needs review: {source}")
        else:
            SecurityLogger.safe_log_info(f"Reconciled {source}", record.to_dict())
        results.append((source, raw_text, record))
    return results


def _to_json_payload(results: List[Tuple[str, str, StructuredRecord]], debug_view: bool) -> List[Dict[str, Any]]:
    payload = []
    for source, raw_text, record in results:
        if debug_view:
            entry = build_debug_view(raw_text, record)
        else:
            entry = {
                'parsed_data': record.to_dict(),
                'name_is_placeholder': record.name_is_placeholder,
            }
        payload.append({'source_file': source, **entry})
    return payload


def write_output(
    results: List[Tuple[str, str, StructuredRecord]],
    output_format: str,
    output_path: Optional[str],
    debug_view: bool = False,
) -> None:
    if output_format == 'csv':
        rows = [(source, record) for source, _, record in results]
        if output_path:
            export_records_to_csv(rows, output_path)
        else:
            sys.stdout.write(records_to_csv_string(rows))
        return

    text = json.dumps(_to_json_payload(results, debug_view), ensure_ascii=False, indent=2)
    if output_path:
        Path(output_path).write_text(text + '\n', encoding='utf-8')
        logger.info(f"JSON output written: {output_path}")
    else:
        sys.stdout.write(text + '\n')


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description='Intake OCR Runner (OCR text -> customer record)')
    p.add_argument('inputs', nargs='+', help="OCR text files ('-' reads stdin)")
    p.add_argument('--format', choices=['json', 'csv'], default='json')
    p.add_argument('--output', type=str, default=None, help='Output file (default: stdout)')
    p.add_argument('--debug-view', action='store_true', help='Include raw OCR text alongside parsed data (json only)')
    p.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default='INFO')
    p.add_argument('--config-dir', type=str, default=None, help='Directory holding the JSON configuration files')
    args = p.parse_args(argv)

    logging.getLogger().setLevel(getattr(logging, args.log_level))
    # ルートロガーのハンドラーにもマスキングを適用（解析モジュールのログ対策）
    setup_sanitized_logging()

    if args.config_dir:
        use_config_dir(Path(args.config_dir))
        clear_vocabulary_cache()

    # 解析中の設定エラーは全項目欠損として扱われるため、ここで先に検出する
    try:
        preload_vocabulary()
    except ConfigLoadError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    if args.debug_view and args.format == 'csv':
        logger.warning("--debug-view is ignored for csv output")

    monitor = BatchPerformanceMonitor()
    monitor.start()
    try:
        results = process_sources(args.inputs, monitor)
    finally:
        monitor.finish()

    if not results:
        logger.error("No input could be processed")
        return 1

    try:
        write_output(results, args.format, args.output, args.debug_view)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
