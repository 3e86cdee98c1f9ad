"""
OCRテキストファイルの読み込み

スキャナ付属ソフトなどから書き出されたテキストは Shift_JIS 系のことがあるため、
UTF-8 で読めない場合は chardet で文字コードを推定する。
"""

import logging
from pathlib import Path
from typing import Union

import chardet

logger = logging.getLogger(__name__)

MIN_DETECTION_CONFIDENCE = 0.5
FALLBACK_ENCODINGS = ["cp932", "shift_jis", "euc-jp", "iso-2022-jp"]


def read_ocr_text_file(file_path: Union[str, Path]) -> str:
    """文字コード検出付きでテキストを読み込む

    Raises:
        FileNotFoundError / OSError: ファイルを開けない
        ValueError: どの文字コードでもデコードできない
    """
    raw_data = Path(file_path).read_bytes()

    # まずUTF-8（BOM付きも可）
    try:
        return raw_data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(raw_data)
    encoding = detected.get("encoding")
    confidence = detected.get("confidence") or 0.0
    if encoding and confidence >= MIN_DETECTION_CONFIDENCE:
        try:
            text = raw_data.decode(encoding)
            logger.info(f"Read {file_path} with detected encoding {encoding} (confidence={confidence:.2f})")
            return text
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(f"Failed to read with detected encoding {encoding}: {e}")

    for enc in FALLBACK_ENCODINGS:
        try:
            text = raw_data.decode(enc)
            logger.warning(f"File read with fallback encoding {enc}: {file_path}")
            return text
        except UnicodeDecodeError:
            continue

    raise ValueError(f"Unable to read file {file_path} with any supported encoding")
