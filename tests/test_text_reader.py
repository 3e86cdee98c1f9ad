"""
OCRテキストファイル読み込みのテスト
"""

import pytest

from intake_ocr.utils.text_reader import read_ocr_text_file


class TestReadOcrTextFile:
    """文字コード検出付きの読み込み"""

    def test_utf8_with_bom(self, tmp_path, clean_form_text):
        path = tmp_path / "scan.txt"
        path.write_bytes(clean_form_text.encode("utf-8-sig"))
        assert read_ocr_text_file(path) == clean_form_text

    def test_shift_jis(self, tmp_path, clean_form_text):
        """スキャナソフトの Shift_JIS 出力"""
        path = tmp_path / "scan_sjis.txt"
        path.write_bytes(clean_form_text.encode("shift_jis"))
        text = read_ocr_text_file(path)
        assert "山田太郎" in text
        assert "090-1234-5678" in text

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            read_ocr_text_file(tmp_path / "missing.txt")
