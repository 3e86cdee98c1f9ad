"""
コマンドラインランナーのテスト
"""

import csv
import json

import pytest

import intake_ocr_runner


@pytest.fixture(autouse=True)
def no_root_handler_wrapping(monkeypatch):
    """pytest のログ捕捉ハンドラーをラップしない"""
    monkeypatch.setattr(intake_ocr_runner, "setup_sanitized_logging", lambda name=None: None)


@pytest.fixture
def ocr_file(tmp_path, clean_form_text):
    path = tmp_path / "scan1.txt"
    path.write_text(clean_form_text, encoding="utf-8")
    return path


class TestRunner:
    """OCRテキストファイルのバッチ処理"""

    def test_json_output(self, ocr_file, tmp_path):
        out = tmp_path / "result.json"
        assert intake_ocr_runner.main([str(ocr_file), "--output", str(out)]) == 0

        payload = json.loads(out.read_text(encoding="utf-8"))
        assert len(payload) == 1
        assert payload[0]["source_file"] == str(ocr_file)
        assert payload[0]["parsed_data"]["name"] == "山田太郎"
        assert payload[0]["name_is_placeholder"] is False
        assert "extracted_text" not in payload[0]

    def test_debug_view_includes_raw_text(self, ocr_file, tmp_path, clean_form_text):
        out = tmp_path / "result.json"
        assert intake_ocr_runner.main([str(ocr_file), "--debug-view", "--output", str(out)]) == 0

        entry = json.loads(out.read_text(encoding="utf-8"))[0]
        assert entry["extracted_text"] == clean_form_text
        assert entry["parsed_data"]["phone"] == "090-1234-5678"
        assert "processed_at" in entry

    def test_csv_output(self, ocr_file, tmp_path):
        out = tmp_path / "result.csv"
        assert intake_ocr_runner.main([str(ocr_file), "--format", "csv", "--output", str(out)]) == 0

        with open(out, encoding="utf-8-sig", newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "元ファイル名"
        assert rows[1][1] == "山田太郎"

    def test_stdout_output(self, ocr_file, capsys):
        assert intake_ocr_runner.main([str(ocr_file)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload[0]["parsed_data"]["furigana"] == "やまだたろう"

    def test_unreadable_inputs_are_skipped(self, ocr_file, tmp_path):
        out = tmp_path / "result.json"
        missing = tmp_path / "missing.txt"
        assert intake_ocr_runner.main([str(missing), str(ocr_file), "--output", str(out)]) == 0
        assert len(json.loads(out.read_text(encoding="utf-8"))) == 1

    def test_no_readable_input(self, tmp_path):
        assert intake_ocr_runner.main([str(tmp_path / "missing.txt")]) == 1

    def test_broken_config_dir(self, ocr_file, tmp_path, restore_config_manager):
        empty_dir = tmp_path / "empty_config"
        empty_dir.mkdir()
        assert intake_ocr_runner.main([str(ocr_file), "--config-dir", str(empty_dir)]) == 2
