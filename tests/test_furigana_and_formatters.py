"""
ふりがな補完・入力整形のテスト
"""

import pytest

from intake_ocr.analyzer.furigana import filter_hiragana_only, generate_furigana
from intake_ocr.analyzer.text_utils import is_hiragana_only, katakana_to_hiragana, normalize_text
from intake_ocr.utils.formatters import format_phone_number, format_postal_code


class TestGenerateFurigana:
    """姓・名からのふりがな提案"""

    def test_dictionary_readings(self):
        suggestion = generate_furigana("山田", "太郎")
        assert suggestion.last_name_furigana == "やまだ"
        assert suggestion.first_name_furigana == "たろう"
        assert suggestion.full_furigana == "やまだ たろう"

    def test_katakana_is_converted(self):
        suggestion = generate_furigana("ヤマダ", "タロウ")
        assert suggestion.full_furigana == "やまだ たろう"

    def test_hiragana_is_kept(self):
        assert generate_furigana("やまだ", "").full_furigana == "やまだ"

    def test_unknown_kanji_is_left_empty(self):
        suggestion = generate_furigana("東海林", "太郎")
        assert suggestion.last_name_furigana == ""
        assert suggestion.full_furigana == "たろう"

    def test_custom_readings(self):
        suggestion = generate_furigana("東海林", "", readings={"東海林": "しょうじ"})
        assert suggestion.last_name_furigana == "しょうじ"

    def test_filter_hiragana_only(self):
        assert filter_hiragana_only("やまだ123タロウ山") == "やまだ"
        assert filter_hiragana_only(None) == ""


class TestTextUtils:
    """文字種変換"""

    def test_katakana_to_hiragana(self):
        assert katakana_to_hiragana("サトウ ハナコ") == "さとう はなこ"

    def test_is_hiragana_only(self):
        assert is_hiragana_only("やまだ たろう")
        assert not is_hiragana_only("やまだ太郎")

    def test_normalize_full_width(self):
        assert normalize_text("０９０－１２３４") == "090-1234"


class TestFormatters:
    """郵便番号・電話番号の整形"""

    @pytest.mark.parametrize("value,expected", [
        ("5300001", "530-0001"),
        ("〒530-0001", "530-0001"),
        ("53", "53"),
        ("53000", "530-00"),
        ("", ""),
    ])
    def test_format_postal_code(self, value, expected):
        assert format_postal_code(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("09012345678", "090-1234-5678"),
        ("090-1234-5678", "090-1234-5678"),
        ("0901", "090-1"),
        ("090", "090"),
        (None, ""),
    ])
    def test_format_phone_number(self, value, expected):
        assert format_phone_number(value) == expected
