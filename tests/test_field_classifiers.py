"""
項目別の字句判定器のテスト
"""

import pytest

from intake_ocr.analyzer.field_classifiers import (
    extract_birth_date,
    extract_phone,
    extract_postal_code,
    is_valid_address,
    is_valid_furigana,
    is_valid_name,
    is_valid_phone,
    match_full_address,
    match_partial_address,
)
from intake_ocr.analyzer.vocabulary import get_template_vocab


class TestTemplateExclusion:
    """テンプレート語彙はどの判定器でも不採用"""

    def test_template_words_are_never_names_or_furigana(self):
        for word in get_template_vocab():
            assert not is_valid_name(word), word
            assert not is_valid_furigana(word), word

    def test_template_words_are_never_addresses(self):
        for word in get_template_vocab():
            assert not is_valid_address(word), word

    def test_label_with_surrounding_spaces_is_still_template(self):
        assert not is_valid_name("  氏名  ")

    def test_checkbox_option_label_is_not_a_name(self):
        """チェック記号（の誤読）付きの選択肢ラベル"""
        assert not is_valid_name("口店頭")
        assert not is_valid_name("■店頭")

    def test_name_starting_with_marker_like_kanji(self):
        assert is_valid_name("口田太郎")


class TestNameAndFurigana:
    """氏名・ふりがなの判定"""

    @pytest.mark.parametrize("line", ["山田太郎", "佐々木", "林誠", " 田中花子 "])
    def test_valid_names(self, line):
        assert is_valid_name(line)

    @pytest.mark.parametrize("line", ["林", "長谷川真由美", "山田 太郎", "やまだ", "山田1", ""])
    def test_invalid_names(self, line):
        assert not is_valid_name(line)

    @pytest.mark.parametrize("line", ["やまだ たろう", "やまだたろう", "さとう　はなこ", "ゆうこ"])
    def test_valid_furigana(self, line):
        assert is_valid_furigana(line)

    @pytest.mark.parametrize("line", ["ふりがな", "あい", "あ い", "ヤマダ", "やまだ太郎", ""])
    def test_invalid_furigana(self, line):
        assert not is_valid_furigana(line)


class TestPhone:
    """電話番号の判定と抽出"""

    @pytest.mark.parametrize("value", ["090-1234-5678", "080-0000-1111", "06-1234-5678", "0120-123-4567"])
    def test_valid_phone(self, value):
        assert is_valid_phone(value)

    @pytest.mark.parametrize("value", ["060-1234-5678x", "1234-5678", "09012345678", ""])
    def test_invalid_phone(self, value):
        assert not is_valid_phone(value)

    def test_extract_phone_adds_hyphens(self):
        assert extract_phone("電話 09012345678") == "090-1234-5678"

    def test_extract_phone_removes_spaces(self):
        assert extract_phone("090 1234 5678") == "090-1234-5678"

    def test_extract_phone_none_for_non_phone(self):
        assert extract_phone("大阪府大阪市北区梅田1-2-3") is None

    @pytest.mark.parametrize("line, expected", [
        ("06-6123-4567", "06-6123-4567"),
        ("TEL 03-1234-5678", "03-1234-5678"),
    ])
    def test_extract_two_digit_area_code(self, line, expected):
        assert extract_phone(line) == expected

    def test_four_digit_group_pair_is_not_a_phone(self):
        assert extract_phone("1234-5678") is None


class TestPostalCode:
    """郵便番号の抽出"""

    def test_postal_code_with_mark(self):
        assert extract_postal_code("〒530-0001") == "530-0001"

    def test_postal_code_without_hyphen_is_formatted(self):
        assert extract_postal_code("5300001") == "530-0001"

    def test_phone_line_never_yields_postal_code(self):
        assert extract_postal_code("〒530-0001 090-1234-5678") is None
        assert extract_postal_code("090-1234-5678") is None


class TestAddress:
    """住所の判定と部分一致"""

    @pytest.mark.parametrize("line", [
        "大阪府大阪市北区梅田1-2-3",
        "大阪府大阪市",
        "福島区福島5-1-5",
        "大阪梅田1-2-3",
    ])
    def test_valid_addresses(self, line):
        assert is_valid_address(line)

    @pytest.mark.parametrize("line", ["市区", "梅田1-2-3", "山田太郎", "住所"])
    def test_invalid_addresses(self, line):
        assert not is_valid_address(line)

    def test_partial_pattern_matches_ward_and_block_number(self):
        assert match_partial_address("福島区福島5-1-5") == "福島区福島5-1-5"

    def test_full_pattern_requires_prefecture(self):
        assert match_full_address("福島区福島5-1-5") is None
        assert match_full_address("大阪府大阪市北区梅田") == "大阪府大阪市北区梅田"


class TestBirthDate:
    """生年月日の抽出"""

    def test_extracts_date(self):
        assert extract_birth_date("1985年3月7日") == (1985, 3, 7)

    def test_allows_spaces(self):
        assert extract_birth_date("2001 年 12 月 31 日") == (2001, 12, 31)

    @pytest.mark.parametrize("line", ["1985年13月1日", "1985年3月32日", "1885年3月7日", "昭和60年3月7日"])
    def test_rejects_out_of_range(self, line):
        assert extract_birth_date(line) is None
