"""
姓名分割のテスト
"""

import pytest

from intake_ocr.analyzer.name_segmenter import NameParts, separate_full_name, separate_furigana


class TestSeparateFullName:
    """フルネームの姓/名分割"""

    def test_explicit_space_delimiter(self):
        assert separate_full_name("山田 太郎") == NameParts("山田", "太郎")

    def test_ideographic_space_and_middle_dot(self):
        assert separate_full_name("山田　太郎") == ("山田", "太郎")
        assert separate_full_name("山田・太郎") == ("山田", "太郎")

    def test_split_on_first_delimiter_only(self):
        assert separate_full_name("山田 太郎 次郎") == ("山田", "太郎 次郎")

    def test_longest_dictionary_prefix(self):
        assert separate_full_name("佐々木花子") == ("佐々木", "花子")
        assert separate_full_name("長谷川誠") == ("長谷川", "誠")

    def test_custom_surname_list(self):
        assert separate_full_name("東海林誠", ["東海", "東海林"]) == ("東海林", "誠")

    def test_dictionary_match_needs_remaining_given_name(self):
        # 辞書一致でも名が空になる場合は文字数フォールバック
        assert separate_full_name("山田") == ("山", "田")

    def test_unknown_surname_uses_first_two_characters(self):
        assert separate_full_name("藤原紀香") == ("藤原", "紀香")

    def test_two_characters_split_one_one(self):
        assert separate_full_name("林誠") == ("林", "誠")

    def test_single_character_becomes_surname(self):
        assert separate_full_name("林") == ("林", "")

    def test_outer_whitespace_is_ignored(self):
        assert separate_full_name("  山田太郎  ") == ("山田", "太郎")

    def test_empty_input(self):
        assert separate_full_name("") == ("", "")
        assert separate_full_name(None) == ("", "")

    @pytest.mark.parametrize("name", [
        "山田太郎", "佐々木花子", "藤原紀香", "林誠", "小久保健太", "長谷川真由美", "あ", "ab", "12345",
    ])
    def test_total_and_reconstructs_input(self, name):
        parts = separate_full_name(name)
        assert parts.last_name
        assert parts.last_name + parts.first_name == name


class TestSeparateFurigana:
    """ふりがなの姓/名分割"""

    def test_reading_dictionary_prefix(self):
        assert separate_furigana("やまだたろう") == ("やまだ", "たろう")

    def test_space_delimited(self):
        assert separate_furigana("やまだ たろう") == ("やまだ", "たろう")

    def test_unknown_reading_falls_back_to_two_characters(self):
        assert separate_furigana("ほげほげ") == ("ほげ", "ほげ")
