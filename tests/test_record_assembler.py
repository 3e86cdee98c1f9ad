"""
OCRテキスト → 顧客レコード組み立てのテスト
"""

import pytest

from intake_ocr.analyzer import reconcile as lazy_reconcile
from intake_ocr.analyzer.record_assembler import (
    apply_literal_overrides,
    build_debug_view,
    detect_scalp_sensitivity,
    parse_ocr_text,
    reconcile,
)
from intake_ocr.models import NAME_PLACEHOLDER, SourceType, StructuredRecord


class TestReconcileScenarios:
    """代表的な問診票テキスト"""

    def test_clean_labeled_form(self, clean_form_text):
        record = reconcile(clean_form_text)

        assert record.name == "山田太郎"
        assert record.furigana == "やまだたろう"
        assert record.last_name == "山田"
        assert record.first_name == "太郎"
        assert record.last_name_furigana == "やまだ"
        assert record.first_name_furigana == "たろう"
        assert record.phone == "090-1234-5678"
        assert record.postal_code == "530-0001"
        assert record.address == "大阪府大阪市北区梅田1-2-3"
        assert (record.birth_year, record.birth_month, record.birth_day) == (1985, 3, 7)
        assert record.referral_person is None
        assert record.name_is_placeholder is False

    def test_misread_storefront_checkbox(self):
        record = reconcile("氏名\n山田太郎\n当店を知ったきっかけを教えて下さい\n口店頭")
        assert record.source_type == SourceType.STOREFRONT
        assert record.referral_person is None
        assert record.name == "山田太郎"

    def test_misread_checkbox_line_without_anchor_is_not_a_name(self):
        record = reconcile("口店頭\n山田太郎")
        assert record.name == "山田太郎"
        assert record.referral_person is None
        assert record.source_type == SourceType.STOREFRONT

    def test_landline_with_two_digit_area_code(self):
        record = reconcile("氏名\n山田太郎\n06-6123-4567")
        assert record.phone == "06-6123-4567"

    def test_misread_storefront_checkbox_with_instagram(self):
        text = "氏名\n山田太郎\n口店頭\nInstagram 個人アカウント\n誰のアカウント→美咲"
        record = reconcile(text)
        assert record.source_type == SourceType.INSTAGRAM_PERSONAL
        assert record.instagram_account == "美咲"

    def test_referral_in_parentheses(self):
        record = reconcile("氏名\n山田太郎\nご紹介（田中花子様）")
        assert record.source_type == SourceType.REFERRAL
        assert record.referral_person == "田中花子"
        assert record.name == "山田太郎"

    def test_no_ideographs_gives_placeholder_only(self):
        record = reconcile("abc 123\n!!!\n---")
        assert record.name == NAME_PLACEHOLDER
        assert record.name_is_placeholder is True
        assert record.to_dict() == {"name": NAME_PLACEHOLDER}

    def test_ward_level_address(self):
        record = reconcile("氏名\n山田太郎\n住所\n福島区福島5-1-5")
        assert record.address == "福島区福島5-1-5"

    def test_lazy_package_export(self):
        assert lazy_reconcile is reconcile


class TestInvariants:
    """レコードの不変条件"""

    @pytest.mark.parametrize("text", [
        "",
        None,
        "\n\n\n",
        "口",
        "■\n■\n■",
        "ご紹介（）",
        "氏名",
        "氏名\n氏名\n氏名",
        "〒\n-\n0",
        "ふりがな\nふりがな",
        "☑" * 500,
        "山" * 1000,
    ])
    def test_reconcile_never_raises_and_name_is_set(self, text):
        record = reconcile(text)
        assert isinstance(record, StructuredRecord)
        assert record.name

    def test_referral_equal_to_name_is_dropped(self):
        record = reconcile("氏名\n山田太郎\nご紹介（山田太郎様）")
        assert record.name == "山田太郎"
        assert record.source_type == SourceType.REFERRAL
        assert record.referral_person is None

    def test_referral_falls_back_to_other_name_candidate(self):
        record = reconcile("氏名\n山田太郎\n田中花子")
        assert record.name == "山田太郎"
        assert record.referral_person == "田中花子"

    def test_name_parts_attached_only_when_both_halves_exist(self):
        record = reconcile("氏名\n山田太郎")
        assert (record.last_name, record.first_name) == ("山田", "太郎")
        assert record.last_name_furigana is None

    def test_internal_error_returns_placeholder(self, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("intake_ocr.analyzer.record_assembler.collect_candidates", broken)
        record = reconcile("氏名\n山田太郎")
        assert record.name == NAME_PLACEHOLDER
        assert record.name_is_placeholder is True

    def test_parse_ocr_text_does_not_substitute_placeholder(self):
        record = parse_ocr_text("abc")
        assert record.name is None
        assert record.name_is_placeholder is False

    def test_record_is_frozen(self, clean_form_text):
        record = reconcile(clean_form_text)
        with pytest.raises(Exception):
            record.name = "別人"


class TestScalpSensitivity:
    """頭皮・アレルギー設問の判定"""

    def test_negative_answer_with_topic(self, intake_settings):
        text = "頭皮がシミやすい・アレルギー等ございますか\nいいえ"
        assert detect_scalp_sensitivity(text, intake_settings) is False
        assert reconcile(text).has_scalp_sensitivity is False

    def test_topic_without_negative_is_undetermined(self, intake_settings):
        text = "頭皮がシミやすい・アレルギー等ございますか\nはい"
        assert detect_scalp_sensitivity(text, intake_settings) is None
        assert "has_scalp_sensitivity" not in reconcile(text).to_dict()


class TestLiteralOverrides:
    """設定された全文一致ルール"""

    def test_first_matching_rule_per_field_wins(self):
        rules = [
            {"field": "address", "match_any": ["大阪市福島区福島5-1-5"]},
            {"field": "address", "pattern": r"大阪市福島区[^\s、。]*\d+[-ー]\d+[-ー]\d+"},
        ]
        values = apply_literal_overrides({}, "住所 大阪市福島区福島7-2-1", rules)
        assert values["address"] == "大阪市福島区福島7-2-1"

    def test_match_any_returns_found_token(self):
        rules = [{"field": "name", "match_any": ["島原章介", "島原介"]}]
        values = apply_literal_overrides({"name": "島原"}, "氏名 島原介", rules)
        assert values["name"] == "島原介"

    def test_unless_equals_name(self):
        rules = [{"field": "referral_person", "match_any": ["愛甲柚香"], "unless_equals_name": True}]
        values = apply_literal_overrides({"name": "愛甲柚香"}, "愛甲柚香", rules)
        assert "referral_person" not in values

    def test_unknown_field_and_bad_pattern_are_ignored(self):
        rules = [
            {"field": "source_type", "match_any": ["x"]},
            {"field": "phone", "pattern": "("},
            "not a rule",
        ]
        assert apply_literal_overrides({}, "x", rules) == {}

    def test_sample_form_name_override(self):
        record = reconcile("ふりがな\nしまはらしょうけ\n氏名\n島原章介")
        assert record.name == "島原章介"
        assert record.furigana == "しまはらしょうけ"
        assert record.last_name == "島原"


class TestDebugView:
    """OCR生テキストと解析結果の確認用データ"""

    def test_contains_raw_text_and_parsed_data(self, clean_form_text):
        view = build_debug_view(clean_form_text)
        assert view["extracted_text"] == clean_form_text
        assert view["parsed_data"]["name"] == "山田太郎"
        assert view["name_is_placeholder"] is False
        assert view["processed_at"].endswith("+09:00")
