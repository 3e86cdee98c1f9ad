"""
テスト共通フィクスチャ
"""

import pytest

import config.manager as config_manager_module
from intake_ocr.analyzer.vocabulary import clear_vocabulary_cache


@pytest.fixture
def restore_config_manager(monkeypatch):
    """グローバル設定マネージャーを差し替えるテストの後始末"""
    monkeypatch.setattr(config_manager_module, "config_manager", config_manager_module.config_manager)
    yield
    clear_vocabulary_cache()


@pytest.fixture
def intake_settings():
    return config_manager_module.get_intake_settings()


@pytest.fixture
def clean_form_text():
    """ラベル付きで整った問診票のOCRテキスト"""
    return "\n".join([
        "BELO OSAKA",
        "ふりがな",
        "やまだ たろう",
        "氏名",
        "山田太郎",
        "住所",
        "〒530-0001 大阪府大阪市北区梅田1-2-3",
        "電話番号",
        "090-1234-5678",
        "生年月日",
        "1985年3月7日",
    ])
