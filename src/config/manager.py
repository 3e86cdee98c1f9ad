"""設定ファイル読み込みと管理を行うユーティリティモジュール"""

import json
import os
from typing import Dict, Any, Optional
from pathlib import Path
import logging


# 参照方向の許容値（アンカー窓）の上限
MAX_ANCHOR_WINDOW = 10
REFERRAL_FALLBACK_CHOICES = ("last", "first", "none")


class ConfigManager:
    """設定ファイルの読み込みと管理を行うクラス"""

    def __init__(self, config_dir: Optional[Path] = None):
        env_dir = os.environ.get("INTAKE_OCR_CONFIG_DIR", "").strip()
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif env_dir:
            self.config_dir = Path(env_dir)
        else:
            self.config_dir = Path(__file__).parent.parent.parent / "config"
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._intake_settings: Optional[Dict[str, Any]] = None

    def get_template_vocabulary(self) -> Dict[str, Any]:
        """テンプレート語彙（印字済みラベル・選択肢）を取得"""
        return self._load_cached("template_vocabulary.json")

    def get_name_dictionary(self) -> Dict[str, Any]:
        """姓・名の辞書（漢字と読み）を取得"""
        return self._load_cached("name_dictionary.json")

    def get_source_keywords(self) -> Dict[str, Any]:
        """来店きっかけ判定用キーワードを取得"""
        return self._load_cached("source_keywords.json")

    def get_address_patterns(self) -> Dict[str, Any]:
        """住所判定用の語彙を取得"""
        return self._load_cached("address_patterns.json")

    def get_intake_settings(self) -> Dict[str, Any]:
        """解析パイプラインの設定を取得（検証・フォールバック付き）"""
        if self._intake_settings is None:
            try:
                cfg = dict(self._load_cached("intake_settings.json"))
                if not isinstance(cfg, dict):
                    raise ValueError("intake_settings must be a dict")
            except Exception as e:
                logging.getLogger(__name__).warning(
                    f"Intake settings error, using defaults: {e}"
                )
                cfg = self._get_default_intake_settings()
            self._intake_settings = self._normalize_intake_settings(cfg)
        return self._intake_settings

    def _normalize_intake_settings(self, cfg: Dict[str, Any]) -> Dict[str, Any]:
        """アンカー窓のクランプや列挙値の検証を行う"""
        defaults = self._get_default_intake_settings()
        windows = cfg.get("anchor_windows")
        if not isinstance(windows, dict):
            windows = defaults["anchor_windows"]
        normalized_windows = {}
        for kind in ("furigana", "name"):
            raw = windows.get(kind) or defaults["anchor_windows"][kind]
            win = {}
            for side in ("before", "after"):
                try:
                    v = int(raw.get(side, defaults["anchor_windows"][kind][side]))
                except Exception:
                    v = defaults["anchor_windows"][kind][side]
                # 0〜MAX_ANCHOR_WINDOW にクランプ
                win[side] = min(max(v, 0), MAX_ANCHOR_WINDOW)
            normalized_windows[kind] = win
        cfg["anchor_windows"] = normalized_windows

        fallback = str(cfg.get("referral_fallback", "last")).strip().lower()
        if fallback not in REFERRAL_FALLBACK_CHOICES:
            logging.getLogger(__name__).warning(
                f"Unknown referral_fallback '{fallback}', using 'last'"
            )
            fallback = "last"
        cfg["referral_fallback"] = fallback

        try:
            gap = int(cfg.get("pairing_max_line_gap", 2))
        except Exception:
            gap = 2
        cfg["pairing_max_line_gap"] = min(max(gap, 1), MAX_ANCHOR_WINDOW)

        if not str(cfg.get("name_placeholder") or "").strip():
            cfg["name_placeholder"] = defaults["name_placeholder"]
        if not str(cfg.get("name_anchor_label") or "").strip():
            cfg["name_anchor_label"] = defaults["name_anchor_label"]
        if not isinstance(cfg.get("scalp_sensitivity"), dict):
            cfg["scalp_sensitivity"] = defaults["scalp_sensitivity"]
        if not isinstance(cfg.get("literal_overrides"), list):
            cfg["literal_overrides"] = []
        return cfg

    def _get_default_intake_settings(self) -> Dict[str, Any]:
        """デフォルトの解析設定"""
        return {
            "name_anchor_label": "氏名",
            "anchor_windows": {
                "furigana": {"before": 2, "after": 3},
                "name": {"before": 1, "after": 3},
            },
            "pairing_max_line_gap": 2,
            "name_placeholder": "OCR読み取り",
            "referral_fallback": "last",
            "scalp_sensitivity": {
                "negative_keywords": ["いいえ"],
                "topic_keywords": ["アレルギー", "シミやすい"],
            },
            "literal_overrides": [],
        }

    def _load_cached(self, filename: str) -> Dict[str, Any]:
        if filename not in self._cache:
            self._cache[filename] = self._load_config(filename)
        return self._cache[filename]

    def _load_config(self, filename: str) -> Dict[str, Any]:
        """設定ファイルを読み込み"""
        config_path = self.config_dir / filename

        if not config_path.exists():
            raise FileNotFoundError(f"設定ファイルが見つかりません: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"設定ファイルの形式が不正です ({filename}): {e}")
        except Exception as e:
            raise RuntimeError(f"設定ファイルの読み込みに失敗しました ({filename}): {e}")


# グローバルな設定マネージャーインスタンス
config_manager = ConfigManager()


def use_config_dir(config_dir: Path) -> ConfigManager:
    """グローバル設定マネージャーの読み込み先を切り替える（CLI・テスト用）"""
    global config_manager
    config_manager = ConfigManager(Path(config_dir))
    return config_manager


def get_template_vocabulary() -> Dict[str, Any]:
    """テンプレート語彙を取得する便利関数"""
    return config_manager.get_template_vocabulary()


def get_name_dictionary() -> Dict[str, Any]:
    """姓・名の辞書を取得する便利関数"""
    return config_manager.get_name_dictionary()


def get_source_keywords() -> Dict[str, Any]:
    """来店きっかけキーワードを取得する便利関数"""
    return config_manager.get_source_keywords()


def get_address_patterns() -> Dict[str, Any]:
    """住所判定語彙を取得する便利関数"""
    return config_manager.get_address_patterns()


def get_intake_settings() -> Dict[str, Any]:
    """解析パイプライン設定を取得する便利関数"""
    return config_manager.get_intake_settings()
