"""
標準化されたエラーハンドリングユーティリティ
"""

import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ConfigLoadError(Exception):
    """設定読み込みエラー"""
    pass


class StandardErrorHandler:
    """標準化されたエラーハンドリング"""

    @staticmethod
    def load_config_with_fallback(
        loader_func: Callable[[], T],
        fallback_value: T,
        config_name: str,
        critical: bool = False
    ) -> T:
        """
        設定読み込みを標準化されたエラーハンドリングで実行

        Args:
            loader_func: 設定読み込み関数
            fallback_value: フォールバック値
            config_name: 設定名（ログ用）
            critical: 重要な設定か（Trueの場合は例外を伝播）

        Returns:
            T: 読み込まれた設定またはフォールバック値

        Raises:
            ConfigLoadError: critical=Trueで読み込み失敗時
        """
        try:
            result = loader_func()
            logger.debug(f"Successfully loaded config: {config_name}")
            return result

        except FileNotFoundError as e:
            msg = f"Config file not found for {config_name}: {e}"
            if critical:
                logger.error(msg)
                raise ConfigLoadError(msg) from e
            logger.warning(f"{msg}, using fallback value")
            return fallback_value

        except ValueError as e:
            msg = f"Invalid config format for {config_name}: {e}"
            if critical:
                logger.error(msg)
                raise ConfigLoadError(msg) from e
            logger.warning(f"{msg}, using fallback value")
            return fallback_value

        except Exception as e:
            msg = f"Unexpected error loading {config_name}: {e}"
            if critical:
                logger.error(msg)
                raise ConfigLoadError(msg) from e
            logger.warning(f"{msg}, using fallback value")
            return fallback_value


# 便利な関数エイリアス
load_config_safe = StandardErrorHandler.load_config_with_fallback
