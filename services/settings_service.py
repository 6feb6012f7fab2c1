# services/settings_service.py
import logging
from typing import Any, Optional

from models.settings_models import AppSettings
from services.base_service import BaseService
from services.storage_service import StorageService

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


class SettingsService(BaseService[AppSettings]):
    """ユーザー設定（最後のディレクトリ・ズーム率・ウィンドウサイズ）を管理するサービス。"""

    def __init__(self, storage_service: StorageService) -> None:
        super().__init__(storage_service=storage_service)
        self.storage_service: StorageService = storage_service
        self.settings: AppSettings = AppSettings()

    def load_data(self, identifier: Any = None) -> Optional[AppSettings]:
        """設定ファイルを読み込む。

        ファイルが存在しない、または壊れている場合は既定値の設定を返します。

        Args:
            identifier (Any): 設定ファイル名。省略時は settings.json。

        Returns:
            Optional[AppSettings]: 読み込まれた設定。
        """
        data = self.storage_service.load_json(identifier or SETTINGS_FILE)
        if isinstance(data, dict):
            self.settings = AppSettings.from_dict(data)
        else:
            if data is not None:
                logger.warning("Settings file has unexpected format; using defaults")
            self.settings = AppSettings()
        return self.settings

    def save_data(self, data: AppSettings) -> None:
        self.settings = data
        self.storage_service.save_json(SETTINGS_FILE, data.to_dict())
