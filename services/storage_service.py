# services/storage_service.py
import json
import logging
import os
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

JsonData = Union[Dict[str, Any], List[Dict[str, Any]]]


class StorageService:
    """ローカルファイルシステムへのJSONデータ永続化を管理するサービスクラス。"""

    def __init__(self, base_path: str) -> None:
        """StorageServiceのコンストラクタ。

        Args:
            base_path (str): データを保存する基準ディレクトリのパス。
                             存在しない場合は自動的に作成されます。
        """
        self.base_path = base_path
        os.makedirs(self.base_path, exist_ok=True)

    def get_path(self, file_name: str) -> str:
        """ベースパスとファイル名を結合して完全なファイルパスを取得する。"""
        return os.path.join(self.base_path, file_name)

    def save_json(self, file_name: str, data: JsonData) -> bool:
        """データをJSONファイルとしてローカルに保存する。

        書き込みは一時ファイルに行い、完了後に置き換えます。

        Args:
            file_name (str): 保存するファイル名。
            data (Union[Dict, List]): 保存するデータ（辞書または辞書のリスト）。

        Returns:
            bool: 保存に成功した場合True。
        """
        file_path = self.get_path(file_name)
        temp_path = f"{file_path}.tmp"
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=4)
            os.replace(temp_path, file_path)
            logger.debug(f"Saved {file_path}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def load_json(self, file_name: str) -> Optional[JsonData]:
        """ローカルのJSONファイルからデータを読み込む。

        Args:
            file_name (str): 読み込むファイル名。

        Returns:
            Optional[Union[Dict, List]]: 読み込まれたデータ。ファイルが存在しないか壊れている場合はNone。
        """
        file_path = self.get_path(file_name)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return None
