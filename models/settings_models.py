# models/settings_models.py
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from utils.constants import DEFAULT_LANGUAGE, DEFAULT_WINDOW_SIZE, DEFAULT_ZOOM, LANGUAGES, MIN_ZOOM


@dataclass
class AppSettings:
    """
    アプリケーションの永続設定を表現するデータモデル。

    Attributes:
        last_directory (str): 最後にファイルを開いた/保存したディレクトリ。
        zoom (float): 最後に使用したズーム率。
        window_size (List[int]): ウィンドウの幅と高さ。
        language (str): 表示言語のコード（"ja" または "en"）。
    """
    last_directory: str = ""
    zoom: float = DEFAULT_ZOOM
    window_size: List[int] = field(default_factory=lambda: list(DEFAULT_WINDOW_SIZE))
    language: str = DEFAULT_LANGUAGE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        """辞書から設定を復元する。不正な値は既定値に置き換える。"""
        settings = cls()
        last_directory = data.get("last_directory")
        if isinstance(last_directory, str):
            settings.last_directory = last_directory

        zoom = data.get("zoom")
        if isinstance(zoom, (int, float)) and not isinstance(zoom, bool) and zoom >= MIN_ZOOM:
            settings.zoom = float(zoom)

        window_size = data.get("window_size")
        if (
            isinstance(window_size, list)
            and len(window_size) == 2
            and all(isinstance(v, int) and v > 0 for v in window_size)
        ):
            settings.window_size = list(window_size)

        language = data.get("language")
        if isinstance(language, str) and language in LANGUAGES:
            settings.language = language
        return settings
