from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from PyQt6.QtCore import QTimer

if TYPE_CHECKING:
    from ..main_window import MainWindow

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_MS = 250


class SearchHandler:
    """
    サイドバーの検索タブと文書セッションの全文検索をつなぐハンドラクラス。

    入力のたびに短い遅延をおいて検索を開始し、古い検索の結果は表示しません。
    """
    def __init__(self, main_window: MainWindow) -> None:
        self.main: MainWindow = main_window
        self._pending_query: str = ""
        self._debounce = QTimer(main_window)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(SEARCH_DEBOUNCE_MS)
        self._debounce.timeout.connect(self._start_search)

    def on_query_changed(self, text: str) -> None:
        """検索語が変更されたときの処理。"""
        self._pending_query = text
        self._debounce.start()

    def _start_search(self) -> None:
        self.main.bridge.run(self._search(self._pending_query))

    async def _search(self, query: str) -> None:
        results = await self.main.session.search(query)
        if results is None:
            return
        self.main.sidebar.set_search_results(results, query)

    def reset(self) -> None:
        """文書の切り替え時に検索状態をクリアする。"""
        self._debounce.stop()
        self._pending_query = ""
        self.main.sidebar.clear_search()
