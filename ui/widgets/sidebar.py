from __future__ import annotations
import html
from typing import List, Optional

from PyQt6.QtCore import pyqtSignal, Qt, QSize
from PyQt6.QtGui import QIcon, QPixmap
from PyQt6.QtWidgets import (QTabWidget, QWidget, QVBoxLayout, QListWidget, QListWidgetItem,
                             QLineEdit, QLabel, QListView)

from models.annotation_models import Annotation
from models.search_models import SearchResult
from utils.constants import SIDEBAR_WIDTH, THUMBNAIL_WIDTH
from utils.i18n import dialog_text, ui_text

HIGHLIGHT_COLOR = "#fff176"


def format_context_html(result: SearchResult) -> str:
    """検索結果の周辺テキストを、ヒット部分をハイライトしたHTMLに変換する。"""
    start = result.context_match_start
    end = start + result.match_length
    before = html.escape(result.context[:start])
    match = html.escape(result.context[start:end])
    after = html.escape(result.context[end:])
    return (
        f"<b>p.{result.page}</b>&nbsp; {before}"
        f"<span style='background-color: {HIGHLIGHT_COLOR};'>{match}</span>{after}"
    )


class SidebarWidget(QTabWidget):
    """
    サムネイル・注釈一覧・全文検索の3つのタブを持つサイドバー。

    項目がクリックされるとpage_requestedシグナル（1始まりのページ番号）を発行します。
    """
    page_requested = pyqtSignal(int)
    query_changed = pyqtSignal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMinimumWidth(200)
        self.setMaximumWidth(SIDEBAR_WIDTH * 2)
        self._annotations: List[Annotation] = []
        self._search_results: List[SearchResult] = []
        self._search_query: str = ""

        # --- サムネイル ---
        self.thumbnail_list = QListWidget()
        self.thumbnail_list.setViewMode(QListView.ViewMode.IconMode)
        self.thumbnail_list.setFlow(QListView.Flow.TopToBottom)
        self.thumbnail_list.setWrapping(False)
        self.thumbnail_list.setMovement(QListView.Movement.Static)
        self.thumbnail_list.setIconSize(QSize(THUMBNAIL_WIDTH, int(THUMBNAIL_WIDTH * 1.5)))
        self.thumbnail_list.setSpacing(8)
        self.thumbnail_list.itemClicked.connect(self._emit_item_page)
        self.addTab(self.thumbnail_list, "")

        # --- 注釈一覧 ---
        self.annotation_list = QListWidget()
        self.annotation_list.setWordWrap(True)
        self.annotation_list.itemClicked.connect(self._emit_item_page)
        self.addTab(self.annotation_list, "")

        # --- 検索 ---
        search_page = QWidget()
        search_layout = QVBoxLayout(search_page)
        search_layout.setContentsMargins(4, 4, 4, 4)
        self.search_input = QLineEdit()
        self.search_input.setClearButtonEnabled(True)
        self.search_input.textChanged.connect(self.query_changed.emit)
        self.search_status = QLabel("")
        self.search_status.setStyleSheet("color: #666;")
        self.result_list = QListWidget()
        self.result_list.itemClicked.connect(self._emit_item_page)
        search_layout.addWidget(self.search_input)
        search_layout.addWidget(self.search_status)
        search_layout.addWidget(self.result_list)
        self.addTab(search_page, "")

        self.setCurrentWidget(self.annotation_list)
        self.retranslate_ui()

    def retranslate_ui(self) -> None:
        """タブ名・プレースホルダー・表示中の一覧を現在の表示言語で設定し直す。"""
        for index, key in enumerate(("thumbnails_tab", "annotations_tab", "search_tab")):
            self.setTabText(index, ui_text(key))
        self.search_input.setPlaceholderText(ui_text("search_placeholder"))
        self.set_annotations(self._annotations)
        self._update_search_status()

    def _emit_item_page(self, item: QListWidgetItem) -> None:
        page = item.data(Qt.ItemDataRole.UserRole)
        if isinstance(page, int):
            self.page_requested.emit(page)

    # --- サムネイル ---

    def reset_thumbnails(self, num_pages: int) -> None:
        """ページ数分の空のサムネイル項目を作成する。"""
        self.thumbnail_list.clear()
        for page in range(1, num_pages + 1):
            item = QListWidgetItem(str(page))
            item.setData(Qt.ItemDataRole.UserRole, page)
            item.setTextAlignment(Qt.AlignmentFlag.AlignHCenter)
            self.thumbnail_list.addItem(item)

    def set_thumbnail(self, page: int, pixmap: QPixmap) -> None:
        item = self.thumbnail_list.item(page - 1)
        if item is not None:
            item.setIcon(QIcon(pixmap))

    # --- 注釈一覧 ---

    def set_annotations(self, annotations: List[Annotation]) -> None:
        """注釈一覧をページ順に表示する。"""
        self._annotations = list(annotations)
        self.annotation_list.clear()
        if not annotations:
            placeholder = QListWidgetItem(ui_text("no_annotations"))
            placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
            self.annotation_list.addItem(placeholder)
            return
        for annotation in sorted(annotations, key=lambda a: (a.page, a.y, a.x)):
            preview = annotation.content or ui_text("empty_annotation")
            item = QListWidgetItem(f"p.{annotation.page}  {preview}")
            item.setData(Qt.ItemDataRole.UserRole, annotation.page)
            item.setToolTip(annotation.content)
            self.annotation_list.addItem(item)

    # --- 検索 ---

    def set_search_results(self, results: List[SearchResult], query: str) -> None:
        """検索結果を、ヒット部分をハイライトした周辺テキスト付きで表示する。"""
        self._search_results = list(results)
        self._search_query = query
        self.result_list.clear()
        self._update_search_status()
        if not query:
            return
        for result in results:
            item = QListWidgetItem()
            item.setData(Qt.ItemDataRole.UserRole, result.page)
            label = QLabel(format_context_html(result))
            label.setTextFormat(Qt.TextFormat.RichText)
            label.setWordWrap(True)
            label.setContentsMargins(4, 4, 4, 4)
            label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
            item.setSizeHint(label.sizeHint())
            self.result_list.addItem(item)
            self.result_list.setItemWidget(item, label)

    def _update_search_status(self) -> None:
        if not self._search_query:
            self.search_status.setText("")
        elif not self._search_results:
            self.search_status.setText(dialog_text("no_search_results"))
        else:
            self.search_status.setText(ui_text("search_count").format(count=len(self._search_results)))

    def clear_search(self) -> None:
        self.search_input.blockSignals(True)
        self.search_input.clear()
        self.search_input.blockSignals(False)
        self._search_results = []
        self._search_query = ""
        self.result_list.clear()
        self.search_status.setText("")
