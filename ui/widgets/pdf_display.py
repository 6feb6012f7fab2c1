from __future__ import annotations
from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import QEvent, QObject, Qt, QPointF
from PyQt6.QtGui import QContextMenuEvent, QMouseEvent
from PyQt6.QtWidgets import QLabel, QWidget

if TYPE_CHECKING:
    from ..main_window import MainWindow


class PDFDisplayLabel(QLabel):
    """
    PDFページ画像を表示し、ページ背景に対するマウス操作を受け付けるカスタムラベル。

    注釈ウィジェットはこのラベルの子として配置されます。注釈以外の場所の左クリックは
    選択解除、右クリックは注釈追加メニューとしてAnnotationHandlerに伝えます。
    """
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        PDFDisplayLabelのコンストラクタ。

        Args:
            parent (Optional[QWidget]): 親ウィジェット。通常はMainWindow。
        """
        super().__init__(parent)
        self.main_window: MainWindow = parent
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.DefaultContextMenu)

    def _page_contains(self, pos: QPointF) -> bool:
        """指定位置がページ画像の範囲内かどうかを返す。"""
        pixmap = self.pixmap()
        if pixmap is None or pixmap.isNull():
            return False
        size = pixmap.deviceIndependentSize()
        return 0 <= pos.x() <= size.width() and 0 <= pos.y() <= size.height()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """背景の左クリックで選択とメニューを解除する。"""
        if self.main_window and event.button() == Qt.MouseButton.LeftButton:
            self.setFocus()
            self.main_window.annotation_handler.background_click()
            event.accept()
            return
        super().mousePressEvent(event)

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:
        """ページ上の右クリックで注釈追加メニューを開く。"""
        pos = QPointF(event.pos())
        if not self.main_window or not self._page_contains(pos):
            return super().contextMenuEvent(event)
        self.main_window.annotation_handler.show_context_menu(pos, event.globalPos())
        event.accept()


class BackgroundClickFilter(QObject):
    """
    スクロール領域のビューポート（ページ画像の外側の余白）の左クリックを選択解除として扱うイベントフィルタ。

    ページ画像上のクリックはPDFDisplayLabelが受け取るため、ここに届くのは余白のクリックだけです。
    """
    def __init__(self, main_window: MainWindow) -> None:
        super().__init__(main_window)
        self.main_window: MainWindow = main_window

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
            self.main_window.annotation_handler.background_click()
        return False
