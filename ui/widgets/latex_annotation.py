from __future__ import annotations
from typing import Optional

from PyQt6.QtCore import pyqtSignal, Qt, QPointF
from PyQt6.QtGui import QContextMenuEvent, QMouseEvent, QPixmap
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QLineEdit, QToolButton

from utils.i18n import ui_text
from utils.latex_renderer import render_latex_png


class LatexAnnotationWidget(QWidget):
    """
    PDF上に配置される、移動可能なLaTeX注釈ウィジェット。

    表示モードでは内容をmatplotlibのmathtextで画像化して表示し、
    ダブルクリックで1行入力の編集モードに切り替わります。
    位置や選択状態は自分では持たず、マウス操作をシグナルとして通知するだけです。
    """
    pressed = pyqtSignal(int, QPointF)
    dragged = pyqtSignal(int, QPointF)
    released = pyqtSignal(int)
    edit_requested = pyqtSignal(int)
    edit_committed = pyqtSignal(int, str)
    delete_requested = pyqtSignal(int)

    def __init__(self, annotation_id: int, parent: Optional[QWidget] = None) -> None:
        """
        LatexAnnotationWidgetのコンストラクタ。

        Args:
            annotation_id (int): 表示する注釈のID。
            parent (Optional[QWidget]): 親ウィジェット（ページ表示ラベル）。
        """
        super().__init__(parent)
        self.annotation_id: int = annotation_id
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        # --- 状態変数の型定義 ---
        self._selected: bool = False
        self._editing: bool = False
        self._content: str = ""
        self._font_px: float = 20.0
        self._dpr: float = 1.0
        self._rendered: bool = False

        # --- UI要素の型定義 ---
        self.display_label: QLabel
        self.line_edit: QLineEdit
        self.delete_button: QToolButton

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 2)
        layout.setSpacing(4)

        self.display_label = QLabel(self)
        self.display_label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.display_label.setStyleSheet("QLabel { background: transparent; border: none; }")
        layout.addWidget(self.display_label)

        self.line_edit = QLineEdit(self)
        self.line_edit.setPlaceholderText(ui_text("edit_placeholder"))
        self.line_edit.setMinimumWidth(200)
        self.line_edit.hide()
        self.line_edit.editingFinished.connect(self._commit)
        layout.addWidget(self.line_edit)

        self.delete_button = QToolButton(self)
        self.delete_button.setText("✕")
        self.delete_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self.delete_button.setStyleSheet("QToolButton { background-color: rgba(0, 0, 0, 0.55); color: white; border-radius: 4px; padding: 0 4px; }")
        self.delete_button.setAutoRaise(True)
        self.delete_button.hide()
        self.delete_button.clicked.connect(lambda: self.delete_requested.emit(self.annotation_id))
        layout.addWidget(self.delete_button)

        self._apply_frame_style()

    @property
    def is_editing(self) -> bool:
        return self._editing

    def set_content(self, content: str, font_px: float, dpr: float = 1.0) -> None:
        """表示する内容とフォントサイズ（画面上のピクセル）を設定し、再描画する。"""
        if self._rendered and (content, font_px, dpr) == (self._content, self._font_px, self._dpr):
            return
        self._rendered = True
        self._content = content
        self._font_px = font_px
        self._dpr = dpr
        self._render_content()

    def _render_content(self) -> None:
        """内容を画像化してラベルに表示する。数式として解釈できない場合は文字列のまま表示する。"""
        png = render_latex_png(self._content, round(self._font_px, 2), 72.0 * self._dpr)
        if png is not None:
            pixmap = QPixmap()
            pixmap.loadFromData(png, "PNG")
            pixmap.setDevicePixelRatio(self._dpr)
            self.display_label.setPixmap(pixmap)
            self.display_label.setStyleSheet("QLabel { background: transparent; border: none; }")
        else:
            font = self.display_label.font()
            font.setPixelSize(max(1, int(round(self._font_px))))
            self.display_label.setFont(font)
            self.display_label.setText(self._content or ui_text("edit_placeholder"))
            color = "#222" if self._content else "#999"
            self.display_label.setStyleSheet(f"QLabel {{ background: transparent; border: none; color: {color}; }}")
        self.adjustSize()

    def retranslate_ui(self) -> None:
        """プレースホルダーを現在の表示言語で設定し直す。"""
        self.line_edit.setPlaceholderText(ui_text("edit_placeholder"))
        if self._rendered and not self._content:
            self._render_content()

    def set_selected(self, selected: bool) -> None:
        """選択状態を設定し、枠線と削除ボタンの表示を更新する。"""
        if self._selected == selected:
            return
        self._selected = selected
        self.delete_button.setVisible(selected and not self._editing)
        self._apply_frame_style()
        self.adjustSize()

    def _apply_frame_style(self) -> None:
        """選択状態に応じてウィジェットの枠線スタイルを更新する。"""
        if self._selected:
            style = "background-color: rgba(255, 255, 255, 0.85); border: 2px solid #ff9800; border-radius: 4px;"
        else:
            style = "background-color: transparent; border: 1px dashed rgba(0, 0, 0, 0.25); border-radius: 4px;"
        self.setStyleSheet(f"LatexAnnotationWidget {{ {style} }}")

    def enter_edit_mode(self, content: str) -> None:
        """1行入力の編集モードに切り替える。"""
        self._editing = True
        self.display_label.hide()
        self.delete_button.hide()
        self.line_edit.setText(content)
        self.line_edit.show()
        self.adjustSize()
        self.line_edit.setFocus()
        self.line_edit.selectAll()
        self.setCursor(Qt.CursorShape.IBeamCursor)

    def _commit(self) -> None:
        """編集内容を確定して表示モードに戻る。Enterとフォーカスアウトの両方から呼ばれる。"""
        if not self._editing:
            return
        self._editing = False
        text = self.line_edit.text()
        self.line_edit.hide()
        self.display_label.show()
        self.delete_button.setVisible(self._selected)
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        self.edit_committed.emit(self.annotation_id, text)

    def place(self, screen_x: float, screen_y: float) -> None:
        """左端がscreen_x、縦方向の中心がscreen_yになるように配置する。"""
        self.move(int(round(screen_x)), int(round(screen_y - self.height() / 2)))

    # --- マウス操作 ---

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """左クリックで選択とドラッグ開始を通知する。"""
        if event.button() == Qt.MouseButton.LeftButton and not self._editing:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            self.pressed.emit(self.annotation_id, event.globalPosition())
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() & Qt.MouseButton.LeftButton and not self._editing:
            self.dragged.emit(self.annotation_id, event.globalPosition())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and not self._editing:
            self.setCursor(Qt.CursorShape.OpenHandCursor)
            self.released.emit(self.annotation_id)
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        """ダブルクリックで編集モードへの切り替えを要求する。"""
        if event.button() == Qt.MouseButton.LeftButton and not self._editing:
            self.edit_requested.emit(self.annotation_id)
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:
        # 注釈上の右クリックではページのメニューを開かない
        event.accept()
