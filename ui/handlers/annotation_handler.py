from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Dict, Optional

from PyQt6.QtCore import QPoint, QPointF
from PyQt6.QtWidgets import QMenu

from models.annotation_models import Annotation
from services.drag_controller import PointerDown, PointerMove, PointerUp
from services.errors import InvalidPageError
from utils.coordinates import screen_from_document
from utils.i18n import ui_text
from ui.widgets.latex_annotation import LatexAnnotationWidget

if TYPE_CHECKING:
    from ..main_window import MainWindow

logger = logging.getLogger(__name__)


class AnnotationHandler:
    """
    PDFページ上のLaTeX注釈ウィジェットの管理を行うハンドラクラス。

    注釈の状態はDocumentSessionが持つAnnotationStore・SelectionController・DragControllerが
    管理し、このクラスはウィジェットからのマウス操作をそれらに伝え、結果を画面に反映します。
    表示中のページに属する注釈だけがウィジェットとして存在します。
    """
    def __init__(self, main_window: MainWindow) -> None:
        """
        AnnotationHandlerのコンストラクタ。

        Args:
            main_window (MainWindow): 親となるメインウィンドウインスタンス。
        """
        self.main: MainWindow = main_window
        self.widgets: Dict[int, LatexAnnotationWidget] = {}

    @property
    def session(self):
        return self.main.session

    @property
    def _zoom(self) -> float:
        return self.main.pdf_handler.zoom_factor

    @property
    def _visible_page(self) -> int:
        return self.main.pdf_handler.current_page + 1

    # --- ウィジェットの同期 ---

    def reset(self) -> None:
        """すべての注釈ウィジェットを削除する。文書の切り替え時に呼ばれる。"""
        for widget in self.widgets.values():
            widget.hide()
            widget.deleteLater()
        self.widgets.clear()

    def refresh(self) -> None:
        """表示中のページの注釈ウィジェットをストアの内容に合わせて作成・更新・削除する。"""
        store = self.session.store
        selection = self.session.selection
        if store is None or selection is None:
            self.reset()
            self.main.sidebar.set_annotations([])
            return

        visible = {a.id: a for a in store.for_page(self._visible_page)}
        for annotation_id in list(self.widgets):
            if annotation_id not in visible:
                self._remove_widget(annotation_id)

        for annotation in visible.values():
            widget = self.widgets.get(annotation.id)
            if widget is None:
                widget = self._create_widget(annotation)
            self._update_widget(widget, annotation, annotation.id == selection.selected_id)

        self.main.sidebar.set_annotations(store.annotations)
        self.main.update_window_state()

    def retranslate_ui(self) -> None:
        for widget in self.widgets.values():
            widget.retranslate_ui()
        self.refresh()

    def _create_widget(self, annotation: Annotation) -> LatexAnnotationWidget:
        """注釈ウィジェットを作成してシグナルを接続する。"""
        widget = LatexAnnotationWidget(annotation.id, self.main.pdf_display_label)
        widget.pressed.connect(self.on_pressed)
        widget.dragged.connect(self.on_dragged)
        widget.released.connect(self.on_released)
        widget.edit_requested.connect(self.on_edit_requested)
        widget.edit_committed.connect(self.on_edit_committed)
        widget.delete_requested.connect(self.delete_annotation)
        self.widgets[annotation.id] = widget
        widget.show()
        widget.raise_()
        if annotation.is_new:
            self.session.selection.begin_edit(annotation.id)
            widget.enter_edit_mode(annotation.content)
        return widget

    def _update_widget(self, widget: LatexAnnotationWidget, annotation: Annotation, selected: bool) -> None:
        """内容・選択状態・位置をウィジェットに反映する。"""
        if not widget.is_editing:
            widget.set_content(
                annotation.content,
                screen_from_document(annotation.effective_font_size, self._zoom),
                self.main.devicePixelRatioF(),
            )
        widget.set_selected(selected)
        self._place_widget(widget, annotation)

    def _place_widget(self, widget: LatexAnnotationWidget, annotation: Annotation) -> None:
        widget.place(
            screen_from_document(annotation.x, self._zoom),
            screen_from_document(annotation.y, self._zoom),
        )

    def _remove_widget(self, annotation_id: int) -> None:
        widget = self.widgets.pop(annotation_id, None)
        if widget is not None:
            widget.hide()
            widget.deleteLater()

    # --- ページ背景の操作 ---

    def background_click(self) -> None:
        """注釈以外の場所のクリックで選択を解除する。"""
        selection = self.session.selection
        if selection is None:
            return
        selection.background_click()
        self.refresh()

    def show_context_menu(self, surface_pos: QPointF, global_pos: QPoint) -> None:
        """
        右クリックメニューを表示し、選ばれた場合はその位置に注釈を追加する。

        Args:
            surface_pos (QPointF): ページ表示ラベル上のクリック位置。
            global_pos (QPoint): メニューを表示する画面上の位置。
        """
        selection = self.session.selection
        if selection is None:
            return
        selection.open_context_menu(
            global_pos.x(), global_pos.y(),
            surface_pos.x(), surface_pos.y(),
            self._visible_page, self._zoom,
        )
        menu = QMenu(self.main.pdf_display_label)
        add_action = menu.addAction(ui_text("add_annotation"))
        chosen = menu.exec(global_pos)

        if chosen is add_action:
            try:
                annotation = selection.add_annotation_from_menu()
            except InvalidPageError as e:
                logger.warning(f"Cannot add annotation: {e}")
                selection.close_menu()
                return
            if annotation is not None:
                logger.info(f"Added annotation {annotation.id} on page {annotation.page}")
        else:
            selection.close_menu()
        self.refresh()

    # --- 注釈ウィジェットからの操作 ---

    def on_pressed(self, annotation_id: int, global_pos: QPointF) -> None:
        """注釈のクリックで選択し、ドラッグを開始する。"""
        selection, drag = self.session.selection, self.session.drag
        if selection is None or drag is None:
            return
        editing = selection.editing_id == annotation_id
        selection.click_annotation(annotation_id)
        drag.dispatch(PointerDown(annotation_id, global_pos.x(), global_pos.y(), editing), self._zoom)
        for widget_id, widget in self.widgets.items():
            widget.set_selected(widget_id == selection.selected_id)
        widget = self.widgets.get(annotation_id)
        if widget is not None:
            widget.raise_()

    def on_dragged(self, annotation_id: int, global_pos: QPointF) -> None:
        """ドラッグ中のポインタ位置から注釈を移動する。"""
        drag = self.session.drag
        if drag is None or not drag.is_dragging:
            return
        drag.dispatch(PointerMove(global_pos.x(), global_pos.y()), self._zoom)
        annotation = self.session.store.get(annotation_id)
        widget = self.widgets.get(annotation_id)
        if annotation is not None and widget is not None:
            self._place_widget(widget, annotation)

    def on_released(self, annotation_id: int) -> None:
        drag = self.session.drag
        if drag is None or not drag.is_dragging:
            return
        drag.dispatch(PointerUp(), self._zoom)
        self.refresh()

    def on_edit_requested(self, annotation_id: int) -> None:
        """ダブルクリックで編集モードに入る。"""
        selection, store = self.session.selection, self.session.store
        if selection is None or store is None:
            return
        annotation = store.get(annotation_id)
        widget = self.widgets.get(annotation_id)
        if annotation is None or widget is None:
            return
        selection.begin_edit(annotation_id)
        widget.enter_edit_mode(annotation.content)

    def on_edit_committed(self, annotation_id: int, content: str) -> None:
        """編集内容をストアに反映する。"""
        selection = self.session.selection
        if selection is None:
            return
        selection.commit_edit(annotation_id, content)
        self.refresh()

    # --- キーボードショートカット ---

    def delete_annotation(self, annotation_id: int) -> None:
        selection = self.session.selection
        if selection is None:
            return
        selection.delete(annotation_id)
        self.refresh()

    def delete_selected(self) -> bool:
        """選択中の注釈を削除する。編集中は何もしない。"""
        selection = self.session.selection
        if selection is None:
            return False
        deleted: Optional[int] = selection.delete_selected()
        if deleted is None:
            return False
        self.refresh()
        return True

    def adjust_font(self, delta: float) -> bool:
        """
        選択中の注釈のフォントサイズを変更する。

        Returns:
            bool: 注釈が選択されていて変更した場合True。Falseの場合、呼び出し側はズームを行う。
        """
        selection = self.session.selection
        if selection is None or not selection.adjust_selected_font(delta):
            return False
        self.refresh()
        return True
