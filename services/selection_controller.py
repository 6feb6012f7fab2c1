# services/selection_controller.py
import logging
from typing import Optional

from models.annotation_models import Annotation
from models.session_models import (
    ContextMenuInfo,
    EditingMode,
    IdleMode,
    InteractionMode,
    MenuOpenMode,
    SelectedMode,
    selected_id_of,
)
from services.annotation_store import AnnotationStore
from utils.coordinates import document_from_screen

logger = logging.getLogger(__name__)


class SelectionController:
    """注釈の選択・編集状態と右クリックメニューを管理するクラス。

    モードは IdleMode / SelectedMode / EditingMode / MenuOpenMode のいずれか1つです。
    右クリックメニューを開いても直前の選択は保持され、背景クリックで両方が解除されます。
    """

    def __init__(self, store: AnnotationStore) -> None:
        self.store: AnnotationStore = store
        self.mode: InteractionMode = IdleMode()

    @property
    def selected_id(self) -> Optional[int]:
        return selected_id_of(self.mode)

    @property
    def menu(self) -> Optional[ContextMenuInfo]:
        if isinstance(self.mode, MenuOpenMode):
            return self.mode.menu
        return None

    @property
    def editing_id(self) -> Optional[int]:
        if isinstance(self.mode, EditingMode):
            return self.mode.annotation_id
        return None

    def click_annotation(self, annotation_id: int) -> None:
        """注釈をクリックして選択する。開いているメニューは閉じる。"""
        if annotation_id not in self.store:
            return
        if isinstance(self.mode, EditingMode) and self.mode.annotation_id == annotation_id:
            return
        self.mode = SelectedMode(annotation_id)

    def open_context_menu(
        self,
        screen_x: float,
        screen_y: float,
        surface_x: float,
        surface_y: float,
        page: int,
        scale: float,
    ) -> ContextMenuInfo:
        """右クリックメニューを開く。

        注釈を追加する文書座標はこの時点で一度だけ計算して固定します。
        その後ズーム率が変わっても追加位置は変わりません。

        Args:
            screen_x (float): メニューを表示する画面X座標（グローバル座標）。
            screen_y (float): メニューを表示する画面Y座標（グローバル座標）。
            surface_x (float): ページ表示面上のクリック位置X。
            surface_y (float): ページ表示面上のクリック位置Y。
            page (int): 表示中のページ番号（1始まり）。
            scale (float): 現在のズーム率。

        Returns:
            ContextMenuInfo: 固定されたメニュー情報。
        """
        menu = ContextMenuInfo(
            screen_x=screen_x,
            screen_y=screen_y,
            document_x=document_from_screen(surface_x, scale),
            document_y=document_from_screen(surface_y, scale),
            page=page,
        )
        self.mode = MenuOpenMode(menu=menu, selected_id=self.selected_id)
        return menu

    def close_menu(self) -> None:
        """メニューを閉じ、メニューを開く前の選択に戻す。"""
        if isinstance(self.mode, MenuOpenMode):
            selected = self.mode.selected_id
            self.mode = SelectedMode(selected) if selected is not None else IdleMode()

    def background_click(self) -> None:
        self.mode = IdleMode()

    def add_annotation_from_menu(self) -> Optional[Annotation]:
        """メニューで固定された位置に新しい注釈を追加し、それを選択する。

        Returns:
            Optional[Annotation]: 作成された注釈。メニューが開いていなければNone。

        Raises:
            InvalidPageError: メニューのページ番号が範囲外の場合。
        """
        menu = self.menu
        if menu is None:
            return None
        annotation = self.store.create(menu.page, menu.document_x, menu.document_y)
        self.mode = SelectedMode(annotation.id)
        return annotation

    def begin_edit(self, annotation_id: int) -> None:
        if annotation_id not in self.store:
            return
        self.mode = EditingMode(annotation_id)

    def commit_edit(self, annotation_id: int, content: str) -> None:
        """編集内容を確定し、選択状態に戻す。"""
        self.store.update(annotation_id, content)
        if isinstance(self.mode, EditingMode) and self.mode.annotation_id == annotation_id:
            self.mode = SelectedMode(annotation_id) if annotation_id in self.store else IdleMode()

    def delete_selected(self) -> Optional[int]:
        """選択中の注釈を削除する。

        Returns:
            Optional[int]: 削除した注釈ID。選択がなければNone。
        """
        annotation_id = self.selected_id
        if annotation_id is None or isinstance(self.mode, EditingMode):
            return None
        self.store.delete(annotation_id)
        self.mode = IdleMode()
        logger.debug(f"Deleted selected annotation {annotation_id}")
        return annotation_id

    def delete(self, annotation_id: int) -> None:
        """指定IDの注釈を削除し、それを指す選択を解除する。"""
        self.store.delete(annotation_id)
        self.forget(annotation_id)

    def adjust_selected_font(self, delta: float) -> bool:
        """選択中の注釈のフォントサイズを変更する。

        Returns:
            bool: 変更した場合True。何も選択されていなければFalse（呼び出し側はズームする）。
        """
        annotation_id = self.selected_id
        if annotation_id is None or annotation_id not in self.store:
            return False
        self.store.set_font_size(annotation_id, delta)
        return True

    def forget(self, annotation_id: int) -> None:
        """削除済みの注釈を指している選択・編集状態を解除する。"""
        if isinstance(self.mode, (SelectedMode, EditingMode)) and self.mode.annotation_id == annotation_id:
            self.mode = IdleMode()
        elif isinstance(self.mode, MenuOpenMode) and self.mode.selected_id == annotation_id:
            self.mode = MenuOpenMode(menu=self.mode.menu, selected_id=None)

    def reset(self) -> None:
        self.mode = IdleMode()
