# services/drag_controller.py
"""
マウスのドラッグ操作を注釈の位置更新に変換する状態機械。

ドラッグ中の位置は常にドラッグ開始時の基準（ポインタの画面座標と注釈の文書座標）から
計算し、直前のフレームからの差分を積み重ねることはしません。
"""
import logging
from dataclasses import dataclass
from typing import Union

from models.session_models import DragIdle, Dragging, DragState
from services.annotation_store import AnnotationStore
from utils.coordinates import document_from_screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerDown:
    """注釈上でマウスボタンが押されたイベント。"""
    annotation_id: int
    screen_x: float
    screen_y: float
    editing: bool = False


@dataclass(frozen=True)
class PointerMove:
    screen_x: float
    screen_y: float


@dataclass(frozen=True)
class PointerUp:
    pass


DragEvent = Union[PointerDown, PointerMove, PointerUp]


class DragController:
    """注釈のドラッグ操作を管理する状態機械。

    状態は DragIdle と Dragging の2つで、dispatch() にイベントを渡して遷移させます。
    キャンセル操作はなく、ボタンを離すと最後に計算された位置が確定します。
    """

    def __init__(self, store: AnnotationStore) -> None:
        """
        DragControllerのコンストラクタ。

        Args:
            store (AnnotationStore): 位置を更新する対象の注釈ストア。
        """
        self.store: AnnotationStore = store
        self.state: DragState = DragIdle()

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def dispatch(self, event: DragEvent, scale: float) -> DragState:
        """イベントを処理して状態を遷移させる。

        Args:
            event (DragEvent): PointerDown / PointerMove / PointerUp のいずれか。
            scale (float): 現在のズーム率。

        Returns:
            DragState: 遷移後の状態。
        """
        state = self.state
        if isinstance(event, PointerDown):
            if isinstance(state, DragIdle) and not event.editing:
                annotation = self.store.get(event.annotation_id)
                if annotation is not None:
                    self.state = Dragging(
                        annotation_id=annotation.id,
                        origin_screen=(event.screen_x, event.screen_y),
                        origin_document=(annotation.x, annotation.y),
                    )
                    logger.debug(f"Drag started for annotation {annotation.id}")
        elif isinstance(event, PointerMove):
            if isinstance(state, Dragging):
                dx = document_from_screen(event.screen_x - state.origin_screen[0], scale)
                dy = document_from_screen(event.screen_y - state.origin_screen[1], scale)
                self.store.move(
                    state.annotation_id,
                    state.origin_document[0] + dx,
                    state.origin_document[1] + dy,
                )
        elif isinstance(event, PointerUp):
            if isinstance(state, Dragging):
                self.store.mark_dirty()
                logger.debug(f"Drag finished for annotation {state.annotation_id}")
                self.state = DragIdle()
        return self.state
