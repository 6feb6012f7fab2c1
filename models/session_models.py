# models/session_models.py
"""
文書セッション・操作モード・ドラッグ状態を表すタグ付きの状態型。

互いに排他的な状態を独立したフラグではなく個別のクラスで表現することで、
「選択中かつ編集中」のような不正な組み合わせを表現できないようにしています。
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union


# --- 文書の状態 ---

@dataclass(frozen=True)
class EmptyDocument:
    """文書が開かれていない状態。"""


@dataclass(frozen=True)
class LoadingDocument:
    """文書を読み込み中の状態。

    Attributes:
        path (str): 読み込み中のファイルパス。
    """
    path: str


@dataclass(frozen=True)
class ReadyDocument:
    """文書が読み込まれ、操作可能な状態。

    Attributes:
        path (str): 現在のファイルパス。
        num_pages (int): 総ページ数。
    """
    path: str
    num_pages: int


DocumentState = Union[EmptyDocument, LoadingDocument, ReadyDocument]


# --- 操作モード（選択・編集・右クリックメニュー） ---

@dataclass(frozen=True)
class ContextMenuInfo:
    """右クリックメニューを開いた時点で固定される位置情報。

    Attributes:
        screen_x (float): メニューを表示する画面X座標。
        screen_y (float): メニューを表示する画面Y座標。
        document_x (float): 注釈を追加する文書座標X。
        document_y (float): 注釈を追加する文書座標Y。
        page (int): 対象ページ番号（1始まり）。
    """
    screen_x: float
    screen_y: float
    document_x: float
    document_y: float
    page: int


@dataclass(frozen=True)
class IdleMode:
    """何も選択されていない状態。"""


@dataclass(frozen=True)
class SelectedMode:
    annotation_id: int


@dataclass(frozen=True)
class EditingMode:
    annotation_id: int


@dataclass(frozen=True)
class MenuOpenMode:
    """右クリックメニューが開いている状態。メニューを開く前の選択は保持される。"""
    menu: ContextMenuInfo
    selected_id: Optional[int] = None


InteractionMode = Union[IdleMode, SelectedMode, EditingMode, MenuOpenMode]


def selected_id_of(mode: InteractionMode) -> Optional[int]:
    """モードから現在選択されている注釈IDを取り出す。"""
    if isinstance(mode, (SelectedMode, EditingMode)):
        return mode.annotation_id
    if isinstance(mode, MenuOpenMode):
        return mode.selected_id
    return None


# --- ドラッグ状態 ---

@dataclass(frozen=True)
class DragIdle:
    """ドラッグしていない状態。"""


@dataclass(frozen=True)
class Dragging:
    """ドラッグ中の状態。開始時の位置を固定の基準として保持する。

    Attributes:
        annotation_id (int): ドラッグ中の注釈ID。
        origin_screen (Tuple[float, float]): ドラッグ開始時のポインタの画面座標。
        origin_document (Tuple[float, float]): ドラッグ開始時の注釈の文書座標。
    """
    annotation_id: int
    origin_screen: Tuple[float, float]
    origin_document: Tuple[float, float]


DragState = Union[DragIdle, Dragging]
