# services/annotation_store.py
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from models.annotation_models import Annotation, AnnotationRecord
from services.errors import InvalidPageError
from utils.constants import MIN_FONT_SIZE

logger = logging.getLogger(__name__)


class AnnotationStore:
    """現在開いている文書の注釈コレクションを管理するクラス。

    注釈の作成・更新・移動・削除と、未保存の変更があるかどうかを示す
    dirtyフラグを管理します。文書を切り替えるたびに新しいインスタンスが作られます。

    存在しないIDに対する update / move / set_font_size / delete は何もしません。
    文書切り替えと競合した古いIDからの操作を安全に無視するためです。
    """

    def __init__(self, num_pages: int) -> None:
        """AnnotationStoreのコンストラクタ。

        Args:
            num_pages (int): 対象文書の総ページ数。
        """
        self.num_pages: int = num_pages
        self._annotations: List[Annotation] = []
        self._next_id: int = 1
        self._dirty: bool = False

    # --- 参照 ---

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def annotations(self) -> List[Annotation]:
        """作成順に並んだ注釈のリスト（コピー）を返す。"""
        return list(self._annotations)

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._annotations))

    def __contains__(self, annotation_id: object) -> bool:
        return self.get(annotation_id) is not None  # type: ignore[arg-type]

    def get(self, annotation_id: int) -> Optional[Annotation]:
        """IDで注釈を取得する。見つからない場合はNone。"""
        for annotation in self._annotations:
            if annotation.id == annotation_id:
                return annotation
        return None

    def for_page(self, page: int) -> List[Annotation]:
        """指定ページ（1始まり）に配置された注釈を返す。"""
        return [a for a in self._annotations if a.page == page]

    def to_records(self) -> List[AnnotationRecord]:
        """保存用のレコードのリストに変換する。"""
        return [a.to_record() for a in self._annotations]

    # --- dirtyフラグ ---

    def mark_dirty(self) -> None:
        self._dirty = True

    def mark_clean(self) -> None:
        self._dirty = False

    # --- 変更操作 ---

    def _allocate_id(self) -> int:
        annotation_id = self._next_id
        self._next_id += 1
        return annotation_id

    def create(self, page: int, x: float, y: float) -> Annotation:
        """指定位置に空の注釈を新規作成する。

        Args:
            page (int): 配置するページ番号（1始まり）。
            x (float): 文書座標のX。
            y (float): 文書座標のY。

        Returns:
            Annotation: 作成された注釈（is_new=True, content=""）。

        Raises:
            InvalidPageError: pageが [1, num_pages] の範囲外の場合。
        """
        if not 1 <= page <= self.num_pages:
            raise InvalidPageError(f"Page {page} out of range (1-{self.num_pages})")

        annotation = Annotation(id=self._allocate_id(), page=page, x=x, y=y, content="", is_new=True)
        self._annotations.append(annotation)
        self._dirty = True
        logger.debug(f"Created annotation {annotation.id} on page {page} at ({x:.1f}, {y:.1f})")
        return annotation

    def update(self, annotation_id: int, content: str) -> None:
        """注釈の内容を更新し、is_newを解除する。"""
        annotation = self.get(annotation_id)
        if annotation is None:
            logger.debug(f"update ignored: unknown annotation {annotation_id}")
            return
        annotation.content = content
        annotation.is_new = False
        self._dirty = True

    def move(self, annotation_id: int, x: float, y: float) -> None:
        """注釈を文書座標の絶対位置へ移動する。"""
        annotation = self.get(annotation_id)
        if annotation is None:
            logger.debug(f"move ignored: unknown annotation {annotation_id}")
            return
        annotation.x = x
        annotation.y = y
        self._dirty = True

    def set_font_size(self, annotation_id: int, delta: float) -> None:
        """フォントサイズをdeltaだけ変更する。MIN_FONT_SIZEより小さくはならない。"""
        annotation = self.get(annotation_id)
        if annotation is None:
            logger.debug(f"set_font_size ignored: unknown annotation {annotation_id}")
            return
        annotation.font_size = max(MIN_FONT_SIZE, annotation.effective_font_size + delta)
        self._dirty = True

    def delete(self, annotation_id: int) -> bool:
        """注釈を削除する。

        Returns:
            bool: 削除した場合はTrue、該当IDが見つからなかった場合はFalse。
        """
        initial_len = len(self._annotations)
        self._annotations = [a for a in self._annotations if a.id != annotation_id]
        if len(self._annotations) < initial_len:
            self._dirty = True
            logger.debug(f"Deleted annotation {annotation_id}")
            return True
        return False

    def replace_all(self, records: Iterable[Dict[str, Any]]) -> None:
        """文書読み込み時に注釈を一括で置き換える。

        読み込み元のIDは破棄され、読み込み順に新しいIDが割り当てられます。
        ユーザーによる編集ではないため、dirtyフラグは立てません。
        範囲外のページや必須フィールドを欠くレコードは読み飛ばします。

        Args:
            records (Iterable[Dict[str, Any]]): 永続化レコードのリスト。
        """
        self._annotations = []
        self._next_id = 1
        skipped = 0
        for record in records:
            try:
                annotation = Annotation.from_record(record, self._next_id)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed annotation record {record!r}: {e}")
                skipped += 1
                continue
            if not 1 <= annotation.page <= self.num_pages:
                logger.warning(f"Skipping annotation on invalid page {annotation.page}")
                skipped += 1
                continue
            self._annotations.append(annotation)
            self._next_id += 1
        self._dirty = False
        logger.info(f"Loaded {len(self._annotations)} annotations ({skipped} skipped)")
