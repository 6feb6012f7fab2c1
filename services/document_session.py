# services/document_session.py
"""
開いている文書のライフサイクル（読み込み・保存・終了確認）を管理するセッション。

バックエンドへの呼び出しやユーザーへの確認ダイアログはすべて非同期で、
セッションの状態と注釈ストアは await の合間に同じスレッドからのみ変更されます。
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Union

from models.annotation_models import AnnotationRecord
from models.search_models import SearchResult
from models.session_models import (
    DocumentState,
    EmptyDocument,
    LoadingDocument,
    ReadyDocument,
)
from services.annotation_store import AnnotationStore
from services.document_backend import DocumentBackend
from services.drag_controller import DragController
from services.search_engine import SearchEngine
from services.selection_controller import SelectionController
from utils.i18n import dialog_text

logger = logging.getLogger(__name__)

NOTICE_INFO = "info"
NOTICE_ERROR = "error"

ConfirmCallback = Callable[[str], Awaitable[bool]]
NotifyCallback = Callable[[str, str], None]
TargetChooser = Callable[[], Awaitable[Optional[str]]]


class DocumentSession:
    """文書セッション。状態は EmptyDocument / LoadingDocument / ReadyDocument のいずれか。

    Attributes:
        backend (DocumentBackend): 文書の読み書きを行うバックエンド。
        search_engine (SearchEngine): 全文検索エンジン。
    """

    def __init__(
        self,
        backend: DocumentBackend,
        confirm: ConfirmCallback,
        notify: Optional[NotifyCallback] = None,
    ) -> None:
        """DocumentSessionのコンストラクタ。

        Args:
            backend (DocumentBackend): 文書バックエンド。
            confirm (ConfirmCallback): メッセージを受け取り、続行するならTrueを返す非同期の確認関数。
            notify (Optional[NotifyCallback]): (level, message) を受け取るユーザー通知関数。
        """
        self.backend = backend
        self._confirm = confirm
        self._notify = notify or (lambda level, message: None)
        self.search_engine = SearchEngine()

        self._state: DocumentState = EmptyDocument()
        # 読み込み失敗時に戻す、最後に確定した状態
        self._settled: Union[EmptyDocument, ReadyDocument] = EmptyDocument()
        self._request_id: int = 0

        self._store: Optional[AnnotationStore] = None
        self._selection: Optional[SelectionController] = None
        self._drag: Optional[DragController] = None

    # --- 参照 ---

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, ReadyDocument)

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, LoadingDocument)

    @property
    def path(self) -> Optional[str]:
        if isinstance(self._state, (LoadingDocument, ReadyDocument)):
            return self._state.path
        return None

    @property
    def num_pages(self) -> int:
        if isinstance(self._state, ReadyDocument):
            return self._state.num_pages
        return 0

    @property
    def is_dirty(self) -> bool:
        return self._store is not None and self._store.is_dirty

    @property
    def store(self) -> Optional[AnnotationStore]:
        """Ready状態の間だけ注釈ストアを返す。読み込み中はNone。"""
        return self._store if self.is_ready else None

    @property
    def selection(self) -> Optional[SelectionController]:
        return self._selection if self.is_ready else None

    @property
    def drag(self) -> Optional[DragController]:
        return self._drag if self.is_ready else None

    # --- 読み込み ---

    async def open_startup_file(self) -> bool:
        """起動引数で指定されたファイルがあれば開く。"""
        path = await self.backend.get_startup_file()
        if not path:
            return False
        return await self.open(path)

    async def open(self, path: str) -> bool:
        """文書を開く。

        未保存の変更がある場合は確認を求め、キャンセルされたら何も変更しません。
        読み込み中に別のopenが開始された場合、古い読み込み結果は破棄されます。

        Args:
            path (str): 開くPDFファイルのパス。

        Returns:
            bool: この文書が現在の文書になった場合True。
        """
        if self.is_dirty:
            proceed = await self._confirm(dialog_text("unsaved_changes_open"))
            if not proceed:
                logger.info(f"Open of {path} cancelled by user")
                return False

        self._request_id += 1
        request_id = self._request_id
        self._state = LoadingDocument(path)
        logger.info(f"Loading {path}")

        try:
            num_pages, records = await asyncio.gather(
                self.backend.open_document(path),
                self._hydrate(path),
            )
        except Exception as e:
            if request_id != self._request_id:
                logger.debug(f"Discarding stale load failure for {path}")
                return False
            logger.error(f"Failed to open {path}: {e}")
            self._state = self._settled
            self._notify(NOTICE_ERROR, f"{dialog_text('load_failed')}: {e}")
            return False

        if request_id != self._request_id:
            logger.debug(f"Discarding stale load result for {path}")
            return False

        store = AnnotationStore(num_pages)
        store.replace_all(records)
        self._store = store
        self._selection = SelectionController(store)
        self._drag = DragController(store)
        self.search_engine.clear()
        self._state = ReadyDocument(path=path, num_pages=num_pages)
        self._settled = self._state
        logger.info(f"Opened {path}: {num_pages} pages, {len(store)} annotations")
        return True

    async def _hydrate(self, path: str) -> List[AnnotationRecord]:
        try:
            return list(await self.backend.load_annotations(path))
        except Exception as e:
            logger.info(f"No annotations loaded for {path}: {e}")
            return []

    # --- 保存 ---

    async def save(self) -> bool:
        """現在のパスに注釈を保存する。

        Returns:
            bool: 保存に成功した場合True。
        """
        if not isinstance(self._state, ReadyDocument) or self._store is None:
            return False
        path = self._state.path
        return await self._save_to(path, source_path=None)

    async def save_as(self, choose_target: TargetChooser) -> bool:
        """保存先を選ばせて注釈付きの文書を保存する。

        保存先の選択がキャンセルされた場合は何もしません。成功すると現在のパスが
        保存先に切り替わり、未保存フラグも解除されます。

        Args:
            choose_target (TargetChooser): 保存先パスを返す非同期関数。キャンセル時はNone。

        Returns:
            bool: 保存に成功した場合True。
        """
        if not isinstance(self._state, ReadyDocument):
            return False
        target = await choose_target()
        if not target:
            logger.info("Save-as cancelled")
            return False
        if not isinstance(self._state, ReadyDocument):
            return False
        return await self._save_to(target, source_path=self._state.path)

    async def _save_to(self, target: str, source_path: Optional[str]) -> bool:
        store = self._store
        if store is None:
            return False
        try:
            await self.backend.save_document_with_annotations(target, store.to_records(), source_path)
        except Exception as e:
            logger.error(f"Failed to save {target}: {e}")
            self._notify(NOTICE_ERROR, f"{dialog_text('save_failed')}: {e}")
            return False

        # 保存中に別の文書へ切り替わっていたら状態には触れない
        if store is not self._store or not isinstance(self._state, ReadyDocument):
            return True
        store.mark_clean()
        if target != self._state.path:
            self._state = ReadyDocument(path=target, num_pages=self._state.num_pages)
            self._settled = self._state
        logger.info(f"Saved {len(store)} annotations to {target}")
        self._notify(NOTICE_INFO, dialog_text("save_success"))
        return True

    # --- 終了 ---

    async def request_close(self) -> bool:
        """終了してよいかを判定する。未保存の変更があれば確認を求める。"""
        if not self.is_dirty:
            return True
        return await self._confirm(dialog_text("unsaved_changes_close"))

    # --- 検索 ---

    async def search(self, query: str) -> Optional[List[SearchResult]]:
        """開いている文書を全文検索する。

        Returns:
            Optional[List[SearchResult]]: 検索結果。文書が開かれていなければ空リスト。
                より新しい検索に追い越された場合はNone。
        """
        if not isinstance(self._state, ReadyDocument):
            return []
        path = self._state.path

        async def page_text(page_index: int) -> str:
            return await self.backend.get_page_text(path, page_index)

        return await self.search_engine.search(query, self._state.num_pages, page_text)
