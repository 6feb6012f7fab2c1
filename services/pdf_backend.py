# services/pdf_backend.py
import logging
import os
import threading
from typing import Any, Awaitable, Callable, Dict, List, Optional

import fitz  # PyMuPDF

from models.annotation_models import AnnotationRecord
from services.document_backend import DocumentBackend
from services.errors import DocumentLoadError, SaveError
from utils.pdf_utils import PDFUtils

logger = logging.getLogger(__name__)

BlockingRunner = Callable[..., Awaitable[Any]]


async def run_inline(func: Callable[..., Any], *args: Any) -> Any:
    """関数をその場で実行する。ワーカースレッドを使わない環境（テストなど）向け。"""
    return func(*args)


class PyMuPDFBackend(DocumentBackend):
    """PyMuPDF（fitz）を使ったDocumentBackendの実装。

    注釈はPDFのFreeText注釈として保存されます。PyMuPDFの呼び出しは
    run_blocking（アプリではワーカースレッドで実行する関数）を通して行い、
    複数のスレッドから同時に呼ばれても1つのロックで直列化されます。
    """

    def __init__(self, startup_file: Optional[str] = None, run_blocking: BlockingRunner = run_inline) -> None:
        """PyMuPDFBackendのコンストラクタ。

        Args:
            startup_file (Optional[str]): 起動時に開くファイルのパス（コマンドライン引数）。
            run_blocking (BlockingRunner): (関数, *引数) を受け取り、その戻り値をawaitできるようにする関数。
        """
        self.startup_file = startup_file
        self._run_blocking = run_blocking
        self._lock = threading.Lock()
        self._text_cache: Dict[str, Dict[int, str]] = {}

    # --- 同期処理（ワーカースレッドで実行） ---

    def _open_sync(self, path: str) -> int:
        with self._lock:
            try:
                with fitz.open(path) as doc:
                    if not doc.is_pdf:
                        raise DocumentLoadError(f"PDFファイルではありません: {path}")
                    return doc.page_count
            except DocumentLoadError:
                raise
            except Exception as e:
                raise DocumentLoadError(f"PDFファイルを開けませんでした: {path}: {e}") from e

    def _load_annotations_sync(self, path: str) -> List[AnnotationRecord]:
        with self._lock:
            with fitz.open(path) as doc:
                return PDFUtils.read_freetext_annotations(doc)

    def _save_sync(self, path: str, records: List[AnnotationRecord], source_path: str) -> None:
        with self._lock:
            temp_path: Optional[str] = None
            try:
                with fitz.open(source_path) as doc:
                    count = PDFUtils.write_freetext_annotations(doc, records)
                    same_file = os.path.exists(path) and os.path.samefile(path, source_path)
                    if same_file and doc.can_save_incrementally():
                        doc.saveIncr()
                    elif same_file:
                        # 増分保存できない文書は一時ファイル経由で置き換える
                        temp_path = f"{path}.tmp"
                        doc.save(temp_path, garbage=3, deflate=True)
                    else:
                        doc.save(path, garbage=3, deflate=True)
                if temp_path is not None:
                    os.replace(temp_path, path)
            except Exception as e:
                raise SaveError(f"PDFの保存に失敗しました: {path}: {e}") from e
            self._text_cache.pop(path, None)
            logger.info(f"Saved {count} annotations to {path}")

    def _page_text_sync(self, path: str, page_index: int) -> str:
        with self._lock:
            cached = self._text_cache.get(path, {})
            if page_index in cached:
                return cached[page_index]
            with fitz.open(path) as doc:
                text = doc.load_page(page_index).get_text()
            self._text_cache.setdefault(path, {})[page_index] = text
            return text

    def render_page_sync(self, path: str, page_index: int, scale: float) -> bytes:
        """UIスレッドから直接呼び出せる同期版のページレンダリング。"""
        with self._lock:
            with fitz.open(path) as doc:
                return PDFUtils.render_page_png(doc.load_page(page_index), scale)

    # --- DocumentBackend ---

    async def get_startup_file(self) -> Optional[str]:
        if self.startup_file and os.path.isfile(self.startup_file):
            return os.path.abspath(self.startup_file)
        if self.startup_file:
            logger.warning(f"Startup file not found: {self.startup_file}")
        return None

    async def open_document(self, path: str) -> int:
        num_pages = await self._run_blocking(self._open_sync, path)
        logger.info(f"Opened {path} ({num_pages} pages)")
        return num_pages

    async def load_annotations(self, path: str) -> List[AnnotationRecord]:
        return await self._run_blocking(self._load_annotations_sync, path)

    async def save_document_with_annotations(
        self,
        path: str,
        records: List[AnnotationRecord],
        source_path: Optional[str] = None,
    ) -> None:
        await self._run_blocking(self._save_sync, path, list(records), source_path or path)

    async def get_page_text(self, path: str, page_index: int) -> str:
        return await self._run_blocking(self._page_text_sync, path, page_index)

    async def render_page(self, path: str, page_index: int, scale: float) -> bytes:
        return await self._run_blocking(self.render_page_sync, path, page_index, scale)
