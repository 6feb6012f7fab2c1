# services/document_backend.py
from abc import ABC, abstractmethod
from typing import List, Optional

from models.annotation_models import AnnotationRecord


class DocumentBackend(ABC):
    """
    文書の読み込み・保存・本文取得を行うバックエンドの抽象クラス（ABC）。

    すべてのメソッドは非同期で、文書セッションはこのインターフェースだけを通して
    PDFファイルにアクセスします。テストではメモリ上の偽実装に差し替えられます。
    """

    @abstractmethod
    async def get_startup_file(self) -> Optional[str]:
        """
        起動時に開くファイルのパスを返す。

        Returns:
            Optional[str]: ファイルパス。指定がなければNone。
        """

    @abstractmethod
    async def open_document(self, path: str) -> int:
        """
        文書を開いてページ数を返す。

        Args:
            path (str): PDFファイルのパス。

        Returns:
            int: 総ページ数。

        Raises:
            DocumentLoadError: ファイルを開けなかった場合。
        """

    @abstractmethod
    async def load_annotations(self, path: str) -> List[AnnotationRecord]:
        """
        文書に保存されている注釈を読み込む。

        Args:
            path (str): PDFファイルのパス。

        Returns:
            List[AnnotationRecord]: 注釈レコードのリスト。
        """

    @abstractmethod
    async def save_document_with_annotations(
        self,
        path: str,
        records: List[AnnotationRecord],
        source_path: Optional[str] = None,
    ) -> None:
        """
        注釈を書き込んだ文書を保存する。

        Args:
            path (str): 保存先のパス。
            records (List[AnnotationRecord]): 書き込む注釈。
            source_path (Optional[str]): 元の文書のパス。Noneの場合はpathを元文書とする。

        Raises:
            SaveError: 保存に失敗した場合。
        """

    @abstractmethod
    async def get_page_text(self, path: str, page_index: int) -> str:
        """
        指定ページの本文テキストを返す。

        Args:
            path (str): PDFファイルのパス。
            page_index (int): 0始まりのページインデックス。
        """

    @abstractmethod
    async def render_page(self, path: str, page_index: int, scale: float) -> bytes:
        """
        指定ページをPNG画像にレンダリングする。

        Args:
            path (str): PDFファイルのパス。
            page_index (int): 0始まりのページインデックス。
            scale (float): 拡大率。

        Returns:
            bytes: PNG形式の画像データ。
        """
