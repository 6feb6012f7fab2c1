# models/annotation_models.py
from dataclasses import dataclass
from typing import Any, Dict, Optional, TypedDict

from utils.constants import DEFAULT_FONT_SIZE


class _AnnotationRecordBase(TypedDict):
    page: int
    x: float
    y: float
    content: str


class AnnotationRecord(_AnnotationRecordBase, total=False):
    """PDFに永続化される注釈レコード。idとis_newは含まない。"""
    fontSize: float


@dataclass
class Annotation:
    """PDFページ上に重ねて表示される単一のLaTeX注釈を表現するデータモデル。

    Attributes:
        id (int): セッション内で一意な注釈ID。永続化はされない。
        page (int): 注釈が配置されたページ番号（1始まり）。
        x (float): 文書座標での左端のX座標（ズーム1.0基準）。
        y (float): 文書座標での縦方向の中心線のY座標（ズーム1.0基準）。
        content (str): LaTeX/テキストの内容。空文字列も有効。
        is_new (bool): 初回表示時に即座に編集モードに入るかどうか。
        font_size (Optional[float]): フォントサイズ。Noneの場合は既定値を使う。
    """
    id: int
    page: int
    x: float
    y: float
    content: str = ""
    is_new: bool = False
    font_size: Optional[float] = None

    @property
    def effective_font_size(self) -> float:
        """実際に使用されるフォントサイズを返す。"""
        return self.font_size if self.font_size is not None else DEFAULT_FONT_SIZE

    def to_record(self) -> AnnotationRecord:
        """永続化用のレコードに変換する。"""
        record: AnnotationRecord = {
            "page": self.page,
            "x": self.x,
            "y": self.y,
            "content": self.content,
        }
        if self.font_size is not None:
            record["fontSize"] = self.font_size
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any], annotation_id: int) -> "Annotation":
        """永続化レコードから注釈を生成する。

        レコードに含まれるidは無視され、annotation_idが割り当てられます。

        Args:
            record (Dict[str, Any]): page, x, y, content と任意の fontSize を持つ辞書。
            annotation_id (int): 新しく割り当てるID。

        Returns:
            Annotation: 生成された注釈。

        Raises:
            KeyError: 必須フィールドが欠けている場合。
        """
        font_size = record.get("fontSize", record.get("font_size"))
        return cls(
            id=annotation_id,
            page=int(record["page"]),
            x=float(record["x"]),
            y=float(record["y"]),
            content=str(record.get("content", "")),
            is_new=False,
            font_size=float(font_size) if font_size is not None else None,
        )
