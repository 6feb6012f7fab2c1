# utils/pdf_utils.py
"""PDFのレンダリングや注釈の読み書きなど、PyMuPDFを使ったPDF操作のユーティリティ機能を提供します。"""

import logging
import re
from typing import List, Optional

import fitz  # PyMuPDF

from models.annotation_models import AnnotationRecord
from utils.constants import (
    DEFAULT_FONT_SIZE,
    FREETEXT_BOX_WIDTH,
    FREETEXT_FONT_NAME,
    FREETEXT_LINE_FACTOR,
)

logger = logging.getLogger(__name__)

_DA_FONT_SIZE = re.compile(r"/\w+\s+([0-9]*\.?[0-9]+)\s+Tf")


class PDFUtils:
    """PDF処理に関する共通機能を提供するユーティリティクラス。"""

    @staticmethod
    def render_page_png(page: fitz.Page, scale: float = 1.0) -> bytes:
        """PDFの指定されたページをPNG画像にレンダリングする。

        保存済みの注釈は画面上のウィジェットと二重に表示されないよう描画しません。

        Args:
            page (fitz.Page): レンダリング対象のPyMuPDFページオブジェクト。
            scale (float): レンダリング時の拡大率。

        Returns:
            bytes: PNG形式の画像データ。
        """
        matrix = fitz.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=matrix, annots=False)
        return pix.tobytes("png")

    @staticmethod
    def parse_font_size(da: Optional[str]) -> Optional[float]:
        """FreeText注釈のDA文字列（例: "0 0 0 rg /Helv 20 Tf"）からフォントサイズを取り出す。"""
        if not da:
            return None
        match = _DA_FONT_SIZE.search(da)
        if match is None:
            return None
        size = float(match.group(1))
        return size if size > 0 else None

    @staticmethod
    def freetext_rect(x: float, y: float, font_size: float) -> fitz.Rect:
        """注釈の位置とフォントサイズからFreeText注釈の矩形を求める。yは矩形の垂直中心になる。"""
        height = font_size * FREETEXT_LINE_FACTOR
        return fitz.Rect(x, y - height / 2, x + FREETEXT_BOX_WIDTH, y + height / 2)

    @staticmethod
    def read_freetext_annotations(doc: fitz.Document) -> List[AnnotationRecord]:
        """文書内の全ページのFreeText注釈を読み込む。

        Args:
            doc (fitz.Document): 開いているPyMuPDF文書。

        Returns:
            List[AnnotationRecord]: ページ順・ページ内の出現順に並んだ注釈レコード。
        """
        records: List[AnnotationRecord] = []
        for page_index in range(doc.page_count):
            page = doc.load_page(page_index)
            for annot in page.annots(types=[fitz.PDF_ANNOT_FREE_TEXT]):
                rect = annot.rect
                record: AnnotationRecord = {
                    "page": page_index + 1,
                    "x": float(rect.x0),
                    "y": float((rect.y0 + rect.y1) / 2),
                    "content": annot.info.get("content", "") or "",
                }
                font_size = PDFUtils.parse_font_size(doc.xref_get_key(annot.xref, "DA")[1])
                if font_size is not None:
                    record["fontSize"] = font_size
                records.append(record)
        return records

    @staticmethod
    def write_freetext_annotations(doc: fitz.Document, records: List[AnnotationRecord]) -> int:
        """文書のFreeText注釈をすべて削除し、レコードの内容で置き換える。

        Args:
            doc (fitz.Document): 開いているPyMuPDF文書。
            records (List[AnnotationRecord]): 書き込む注釈レコード。

        Returns:
            int: 書き込んだ注釈の数。
        """
        for page_index in range(doc.page_count):
            page = doc.load_page(page_index)
            stale = [annot.xref for annot in page.annots(types=[fitz.PDF_ANNOT_FREE_TEXT])]
            for xref in stale:
                page.delete_annot(page.load_annot(xref))

        written = 0
        for record in records:
            page_index = int(record["page"]) - 1
            if not 0 <= page_index < doc.page_count:
                logger.warning(f"Skipping annotation on invalid page {record['page']}")
                continue
            page = doc.load_page(page_index)
            font_size = float(record.get("fontSize") or DEFAULT_FONT_SIZE)
            rect = PDFUtils.freetext_rect(float(record["x"]), float(record["y"]), font_size)
            annot = page.add_freetext_annot(
                rect,
                record.get("content", ""),
                fontsize=font_size,
                fontname=FREETEXT_FONT_NAME,
                text_color=(0, 0, 0),
            )
            annot.update()
            written += 1
        return written
