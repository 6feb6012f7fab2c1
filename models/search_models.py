# models/search_models.py
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    """全文検索の1件のヒットを表現するデータモデル。

    Attributes:
        page (int): ヒットしたページ番号（1始まり）。
        match_index (int): そのページ内でのヒットの通し番号（0始まり）。
        context (str): ヒット箇所の前後最大20文字を含む周辺テキスト。
        offset (int): ページ全文内でのヒット開始位置。
        context_match_start (int): context内でのヒット開始位置（ハイライト表示用）。
        match_length (int): ヒットした文字列の長さ。
    """
    page: int
    match_index: int
    context: str
    offset: int = 0
    context_match_start: int = 0
    match_length: int = 0

    @property
    def matched_text(self) -> str:
        """context内のヒット部分の文字列を返す。"""
        return self.context[self.context_match_start:self.context_match_start + self.match_length]
