# services/search_engine.py
"""
全ページの本文テキストに対する大文字小文字を区別しない全文検索。
"""
import logging
import re
from typing import Awaitable, Callable, List, Optional

from models.search_models import SearchResult
from utils.constants import SEARCH_CONTEXT_CHARS

logger = logging.getLogger(__name__)

PageTextProvider = Callable[[int], Awaitable[str]]


def find_matches(text: str, query: str, page: int) -> List[SearchResult]:
    """1ページ分のテキストから検索語のヒットを重複なしで抽出する。

    Args:
        text (str): ページ本文。
        query (str): 検索語。空文字列の場合はヒットなし。
        page (int): ページ番号（1始まり）。

    Returns:
        List[SearchResult]: 出現順に並んだヒットのリスト。
    """
    if not query:
        return []

    results: List[SearchResult] = []
    # オフセットは常に元のテキスト基準
    for match in re.finditer(re.escape(query), text, re.IGNORECASE):
        index, end = match.start(), match.end()
        context_start = max(0, index - SEARCH_CONTEXT_CHARS)
        context_end = min(len(text), end + SEARCH_CONTEXT_CHARS)
        results.append(SearchResult(
            page=page,
            match_index=len(results),
            context=text[context_start:context_end],
            offset=index,
            context_match_start=index - context_start,
            match_length=end - index,
        ))

    return results


async def search(query: str, num_pages: int, get_page_text: PageTextProvider) -> List[SearchResult]:
    """文書の全ページを1ページ目から順に検索する。

    ページ本文の取得に失敗したページは警告を記録して読み飛ばします。

    Args:
        query (str): 検索語。
        num_pages (int): 総ページ数。
        get_page_text (PageTextProvider): 0始まりのページインデックスを受け取り本文を返す非同期関数。

    Returns:
        List[SearchResult]: ページ昇順、ページ内では出現順に並んだヒット。
    """
    if not query or num_pages <= 0:
        return []

    results: List[SearchResult] = []
    for page_index in range(num_pages):
        try:
            text = await get_page_text(page_index)
        except Exception as e:
            logger.warning(f"Failed to read text of page {page_index + 1}: {e}")
            continue
        results.extend(find_matches(text, query, page_index + 1))

    logger.info(f"Search '{query}': {len(results)} hits in {num_pages} pages")
    return results


class SearchEngine:
    """入力に追従して繰り返し呼ばれる検索を管理するクラス。

    呼び出しのたびに世代番号を進め、結果が返る前により新しい検索が始まっていた場合は
    古い結果を捨ててNoneを返します。
    """

    def __init__(self) -> None:
        self.generation: int = 0
        self.last_query: str = ""
        self.last_results: List[SearchResult] = []

    async def search(
        self, query: str, num_pages: int, get_page_text: PageTextProvider
    ) -> Optional[List[SearchResult]]:
        self.generation += 1
        generation = self.generation
        results = await search(query, num_pages, get_page_text)
        if generation != self.generation:
            logger.debug(f"Discarding stale search results for '{query}'")
            return None
        self.last_query = query
        self.last_results = results
        return results

    def clear(self) -> None:
        self.generation += 1
        self.last_query = ""
        self.last_results = []
