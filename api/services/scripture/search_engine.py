# api/services/scripture/search_engine.py
"""
Whole-corpus phrase search.

Walks every chapter in canonical order through the ChapterLoader and
collects case-insensitive substring matches with context snippets.
"""

import logging
import threading
from dataclasses import dataclass, asdict
from typing import Callable, List, Optional, Sequence, Tuple

from .books import canonical_order, get_book
from .chapter_loader import ChapterLoader
from .markup import html_to_text

logger = logging.getLogger(__name__)

ELLIPSIS = "…"


@dataclass
class SearchResult:
    """One occurrence of the query inside one chapter."""
    book_id: int
    book_name: str
    chapter: int
    snippet: str
    match_index: int

    def to_dict(self) -> dict:
        return asdict(self)


ProgressCallback = Callable[[int], None]


class CorpusSearch:
    """
    Linear substring search across all chapters.

    Usage:
        search = CorpusSearch(loader)
        results = search.search("pag-ibig", on_progress=print)

    Cancellation is cooperative: set the event passed as ``cancel`` and
    the search stops before the next chapter, returning what it has.
    """

    def __init__(
        self,
        loader: ChapterLoader,
        min_query_length: int = 2,
        snippet_context: int = 60,
        max_per_chapter: int = 5,
        max_results: int = 100,
        progress_interval: int = 20,
        chapters: Optional[Sequence[Tuple[int, int]]] = None,
    ):
        self.loader = loader
        self.min_query_length = min_query_length
        self.snippet_context = snippet_context
        self.max_per_chapter = max_per_chapter
        self.max_results = max_results
        self.progress_interval = progress_interval
        self.chapters = list(chapters) if chapters is not None else canonical_order()

    def search(
        self,
        query: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[SearchResult]:
        """
        Find every chapter containing query (case-insensitive).

        Args:
            query: Literal phrase; shorter than min_query_length after
                trimming returns [] without reading anything
            on_progress: Called with a 0-100 percentage every
                progress_interval chapters and once with 100 when the
                search runs to completion
            cancel: Checked between chapters

        Returns:
            At most max_per_chapter results per chapter and max_results
            in total, in canonical order

        Raises:
            PackageFormatError: the package could not be indexed
        """
        needle = (query or "").strip().lower()
        if len(needle) < self.min_query_length:
            return []

        self.loader.indexer.initialize()

        results: List[SearchResult] = []
        total = len(self.chapters)
        processed = 0
        cancelled = False

        for book_id, chapter in self.chapters:
            if cancel is not None and cancel.is_set():
                logger.info(f"Search for '{query}' cancelled after {processed}/{total} chapters")
                cancelled = True
                break

            try:
                content = self.loader.load_chapter(book_id, chapter)
            except Exception as e:
                logger.warning(f"Skipping book {book_id} chapter {chapter}: {e}")
                content = None

            if content is not None:
                remaining = self.max_results - len(results)
                results.extend(self._search_chapter(
                    needle, content.html, book_id, chapter, remaining
                ))

            processed += 1
            if on_progress and processed % self.progress_interval == 0:
                on_progress(round(processed / total * 100))

            if len(results) >= self.max_results:
                break

        if on_progress and not cancelled:
            on_progress(100)
        return results

    def _search_chapter(
        self, needle: str, markup: str, book_id: int, chapter: int, limit: int
    ) -> List[SearchResult]:
        text = html_to_text(markup)
        lower_text = text.lower()
        book = get_book(book_id)
        book_name = book.name if book else ""

        matches = []
        cap = min(self.max_per_chapter, limit)
        start = 0
        while len(matches) < cap:
            idx = lower_text.find(needle, start)
            if idx == -1:
                break
            matches.append(SearchResult(
                book_id=book_id,
                book_name=book_name,
                chapter=chapter,
                snippet=self._snippet(text, idx, len(needle)),
                match_index=idx,
            ))
            start = idx + len(needle)
        return matches

    def _snippet(self, text: str, idx: int, length: int) -> str:
        start = max(0, idx - self.snippet_context)
        end = min(len(text), idx + length + self.snippet_context)
        snippet = text[start:end].strip()
        if start > 0:
            snippet = ELLIPSIS + snippet
        if end < len(text):
            snippet = snippet + ELLIPSIS
        return snippet
