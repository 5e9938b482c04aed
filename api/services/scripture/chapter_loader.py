# api/services/scripture/chapter_loader.py
"""
Chapter content loader.

Resolves (book, chapter) to the cleaned body fragment of the chapter's
content document. Nothing is cached: every call re-reads and re-cleans.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Optional

from .markup import extract_body
from .package_indexer import PackageIndexer

logger = logging.getLogger(__name__)

# Resources shorter than this are placeholders, not chapters
MIN_CHAPTER_CHARS = 50


@dataclass
class ChapterContent:
    """Cleaned markup for one chapter."""
    html: str

    def to_dict(self) -> dict:
        return asdict(self)


class ChapterLoader:
    """
    Loads chapter markup through a PackageIndexer.

    Usage:
        loader = ChapterLoader(indexer)
        content = loader.load_chapter(43, 3)
        if content is None:
            ...  # not in this package
    """

    def __init__(self, indexer: PackageIndexer, min_chapter_chars: int = MIN_CHAPTER_CHARS):
        self.indexer = indexer
        self.min_chapter_chars = min_chapter_chars

    def load_chapter(self, book_id: int, chapter: int) -> Optional[ChapterContent]:
        """
        Load one chapter.

        Returns:
            ChapterContent, or None when the book is unmapped, the chapter
            is out of range, or the content resource is missing.

        Raises:
            PackageFormatError: the package could not be indexed
        """
        index = self.indexer.initialize()

        spine_index = index.spine_index(book_id, chapter)
        if spine_index is None:
            logger.debug(f"No spine entry for book {book_id} chapter {chapter}")
            return None

        xhtml = self.indexer.read_resource(index.resource_path(spine_index))
        if not xhtml or len(xhtml) < self.min_chapter_chars:
            logger.debug(f"Missing content for book {book_id} chapter {chapter}")
            return None

        return ChapterContent(html=extract_body(xhtml))
