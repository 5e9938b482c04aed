# api/services/scripture/scripture_service.py
"""
Per-translation scripture service.

Wires one PackageIndexer into its ChapterLoader and CorpusSearch, and
keeps one service per language code for the life of the process.
"""

import logging
import threading
from typing import Dict, List, Optional

from core.config import (
    get_default_translation,
    get_package_settings,
    get_search_settings,
    get_translations,
    package_path_for,
)

from .chapter_loader import MIN_CHAPTER_CHARS, ChapterContent, ChapterLoader
from .footnote_parser import FootnoteExtraction, extract_footnotes
from .package_indexer import DEFAULT_CHAPTER_NAV_PATTERN, PackageIndexer
from .search_engine import CorpusSearch, ProgressCallback, SearchResult
from .sections import SectionContent, load_sections

logger = logging.getLogger(__name__)


class ScriptureService:
    """
    Chapter, footnote, search and section access for one package.

    Usage:
        service = ScriptureService("/data/bibles/nwt_TG.epub", lang="tg")
        chapter = service.get_chapter(43, 3)
        results = service.search("pag-ibig")
    """

    def __init__(
        self,
        package_path: str,
        lang: str = "",
        package_settings: Optional[dict] = None,
        search_settings: Optional[dict] = None,
    ):
        package_settings = package_settings or {}
        search_settings = search_settings or {}

        self.lang = lang
        self.package_path = package_path
        self.indexer = PackageIndexer(
            package_path,
            lang=lang,
            chapter_nav_pattern=package_settings.get(
                "chapter_nav_pattern", DEFAULT_CHAPTER_NAV_PATTERN
            ),
        )
        self.loader = ChapterLoader(
            self.indexer,
            min_chapter_chars=package_settings.get("min_chapter_chars", MIN_CHAPTER_CHARS),
        )
        self.searcher = CorpusSearch(self.loader, **search_settings)

        self._sections: Optional[Dict[str, SectionContent]] = None
        self._sections_lock = threading.Lock()

    def get_chapter(self, book_id: int, chapter: int) -> Optional[ChapterContent]:
        return self.loader.load_chapter(book_id, chapter)

    def get_annotated_chapter(self, book_id: int, chapter: int) -> Optional[FootnoteExtraction]:
        """Chapter markup with footnotes split out, or None if unavailable."""
        content = self.loader.load_chapter(book_id, chapter)
        if content is None:
            return None
        return extract_footnotes(content.html)

    def search(
        self,
        query: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[SearchResult]:
        return self.searcher.search(query, on_progress=on_progress, cancel=cancel)

    def get_sections(self) -> Dict[str, SectionContent]:
        """Front-matter sections, read once. An empty read is retried next call."""
        with self._sections_lock:
            if not self._sections:
                self._sections = load_sections(self.package_path)
            return self._sections

    def get_section(self, section_id: str) -> Optional[SectionContent]:
        return self.get_sections().get(section_id)

    def describe(self) -> str:
        return self.indexer.describe()


# =============================================================================
# Registry
# =============================================================================

_services: Dict[str, ScriptureService] = {}
_services_lock = threading.Lock()


def resolve_lang(lang: Optional[str]) -> str:
    """Known language code, or the default translation."""
    if lang and lang in get_translations():
        return lang
    return get_default_translation()


def get_scripture_service(lang: Optional[str] = None) -> ScriptureService:
    """Get or create the service for a translation."""
    lang = resolve_lang(lang)
    with _services_lock:
        service = _services.get(lang)
        if service is None:
            service = ScriptureService(
                package_path_for(lang),
                lang=lang,
                package_settings=get_package_settings(),
                search_settings=get_search_settings(),
            )
            _services[lang] = service
            logger.debug(f"Created scripture service for '{lang}'")
        return service


def reset_scripture_services() -> None:
    """Forget every service; packages are re-indexed on next use."""
    with _services_lock:
        _services.clear()
