# api/services/scripture/__init__.py
"""
Scripture content engine.

This package provides:
- PackageIndexer: Parses a zipped e-book once into a PackageIndex
- ChapterLoader: Resolves (book, chapter) to cleaned chapter markup
- extract_footnotes: Splits chapter markup into display HTML + footnotes
- parse_references / make_clickable: Citation detection and linking
- CorpusSearch: Substring search across every chapter
- load_sections: Introduction, index and appendices of a package
- ScriptureService: Per-translation facade over all of the above
"""

from .books import (
    BibleBook,
    BIBLE_BOOKS,
    TOTAL_CHAPTERS,
    get_book,
    canonical_order,
    plan_order,
    wol_url,
)
from .package_indexer import (
    PackageIndexer,
    PackageIndex,
    PackageFormatError,
    SpineEntry,
)
from .chapter_loader import (
    ChapterLoader,
    ChapterContent,
)
from .footnote_parser import (
    FootnoteDefinition,
    FootnoteExtraction,
    extract_footnotes,
)
from .reference_resolver import (
    ScriptureReference,
    parse_references,
    make_clickable,
    resolve_book_id,
    BOOK_TABLE,
)
from .search_engine import (
    CorpusSearch,
    SearchResult,
)
from .sections import (
    SectionContent,
    load_sections,
)
from .markup import (
    html_to_text,
    sanitize_html,
)
from .scripture_service import (
    ScriptureService,
    get_scripture_service,
    reset_scripture_services,
)

__all__ = [
    # Books
    "BibleBook",
    "BIBLE_BOOKS",
    "TOTAL_CHAPTERS",
    "get_book",
    "canonical_order",
    "plan_order",
    "wol_url",
    # Package
    "PackageIndexer",
    "PackageIndex",
    "PackageFormatError",
    "SpineEntry",
    "ChapterLoader",
    "ChapterContent",
    # Annotations
    "FootnoteDefinition",
    "FootnoteExtraction",
    "extract_footnotes",
    "ScriptureReference",
    "parse_references",
    "make_clickable",
    "resolve_book_id",
    "BOOK_TABLE",
    # Search
    "CorpusSearch",
    "SearchResult",
    # Sections
    "SectionContent",
    "load_sections",
    # Markup
    "html_to_text",
    "sanitize_html",
    # Service
    "ScriptureService",
    "get_scripture_service",
    "reset_scripture_services",
]
