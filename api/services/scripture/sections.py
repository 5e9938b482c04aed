# api/services/scripture/sections.py
"""
Front-matter sections of a scripture package.

Collects the introduction, index and appendices from the package's
non-chapter documents. Documents are classified by file name first and
by heading/opening text second; a document that maps to an already
collected section is appended to it.
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

import ebooklib
from ebooklib import epub

from .markup import extract_body, first_heading, html_to_text

logger = logging.getLogger(__name__)

SECTION_IDS = ("introduksiyon", "indise", "apendise-a", "apendise-b", "apendise-c")

HREF_PATTERNS: Dict[str, List[re.Pattern]] = {
    "introduksiyon": [re.compile(p, re.I) for p in (r"introduction", r"introduk", r"preface")],
    "indise": [re.compile(p, re.I) for p in (r"index", r"indise", r"glossary", r"glosaryo")],
    "apendise-a": [re.compile(p, re.I) for p in (r"appendix.*a", r"apendise.*a", r"appa")],
    "apendise-b": [re.compile(p, re.I) for p in (r"appendix.*b", r"apendise.*b", r"appb")],
    "apendise-c": [re.compile(p, re.I) for p in (r"appendix.*c", r"apendise.*c", r"appc")],
}

CHAPTER_HREF_RE = re.compile(r"biblechapter|chapter\d", re.I)

MIN_SECTION_CHARS = 50
OPENING_CHARS = 500


@dataclass
class SectionContent:
    """A front-matter section ready for display."""
    section_id: str
    title: str
    html: str

    def to_dict(self) -> dict:
        return asdict(self)


def classify_href(href: str, taken: Dict[str, SectionContent]) -> Optional[str]:
    """Section id whose file-name patterns match href, skipping taken ones."""
    for section_id, patterns in HREF_PATTERNS.items():
        if section_id in taken:
            continue
        if any(p.search(href) for p in patterns):
            return section_id
    return None


def classify_content(title: str, opening: str, taken: Dict[str, SectionContent]) -> Optional[str]:
    """Section id suggested by a document's heading and opening text."""
    if re.search(r"introduk|paunang\s*salita|preface|foreword", opening, re.I) \
            or re.search(r"introduk", title, re.I):
        return "introduksiyon"
    if re.search(r"indise|index|talaan.*paksa", opening, re.I) \
            or re.search(r"indise|index", title, re.I):
        return "indise"
    if re.search(r"apendise.*a|appendix.*a", title, re.I):
        return "apendise-a"
    if re.search(r"apendise.*b|appendix.*b", title, re.I):
        return "apendise-b"
    if re.search(r"apendise.*c|appendix.*c", title, re.I):
        return "apendise-c"
    # Untitled appendix pages open appendix A until any appendix exists
    if re.search(r"apendise|appendix", title, re.I) and not any(
        s in taken for s in ("apendise-a", "apendise-b", "apendise-c")
    ):
        return "apendise-a"
    return None


def _spine_documents(book: epub.EpubBook) -> List[Tuple[str, str]]:
    """(href, raw markup) for each spine document, in reading order."""
    documents = []
    for idref, _linear in book.spine:
        item = book.get_item_with_id(idref)
        if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
            continue
        documents.append((item.get_name(), item.get_content().decode("utf-8", errors="ignore")))
    return documents


def load_sections(package_path) -> Dict[str, SectionContent]:
    """
    Read and classify the front-matter sections of a package.

    Returns an empty mapping when the package cannot be read.
    """
    try:
        book = epub.read_epub(package_path, options={"ignore_ncx": True})
        documents = _spine_documents(book)
    except Exception as e:
        logger.error(f"Failed to read sections from {package_path}: {e}")
        return {}

    sections: Dict[str, SectionContent] = {}

    for href, raw in documents:
        if CHAPTER_HREF_RE.search(href):
            continue

        matched = classify_href(href.lower(), sections)

        body = extract_body(raw)
        if len(body.strip()) < MIN_SECTION_CHARS:
            continue

        title = first_heading(body)
        if matched is None:
            opening = html_to_text(body)[:OPENING_CHARS].lower()
            matched = classify_content(title, opening, sections)
        if matched is None:
            continue

        if matched in sections:
            sections[matched].html += body
        else:
            sections[matched] = SectionContent(
                section_id=matched,
                title=title or matched.upper(),
                html=body,
            )

    logger.info(f"Found {len(sections)} sections: {list(sections)}")
    return sections
