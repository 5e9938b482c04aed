# routes/scripture_api.py
"""
API endpoints for scripture reading.

Provides access to:
- The book table and reading plans
- Chapter markup with footnotes split out
- Citation detection and clickable-citation HTML
- Whole-corpus phrase search
- Front-matter sections (introduction, index, appendices)
"""

import logging

from flask import Blueprint, request, jsonify

from services.scripture import (
    BIBLE_BOOKS,
    PackageFormatError,
    extract_footnotes,
    get_book,
    get_scripture_service,
    make_clickable,
    parse_references,
    plan_order,
    sanitize_html,
    wol_url,
)
from services.scripture.scripture_service import resolve_lang
from utils.errors import (
    missing_field,
    not_found,
    package_unavailable,
    server_error,
)

logger = logging.getLogger(__name__)

scripture_bp = Blueprint("scripture_api", __name__, url_prefix="/api/scripture")


def _lang() -> str:
    return resolve_lang(request.args.get("lang"))


def _flag(name: str, default: bool = True) -> bool:
    value = request.args.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


# =============================================================================
# Books & Plans
# =============================================================================

@scripture_bp.get("/books")
def list_books():
    """Return the 66 books in canonical order."""
    return jsonify({"books": [b.to_dict() for b in BIBLE_BOOKS]})


@scripture_bp.get("/plans/<plan_id>")
def get_plan(plan_id: str):
    """
    Return a reading plan as a list of chapters.

    Unknown plan ids return the canonical order.
    """
    order = plan_order(plan_id)
    return jsonify({
        "plan": plan_id,
        "count": len(order),
        "chapters": [{"book_id": b, "chapter": c} for b, c in order],
    })


# =============================================================================
# Chapters
# =============================================================================

@scripture_bp.get("/chapter/<int:book_id>/<int:chapter>")
def get_chapter(book_id: int, chapter: int):
    """
    Get a chapter ready for display.

    Query params:
        lang: Translation code (optional)
        footnotes: Split footnotes out of the markup (default true)

    Returns:
        {
            "book_id": 43,
            "book_name": "Juan",
            "chapter": 3,
            "html": "...",
            "footnotes": [{"id": "fn_0", "reference": "Juan 3:16", "content": "..."}],
            "wol_url": "https://..."
        }
    """
    lang = _lang()
    book = get_book(book_id)
    if book is None:
        return not_found("book")

    service = get_scripture_service(lang)
    try:
        if _flag("footnotes"):
            annotated = service.get_annotated_chapter(book_id, chapter)
            html, footnotes = annotated if annotated is not None else (None, [])
        else:
            content = service.get_chapter(book_id, chapter)
            html, footnotes = (content.html if content is not None else None), []
    except PackageFormatError as e:
        return package_unavailable(lang, str(e))

    if html is None:
        return not_found("chapter", book_id=book_id, chapter=chapter)

    return jsonify({
        "lang": lang,
        "book_id": book_id,
        "book_name": book.name,
        "chapter": chapter,
        "html": sanitize_html(html),
        "footnotes": [f.to_dict() for f in footnotes],
        "wol_url": wol_url(book_id, chapter),
    })


@scripture_bp.post("/footnotes")
def split_footnotes():
    """
    Split arbitrary chapter markup into clean HTML and footnotes.

    Body: {"html": "..."}
    """
    data = request.get_json(silent=True) or {}
    html = data.get("html")
    if not html:
        return missing_field("html")

    clean_html, footnotes = extract_footnotes(html)
    return jsonify({
        "html": clean_html,
        "footnotes": [f.to_dict() for f in footnotes],
    })


# =============================================================================
# References
# =============================================================================

@scripture_bp.post("/references")
def detect_references():
    """
    Find scripture citations in text.

    Body: {"text": "Basahin ang Juan 3:16 at Roma 5:12; 6:23"}
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if not text:
        return missing_field("text")

    refs = parse_references(text)
    return jsonify({
        "count": len(refs),
        "references": [r.to_dict() for r in refs],
    })


@scripture_bp.post("/references/clickable")
def clickable_references():
    """
    Escape text and wrap each citation in a verse-ref-link span.

    Body: {"text": "..."}
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if text is None:
        return missing_field("text")

    return jsonify({"html": make_clickable(text)})


# =============================================================================
# Search
# =============================================================================

@scripture_bp.get("/search")
def search_corpus():
    """
    Search every chapter for a phrase.

    Query params:
        q: Phrase (at least 2 characters)
        lang: Translation code (optional)
    """
    query = request.args.get("q", "")
    if not query.strip():
        return missing_field("q")

    lang = _lang()

    def log_progress(percent: int):
        logger.debug(f"Search '{query}' [{lang}]: {percent}%")

    try:
        results = get_scripture_service(lang).search(query, on_progress=log_progress)
    except PackageFormatError as e:
        return package_unavailable(lang, str(e))
    except Exception as e:
        logger.error(f"Search failed: {e}")
        return server_error("search_failed", str(e))

    return jsonify({
        "query": query,
        "lang": lang,
        "count": len(results),
        "results": [r.to_dict() for r in results],
    })


# =============================================================================
# Sections & Diagnostics
# =============================================================================

@scripture_bp.get("/sections/<section_id>")
def get_section(section_id: str):
    """Get a front-matter section (introduksiyon, indise, apendise-a/b/c)."""
    lang = _lang()
    section = get_scripture_service(lang).get_section(section_id)
    if section is None:
        return not_found("section")

    payload = section.to_dict()
    payload["html"] = sanitize_html(payload["html"])
    return jsonify(payload)


@scripture_bp.get("/debug")
def debug_index():
    """Plain-text summary of the package index for a translation."""
    lang = _lang()
    service = get_scripture_service(lang)
    try:
        service.indexer.initialize()
    except PackageFormatError as e:
        return package_unavailable(lang, str(e))

    return jsonify({"lang": lang, "report": service.describe()})
