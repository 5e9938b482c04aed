# api/services/scripture/footnote_parser.py
"""
Footnote extraction for chapter markup.

Chapter documents carry their notes inline as plain-text runs:

    ^ Gen. 1:1 O "nilikha."

and mark the annotated words with short anchors:

    <a id="12345" href="#">*</a>

extract_footnotes() pulls the definitions out, removes them from the
markup, and turns each anchor into a tappable span.

Anchors and definitions are paired by position only: the Nth anchor in
document order gets the Nth definition. The anchor id is not used for
pairing. When there are more anchors than definitions, the extra anchors
become inert spans with no footnote id.
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import List, NamedTuple

from bs4 import BeautifulSoup

from .markup import WHITESPACE_RE, html_to_text

logger = logging.getLogger(__name__)

# Reserved character opening every definition block
DEFINITION_MARK = "^"

# "Gen. 1:1", "Gen 1:2b", "1 Cor. 3:4"
CITATION = r"(?:\d\s+)?[\w.]+\s+\d+:\d+[a-z]?"

DEFINITION_RE = re.compile(
    rf"\^\s+({CITATION})\s+(.*?)(?=\^\s+{CITATION}|$)"
)

DEFINITION_BLOCK_TAGS = ["p", "div", "span"]

LOOSE_DEFINITION_RE = re.compile(r"\^[^<\n]*")

PARAGRAPH_RE = re.compile(r"<p\b[^>]*>(.*?)</p>", re.IGNORECASE | re.DOTALL)

# "Gen. 1:1 text" left behind once the marker character is gone
STANDALONE_CITATION_RE = re.compile(r"^(?:\d\s*)?[^\W\d_]+\.\s*\d+:\d+[a-z]?\s+")
STANDALONE_MAX_CHARS = 200

EMPTY_BLOCK_RE = re.compile(r"<(p|div)\b[^>]*>\s*</\1>", re.IGNORECASE)

FOOTNOTE_ANCHOR_RE = re.compile(
    r'<a\b[^>]*?\bid="(\d+)"[^>]*>\s*\*\s*</a>',
    re.IGNORECASE,
)


@dataclass
class FootnoteDefinition:
    """
    An out-of-line note.

    Attributes:
        id: "fn_0", "fn_1", ... in extraction order
        reference: Citation as written (e.g., "Gen. 1:1")
        content: Note text
    """
    id: str
    reference: str
    content: str

    def to_dict(self) -> dict:
        return asdict(self)


class FootnoteExtraction(NamedTuple):
    clean_html: str
    footnotes: List[FootnoteDefinition]


def find_definitions(plain_text: str) -> List[FootnoteDefinition]:
    """
    Scan flattened text for definition blocks.

    Identical (reference, content) pairs are kept once.
    """
    footnotes = []
    seen = set()

    for match in DEFINITION_RE.finditer(plain_text):
        reference = match.group(1).strip()
        content = match.group(2).strip()
        if not reference or not content:
            continue

        key = (reference, content)
        if key in seen:
            continue
        seen.add(key)

        footnotes.append(FootnoteDefinition(
            id=f"fn_{len(footnotes)}",
            reference=reference,
            content=content,
        ))

    return footnotes


def _remove_definition_blocks(markup: str) -> str:
    """
    Drop every p/div/span whose whole text is definitions.

    Elements are visited innermost first, so definitions nested in a
    wrapper block are removed while the wrapper and its body text stay.
    Markup with nothing to remove is returned as given.
    """
    if DEFINITION_MARK not in markup:
        return markup

    soup = BeautifulSoup(markup, "html.parser")
    removed = 0
    for tag in reversed(soup.find_all(DEFINITION_BLOCK_TAGS)):
        if tag.decomposed:
            continue
        text = WHITESPACE_RE.sub(" ", tag.get_text(" ")).strip()
        if text.startswith(DEFINITION_MARK) and DEFINITION_RE.match(text):
            tag.decompose()
            removed += 1

    return soup.decode() if removed else markup


def _remove_standalone_citations(markup: str) -> str:
    def drop_if_citation(match: re.Match) -> str:
        text = html_to_text(match.group(1))
        if STANDALONE_CITATION_RE.match(text) and len(text) < STANDALONE_MAX_CHARS:
            return ""
        return match.group(0)

    return PARAGRAPH_RE.sub(drop_if_citation, markup)


def _link_anchors(markup: str, footnotes: List[FootnoteDefinition]) -> str:
    position = 0

    def replace(match: re.Match) -> str:
        nonlocal position
        fn_index = position
        position += 1
        if fn_index < len(footnotes):
            return (
                f'<span class="footnote-marker" data-fn-id="{footnotes[fn_index].id}" '
                f'data-fn-index="{fn_index}" title="View footnote">*</span>'
            )
        return '<span class="footnote-marker">*</span>'

    return FOOTNOTE_ANCHOR_RE.sub(replace, markup)


def extract_footnotes(html: str) -> FootnoteExtraction:
    """
    Split chapter markup into display markup and footnote definitions.

    Args:
        html: Raw chapter body markup

    Returns:
        (clean_html, footnotes). Never raises; markup that does not fit
        the expected shape comes back unchanged with no footnotes.
    """
    if not html:
        return FootnoteExtraction(html or "", [])

    try:
        footnotes = find_definitions(html_to_text(html))

        clean = _remove_definition_blocks(html)
        clean = LOOSE_DEFINITION_RE.sub("", clean)
        clean = _remove_standalone_citations(clean)
        clean = EMPTY_BLOCK_RE.sub("", clean)
        clean = _link_anchors(clean, footnotes)
    except Exception as e:
        logger.warning(f"Footnote extraction failed, returning markup unchanged: {e}")
        return FootnoteExtraction(html, [])

    return FootnoteExtraction(clean, footnotes)
