# api/services/scripture/markup.py
"""
Markup helpers shared by the chapter loader, footnote parser and search.

- html_to_text: flatten markup to single-spaced plain text
- extract_body: body-only fragment with non-content elements removed
- sanitize_html: allow-list sanitizer for HTML handed to the reader UI
"""

import html as html_lib
import re

from bs4 import BeautifulSoup, Comment

TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")

# Elements that never carry readable chapter content
NON_CONTENT_TAGS = ["script", "style", "link", "meta", "img"]

ALLOWED_TAGS = {
    "p", "strong", "em", "span", "a", "h1", "h2", "h3", "h4", "h5", "h6",
    "div", "br", "sup", "sub", "ul", "ol", "li", "table", "thead", "tbody",
    "tr", "td", "th", "blockquote", "b", "i", "u", "small", "img", "hr",
    "section", "article", "header", "footer", "nav", "figure", "figcaption",
}

ALLOWED_ATTRS = {
    "class", "id", "style", "href", "target", "rel",
    "data-verse", "data-fn-id", "data-fn-index", "data-book", "data-chapter",
    "data-verse-end", "data-verse-list", "data-verse-num",
    "data-highlighted", "data-highlight-color",
    "src", "alt", "width", "height", "title",
}

# Removed together with everything inside them
DROP_WITH_CONTENT = {"script", "style", "iframe", "object", "embed", "noscript"}


def html_to_text(markup: str) -> str:
    """Strip tags, decode entities and collapse whitespace."""
    if not markup:
        return ""
    text = TAG_RE.sub(" ", markup)
    text = html_lib.unescape(text)
    return WHITESPACE_RE.sub(" ", text).strip()


def extract_body(xhtml: str) -> str:
    """
    Return the inner markup of <body>, minus scripts, styles, links,
    metadata and images.

    Documents without a <body> are cleaned as a whole.
    """
    soup = BeautifulSoup(xhtml, "html.parser")
    root = soup.body or soup

    for tag in root.find_all(NON_CONTENT_TAGS):
        tag.decompose()

    return root.decode_contents()


def first_heading(markup: str) -> str:
    """Text of the first <h1>/<h2> in the markup, or ''."""
    soup = BeautifulSoup(markup, "html.parser")
    heading = soup.find(["h1", "h2"])
    if heading is None:
        return ""
    return heading.get_text(" ", strip=True)


def sanitize_html(markup: str) -> str:
    """
    Keep only the tags and attributes the reader renders.

    Disallowed tags are unwrapped (their text survives); scripts, styles
    and embeds are removed with their content; comments are dropped.
    """
    soup = BeautifulSoup(markup, "html.parser")

    for comment in soup.find_all(string=lambda t: isinstance(t, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name in DROP_WITH_CONTENT:
            tag.decompose()
            continue
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        for attr in list(tag.attrs):
            if attr not in ALLOWED_ATTRS:
                del tag.attrs[attr]
        href = tag.attrs.get("href")
        if href and href.strip().lower().startswith("javascript:"):
            del tag.attrs["href"]

    return soup.decode()
