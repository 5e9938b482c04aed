# api/services/scripture/reference_resolver.py
"""
Scripture citation finder.

Locates citations in free text and resolves them to book/chapter/verse:
- Full names: "Juan 3:16", "Mga Awit 23:1", "John 3:16"
- Abbreviations: "Mat 5:3", "Gen. 1:1", "1 Cor. 13:4-7", "1Co 13:4"
- Verse lists: "Juan 3:16, 17", "Mat 3:1-5, 8"
- Semicolon chains: "Roma 5:12; 6:23"
- Chapter-only: "Genesis 6"

Book names resolve by exact (case-folded) lookup first, then by prefix:
any table key of 3+ characters that starts the candidate name. The prefix
step is loose on purpose and can pick the wrong book when names share a
prefix ("Romance 3:4" -> Roma).
"""

import html
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .books import BIBLE_BOOKS, get_book

MIN_PREFIX_LENGTH = 3

# A single range never expands past this many verses
MAX_RANGE_VERSES = 200

# Common abbreviations beyond each book's name and short code
EXTRA_ABBREVIATIONS: Dict[str, int] = {
    "gen": 1, "ex": 2, "exod": 2, "lev": 3, "num": 4, "deut": 5, "dt": 5,
    "josh": 6, "judg": 7, "jdg": 7, "ru": 8, "1 sam": 9, "2 sam": 10,
    "1 ki": 11, "2 ki": 12, "1 chr": 13, "2 chr": 14, "neh": 16, "est": 17,
    "ps": 19, "psa": 19, "psalm": 19, "prov": 20, "pr": 20, "eccl": 21, "ec": 21,
    "song": 22, "isa": 23, "is": 23, "jer": 24, "lam": 25, "ezek": 26, "eze": 26,
    "dan": 27, "hos": 28, "joe": 29, "am": 30, "ob": 31, "obad": 31,
    "jon": 32, "mic": 33, "nah": 34, "hab": 35, "zeph": 36, "hag": 37,
    "zech": 38, "zec": 38, "mal": 39,
    "matt": 40, "mt": 40, "mk": 41, "lk": 42, "jn": 43, "joh": 43,
    "acts": 44, "rom": 45, "1 cor": 46, "2 cor": 47, "gal": 48,
    "eph": 49, "phil": 50, "col": 51, "1 thess": 52, "2 thess": 53,
    "1 tim": 54, "2 tim": 55, "tit": 56, "philem": 57, "phlm": 57,
    "heb": 58, "jas": 59, "1 pet": 60, "2 pet": 61,
    "1 jn": 62, "2 jn": 63, "3 jn": 64, "jude": 65, "rev": 66,
    # Tagalog
    "aw": 19, "kaw": 20, "mat": 40, "mar": 41, "luc": 42, "jua": 43,
    "gaw": 44, "apo": 66,
}

# English names, canonical order
ENGLISH_BOOK_NAMES = [
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy", "Joshua",
    "Judges", "Ruth", "1 Samuel", "2 Samuel", "1 Kings", "2 Kings",
    "1 Chronicles", "2 Chronicles", "Ezra", "Nehemiah", "Esther", "Job",
    "Psalms", "Proverbs", "Ecclesiastes", "Song of Solomon", "Isaiah",
    "Jeremiah", "Lamentations", "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk", "Zephaniah", "Haggai",
    "Zechariah", "Malachi",
    "Matthew", "Mark", "Luke", "John", "Acts", "Romans", "1 Corinthians",
    "2 Corinthians", "Galatians", "Ephesians", "Philippians", "Colossians",
    "1 Thessalonians", "2 Thessalonians", "1 Timothy", "2 Timothy", "Titus",
    "Philemon", "Hebrews", "James", "1 Peter", "2 Peter", "1 John", "2 John",
    "3 John", "Jude", "Revelation",
]


def _normalize_name(name: str) -> str:
    key = name.lower().replace(".", " ")
    return re.sub(r"\s+", " ", key).strip()


def _build_book_table() -> Dict[str, int]:
    table: Dict[str, int] = {}
    for book in BIBLE_BOOKS:
        table[_normalize_name(book.name)] = book.id
        table[_normalize_name(book.short_name)] = book.id
    for abbr, book_id in EXTRA_ABBREVIATIONS.items():
        table[abbr] = book_id
    for book_id, name in enumerate(ENGLISH_BOOK_NAMES, start=1):
        table.setdefault(_normalize_name(name), book_id)
    return table


BOOK_TABLE: Dict[str, int] = _build_book_table()

# Longest first, so the most specific key wins a prefix match
_PREFIX_KEYS: List[Tuple[str, int]] = sorted(
    ((k, v) for k, v in BOOK_TABLE.items() if len(k) >= MIN_PREFIX_LENGTH),
    key=lambda kv: len(kv[0]),
    reverse=True,
)


def _exact_book_id(name: str) -> Optional[int]:
    key = _normalize_name(name)
    if key in BOOK_TABLE:
        return BOOK_TABLE[key]
    # "1 co" may be stored as "1co"
    compact = key.replace(" ", "")
    return BOOK_TABLE.get(compact)


def _prefix_book_id(name: str) -> Optional[int]:
    key = _normalize_name(name)
    for prefix, book_id in _PREFIX_KEYS:
        if key.startswith(prefix):
            return book_id
    return None


def resolve_book_id(name: str) -> Optional[int]:
    """
    Resolve a book name or abbreviation to its id.

    Exact match first, then the longest table key (3+ chars) that is a
    prefix of the name. Returns None when nothing matches.
    """
    return _exact_book_id(name) or _prefix_book_id(name)


# =============================================================================
# Patterns
# =============================================================================

_L = "A-Za-zÀ-ÿ"

VERSES = r"\d{1,3}(?:\s*[-–]\s*\d{1,3})?(?:\s*,\s*\d{1,3}(?:\s*[-–]\s*\d{1,3})?)*"

REFERENCE_RE = re.compile(
    rf"(?<![{_L}\d])"
    rf"(?:(?P<num>[1-3])\s*)?"
    rf"(?P<book>[{_L}][{_L}.]*(?:\s+(?:ng|ni|of)\s+[{_L}]+)?(?:\s+[{_L}]+)?)"
    rf"\.?\s+"
    rf"(?P<chapter>\d{{1,3}})"
    rf"(?:\s*:\s*(?P<verses>{VERSES})|(?!\s*:|\d))"
    rf"(?P<chain>(?:\s*;\s*\d{{1,3}}\s*:\s*{VERSES})*)"
)

CONTINUATION_RE = re.compile(
    rf";\s*(?P<cv>(?P<chapter>\d{{1,3}})\s*:\s*(?P<verses>{VERSES}))"
)

WORD_RE = re.compile(r"\S+")


@dataclass
class ScriptureReference:
    """
    A citation resolved to a chapter and optional verses.

    Attributes:
        book_id: Canonical book number (1-66)
        chapter: Chapter number, within the book's chapter count
        verse: First verse (None for chapter-only citations)
        verse_end: Last verse when it differs from the first
        verse_list: Every verse, when more than one
        original_span: Exact matched text
        start/end: Offsets of original_span in the scanned text
    """
    book_id: int
    chapter: int
    verse: Optional[int] = None
    verse_end: Optional[int] = None
    verse_list: Optional[List[int]] = None
    original_span: str = ""
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @property
    def book_name(self) -> str:
        book = get_book(self.book_id)
        return book.name if book else ""

    @property
    def key(self) -> Tuple[int, int, Optional[int]]:
        return (self.book_id, self.chapter, self.verse)

    def to_dict(self) -> dict:
        return {
            "book_id": self.book_id,
            "book_name": self.book_name,
            "chapter": self.chapter,
            "verse": self.verse,
            "verse_end": self.verse_end,
            "verse_list": self.verse_list,
            "original_span": self.original_span,
        }


def parse_verse_list(verse_str: str) -> List[int]:
    """Expand "1-3, 5" to [1, 2, 3, 5]."""
    verses = []
    for part in re.split(r"\s*,\s*", verse_str.strip()):
        range_match = re.match(r"^(\d+)\s*[-–]\s*(\d+)$", part)
        if range_match:
            start, end = int(range_match.group(1)), int(range_match.group(2))
            if end < start:
                verses.append(start)
                continue
            verses.extend(range(start, min(end, start + MAX_RANGE_VERSES - 1) + 1))
        elif part.isdigit():
            verses.append(int(part))
    return verses


def _make_reference(
    book_id: int, chapter: int, verse_str: Optional[str], span: str, start: int
) -> ScriptureReference:
    ref = ScriptureReference(
        book_id=book_id,
        chapter=chapter,
        original_span=span,
        start=start,
        end=start + len(span),
    )
    if verse_str:
        verses = parse_verse_list(verse_str)
        if verses:
            ref.verse = verses[0]
            if verses[-1] != verses[0]:
                ref.verse_end = verses[-1]
            if len(verses) > 1:
                ref.verse_list = verses
    return ref


def _resolve_match_book(match: re.Match, exact_only: bool) -> Optional[Tuple[int, int]]:
    """
    Resolve the book phrase of a match to (book_id, span_start).

    Leading words are dropped one at a time when the whole phrase does not
    resolve ("ang Juan" -> "Juan"). Exact matches on any suffix win over
    prefix matches.
    """
    book_text = match.group("book")
    book_start = match.start("book")
    words = list(WORD_RE.finditer(book_text))

    candidates = []
    for i, word in enumerate(words):
        name = book_text[word.start():].rstrip(".")
        start = book_start + word.start()
        if i == 0 and match.group("num"):
            name = f"{match.group('num')} {name}"
            start = match.start("num")
        candidates.append((name, start))

    for name, start in candidates:
        book_id = _exact_book_id(name)
        if book_id:
            return book_id, start

    if exact_only:
        return None

    for name, start in candidates:
        book_id = _prefix_book_id(name)
        if book_id:
            return book_id, start
    return None


def scan_references(text: str) -> List[ScriptureReference]:
    """
    Every citation in text order, without de-duplication.

    Spans never overlap.
    """
    if not text:
        return []

    found: List[ScriptureReference] = []
    pos = 0

    while pos < len(text):
        match = REFERENCE_RE.search(text, pos)
        if not match:
            break

        verses = match.group("verses")
        # Bare "Name N" only counts when the name is an exact book name
        resolved = _resolve_match_book(match, exact_only=verses is None)
        if resolved is None:
            pos = match.start() + 1
            continue

        book_id, span_start = resolved
        book = get_book(book_id)
        chapter = int(match.group("chapter"))

        if 1 <= chapter <= book.chapters:
            span_end = match.end("verses") if verses else match.end("chapter")
            found.append(_make_reference(
                book_id, chapter, verses, text[span_start:span_end], span_start
            ))

        chain = match.group("chain")
        if chain:
            chain_start = match.start("chain")
            for cont in CONTINUATION_RE.finditer(chain):
                cont_chapter = int(cont.group("chapter"))
                if not 1 <= cont_chapter <= book.chapters:
                    continue
                found.append(_make_reference(
                    book_id,
                    cont_chapter,
                    cont.group("verses"),
                    cont.group("cv"),
                    chain_start + cont.start("cv"),
                ))

        pos = max(match.end(), match.start() + 1)

    return found


def parse_references(text: str) -> List[ScriptureReference]:
    """
    Find citations in text, one per (book, chapter, verse).

    Args:
        text: Any text (chapter body, daily text excerpt, notes)

    Returns:
        ScriptureReference list in text order; empty when nothing matches
    """
    refs = []
    seen = set()
    for ref in scan_references(text):
        if ref.key in seen:
            continue
        seen.add(ref.key)
        refs.append(ref)
    return refs


def _link_markup(ref: ScriptureReference) -> str:
    verse = ref.verse if ref.verse is not None else ""
    verse_end = ref.verse_end if ref.verse_end is not None else ""
    verse_list = ",".join(str(v) for v in ref.verse_list) if ref.verse_list else ""
    return (
        f'<span class="verse-ref-link" data-book="{ref.book_id}" '
        f'data-chapter="{ref.chapter}" data-verse="{verse}" '
        f'data-verse-end="{verse_end}" data-verse-list="{verse_list}">'
        f"{html.escape(ref.original_span)}</span>"
    )


def make_clickable(text: str) -> str:
    """
    Escape text for HTML and wrap every citation in a verse-ref-link span.

    Replacements run right to left so earlier offsets stay valid. Text
    that is already wrapped must not be passed through again.
    """
    if not text:
        return ""

    refs = sorted(scan_references(text), key=lambda r: r.start, reverse=True)
    if not refs:
        return html.escape(text)

    parts = []
    tail = len(text)
    for ref in refs:
        if ref.end > tail:
            continue
        parts.append(html.escape(text[ref.end:tail]))
        parts.append(_link_markup(ref))
        tail = ref.start
    parts.append(html.escape(text[:tail]))

    return "".join(reversed(parts))
