# api/services/scripture/books.py
"""
Static book table for the New World Translation (Tagalog edition).

Provides:
- BIBLE_BOOKS: the 66 books in canonical order
- Reading orders (canonical, NT-first, chronological, writing order)
- Lookup helpers and the online study-edition URL builder
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class BibleBook:
    """
    One book of the Bible.

    Attributes:
        id: Canonical book number (1-66)
        name: Display name (e.g., "Juan")
        short_name: Short code (e.g., "Jua")
        chapters: Number of chapters
        testament: "OT" or "NT"
        wol_book_num: Book number used by the online study edition
    """
    id: int
    name: str
    short_name: str
    chapters: int
    testament: str
    wol_book_num: int

    def to_dict(self) -> dict:
        return asdict(self)


def _book(book_id: int, name: str, short_name: str, chapters: int) -> BibleBook:
    testament = "OT" if book_id <= 39 else "NT"
    return BibleBook(book_id, name, short_name, chapters, testament, book_id)


BIBLE_BOOKS: List[BibleBook] = [
    # Hebrew-Aramaic Scriptures
    _book(1, "Genesis", "Gen", 50),
    _book(2, "Exodo", "Exo", 40),
    _book(3, "Levitico", "Lev", 27),
    _book(4, "Mga Bilang", "Bil", 36),
    _book(5, "Deuteronomio", "Deu", 34),
    _book(6, "Josue", "Jos", 24),
    _book(7, "Mga Hukom", "Huk", 21),
    _book(8, "Ruth", "Rut", 4),
    _book(9, "1 Samuel", "1Sa", 31),
    _book(10, "2 Samuel", "2Sa", 24),
    _book(11, "1 Hari", "1Ha", 22),
    _book(12, "2 Hari", "2Ha", 25),
    _book(13, "1 Cronica", "1Cr", 29),
    _book(14, "2 Cronica", "2Cr", 36),
    _book(15, "Ezra", "Ezr", 10),
    _book(16, "Nehemias", "Neh", 13),
    _book(17, "Esther", "Est", 10),
    _book(18, "Job", "Job", 42),
    _book(19, "Mga Awit", "Aw", 150),
    _book(20, "Mga Kawikaan", "Kaw", 31),
    _book(21, "Eclesiastes", "Ecl", 12),
    _book(22, "Awit ni Solomon", "Sol", 8),
    _book(23, "Isaias", "Isa", 66),
    _book(24, "Jeremias", "Jer", 52),
    _book(25, "Mga Panaghoy", "Pan", 5),
    _book(26, "Ezekiel", "Eze", 48),
    _book(27, "Daniel", "Dan", 12),
    _book(28, "Hosea", "Hos", 14),
    _book(29, "Joel", "Joe", 3),
    _book(30, "Amos", "Amo", 9),
    _book(31, "Obadias", "Oba", 1),
    _book(32, "Jonas", "Jon", 4),
    _book(33, "Mikas", "Mik", 7),
    _book(34, "Nahum", "Nah", 3),
    _book(35, "Habakuk", "Hab", 3),
    _book(36, "Zefanias", "Zef", 3),
    _book(37, "Hagai", "Hag", 2),
    _book(38, "Zacarias", "Zac", 14),
    _book(39, "Malakias", "Mal", 4),

    # Christian Greek Scriptures
    _book(40, "Mateo", "Mat", 28),
    _book(41, "Marcos", "Mar", 16),
    _book(42, "Lucas", "Luc", 24),
    _book(43, "Juan", "Jua", 21),
    _book(44, "Mga Gawa", "Gaw", 28),
    _book(45, "Roma", "Rom", 16),
    _book(46, "1 Corinto", "1Co", 16),
    _book(47, "2 Corinto", "2Co", 13),
    _book(48, "Galacia", "Gal", 6),
    _book(49, "Efeso", "Efe", 6),
    _book(50, "Filipos", "Fil", 4),
    _book(51, "Colosas", "Col", 4),
    _book(52, "1 Tesalonica", "1Te", 5),
    _book(53, "2 Tesalonica", "2Te", 3),
    _book(54, "1 Timoteo", "1Ti", 6),
    _book(55, "2 Timoteo", "2Ti", 4),
    _book(56, "Tito", "Tit", 3),
    _book(57, "Filemon", "Flm", 1),
    _book(58, "Hebreo", "Heb", 13),
    _book(59, "Santiago", "San", 5),
    _book(60, "1 Pedro", "1Pe", 5),
    _book(61, "2 Pedro", "2Pe", 3),
    _book(62, "1 Juan", "1Ju", 5),
    _book(63, "2 Juan", "2Ju", 1),
    _book(64, "3 Juan", "3Ju", 1),
    _book(65, "Judas", "Jud", 1),
    _book(66, "Apocalipsis", "Apo", 22),
]

_BOOKS_BY_ID: Dict[int, BibleBook] = {b.id: b for b in BIBLE_BOOKS}

TOTAL_CHAPTERS = sum(b.chapters for b in BIBLE_BOOKS)

WOL_BASE_URL = "https://wol.jw.org"
WOL_CHAPTER_URL = WOL_BASE_URL + "/tl/wol/b/r27/lp-tg/nwtsty/{book}/{chapter}"


def get_book(book_id: int) -> Optional[BibleBook]:
    """Return the book with the given id, or None."""
    return _BOOKS_BY_ID.get(book_id)


# =============================================================================
# Reading Orders
# =============================================================================

CHRONOLOGICAL_BOOK_ORDER = [
    1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 18, 19, 20, 21, 22, 29, 30, 31, 32, 28,
    23, 33, 34, 35, 36, 24, 25, 13, 14, 26, 27, 37, 38, 39, 15, 16, 17,
    40, 41, 42, 43, 44, 59, 48, 52, 53, 46, 47, 45, 49, 50, 51, 57, 54, 56, 55, 58,
    60, 65, 61, 62, 63, 64, 66,
]

WRITING_ORDER_BOOKS = [
    18, 1, 2, 3, 4, 5, 19, 6, 7, 8, 9, 10, 22, 29, 30, 28, 23, 20, 21, 11, 12, 32,
    33, 34, 35, 36, 24, 25, 26, 31, 27, 37, 38, 39, 13, 14, 15, 16, 17,
    40, 41, 42, 43, 44, 48, 52, 53, 46, 47, 45, 59, 49, 50, 51, 57, 54, 55, 56,
    60, 58, 65, 61, 62, 63, 64, 66,
]


def _chapters_of(book_ids: List[int]) -> List[Tuple[int, int]]:
    order = []
    for book_id in book_ids:
        book = _BOOKS_BY_ID.get(book_id)
        if book is None:
            continue
        for chapter in range(1, book.chapters + 1):
            order.append((book.id, chapter))
    return order


def canonical_order() -> List[Tuple[int, int]]:
    """All (book_id, chapter) pairs, Genesis 1 through Apocalipsis 22."""
    return _chapters_of([b.id for b in BIBLE_BOOKS])


def nt_first_order() -> List[Tuple[int, int]]:
    nt = [b.id for b in BIBLE_BOOKS if b.testament == "NT"]
    ot = [b.id for b in BIBLE_BOOKS if b.testament == "OT"]
    return _chapters_of(nt + ot)


def chronological_order() -> List[Tuple[int, int]]:
    return _chapters_of(CHRONOLOGICAL_BOOK_ORDER)


def writing_order() -> List[Tuple[int, int]]:
    return _chapters_of(WRITING_ORDER_BOOKS)


READING_PLANS = {
    "canonical": canonical_order,
    "nt-first": nt_first_order,
    "chronological": chronological_order,
    "writing-order": writing_order,
}


def plan_order(plan_id: str) -> List[Tuple[int, int]]:
    """Reading order for a plan id. Unknown plans read canonically."""
    return READING_PLANS.get(plan_id, canonical_order)()


def wol_url(book_id: int, chapter: int) -> str:
    """Online study-edition URL for a chapter (always the Tagalog edition)."""
    book = get_book(book_id)
    if book is None:
        return WOL_BASE_URL
    return WOL_CHAPTER_URL.format(book=book.wol_book_num, chapter=chapter)
