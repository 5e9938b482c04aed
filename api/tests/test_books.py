# api/tests/test_books.py
"""
Tests for books.py - book table, reading orders and study links.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.scripture.books import (
    BIBLE_BOOKS,
    READING_PLANS,
    TOTAL_CHAPTERS,
    WOL_BASE_URL,
    canonical_order,
    get_book,
    plan_order,
    wol_url,
)


def test_book_table():
    """Test the static book table."""
    print("\n=== Testing book table ===")

    assert len(BIBLE_BOOKS) == 66
    assert [b.id for b in BIBLE_BOOKS] == list(range(1, 67))
    assert TOTAL_CHAPTERS == 1189
    print("✓ 66 books, 1189 chapters")

    juan = get_book(43)
    assert (juan.name, juan.short_name, juan.chapters, juan.testament) == ("Juan", "Jua", 21, "NT")
    assert get_book(19).chapters == 150
    assert get_book(39).testament == "OT"
    assert get_book(0) is None and get_book(67) is None
    print("✓ lookups")

    assert juan.to_dict()["name"] == "Juan"
    print("✓ to_dict")


def test_reading_plans():
    """Test every plan covers every chapter exactly once."""
    print("\n=== Testing reading plans ===")

    canonical = canonical_order()
    assert canonical[0] == (1, 1) and canonical[-1] == (66, 22)
    assert len(canonical) == TOTAL_CHAPTERS

    for plan_id in READING_PLANS:
        order = plan_order(plan_id)
        assert len(order) == TOTAL_CHAPTERS, plan_id
        assert sorted(order) == sorted(canonical), plan_id
    print("✓ all plans are permutations of the canonical order")

    assert plan_order("nt-first")[0] == (40, 1)
    assert plan_order("writing-order")[0] == (18, 1)
    print("✓ plan starting points")

    assert plan_order("walang-ganito") == canonical
    print("✓ unknown plan reads canonically")


def test_wol_url():
    """Test study-edition links."""
    print("\n=== Testing wol_url ===")

    assert wol_url(43, 3) == "https://wol.jw.org/tl/wol/b/r27/lp-tg/nwtsty/43/3"
    assert wol_url(99, 1) == WOL_BASE_URL
    print("✓ chapter link and unknown-book fallback")


def main():
    """Run all tests."""
    print("=" * 60)
    print("Books Test Suite")
    print("=" * 60)

    test_book_table()
    test_reading_plans()
    test_wol_url()

    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    main()
