# api/tests/test_chapter_loader.py
"""
Tests for chapter_loader.py and the markup helpers it relies on.
"""

import os
import sys
import tempfile

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from package_fixtures import build_package
from services.scripture.chapter_loader import ChapterLoader
from services.scripture.markup import (
    extract_body,
    first_heading,
    html_to_text,
    sanitize_html,
)
from services.scripture.package_indexer import PackageFormatError, PackageIndexer


def _loader(path) -> ChapterLoader:
    return ChapterLoader(PackageIndexer(path, lang="tg"))


def test_load_chapter():
    """Test a mapped chapter comes back as a cleaned body fragment."""
    print("\n=== Testing load_chapter ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        loader = _loader(build_package(os.path.join(tmpdir, "nwt.epub")))

        content = loader.load_chapter(43, 3)
        assert content is not None
        assert "<h2>Juan 3</h2>" in content.html
        assert "pag-ibig" in content.html
        print("✓ chapter markup returned")

        assert "<body" not in content.html and "<head" not in content.html
        assert "<script" not in content.html and "track()" not in content.html
        assert "<img" not in content.html
        assert "<link" not in content.html
        print("✓ body only, scripts/images/links stripped")

        assert loader.indexer.is_initialized
        print("✓ first load initializes the indexer")


def test_load_chapter_not_found():
    """Test every unavailable case is None rather than an error."""
    print("\n=== Testing unavailable chapters ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = build_package(
            os.path.join(tmpdir, "nwt.epub"),
            books=(43, 45),
            placeholders=[(45, 2)],
            missing=[(45, 3)],
        )
        loader = _loader(path)

        assert loader.load_chapter(1, 1) is None
        print("✓ unmapped book")

        assert loader.load_chapter(43, 22) is None
        assert loader.load_chapter(43, 0) is None
        print("✓ chapter out of range")

        assert loader.load_chapter(45, 3) is None
        print("✓ content resource missing from archive")

        assert loader.load_chapter(45, 2) is None
        assert loader.load_chapter(45, 1) is not None
        print("✓ placeholder resource treated as missing")


def test_load_chapter_short_book():
    """Test a book with fewer chapter documents than expected ends at its last one."""
    print("\n=== Testing short book ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = build_package(
            os.path.join(tmpdir, "nwt.epub"),
            books=(1, 2),
            chapter_counts={1: 2},
            front_matter=False,
        )
        loader = _loader(path)

        assert "<h2>Genesis 2</h2>" in loader.load_chapter(1, 2).html
        assert loader.load_chapter(1, 3) is None
        assert loader.load_chapter(1, 4) is None
        print("✓ no navigation page or Exodo chapter served as Genesis")

        assert "<h2>Exodo 1</h2>" in loader.load_chapter(2, 1).html
        print("✓ following book still loads")


def test_load_chapter_rereads():
    """Test chapters are not cached between calls."""
    print("\n=== Testing no caching ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        loader = _loader(build_package(os.path.join(tmpdir, "nwt.epub")))

        first = loader.load_chapter(43, 1)
        second = loader.load_chapter(43, 1)
        assert first == second
        assert first is not second
        print("✓ equal content, fresh object")


def test_load_chapter_package_error():
    """Test an unreadable package propagates PackageFormatError."""
    print("\n=== Testing package error propagation ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        loader = _loader(os.path.join(tmpdir, "missing.epub"))
        try:
            loader.load_chapter(43, 3)
            assert False, "Should have raised PackageFormatError"
        except PackageFormatError:
            print("✓ PackageFormatError raised")


def test_html_to_text():
    """Test flattening markup to text."""
    print("\n=== Testing html_to_text ===")

    text = html_to_text("<p>Ang  <b>Diyos</b>\n ay pag-ibig&nbsp;&amp; liwanag.</p>")
    assert text == "Ang Diyos ay pag-ibig & liwanag."
    print("✓ tags removed, entities decoded, whitespace collapsed")

    assert html_to_text("") == ""
    print("✓ empty input")


def test_extract_body_without_body():
    """Test fragments without <body> are cleaned as a whole."""
    print("\n=== Testing extract_body on fragments ===")

    cleaned = extract_body('<p>Talata</p><style>p {}</style><meta charset="utf-8"/>')
    assert cleaned == "<p>Talata</p>"
    print("✓ fragment cleaned")


def test_first_heading():
    """Test heading lookup."""
    print("\n=== Testing first_heading ===")

    assert first_heading("<p>x</p><h2>Apendise B</h2><h1>Iba</h1>") == "Apendise B"
    assert first_heading("<p>walang pamagat</p>") == ""
    print("✓ first h1/h2 or empty")


def test_sanitize_html():
    """Test the allow-list sanitizer."""
    print("\n=== Testing sanitize_html ===")

    dirty = (
        '<p onclick="steal()" class="v">Juan <font color="red">3:16</font>'
        '<script>alert(1)</script><!-- tala --></p>'
        '<a href="javascript:alert(1)">x</a>'
        '<span class="footnote-marker" data-fn-id="fn_0" data-fn-index="0">*</span>'
        '<iframe src="https://example.com">frame</iframe>'
    )
    clean = sanitize_html(dirty)

    assert 'onclick' not in clean
    assert 'class="v"' in clean
    print("✓ disallowed attributes dropped")

    assert "<font" not in clean and "3:16" in clean
    print("✓ disallowed tags unwrapped, text kept")

    assert "<script" not in clean and "alert(1)" not in clean
    assert "<iframe" not in clean and "frame<" not in clean
    print("✓ scripts and embeds removed with content")

    assert "tala" not in clean
    print("✓ comments removed")

    assert "javascript:" not in clean and "<a>x</a>" in clean
    print("✓ javascript links neutralised")

    assert 'data-fn-id="fn_0"' in clean and 'data-fn-index="0"' in clean
    print("✓ footnote attributes kept")


def main():
    """Run all tests."""
    print("=" * 60)
    print("Chapter Loader Test Suite")
    print("=" * 60)

    test_load_chapter()
    test_load_chapter_not_found()
    test_load_chapter_short_book()
    test_load_chapter_rereads()
    test_load_chapter_package_error()
    test_html_to_text()
    test_extract_body_without_body()
    test_first_heading()
    test_sanitize_html()

    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    main()
