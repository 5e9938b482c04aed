# api/services/scripture/package_indexer.py
"""
Package indexer for zipped scripture e-books.

Parses the container once into an immutable PackageIndex:
- container.xml -> path of the package document (.opf)
- manifest      -> id -> href
- spine         -> ordered SpineEntry list
- book markers  -> book id -> spine index of its first chapter

Initialization is memoized: concurrent first callers share one in-flight
parse and all observe the same result or failure.
"""

import logging
import posixpath
import re
import threading
import xml.etree.ElementTree as ET
import zipfile
import zlib
from concurrent.futures import Future
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, Dict, List, Mapping, Optional, Tuple, Union

from .books import BIBLE_BOOKS, get_book

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"

# Tried in order when container.xml is absent or names no package document
FALLBACK_OPF_PATHS = ("content.opf", "OEBPS/content.opf", "OPS/content.opf")

DEFAULT_CHAPTER_NAV_PATTERN = r"biblechapternav(\d+)\.xhtml"

MIN_BOOK_ID = 1
MAX_BOOK_ID = 66

# Raised by ZipFile.read for corrupt, encrypted or unsupported members
MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError)


class PackageFormatError(Exception):
    """Raised when the container or its package document is missing or invalid."""

    def __init__(self, message: str, package_path: str = ""):
        super().__init__(message)
        self.package_path = package_path


@dataclass(frozen=True)
class SpineEntry:
    """One item of the reading order. index is its position in the spine."""
    index: int
    href: str


@dataclass(frozen=True)
class PackageIndex:
    """
    Immutable addressing scheme over a parsed package.

    Attributes:
        spine: Reading order
        content_path_prefix: Directory of the package document ("" or "OEBPS/")
        book_chapter_start: Book id -> spine index of chapter 1
        manifest: Manifest id -> href
    """
    spine: Tuple[SpineEntry, ...]
    content_path_prefix: str
    book_chapter_start: Mapping[int, int]
    manifest: Mapping[str, str] = field(default_factory=dict)

    def spine_index(self, book_id: int, chapter: int) -> Optional[int]:
        """
        Spine index holding a chapter, or None when the book is unmapped,
        the chapter is outside the book, or the index runs into the next
        book or past the spine.
        """
        start = self.book_chapter_start.get(book_id)
        if start is None:
            return None

        book = get_book(book_id)
        if book is None or chapter < 1 or chapter > book.chapters:
            return None

        index = start + chapter - 1
        if index >= len(self.spine):
            return None

        # The next book's navigation page sits just before its chapter 1
        following = [s for s in self.book_chapter_start.values() if s > start]
        if following and index >= min(following) - 1:
            return None
        return index

    def resource_path(self, spine_index: int) -> str:
        """Archive member path for a spine entry."""
        return self.content_path_prefix + self.spine[spine_index].href


PackageSource = Union[str, BinaryIO]


class PackageIndexer:
    """
    Builds and holds the PackageIndex for one package file.

    Usage:
        indexer = PackageIndexer("/data/bibles/nwt_TG.epub", lang="tg")
        index = indexer.initialize()
        html = indexer.read_resource(index.resource_path(3))
    """

    def __init__(
        self,
        source: PackageSource,
        lang: str = "",
        chapter_nav_pattern: str = DEFAULT_CHAPTER_NAV_PATTERN,
    ):
        self.source = source
        self.lang = lang
        self._nav_re = re.compile(chapter_nav_pattern, re.IGNORECASE)
        self._lock = threading.Lock()
        self._pending: Optional[Future] = None
        self._index: Optional[PackageIndex] = None
        self._archive: Optional[zipfile.ZipFile] = None

    @property
    def package_path(self) -> str:
        return self.source if isinstance(self.source, str) else "<stream>"

    @property
    def is_initialized(self) -> bool:
        return self._index is not None

    def initialize(self) -> PackageIndex:
        """
        Parse the package once and return the index.

        Safe to call from many threads: callers arriving while a parse is
        in flight wait for that same parse. A failed parse is reported to
        every waiter and then discarded, so a later call retries. This
        includes KeyboardInterrupt and SystemExit.

        Raises:
            PackageFormatError: container or package document unusable
        """
        with self._lock:
            if self._index is not None:
                return self._index
            future = self._pending
            owner = future is None
            if owner:
                future = Future()
                self._pending = future

        if not owner:
            return future.result()

        try:
            archive, index = self._build()
        except BaseException as e:
            logger.error(f"[{self.lang or 'package'}] Init error: {e}")
            with self._lock:
                self._pending = None
            future.set_exception(e)
            raise

        with self._lock:
            self._archive = archive
            self._index = index
            self._pending = None
        future.set_result(index)
        return index

    def read_resource(self, member_path: str) -> Optional[str]:
        """Decoded text of an archive member, or None if it is not there."""
        if self._archive is None:
            return None
        try:
            data = self._archive.read(member_path)
        except KeyError:
            return None
        return data.decode("utf-8", errors="ignore")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _build(self) -> Tuple[zipfile.ZipFile, PackageIndex]:
        try:
            archive = zipfile.ZipFile(self.source)
        except FileNotFoundError:
            raise PackageFormatError(
                f"Package not found: {self.package_path}", self.package_path
            )
        except (zipfile.BadZipFile, OSError) as e:
            raise PackageFormatError(
                f"Cannot open package {self.package_path}: {e}", self.package_path
            )

        try:
            index = self._parse(archive)
        except BaseException:
            archive.close()
            raise
        return archive, index

    def _parse(self, archive: zipfile.ZipFile) -> PackageIndex:
        names = set(archive.namelist())
        opf_path = self._find_package_document(archive, names)
        if not opf_path:
            raise PackageFormatError(
                "Could not locate package document", self.package_path
            )

        try:
            opf_root = ET.fromstring(archive.read(opf_path))
        except KeyError:
            raise PackageFormatError(
                f"Could not read package document: {opf_path}", self.package_path
            )
        except ET.ParseError as e:
            raise PackageFormatError(
                f"Malformed package document {opf_path}: {e}", self.package_path
            )
        except MEMBER_READ_ERRORS as e:
            raise PackageFormatError(
                f"Cannot read package document {opf_path}: {e}", self.package_path
            )

        prefix = posixpath.dirname(opf_path)
        prefix = prefix + "/" if prefix else ""

        manifest = self._parse_manifest(opf_root)
        spine = self._parse_spine(opf_root, manifest)
        starts = self._map_books(spine)

        index = PackageIndex(
            spine=tuple(spine),
            content_path_prefix=prefix,
            book_chapter_start=MappingProxyType(starts),
            manifest=MappingProxyType(manifest),
        )
        logger.info(
            f"[{self.lang or 'package'}] {len(starts)}/{MAX_BOOK_ID} books mapped "
            f"from {len(spine)} spine items"
        )
        return index

    def _find_package_document(self, archive: zipfile.ZipFile, names: set) -> str:
        """Path from container.xml, else the first conventional path present."""
        if CONTAINER_PATH in names:
            try:
                root = ET.fromstring(archive.read(CONTAINER_PATH))
                for element in root.iter():
                    if element.tag.endswith("rootfile"):
                        path = element.get("full-path", "")
                        if path.endswith(".opf"):
                            return path
            except (ET.ParseError, *MEMBER_READ_ERRORS):
                logger.warning(f"Unreadable {CONTAINER_PATH}, trying conventional paths")

        for path in FALLBACK_OPF_PATHS:
            if path in names:
                return path
        return ""

    def _parse_manifest(self, opf_root: ET.Element) -> Dict[str, str]:
        manifest = {}
        for item in opf_root.findall(".//{*}manifest/{*}item"):
            manifest[item.get("id", "")] = item.get("href", "")
        return manifest

    def _parse_spine(self, opf_root: ET.Element, manifest: Dict[str, str]) -> List[SpineEntry]:
        refs = opf_root.findall(".//{*}spine/{*}itemref")
        return [
            SpineEntry(index=i, href=manifest.get(ref.get("idref", ""), ""))
            for i, ref in enumerate(refs)
        ]

    def _map_books(self, spine: List[SpineEntry]) -> Dict[int, int]:
        """
        Book id -> first chapter spine index.

        A navigation marker at index i puts chapter 1 at i + 1. Books
        without a marker are then placed into the gaps between mapped books.
        """
        starts: Dict[int, int] = {}
        for entry in spine:
            match = self._nav_re.search(entry.href)
            if not match:
                continue
            book_id = int(match.group(1))
            if MIN_BOOK_ID <= book_id <= MAX_BOOK_ID and book_id not in starts:
                starts[book_id] = entry.index + 1

        self._fill_unmarked_books(starts, len(spine))
        return dict(sorted(starts.items()))

    def _fill_unmarked_books(self, starts: Dict[int, int], spine_length: int) -> None:
        """
        Place books that have no navigation marker (usually one-chapter
        books) into the spine gap after the preceding mapped book.

        Each gap is walked two entries at a time: a navigation page, then
        the chapter content.
        """
        missing = [b for b in BIBLE_BOOKS if b.id not in starts]
        if not missing or not starts:
            return

        runs: List[List] = []
        for book in missing:
            if runs and book.id == runs[-1][-1].id + 1:
                runs[-1].append(book)
            else:
                runs.append([book])

        for run in runs:
            previous = [b for b in starts if b < run[0].id]
            if not previous:
                continue
            prev_id = max(previous)
            following = [b for b in starts if b > run[-1].id]

            gap_start = starts[prev_id] + get_book(prev_id).chapters
            gap_end = starts[min(following)] - 1 if following else spine_length

            position = gap_start
            for book in run:
                if position >= gap_end:
                    break
                content_index = position + 1
                if content_index < spine_length:
                    starts[book.id] = content_index
                position += 2

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def describe(self) -> str:
        """Human-readable summary of the index for troubleshooting."""
        index = self._index
        if index is None:
            return "Package not loaded"

        lines = [
            f"Lang: {self.lang}",
            f"Spine: {len(index.spine)} items",
            f"Books: {len(index.book_chapter_start)}/{MAX_BOOK_ID}",
            f'Prefix: "{index.content_path_prefix}"',
            "",
        ]
        missing = [b for b in BIBLE_BOOKS if b.id not in index.book_chapter_start]
        if missing:
            lines.append("MISSING: " + ", ".join(f"{b.id}:{b.name}" for b in missing))
            lines.append("")

        for book_id, start in index.book_chapter_start.items():
            book = get_book(book_id)
            name = book.name if book else f"#{book_id}"
            href = index.spine[start].href if start < len(index.spine) else "?"
            lines.append(f"{name:<18} ch1=[{start}] {href}")
        return "\n".join(lines)
