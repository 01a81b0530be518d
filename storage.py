"""Flat-file persistence for the catalog.

One record per line, fields joined by a comma in a fixed order:

    title,author,genre,year,available

``available`` is written as ``1`` or ``0``. There is no header and no
escaping, so text fields must not contain the delimiter or a line break;
``encode_line`` refuses such records instead of writing a corrupt line.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from book import Book, BookStatus
from config import settings

logger = logging.getLogger(__name__)

DELIMITER = ","
FIELD_COUNT = 5
FORBIDDEN_CHARS = (DELIMITER, "\n", "\r")


class MalformedLineError(ValueError):
    """A stored line could not be turned back into a Book."""

    def __init__(self, reason: str, line: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.line = line


@dataclass
class SkippedLine:
    line_no: int
    text: str
    reason: str


def has_forbidden_chars(value: str) -> bool:
    return any(ch in value for ch in FORBIDDEN_CHARS)


def encode_line(book: Book) -> str:
    """Serialize a Book to one line (without the trailing newline)."""
    for name in ("title", "author", "genre"):
        value = getattr(book, name)
        if has_forbidden_chars(value):
            raise ValueError(f"Field '{name}' contains a comma or line break: {value!r}")
    return DELIMITER.join([
        book.title,
        book.author,
        book.genre,
        str(book.year),
        "1" if book.available else "0",
    ])


def decode_line(line: str) -> Book:
    """Parse one stored line into a Book, raising MalformedLineError on bad input."""
    text = line.rstrip("\r\n")
    fields = text.split(DELIMITER)
    if len(fields) != FIELD_COUNT:
        raise MalformedLineError(f"expected {FIELD_COUNT} fields, got {len(fields)}", text)

    title, author, genre, year_raw, available_raw = fields
    if not title.strip() or not author.strip() or not genre.strip():
        raise MalformedLineError("empty title, author or genre", text)

    try:
        year = int(year_raw.strip())
    except ValueError:
        raise MalformedLineError(f"year is not a number: {year_raw!r}", text) from None
    if year <= 0:
        raise MalformedLineError(f"year must be positive: {year}", text)

    flag = available_raw.strip()
    if flag not in ("1", "0"):
        raise MalformedLineError(f"availability must be 1 or 0: {available_raw!r}", text)

    status = BookStatus.ACTIVE if flag == "1" else BookStatus.RETIRED
    return Book(title=title, author=author, genre=genre, year=year, status=status)


def write_books(path: str, books: Iterable[Book]) -> int:
    """Overwrite ``path`` with every record. Returns the number of lines written."""
    # Encode fully before opening so a bad record never truncates the previous save.
    lines = [encode_line(book) + "\n" for book in books]
    data = "".join(lines).encode(settings.encoding)
    with open(path, "wb") as f:
        f.write(data)
    logger.info(f"Wrote {len(lines)} records to {path}")
    return len(lines)


def read_books(path: str) -> Tuple[List[Book], List[SkippedLine]]:
    """Read every record from ``path``.

    Lines are decoded one at a time. Blank lines are ignored. Malformed or
    undecodable lines are skipped, logged and returned alongside the parsed
    books. ``OSError`` (including ``FileNotFoundError``)
    propagates to the caller.
    """
    books: List[Book] = []
    skipped: List[SkippedLine] = []
    with open(path, "rb") as f:
        for line_no, raw in enumerate(f, 1):
            try:
                line = raw.decode(settings.encoding)
            except UnicodeDecodeError as e:
                text = raw.decode(settings.encoding, errors="replace").rstrip("\r\n")
                reason = f"not valid {settings.encoding}: {e.reason}"
                logger.warning(f"Skipping malformed line {line_no} in {path}: {reason}")
                skipped.append(SkippedLine(line_no=line_no, text=text, reason=reason))
                continue
            if not line.strip():
                continue
            try:
                books.append(decode_line(line))
            except MalformedLineError as e:
                logger.warning(f"Skipping malformed line {line_no} in {path}: {e.reason}")
                skipped.append(SkippedLine(line_no=line_no, text=e.line, reason=e.reason))
    logger.info(f"Read {len(books)} records from {path} ({len(skipped)} skipped)")
    return books, skipped
