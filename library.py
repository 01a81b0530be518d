import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

import storage
from book import Book
from config import settings
from storage import SkippedLine

logger = logging.getLogger(__name__)


class SearchField(Enum):
    TITLE = "title"
    AUTHOR = "author"
    GENRE = "genre"


class LoadStatus(Enum):
    LOADED = "loaded"
    MISSING = "missing"
    ERROR = "error"


@dataclass
class LoadResult:
    status: LoadStatus
    count: int = 0
    skipped: List[SkippedLine] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.LOADED


class Library:
    """Owns the in-memory catalog and its persistence to the data file."""

    def __init__(self, data_file: Optional[str] = None) -> None:
        self.data_file = data_file or settings.data_file
        self.books: List[Book] = []

    # ------------------------- Core operations ------------------------- #
    def add_book(self, book: Book) -> None:
        """Append a pre-validated Book to the end of the catalog."""
        self.books.append(book)
        logger.info(f"Added book: {book.title}")

    def find_by_title(self, title: str) -> Optional[Book]:
        """Return the first book whose title equals ``title`` exactly."""
        for book in self.books:
            if book.title == title:
                return book
        return None

    def remove_book(self, title: str) -> bool:
        """Retire the first book with this title. The record stays in the catalog."""
        book = self.find_by_title(title)
        if not book:
            return False
        book.retire()
        logger.info(f"Retired book: {title}")
        return True

    def restore_book(self, title: str) -> bool:
        """Make a retired book available again."""
        book = self.find_by_title(title)
        if not book:
            return False
        book.restore()
        logger.info(f"Restored book: {title}")
        return True

    def find_books(self, keyword: str, field: SearchField = SearchField.TITLE) -> List[Book]:
        """Case-sensitive substring search on one field, retired books included."""
        attr = field.value
        return [book for book in self.books if keyword in getattr(book, attr)]

    def books_sorted_by_year(self) -> List[Book]:
        # sorted() is stable, equal years keep insertion order
        return sorted(self.books, key=lambda b: b.year)

    def list_books(self, genre_filter: str = "") -> List[Book]:
        if not genre_filter:
            return list(self.books)
        return [book for book in self.books if book.genre == genre_filter]

    def edit_book(self, title: str, *, new_title: Optional[str] = None, author: Optional[str] = None,
                  genre: Optional[str] = None, year: Optional[int] = None) -> Optional[Book]:
        """Update fields of the first book matching ``title``.

        ``None`` or blank replacements leave a field unchanged. Returns the
        updated book or None if no book has that title.
        """
        book = self.find_by_title(title)
        if not book:
            return None

        if new_title is not None and new_title.strip():
            book.title = new_title.strip()
        if author is not None and author.strip():
            book.author = author.strip()
        if genre is not None and genre.strip():
            book.genre = genre.strip()
        if year is not None:
            book.year = int(year)
        logger.info(f"Edited book: {title}")
        return book

    def get_statistics(self) -> Dict[str, Any]:
        available = sum(1 for b in self.books if b.available)
        return {
            "total_books": len(self.books),
            "available_books": available,
            "retired_books": len(self.books) - available,
            "genres": len({b.genre for b in self.books}),
        }

    # ------------------------- Persistence ------------------------- #
    def save(self) -> bool:
        """Overwrite the data file with every record, retired ones included."""
        try:
            storage.write_books(self.data_file, self.books)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save library to {self.data_file}: {e}")
            return False

    def load(self) -> LoadResult:
        """Replace the catalog with the data file's contents.

        A missing or unreadable file leaves the current catalog untouched.
        """
        try:
            books, skipped = storage.read_books(self.data_file)
        except FileNotFoundError:
            logger.info(f"Data file {self.data_file} not found")
            return LoadResult(LoadStatus.MISSING)
        except OSError as e:
            logger.error(f"Failed to load library from {self.data_file}: {e}")
            return LoadResult(LoadStatus.ERROR)

        self.books = books
        return LoadResult(LoadStatus.LOADED, count=len(books), skipped=skipped)
