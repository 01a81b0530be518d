from __future__ import annotations

from enum import Enum


class BookStatus(Enum):
    """Lifecycle of a catalog record. Retired books stay in the catalog."""
    ACTIVE = "available"
    RETIRED = "retired"


class Book:
    """Represents a single book record in the catalog."""

    def __init__(self, title: str, author: str, genre: str, year: int,
                 status: BookStatus = BookStatus.ACTIVE) -> None:
        self.title = title.strip()
        self.author = author.strip()
        self.genre = genre.strip()
        self.year = int(year)
        self.status = status

    @property
    def available(self) -> bool:
        return self.status is BookStatus.ACTIVE

    def retire(self) -> None:
        self.status = BookStatus.RETIRED

    def restore(self) -> None:
        self.status = BookStatus.ACTIVE

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.genre}, {self.year}) [{self.status.value}]"

    def __repr__(self) -> str:
        return (f"Book(title={self.title!r}, author={self.author!r}, genre={self.genre!r}, "
                f"year={self.year!r}, status={self.status.name})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # mutable record

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "year": self.year,
            "available": self.available,
        }

