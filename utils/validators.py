from typing import Optional

from library import SearchField
from storage import has_forbidden_chars

# Older data and habits call the title "name"
_SEARCH_FIELD_ALIASES = {
    "title": SearchField.TITLE,
    "name": SearchField.TITLE,
    "author": SearchField.AUTHOR,
    "genre": SearchField.GENRE,
}


class TextValidator:
    """Validation for the free-text fields of a book record."""

    @staticmethod
    def validate_field(text: Optional[str]) -> bool:
        if text is None:
            return False
        t = text.strip()
        if not t:
            return False
        # the data file has no escaping
        return not has_forbidden_chars(t)


class YearValidator:

    @staticmethod
    def parse_year(raw) -> Optional[int]:
        """Return a positive integer year, or None for anything else."""
        if raw is None:
            return None
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw if raw > 0 else None
        s = str(raw).strip()
        if not s.isdigit():
            return None
        year = int(s)
        return year if year > 0 else None


def parse_search_field(raw: Optional[str]) -> Optional[SearchField]:
    if raw is None:
        return None
    return _SEARCH_FIELD_ALIASES.get(raw.strip().lower())
