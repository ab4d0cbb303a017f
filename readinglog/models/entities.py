"""Data model classes for readinglog.

This module contains only the dataclass definitions for database rows and
formatted catalog results. Queries and writes live in ``readinglog.services``.

Note: required fields come first, optional fields after, so the classes work
with FastLite's db.create() transformation. Identifiers are UUID strings and
timestamps are ISO-8601 strings, exactly as they are stored.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class BookStatus(str, Enum):
    """Reading-list status. Any status may follow any other."""
    WANT_TO_READ = "want_to_read"
    READING = "reading"
    READ = "read"
    ABANDONED = "abandoned"


@dataclass
class Book:
    """Canonical catalog entry, created once per external catalog id."""
    title: str
    id: Optional[str] = None
    google_books_id: Optional[str] = None  # UNIQUE; NULL for manually created books
    author: Optional[str] = None
    year: Optional[str] = None
    cover_url: Optional[str] = None
    synopsis: Optional[str] = None
    isbn: Optional[str] = None
    page_count: Optional[int] = None
    language: Optional[str] = None
    categories: Optional[str] = None  # JSON-encoded list of strings
    created_at: str = ""
    updated_at: str = ""

    @property
    def category_list(self) -> List[str]:
        if not self.categories:
            return []
        try:
            value = json.loads(self.categories)
        except (TypeError, ValueError):
            return []
        return [str(c) for c in value] if isinstance(value, list) else []


@dataclass
class UserBook:
    """A book on a user's reading list."""
    user_id: str
    book_id: str
    id: Optional[str] = None
    status: str = BookStatus.WANT_TO_READ.value
    started_at: Optional[str] = None  # YYYY-MM-DD
    finished_at: Optional[str] = None  # YYYY-MM-DD
    current_page: Optional[int] = None
    notes: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class BookRating:
    """One 0-5 rating per (user, book), with an optional review."""
    user_id: str
    book_id: str
    rating: float
    id: Optional[str] = None
    review: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class BookQuote:
    """A saved excerpt. A user may keep any number per book."""
    user_id: str
    book_id: str
    quote_text: str
    id: Optional[str] = None
    page_number: Optional[int] = None
    chapter: Optional[str] = None
    notes: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class BookClubSuggestion:
    """A user's nomination of a book. Each row counts as one vote."""
    book_id: str
    suggested_by: str
    id: Optional[str] = None
    created_at: str = ""


@dataclass
class CurrentBookClubBook:
    """Singleton row naming the book the club is reading."""
    book_id: str
    set_by: str
    id: str = "current"
    set_at: str = ""
    notes: Optional[str] = None


@dataclass
class SearchResult:
    """A catalog volume formatted for display and ranking (not persisted)."""
    id: str  # external catalog id
    title: str
    author: str
    year: str
    cover: str
    synopsis: str
    rating: str = "0.0"
    ratings_count: int = 0
    average_rating: float = 0.0
    categories: List[str] = field(default_factory=list)
    page_count: Optional[int] = None
    language: Optional[str] = None
    preview_link: Optional[str] = None
    info_link: Optional[str] = None

    @property
    def has_cover(self) -> bool:
        return bool(self.cover) and 'placeholder' not in self.cover


@dataclass
class SuggestionSummary:
    """A suggested book with its vote count, as listed on the club page."""
    id: str
    book_id: str
    suggested_by: str
    created_at: str
    vote_count: int
    book: Optional[Book] = None
