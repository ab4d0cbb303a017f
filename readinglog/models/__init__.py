"""Models package for readinglog.

This package provides the entity dataclasses and database setup.
"""

# Entity classes
from .entities import (
    BookStatus,
    Book,
    UserBook,
    BookRating,
    BookQuote,
    BookClubSuggestion,
    CurrentBookClubBook,
    SearchResult,
    SuggestionSummary,
)

# Database setup
from .database import (
    setup_database,
    close_database,
    backend_errors,
    new_id,
    utc_now,
    CURRENT_BOOK_KEY,
)

__all__ = [
    # Entities
    'BookStatus',
    'Book',
    'UserBook',
    'BookRating',
    'BookQuote',
    'BookClubSuggestion',
    'CurrentBookClubBook',
    'SearchResult',
    'SuggestionSummary',
    # Database
    'setup_database',
    'close_database',
    'backend_errors',
    'new_id',
    'utc_now',
    'CURRENT_BOOK_KEY',
]
