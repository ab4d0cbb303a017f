"""readinglog - the data and logic layer of a reading-tracker app.

Package Structure:
- readinglog.models: entity dataclasses and database setup
- readinglog.clients: Google Books catalog client
- readinglog.services: ranking, identity reconciliation, search and CRUD
- readinglog.auth: session state
- readinglog.context: AppContext tying everything together
"""

__version__ = "0.1.0"

# Re-export commonly used items for convenience
from .models import (
    BookStatus,
    Book,
    UserBook,
    BookRating,
    BookQuote,
    BookClubSuggestion,
    CurrentBookClubBook,
    SearchResult,
    setup_database,
)

from .clients import GoogleBooksClient

from .services import (
    sort_books_by_popularity,
    is_internal_id,
    reconcile_book_id,
    get_or_create_book,
    search_catalog,
    DebouncedSearch,
)

from .config import Settings
from .context import AppContext

__all__ = [
    # Version
    '__version__',
    # Models
    'BookStatus',
    'Book',
    'UserBook',
    'BookRating',
    'BookQuote',
    'BookClubSuggestion',
    'CurrentBookClubBook',
    'SearchResult',
    'setup_database',
    # Clients
    'GoogleBooksClient',
    # Services
    'sort_books_by_popularity',
    'is_internal_id',
    'reconcile_book_id',
    'get_or_create_book',
    'search_catalog',
    'DebouncedSearch',
    # Context
    'Settings',
    'AppContext',
]
