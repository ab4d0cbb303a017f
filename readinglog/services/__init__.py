"""Services package for readinglog.

This package contains the business logic: ranking, identity reconciliation,
catalog search and the data-access operations for each table.
"""

from .ranking import (
    popularity_score,
    compare_popularity,
    sort_books_by_popularity,
)

from .identity import (
    BookRefOrigin,
    is_internal_id,
    reconcile_book_id,
    get_or_create_book,
)

from .search import (
    search_catalog,
    DebouncedSearch,
)

from .books import (
    get_book_by_id,
    find_book_by_google_id,
    create_book,
    update_book,
)

from .reading_list import (
    get_reading_list_entry,
    get_user_reading_list,
    add_to_reading_list,
    update_reading_list_status,
    update_reading_list_item,
    remove_from_reading_list,
    get_user_reading_stats,
)

from .ratings import (
    get_user_book_rating,
    set_book_rating,
    delete_book_rating,
    get_user_ratings,
)

from .quotes import (
    get_book_quotes,
    get_user_quotes,
    add_book_quote,
    update_book_quote,
    delete_book_quote,
)

from .book_club import (
    suggest_book_for_club,
    get_vote_count,
    get_book_club_suggestions,
    get_current_book_club_book,
    set_current_book_club_book,
    clear_current_book_club_book,
)

__all__ = [
    # Ranking
    'popularity_score',
    'compare_popularity',
    'sort_books_by_popularity',
    # Identity
    'BookRefOrigin',
    'is_internal_id',
    'reconcile_book_id',
    'get_or_create_book',
    # Search
    'search_catalog',
    'DebouncedSearch',
    # Books
    'get_book_by_id',
    'find_book_by_google_id',
    'create_book',
    'update_book',
    # Reading list
    'get_reading_list_entry',
    'get_user_reading_list',
    'add_to_reading_list',
    'update_reading_list_status',
    'update_reading_list_item',
    'remove_from_reading_list',
    'get_user_reading_stats',
    # Ratings
    'get_user_book_rating',
    'set_book_rating',
    'delete_book_rating',
    'get_user_ratings',
    # Quotes
    'get_book_quotes',
    'get_user_quotes',
    'add_book_quote',
    'update_book_quote',
    'delete_book_quote',
    # Book club
    'suggest_book_for_club',
    'get_vote_count',
    'get_book_club_suggestions',
    'get_current_book_club_book',
    'set_current_book_club_book',
    'clear_current_book_club_book',
]
