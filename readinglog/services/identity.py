"""Book identity reconciliation.

A book reference is either an internal id (a UUID assigned when the Book row
was created) or an external Google Books volume id. Every dependent write
(reading list, rating, quote, suggestion, current book) needs the internal id,
so external ids are resolved here, creating the Book row on first sight.
"""

import re
import logging
from enum import Enum
from typing import Optional, Dict, Any

from ..errors import InvalidBookReferenceError, ReconciliationError, UniqueViolationError
from ..models.entities import Book
from .books import create_book, find_book_by_google_id
from ..clients.books import format_book_for_database

logger = logging.getLogger(__name__)

INTERNAL_ID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE,
)


class BookRefOrigin(str, Enum):
    """Where a book reference came from."""
    SEARCH_RESULT = "search_result"  # fresh catalog hit, external id
    STORED_ENTRY = "stored_entry"  # row we already hold, internal id


def is_internal_id(token: str) -> bool:
    """True if ``token`` has the 8-4-4-4-12 hex shape of an internal id."""
    return bool(token) and INTERNAL_ID_RE.match(token) is not None


async def get_or_create_book(google_books_id: str, db_tables, catalog,
                             book_data: Optional[Dict[str, Any]] = None) -> Book:
    """Return the Book for an external catalog id, creating it if needed.

    An existing row is returned without touching the catalog. Otherwise the
    volume is fetched (unless ``book_data`` is given), mapped and inserted. If
    the insert loses a race with another caller the existing row is returned.

    Raises:
        ReconciliationError: if the catalog has no metadata for the id
    """
    existing = find_book_by_google_id(google_books_id, db_tables)
    if existing is not None:
        logger.debug(f"Catalog id {google_books_id} already stored as {existing.id}")
        return existing

    if book_data is None:
        volume = await catalog.get_book_by_id(google_books_id)
        if not volume:
            raise ReconciliationError(google_books_id, "catalog returned no metadata")
        book_data = format_book_for_database(volume)

    try:
        return create_book(book_data, db_tables, google_books_id=google_books_id)
    except UniqueViolationError:
        logger.info(f"Catalog id {google_books_id} was stored concurrently, re-reading")
        existing = find_book_by_google_id(google_books_id, db_tables)
        if existing is None:
            raise
        return existing


async def reconcile_book_id(token: str, db_tables, catalog,
                            origin: Optional[BookRefOrigin] = None) -> str:
    """Return the internal id to use for writes about ``token``.

    Internal ids are returned as-is with no lookup. Anything else is treated as
    an external catalog id and resolved with get_or_create_book.
    """
    token = (token or '').strip()
    if not token:
        raise InvalidBookReferenceError(token, "empty reference")

    if is_internal_id(token):
        return token.lower()

    if origin == BookRefOrigin.STORED_ENTRY:
        raise InvalidBookReferenceError(token, "stored entries must use internal ids")

    book = await get_or_create_book(token, db_tables, catalog)
    return book.id
