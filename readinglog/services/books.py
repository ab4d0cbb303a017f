"""Book row lookups and edits."""

import json
import logging
from typing import Optional, Dict, Any

from apswutils.db import NotFoundError

from ..errors import BookNotFoundError, ValidationError
from ..models.database import backend_errors, new_id, utc_now
from ..models.entities import Book

logger = logging.getLogger(__name__)

EDITABLE_BOOK_FIELDS = {
    'title', 'author', 'year', 'cover_url', 'synopsis', 'isbn',
    'page_count', 'language', 'categories',
}


def _encode_categories(categories) -> Optional[str]:
    if categories is None:
        return None
    if isinstance(categories, str):
        return categories
    return json.dumps(list(categories))


def get_book_by_id(book_id: str, db_tables) -> Optional[Book]:
    """Get a book by its internal id, returning None if not found."""
    if not book_id:
        return None
    try:
        with backend_errors("get book"):
            return db_tables['books'].get(book_id)
    except NotFoundError:
        return None


def require_book(book_id: str, db_tables) -> Book:
    """Like get_book_by_id, but a missing book is a validation error."""
    book = get_book_by_id(book_id, db_tables)
    if book is None:
        raise BookNotFoundError(book_id)
    return book


def find_book_by_google_id(google_books_id: str, db_tables) -> Optional[Book]:
    """Find the book created for an external catalog id."""
    with backend_errors("find book by catalog id"):
        rows = db_tables['books'](where="google_books_id = ?", where_args=[google_books_id], limit=1)
    return rows[0] if rows else None


def create_book(book_data: Dict[str, Any], db_tables, google_books_id: str = None) -> Book:
    """Insert a new book row.

    Raises:
        UniqueViolationError: if a book for ``google_books_id`` already exists
    """
    data = {k: v for k, v in book_data.items() if k in EDITABLE_BOOK_FIELDS}
    if not data.get('title'):
        raise ValidationError("A book needs a title")
    data['categories'] = _encode_categories(data.get('categories'))

    now = utc_now()
    book = Book(id=new_id(), google_books_id=google_books_id, created_at=now, updated_at=now, **data)
    with backend_errors("create book"):
        created = db_tables['books'].insert(book)
    logger.info(f"Created book {created.id} ({created.title!r}, catalog id {google_books_id})")
    return created


def update_book(book_id: str, updates: Dict[str, Any], db_tables) -> Optional[Book]:
    """Apply an explicit edit to a book. Returns None if the book does not exist."""
    unknown = set(updates) - EDITABLE_BOOK_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update book fields: {', '.join(sorted(unknown))}")

    if get_book_by_id(book_id, db_tables) is None:
        return None

    changes = dict(updates)
    if 'categories' in changes:
        changes['categories'] = _encode_categories(changes['categories'])
    changes['updated_at'] = utc_now()

    with backend_errors("update book"):
        return db_tables['books'].update(changes, book_id)
