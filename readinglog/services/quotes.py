"""Book quotes: any number of saved excerpts per user and book."""

import logging
from typing import Optional, List, Dict, Any

from ..errors import ValidationError
from ..models.database import backend_errors, new_id, utc_now
from ..models.entities import BookQuote
from .books import get_book_by_id, require_book

logger = logging.getLogger(__name__)

EDITABLE_QUOTE_FIELDS = {'quote_text', 'page_number', 'chapter', 'notes'}


def clean_page_number(page_number) -> Optional[int]:
    if page_number is None or page_number == '':
        return None
    try:
        value = int(page_number)
    except (TypeError, ValueError):
        raise ValidationError("Page number must be a whole number")
    if value <= 0:
        raise ValidationError("Page number must be positive")
    return value


def _with_books(quotes: List[BookQuote], db_tables) -> List[BookQuote]:
    for quote in quotes:
        quote.book = get_book_by_id(quote.book_id, db_tables)
    return quotes


def get_book_quotes(user_id: str, book_id: str, db_tables) -> List[BookQuote]:
    """A user's quotes for one book: by page, unnumbered last, then newest first."""
    with backend_errors("get book quotes"):
        rows = db_tables['book_quotes'](
            where="user_id = ? AND book_id = ?",
            where_args=[user_id, book_id],
            order_by="page_number IS NULL, page_number ASC, created_at DESC, rowid DESC",
        )
    return _with_books(rows, db_tables)


def get_user_quotes(user_id: str, db_tables) -> List[BookQuote]:
    """All of a user's quotes, newest first."""
    with backend_errors("get user quotes"):
        rows = db_tables['book_quotes'](where="user_id = ?", where_args=[user_id], order_by="created_at DESC, rowid DESC")
    return _with_books(rows, db_tables)


def add_book_quote(user_id: str, book_id: str, quote_text: str, db_tables,
                   page_number=None, chapter: str = None, notes: str = None) -> BookQuote:
    """Save a new quote."""
    if not quote_text or not quote_text.strip():
        raise ValidationError("Quote text cannot be empty")
    page = clean_page_number(page_number)
    require_book(book_id, db_tables)

    now = utc_now()
    quote = BookQuote(
        id=new_id(),
        user_id=user_id,
        book_id=book_id,
        quote_text=quote_text.strip(),
        page_number=page,
        chapter=chapter or None,
        notes=notes or None,
        created_at=now,
        updated_at=now,
    )
    with backend_errors("add quote"):
        created = db_tables['book_quotes'].insert(quote)
    logger.info(f"User {user_id} saved quote {created.id} for book {book_id}")
    created.book = get_book_by_id(created.book_id, db_tables)
    return created


def update_book_quote(user_id: str, quote_id: str, updates: Dict[str, Any], db_tables) -> Optional[BookQuote]:
    """Edit one of the user's quotes. Returns None if the user has no such quote."""
    unknown = set(updates) - EDITABLE_QUOTE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update quote fields: {', '.join(sorted(unknown))}")

    changes = dict(updates)
    if 'quote_text' in changes:
        if not changes['quote_text'] or not changes['quote_text'].strip():
            raise ValidationError("Quote text cannot be empty")
        changes['quote_text'] = changes['quote_text'].strip()
    if 'page_number' in changes:
        changes['page_number'] = clean_page_number(changes['page_number'])

    with backend_errors("get quote"):
        rows = db_tables['book_quotes'](where="id = ? AND user_id = ?", where_args=[quote_id, user_id], limit=1)
    if not rows:
        return None

    changes['updated_at'] = utc_now()
    with backend_errors("update quote"):
        updated = db_tables['book_quotes'].update(changes, quote_id)
    updated.book = get_book_by_id(updated.book_id, db_tables)
    return updated


def delete_book_quote(user_id: str, quote_id: str, db_tables) -> bool:
    """Delete one of the user's quotes. Returns False if the user has no such quote."""
    with backend_errors("get quote"):
        rows = db_tables['book_quotes'](where="id = ? AND user_id = ?", where_args=[quote_id, user_id], limit=1)
    if not rows:
        return False
    with backend_errors("delete quote"):
        db_tables['book_quotes'].delete_where("id = ? AND user_id = ?", [quote_id, user_id])
    return True
