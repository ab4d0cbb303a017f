"""Book ratings: one 0-5 rating (and optional review) per user and book."""

import logging
from typing import Optional, List

from ..errors import ValidationError, UniqueViolationError
from ..models.database import backend_errors, new_id, utc_now
from ..models.entities import BookRating
from .books import get_book_by_id, require_book

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 5


def validate_rating(rating) -> float:
    if isinstance(rating, bool):
        raise ValidationError("Rating must be a number")
    try:
        value = float(rating)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be a number")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return value


def get_user_book_rating(user_id: str, book_id: str, db_tables) -> Optional[BookRating]:
    """Get a user's rating for a book. None means the user has not rated it."""
    with backend_errors("get rating"):
        rows = db_tables['book_ratings'](where="user_id = ? AND book_id = ?", where_args=[user_id, book_id], limit=1)
    if not rows:
        return None
    rating = rows[0]
    rating.book = get_book_by_id(rating.book_id, db_tables)
    return rating


def _update_rating(existing: BookRating, rating: float, review: Optional[str], db_tables) -> BookRating:
    changes = {'rating': rating, 'review': review or None, 'updated_at': utc_now()}
    with backend_errors("update rating"):
        updated = db_tables['book_ratings'].update(changes, existing.id)
    updated.book = get_book_by_id(updated.book_id, db_tables)
    return updated


def set_book_rating(user_id: str, book_id: str, rating, db_tables, review: Optional[str] = None) -> BookRating:
    """Create or update a user's rating for a book."""
    value = validate_rating(rating)
    require_book(book_id, db_tables)

    existing = get_user_book_rating(user_id, book_id, db_tables)
    if existing is not None:
        return _update_rating(existing, value, review, db_tables)

    now = utc_now()
    new_rating = BookRating(
        id=new_id(),
        user_id=user_id,
        book_id=book_id,
        rating=value,
        review=review or None,
        created_at=now,
        updated_at=now,
    )
    try:
        with backend_errors("create rating"):
            created = db_tables['book_ratings'].insert(new_rating)
    except UniqueViolationError:
        # Another write created the rating between our read and insert
        existing = get_user_book_rating(user_id, book_id, db_tables)
        if existing is None:
            raise
        return _update_rating(existing, value, review, db_tables)

    logger.info(f"User {user_id} rated book {book_id}: {value}")
    created.book = get_book_by_id(created.book_id, db_tables)
    return created


def delete_book_rating(user_id: str, book_id: str, db_tables) -> bool:
    """Delete a user's rating. Returns False if there was none."""
    if get_user_book_rating(user_id, book_id, db_tables) is None:
        return False
    with backend_errors("delete rating"):
        db_tables['book_ratings'].delete_where("user_id = ? AND book_id = ?", [user_id, book_id])
    return True


def get_user_ratings(user_id: str, db_tables) -> List[BookRating]:
    """All of a user's ratings, newest first."""
    with backend_errors("get ratings"):
        rows = db_tables['book_ratings'](where="user_id = ?", where_args=[user_id], order_by="created_at DESC, rowid DESC")
    for row in rows:
        row.book = get_book_by_id(row.book_id, db_tables)
    return rows
