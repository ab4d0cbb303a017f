"""Database setup and error translation for readinglog.

This module creates the FastLite tables, their uniqueness indexes, and
provides helpers shared by the service modules: id/timestamp generation and
translation of apsw errors into readinglog's backend errors.
"""

import os
import uuid
import logging
from contextlib import contextmanager
from datetime import datetime, date, timezone
from typing import Dict, Any

import apsw
from fastlite import database

from ..errors import BackendError, UniqueViolationError, ValidationError
from .entities import (
    Book, UserBook, BookRating, BookQuote, BookClubSuggestion, CurrentBookClubBook
)

logger = logging.getLogger(__name__)

CURRENT_BOOK_KEY = "current"

# (table key, column list) for every UNIQUE index the services rely on
UNIQUE_INDEXES = [
    ('books', ['google_books_id']),
    ('user_books', ['user_id', 'book_id']),
    ('book_ratings', ['user_id', 'book_id']),
    ('book_club_suggestions', ['book_id', 'suggested_by']),
]


def new_id() -> str:
    """Return a fresh internal identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def today() -> str:
    """Today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def as_date_string(value) -> str:
    """Normalise a date/datetime/str to YYYY-MM-DD (None passes through).

    Strings must start with an ISO date; anything after the date (a time part)
    is dropped.

    Raises:
        ValidationError: If a string does not start with a valid YYYY-MM-DD date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value)[:10]).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD",
                              user_message="Please enter dates as YYYY-MM-DD.")


def is_unique_violation(error: Exception) -> bool:
    """True if an apsw error was raised by a UNIQUE/PRIMARY KEY constraint."""
    if not isinstance(error, apsw.ConstraintError):
        return False
    message = str(error).upper()
    return 'UNIQUE' in message or 'PRIMARY KEY' in message


@contextmanager
def backend_errors(operation: str):
    """Translate apsw errors raised inside the block into BackendError types.

    Uniqueness violations become UniqueViolationError so callers can turn them
    into a no-op or an update.
    """
    try:
        yield
    except apsw.Error as e:
        if is_unique_violation(e):
            logger.debug(f"Unique violation during {operation}: {e}")
            raise UniqueViolationError(f"Unique violation during {operation}: {e}", original_error=e) from e
        logger.error(f"Database error during {operation}: {e}")
        raise BackendError(f"Database error during {operation}: {e}", original_error=e) from e


def setup_database(db_path: str = 'data/readinglog.db', memory: bool = False) -> Dict[str, Any]:
    """Initialize the database and all tables.

    Args:
        db_path: Path to the SQLite database file
        memory: If True, use an in-memory database (for testing)

    Returns:
        Dictionary containing the database connection and table objects

    Raises:
        BackendError: if the database cannot be opened or initialised
    """
    with backend_errors("setup database"):
        return _setup_database(db_path, memory)


def _setup_database(db_path: str, memory: bool) -> Dict[str, Any]:
    if memory:
        logger.debug("Setting up in-memory database")
        db = database(':memory:')
    else:
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        db = database(db_path)
        db.execute("PRAGMA journal_mode=WAL")
        db.execute("PRAGMA synchronous=NORMAL")
        db.execute("PRAGMA busy_timeout=30000")  # 30 second timeout
        logger.info(f"Database opened at {db_path}")

    books = db.create(Book, pk='id', transform=True, if_not_exists=True)
    user_books = db.create(UserBook, pk='id', transform=True, if_not_exists=True)
    book_ratings = db.create(BookRating, pk='id', transform=True, if_not_exists=True)
    book_quotes = db.create(BookQuote, pk='id', transform=True, if_not_exists=True)
    book_club_suggestions = db.create(BookClubSuggestion, pk='id', transform=True, if_not_exists=True)
    current_book_club_book = db.create(CurrentBookClubBook, pk='id', transform=True, if_not_exists=True)

    tables = {
        'db': db,
        'books': books,
        'user_books': user_books,
        'book_ratings': book_ratings,
        'book_quotes': book_quotes,
        'book_club_suggestions': book_club_suggestions,
        'current_book_club_book': current_book_club_book,
    }

    for table_key, columns in UNIQUE_INDEXES:
        tables[table_key].create_index(columns, unique=True, if_not_exists=True)

    return tables


def close_database(db_tables: Dict[str, Any]):
    """Close the underlying connection."""
    db = db_tables.get('db')
    if db is None:
        return
    try:
        db.conn.close()
    except apsw.Error as e:
        logger.warning(f"Error closing database: {e}")
