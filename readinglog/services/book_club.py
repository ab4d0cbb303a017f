"""Book club: suggestions (each one a vote) and the current club book.

The current book is a single row under a fixed key. Setting it is one
INSERT ... ON CONFLICT statement, so there is no window in which the club has
no current book while another user replaces it.
"""

import logging
from typing import Optional, List, Dict

from apswutils.db import NotFoundError

from ..errors import UniqueViolationError
from ..models.database import backend_errors, new_id, utc_now, CURRENT_BOOK_KEY
from ..models.entities import BookClubSuggestion, CurrentBookClubBook, SuggestionSummary
from .books import get_book_by_id, require_book

logger = logging.getLogger(__name__)


def suggest_book_for_club(user_id: str, book_id: str, db_tables) -> bool:
    """Nominate a book. Returns False if this user already suggested it."""
    require_book(book_id, db_tables)

    with backend_errors("check suggestion"):
        existing = db_tables['book_club_suggestions'](
            where="book_id = ? AND suggested_by = ?", where_args=[book_id, user_id], limit=1
        )
    if existing:
        return False

    suggestion = BookClubSuggestion(id=new_id(), book_id=book_id, suggested_by=user_id, created_at=utc_now())
    try:
        with backend_errors("suggest book"):
            db_tables['book_club_suggestions'].insert(suggestion)
    except UniqueViolationError:
        return False

    logger.info(f"User {user_id} suggested book {book_id} for the club")
    return True


def get_vote_count(book_id: str, db_tables) -> int:
    table = db_tables['book_club_suggestions']
    with backend_errors("count votes"):
        rows = db_tables['db'].q(f"SELECT COUNT(*) AS n FROM {table.name} WHERE book_id = ?", [book_id])
    return rows[0]['n'] if rows else 0


def get_book_club_suggestions(db_tables) -> List[SuggestionSummary]:
    """One entry per suggested book, most recently suggested first, with vote counts."""
    with backend_errors("get suggestions"):
        rows = db_tables['book_club_suggestions'](order_by="created_at DESC, rowid DESC")

    vote_counts: Dict[str, int] = {}
    for row in rows:
        vote_counts[row.book_id] = vote_counts.get(row.book_id, 0) + 1

    summaries: Dict[str, SuggestionSummary] = {}
    for row in rows:
        if row.book_id in summaries:
            continue
        summaries[row.book_id] = SuggestionSummary(
            id=row.id,
            book_id=row.book_id,
            suggested_by=row.suggested_by,
            created_at=row.created_at,
            vote_count=vote_counts[row.book_id],
            book=get_book_by_id(row.book_id, db_tables),
        )
    return list(summaries.values())


def get_current_book_club_book(db_tables) -> Optional[CurrentBookClubBook]:
    """The book the club is reading, or None if none is set."""
    try:
        with backend_errors("get current book"):
            current = db_tables['current_book_club_book'].get(CURRENT_BOOK_KEY)
    except NotFoundError:
        return None
    current.book = get_book_by_id(current.book_id, db_tables)
    return current


def set_current_book_club_book(user_id: str, book_id: str, db_tables, notes: Optional[str] = None) -> CurrentBookClubBook:
    """Make ``book_id`` the current club book, replacing any previous one."""
    require_book(book_id, db_tables)

    table = db_tables['current_book_club_book']
    with backend_errors("set current book"):
        db_tables['db'].execute(
            f"""
            INSERT INTO {table.name} (id, book_id, set_by, set_at, notes)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                book_id = excluded.book_id,
                set_by = excluded.set_by,
                set_at = excluded.set_at,
                notes = excluded.notes
            """,
            [CURRENT_BOOK_KEY, book_id, user_id, utc_now(), notes or None]
        )
    logger.info(f"User {user_id} set current club book to {book_id}")
    return get_current_book_club_book(db_tables)


def clear_current_book_club_book(db_tables) -> bool:
    """Remove the current club book. Returns False if none was set."""
    if get_current_book_club_book(db_tables) is None:
        return False
    with backend_errors("clear current book"):
        db_tables['current_book_club_book'].delete(CURRENT_BOOK_KEY)
    return True
