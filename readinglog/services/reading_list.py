"""Reading list (user_books) operations."""

import logging
from typing import Optional, List, Dict, Any

from ..errors import ValidationError, UniqueViolationError
from ..models.database import backend_errors, new_id, utc_now, today, as_date_string
from ..models.entities import BookStatus, UserBook
from .books import get_book_by_id, require_book

logger = logging.getLogger(__name__)

EDITABLE_ENTRY_FIELDS = {'status', 'started_at', 'finished_at', 'current_page', 'notes'}


def validate_status(status) -> str:
    """Return the status value, raising ValidationError for unknown statuses."""
    try:
        return BookStatus(status).value
    except ValueError:
        valid = ', '.join(s.value for s in BookStatus)
        raise ValidationError(f"Unknown reading status {status!r} (expected one of: {valid})")


def _attach_book(entry: UserBook, db_tables) -> UserBook:
    entry.book = get_book_by_id(entry.book_id, db_tables)
    return entry


def get_reading_list_entry(user_id: str, book_id: str, db_tables) -> Optional[UserBook]:
    """Get a user's entry for a book, or None."""
    with backend_errors("get reading list entry"):
        rows = db_tables['user_books'](where="user_id = ? AND book_id = ?", where_args=[user_id, book_id], limit=1)
    return _attach_book(rows[0], db_tables) if rows else None


def get_user_reading_list(user_id: str, db_tables, status=None) -> List[UserBook]:
    """Get a user's reading list, newest first, with book details attached."""
    where = "user_id = ?"
    args = [user_id]
    if status:
        where += " AND status = ?"
        args.append(validate_status(status))

    with backend_errors("get reading list"):
        rows = db_tables['user_books'](where=where, where_args=args, order_by="created_at DESC, rowid DESC")
    return [_attach_book(row, db_tables) for row in rows]


def add_to_reading_list(user_id: str, book_id: str, db_tables,
                        status=BookStatus.WANT_TO_READ, started_at=None) -> Optional[UserBook]:
    """Add a book to a user's reading list.

    If the book is already on the list its status is updated instead.
    """
    status = validate_status(status)
    started_at = as_date_string(started_at)
    require_book(book_id, db_tables)

    now = utc_now()
    entry = UserBook(
        id=new_id(),
        user_id=user_id,
        book_id=book_id,
        status=status,
        started_at=started_at,
        created_at=now,
        updated_at=now,
    )
    try:
        with backend_errors("add to reading list"):
            created = db_tables['user_books'].insert(entry)
    except UniqueViolationError:
        logger.debug(f"Book {book_id} already on {user_id}'s list, updating status")
        return update_reading_list_status(user_id, book_id, status, db_tables, started_at=started_at)

    logger.info(f"Added book {book_id} to reading list of {user_id} as {status}")
    return _attach_book(created, db_tables)


def update_reading_list_status(user_id: str, book_id: str, status, db_tables,
                               started_at=None, finished_at=None) -> Optional[UserBook]:
    """Set the status of a reading-list entry.

    Marking a book as read without a finish date stamps today's date.
    Returns None if the book is not on the user's list.
    """
    status = validate_status(status)
    started_at = as_date_string(started_at)
    finished_at = as_date_string(finished_at)
    existing = get_reading_list_entry(user_id, book_id, db_tables)
    if existing is None:
        return None

    changes: Dict[str, Any] = {'status': status, 'updated_at': utc_now()}
    if started_at is not None:
        changes['started_at'] = started_at
    if finished_at is not None:
        changes['finished_at'] = finished_at
    elif status == BookStatus.READ.value:
        changes['finished_at'] = today()

    with backend_errors("update reading list status"):
        updated = db_tables['user_books'].update(changes, existing.id)
    return _attach_book(updated, db_tables)


def update_reading_list_item(user_id: str, user_book_id: str, updates: Dict[str, Any], db_tables) -> Optional[UserBook]:
    """General update of one of the user's entries. Returns None if not found."""
    unknown = set(updates) - EDITABLE_ENTRY_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update reading list fields: {', '.join(sorted(unknown))}")

    changes = dict(updates)
    if 'status' in changes:
        changes['status'] = validate_status(changes['status'])
    for key in ('started_at', 'finished_at'):
        if changes.get(key) is not None:
            changes[key] = as_date_string(changes[key])
    if changes.get('current_page') is not None and changes['current_page'] < 0:
        raise ValidationError("current_page cannot be negative")

    with backend_errors("get reading list item"):
        rows = db_tables['user_books'](where="id = ? AND user_id = ?", where_args=[user_book_id, user_id], limit=1)
    if not rows:
        return None

    changes['updated_at'] = utc_now()
    with backend_errors("update reading list item"):
        updated = db_tables['user_books'].update(changes, user_book_id)
    return _attach_book(updated, db_tables)


def remove_from_reading_list(user_id: str, book_id: str, db_tables) -> bool:
    """Remove a book from a user's list. Returns False if it was not there."""
    if get_reading_list_entry(user_id, book_id, db_tables) is None:
        return False
    with backend_errors("remove from reading list"):
        db_tables['user_books'].delete_where("user_id = ? AND book_id = ?", [user_id, book_id])
    logger.info(f"Removed book {book_id} from reading list of {user_id}")
    return True


def get_user_reading_stats(user_id: str, db_tables) -> Dict[str, int]:
    """Count a user's entries per status."""
    stats = {status.value: 0 for status in BookStatus}
    table = db_tables['user_books']
    with backend_errors("get reading stats"):
        rows = db_tables['db'].q(
            f"SELECT status, COUNT(*) AS n FROM {table.name} WHERE user_id = ? GROUP BY status",
            [user_id]
        )
    for row in rows:
        if row['status'] in stats:
            stats[row['status']] = row['n']
    return stats
