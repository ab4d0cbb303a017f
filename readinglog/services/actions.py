"""User-facing actions on a book reference.

Each action checks the session and its own input first, then reconciles the
book reference to an internal id, then performs one write. Any failure stops
the action before the write and comes back as an ``error`` ActionResult with a
message fit for an alert.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import ReadingLogError, ValidationError
from ..models.entities import BookStatus
from .book_club import get_current_book_club_book, set_current_book_club_book, suggest_book_for_club
from .books import get_book_by_id, find_book_by_google_id
from .identity import BookRefOrigin, is_internal_id, reconcile_book_id
from .quotes import add_book_quote, clean_page_number
from .ratings import set_book_rating, validate_rating
from .reading_list import add_to_reading_list, validate_status

logger = logging.getLogger(__name__)

SUCCESS = 'success'
INFO = 'info'
ERROR = 'error'


@dataclass
class ActionResult:
    """Outcome of an action, shaped like the alert the app shows."""
    kind: str
    title: str
    message: str
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.kind != ERROR


def _failure(error: ReadingLogError, action: str) -> ActionResult:
    if isinstance(error, ValidationError):
        logger.info(f"Rejected {action}: {error}")
    else:
        logger.error(f"Failed {action}: {error}")
    return ActionResult(ERROR, 'Error', error.user_message)


def _title(ctx, book_id: str, fallback: str = 'This book') -> str:
    book = get_book_by_id(book_id, ctx.db_tables)
    return book.title if book and book.title else fallback


async def add_book_to_reading_list(ctx, book_ref: str, status=BookStatus.WANT_TO_READ,
                                   origin: Optional[BookRefOrigin] = None) -> ActionResult:
    action = "adding to reading list"
    try:
        user_id = ctx.session.require_user_id("add books to your reading list")
        status = validate_status(status)
        book_id = await reconcile_book_id(book_ref, ctx.db_tables, ctx.catalog, origin)
        entry = add_to_reading_list(user_id, book_id, ctx.db_tables, status)
    except ReadingLogError as e:
        return _failure(e, action)

    # A repeat add updates the existing entry; None means it was removed between the insert and the update
    if entry is None:
        return ActionResult(INFO, 'Info', 'This book is already in your reading list.')
    title = _title(ctx, book_id)
    return ActionResult(SUCCESS, 'Success', f'"{title}" has been added to your reading list!', entry)


async def suggest_book(ctx, book_ref: str, origin: Optional[BookRefOrigin] = None) -> ActionResult:
    action = "suggesting book for club"
    try:
        user_id = ctx.session.require_user_id("suggest books for book club")
        book_id = await reconcile_book_id(book_ref, ctx.db_tables, ctx.catalog, origin)
        created = suggest_book_for_club(user_id, book_id, ctx.db_tables)
    except ReadingLogError as e:
        return _failure(e, action)

    if not created:
        return ActionResult(INFO, 'Info', 'This book has already been suggested.')
    title = _title(ctx, book_id)
    return ActionResult(SUCCESS, 'Success', f'"{title}" has been suggested for book club reading!', book_id)


async def set_current_book(ctx, book_ref: str, notes: Optional[str] = None,
                           origin: Optional[BookRefOrigin] = None) -> ActionResult:
    action = "setting current book"
    try:
        user_id = ctx.session.require_user_id("set the current book club book")
        book_id = await reconcile_book_id(book_ref, ctx.db_tables, ctx.catalog, origin)
        current = set_current_book_club_book(user_id, book_id, ctx.db_tables, notes=notes)
    except ReadingLogError as e:
        return _failure(e, action)

    title = _title(ctx, book_id)
    return ActionResult(SUCCESS, 'Success', f'"{title}" is now the current book club book!', current)


async def rate_book(ctx, book_ref: str, rating, review: Optional[str] = None,
                    origin: Optional[BookRefOrigin] = None) -> ActionResult:
    action = "rating book"
    try:
        user_id = ctx.session.require_user_id("rate books")
        value = validate_rating(rating)
        book_id = await reconcile_book_id(book_ref, ctx.db_tables, ctx.catalog, origin)
        saved = set_book_rating(user_id, book_id, value, ctx.db_tables, review=review)
    except ReadingLogError as e:
        return _failure(e, action)

    title = _title(ctx, book_id)
    return ActionResult(SUCCESS, 'Success', f'Your rating for "{title}" has been saved.', saved)


async def add_quote(ctx, book_ref: str, quote_text: str, page_number=None,
                    chapter: Optional[str] = None, notes: Optional[str] = None,
                    origin: Optional[BookRefOrigin] = None) -> ActionResult:
    action = "saving quote"
    try:
        user_id = ctx.session.require_user_id("save quotes")
        if not quote_text or not quote_text.strip():
            raise ValidationError("Quote text cannot be empty", user_message="Please enter the quote text.")
        page_number = clean_page_number(page_number)
        book_id = await reconcile_book_id(book_ref, ctx.db_tables, ctx.catalog, origin)
        quote = add_book_quote(user_id, book_id, quote_text, ctx.db_tables,
                               page_number=page_number, chapter=chapter, notes=notes)
    except ReadingLogError as e:
        return _failure(e, action)

    title = _title(ctx, book_id)
    return ActionResult(SUCCESS, 'Success', f'Quote saved for "{title}".', quote)


def is_current_book(ctx, book_ref: str) -> bool:
    """True if ``book_ref`` names the current club book.

    An external id that has never been stored cannot be the current book, so
    this never creates rows or calls the catalog.
    """
    current = get_current_book_club_book(ctx.db_tables)
    if current is None or not book_ref:
        return False
    if is_internal_id(book_ref):
        return current.book_id == book_ref.lower()
    book = find_book_by_google_id(book_ref, ctx.db_tables)
    return book is not None and current.book_id == book.id
