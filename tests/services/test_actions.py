"""
Tests for the user-facing book actions.

Each action is checked for: refusal without a session (before any catalog
call), reconciliation of external ids, and no write when reconciliation or
validation fails.
"""

import pytest
from unittest.mock import AsyncMock

from readinglog.services import actions
from readinglog.services.identity import BookRefOrigin, is_internal_id

EXTERNAL_ID = "zG3-somecode"
MISSING_BOOK_ID = "99999999-9999-9999-9999-999999999999"


def _row_counts(db_tables):
    return {key: db_tables[key].count for key in
            ['books', 'user_books', 'book_ratings', 'book_quotes', 'book_club_suggestions', 'current_book_club_book']}


class TestSignedOut:
    """Every write action needs a signed-in user."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call, message", [
        (lambda ctx: actions.add_book_to_reading_list(ctx, EXTERNAL_ID),
         "Please sign in to add books to your reading list"),
        (lambda ctx: actions.suggest_book(ctx, EXTERNAL_ID), "Please sign in to suggest books for book club"),
        (lambda ctx: actions.set_current_book(ctx, EXTERNAL_ID), "Please sign in to set the current book club book"),
        (lambda ctx: actions.rate_book(ctx, EXTERNAL_ID, 4), "Please sign in to rate books"),
        (lambda ctx: actions.add_quote(ctx, EXTERNAL_ID, "A quote"), "Please sign in to save quotes"),
    ])
    async def test_refused_before_network(self, signed_out_ctx, call, message):
        result = await call(signed_out_ctx)

        assert result.kind == actions.ERROR
        assert not result.ok
        assert result.message == message
        signed_out_ctx.catalog.get_book_by_id.assert_not_awaited()
        assert all(count == 0 for count in _row_counts(signed_out_ctx.db_tables).values())


class TestAddToReadingList:
    """Tests for add_book_to_reading_list."""

    @pytest.mark.asyncio
    async def test_external_id_is_reconciled(self, app_ctx):
        result = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID)

        assert result.kind == actions.SUCCESS
        assert result.message == '"A Wizard of Earthsea" has been added to your reading list!'
        assert is_internal_id(result.value.book_id)
        assert result.value.user_id == app_ctx.session.user_id
        assert app_ctx.db_tables['books'].count == 1

    @pytest.mark.asyncio
    async def test_reconcile_failure_writes_nothing(self, app_ctx):
        app_ctx.catalog.get_book_by_id = AsyncMock(return_value=None)

        result = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID)

        assert result.kind == actions.ERROR
        assert result.message == "Could not add book to database. Please try again."
        assert all(count == 0 for count in _row_counts(app_ctx.db_tables).values())

    @pytest.mark.asyncio
    async def test_unknown_internal_id(self, app_ctx):
        result = await actions.add_book_to_reading_list(app_ctx, MISSING_BOOK_ID)

        assert result.kind == actions.ERROR
        assert result.message == "That book could not be found."
        app_ctx.catalog.get_book_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stored_entry_with_external_id(self, app_ctx):
        result = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID, origin=BookRefOrigin.STORED_ENTRY)

        assert result.kind == actions.ERROR
        app_ctx.catalog.get_book_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repeat_add_is_success(self, app_ctx):
        first = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID)
        second = await actions.add_book_to_reading_list(app_ctx, first.value.book_id, status='reading')

        assert second.kind == actions.SUCCESS
        assert second.value.id == first.value.id
        assert second.value.status == 'reading'

    @pytest.mark.asyncio
    async def test_entry_removed_during_add_is_info(self, app_ctx, monkeypatch):
        monkeypatch.setattr(actions, 'add_to_reading_list', lambda *args, **kwargs: None)

        result = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID)

        assert result.kind == actions.INFO
        assert result.message == 'This book is already in your reading list.'

    @pytest.mark.asyncio
    async def test_invalid_status(self, app_ctx):
        result = await actions.add_book_to_reading_list(app_ctx, EXTERNAL_ID, status='someday')

        assert result.kind == actions.ERROR
        app_ctx.catalog.get_book_by_id.assert_not_awaited()


class TestSuggestBook:
    """Tests for suggest_book."""

    @pytest.mark.asyncio
    async def test_second_suggestion_is_info(self, app_ctx):
        first = await actions.suggest_book(app_ctx, EXTERNAL_ID)
        second = await actions.suggest_book(app_ctx, EXTERNAL_ID)

        assert first.kind == actions.SUCCESS
        assert first.message == '"A Wizard of Earthsea" has been suggested for book club reading!'
        assert second.kind == actions.INFO
        assert second.ok
        assert second.message == 'This book has already been suggested.'
        assert app_ctx.db_tables['book_club_suggestions'].count == 1
        app_ctx.catalog.get_book_by_id.assert_awaited_once()


class TestCurrentBook:
    """Tests for set_current_book and is_current_book."""

    @pytest.mark.asyncio
    async def test_set_and_check(self, app_ctx):
        result = await actions.set_current_book(app_ctx, EXTERNAL_ID, notes="Discuss on Friday")

        assert result.kind == actions.SUCCESS
        assert result.value.notes == "Discuss on Friday"
        assert actions.is_current_book(app_ctx, EXTERNAL_ID)
        assert actions.is_current_book(app_ctx, result.value.book_id)
        assert actions.is_current_book(app_ctx, result.value.book_id.upper())

    @pytest.mark.asyncio
    async def test_unknown_external_id_is_not_current(self, app_ctx):
        await actions.set_current_book(app_ctx, EXTERNAL_ID)
        app_ctx.catalog.get_book_by_id.reset_mock()

        assert not actions.is_current_book(app_ctx, "never-seen")
        assert app_ctx.db_tables['books'].count == 1
        app_ctx.catalog.get_book_by_id.assert_not_awaited()

    def test_nothing_current(self, app_ctx):
        assert not actions.is_current_book(app_ctx, EXTERNAL_ID)
        assert not actions.is_current_book(app_ctx, "")


class TestRateBook:
    """Tests for rate_book."""

    @pytest.mark.asyncio
    async def test_rate(self, app_ctx):
        result = await actions.rate_book(app_ctx, EXTERNAL_ID, 4.5, review="Timeless")

        assert result.kind == actions.SUCCESS
        assert result.value.rating == 4.5
        assert result.value.review == "Timeless"

    @pytest.mark.asyncio
    async def test_invalid_rating_checked_before_network(self, app_ctx):
        result = await actions.rate_book(app_ctx, EXTERNAL_ID, 7)

        assert result.kind == actions.ERROR
        app_ctx.catalog.get_book_by_id.assert_not_awaited()
        assert app_ctx.db_tables['books'].count == 0


class TestAddQuote:
    """Tests for add_quote."""

    @pytest.mark.asyncio
    async def test_add(self, app_ctx):
        result = await actions.add_quote(app_ctx, EXTERNAL_ID, "To light a candle is to cast a shadow.",
                                         page_number="44", chapter="3")

        assert result.kind == actions.SUCCESS
        assert result.value.page_number == 44
        assert result.value.chapter == "3"

    @pytest.mark.asyncio
    async def test_empty_quote_checked_before_network(self, app_ctx):
        result = await actions.add_quote(app_ctx, EXTERNAL_ID, "   ")

        assert result.kind == actions.ERROR
        assert result.message == "Please enter the quote text."
        app_ctx.catalog.get_book_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_page_checked_before_network(self, app_ctx):
        result = await actions.add_quote(app_ctx, EXTERNAL_ID, "Words", page_number="x")

        assert result.kind == actions.ERROR
        app_ctx.catalog.get_book_by_id.assert_not_awaited()
