"""
Shared pytest fixtures for readinglog tests.

This module provides test fixtures for:
- In-memory SQLite database with all tables and unique indexes
- A fake Google Books catalog (AsyncMock) and an httpx MockTransport helper
- Session and application contexts
- Test data factories
"""

import pytest
import os
import sys
from unittest.mock import MagicMock, AsyncMock
from typing import Dict, Any, Optional, List

import httpx

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

TEST_USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_tables():
    """
    Create an in-memory SQLite database with all tables.

    This fixture provides a fresh database for each test, ensuring
    test isolation.
    """
    from readinglog.models import setup_database, close_database

    tables = setup_database(memory=True)

    yield tables

    close_database(tables)


@pytest.fixture
def db_with_book(db_tables):
    """Database with a single stored book."""
    from readinglog.services.books import create_book

    book = create_book(
        {'title': 'The Left Hand of Darkness', 'author': 'Ursula K. Le Guin', 'year': '1969'},
        db_tables,
        google_books_id='lhod123',
    )
    return db_tables, book


@pytest.fixture
def db_with_books(db_tables):
    """Database with three stored books."""
    from readinglog.services.books import create_book

    books = [
        create_book({'title': f'Test Book {i + 1}', 'author': f'Test Author {i + 1}'},
                    db_tables, google_books_id=f'vol{i + 1}')
        for i in range(3)
    ]
    return db_tables, books


# ============================================================================
# Test Data Factories
# ============================================================================

class TestDataFactory:
    """Factory for creating test data objects."""

    @staticmethod
    def create_volume(
        volume_id: str = "zG3-somecode",
        title: str = "A Wizard of Earthsea",
        authors: Optional[List[str]] = None,
        average_rating: Optional[float] = None,
        ratings_count: Optional[int] = None,
        image_links: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """Create a raw Google Books volume as the API returns it."""
        info: Dict[str, Any] = {
            'title': title,
            'authors': authors if authors is not None else ['Ursula K. Le Guin'],
            'publishedDate': kwargs.get('published_date', '1968-11-01'),
            'description': kwargs.get('description', 'A young wizard learns the cost of power.'),
            'industryIdentifiers': kwargs.get('identifiers', [
                {'type': 'ISBN_10', 'identifier': '0000000000'},
                {'type': 'ISBN_13', 'identifier': '9780000000002'},
            ]),
            'pageCount': kwargs.get('page_count', 183),
            'language': kwargs.get('language', 'en'),
            'categories': kwargs.get('categories', ['Fiction']),
        }
        if image_links is None:
            image_links = {
                'smallThumbnail': 'http://books.example.com/small.jpg',
                'thumbnail': 'http://books.example.com/thumb.jpg',
            }
        if image_links:
            info['imageLinks'] = image_links
        if average_rating is not None:
            info['averageRating'] = average_rating
        if ratings_count is not None:
            info['ratingsCount'] = ratings_count
        return {'id': volume_id, 'volumeInfo': info}

    @staticmethod
    def create_search_result(result_id: str, average_rating: float = 0.0, ratings_count: int = 0, **kwargs):
        """Create a formatted search result for ranking tests."""
        from readinglog.models import SearchResult

        return SearchResult(
            id=result_id,
            title=kwargs.get('title', f"Book {result_id}"),
            author=kwargs.get('author', 'Test Author'),
            year=kwargs.get('year', '2001'),
            cover=kwargs.get('cover', f"https://books.example.com/{result_id}.jpg"),
            synopsis=kwargs.get('synopsis', 'No description available.'),
            rating=f"{average_rating:.1f}",
            ratings_count=ratings_count,
            average_rating=average_rating,
        )


@pytest.fixture
def factory():
    """Provide access to the test data factory."""
    return TestDataFactory()


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def mock_catalog(factory):
    """Fake GoogleBooksClient for testing without real API calls."""
    catalog = MagicMock()
    catalog.get_book_by_id = AsyncMock(side_effect=lambda volume_id: factory.create_volume(volume_id=volume_id))
    catalog.search_books = AsyncMock(return_value={'totalItems': 0, 'items': []})
    return catalog


@pytest.fixture
def make_catalog_client():
    """
    Build a real GoogleBooksClient whose HTTP traffic goes to ``handler``.

    Returns a function taking the handler plus client kwargs; every request
    seen by the transport is appended to ``client.requests``.
    """
    from readinglog.clients.books import GoogleBooksClient
    from readinglog.infrastructure.rate_limiter import RateLimiter

    def _make(handler, **kwargs):
        requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        kwargs.setdefault('rate_limiter', RateLimiter(1000, 1000))
        client = GoogleBooksClient(transport=httpx.MockTransport(_record), **kwargs)
        client.requests = requests
        return client

    return _make


# ============================================================================
# Session / Context Fixtures
# ============================================================================

@pytest.fixture
def signed_out_session():
    from readinglog.auth import SessionContext
    return SessionContext()


@pytest.fixture
def signed_in_session():
    from readinglog.auth import SessionContext
    session = SessionContext()
    session.sign_in(TEST_USER_ID, access_token="mock_access_token", email="alice@example.com")
    return session


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at temporary paths, with no API key."""
    from readinglog.config import Settings
    return Settings(
        db_path=str(tmp_path / "readinglog.db"),
        preferences_path=str(tmp_path / "preferences.json"),
        search_debounce_seconds=0.01,
    )


@pytest.fixture
def app_ctx(test_settings, db_tables, mock_catalog, signed_in_session):
    """Started AppContext with a signed-in user, in-memory db and fake catalog."""
    from readinglog.context import AppContext

    ctx = AppContext(settings=test_settings, db_tables=db_tables, catalog=mock_catalog, session=signed_in_session)
    ctx.start()
    yield ctx
    ctx.stop()


@pytest.fixture
def signed_out_ctx(test_settings, db_tables, mock_catalog, signed_out_session):
    """Started AppContext with nobody signed in."""
    from readinglog.context import AppContext

    ctx = AppContext(settings=test_settings, db_tables=db_tables, catalog=mock_catalog, session=signed_out_session)
    ctx.start()
    yield ctx
    ctx.stop()
