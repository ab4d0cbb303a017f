"""Google Books catalog client and volume mapping helpers."""

import re
import logging
from typing import Optional, List, Dict, Any
from urllib.parse import quote

import httpx

from ..config import DEFAULT_GOOGLE_BOOKS_URL, Settings, is_valid_api_key
from ..errors import CatalogError
from ..infrastructure.rate_limiter import RateLimiter
from ..models.entities import SearchResult

logger = logging.getLogger(__name__)

# Google Books rejects maxResults above 40
MAX_RESULTS_LIMIT = 40

PLACEHOLDER_COVER = "https://via.placeholder.com/150x225?text=No+Cover"

# Status codes that mean the API key was refused
AUTH_FAILURE_STATUSES = (400, 401, 403)

# Largest first; used when storing a book
COVER_PREFERENCE = ('extraLarge', 'large', 'medium', 'small', 'thumbnail', 'smallThumbnail')

# What the search list shows
DISPLAY_COVER_PREFERENCE = ('thumbnail', 'smallThumbnail')

_YEAR_RE = re.compile(r'^(\d{4})')


def _secure(url: str) -> str:
    return url.replace('http://', 'https://', 1) if url else url


def extract_isbn(identifiers: List[Dict]) -> Optional[str]:
    """Extract an ISBN from Google Books identifiers, preferring ISBN_13."""
    for identifier in identifiers or []:
        if identifier.get('type') == 'ISBN_13' and identifier.get('identifier'):
            return identifier['identifier']

    for identifier in identifiers or []:
        if identifier.get('type') == 'ISBN_10' and identifier.get('identifier'):
            return identifier['identifier']

    return None


def extract_year(published_date: Optional[str]) -> Optional[str]:
    """Return the 4-digit year from a date such as '2004-05-01', or None."""
    if not published_date:
        return None
    match = _YEAR_RE.match(published_date.strip())
    return match.group(1) if match else None


def best_cover_url(image_links: Optional[Dict[str, str]], preference=COVER_PREFERENCE) -> Optional[str]:
    """Pick the first available image in preference order, forced to https."""
    if not image_links:
        return None
    for size in preference:
        url = image_links.get(size)
        if url:
            return _secure(url)
    return None


def format_book_for_app(volume: Dict[str, Any]) -> SearchResult:
    """Format a catalog volume for display and ranking."""
    info = volume.get('volumeInfo') or {}
    average_rating = info.get('averageRating') or 0
    authors = info.get('authors') or []

    return SearchResult(
        id=volume.get('id', ''),
        title=info.get('title') or 'Unknown Title',
        author=', '.join(authors) or 'Unknown Author',
        year=(info.get('publishedDate') or '')[:4] or 'Unknown',
        cover=best_cover_url(info.get('imageLinks'), DISPLAY_COVER_PREFERENCE) or PLACEHOLDER_COVER,
        synopsis=info.get('description') or 'No description available.',
        rating=f"{average_rating:.1f}" if average_rating else '0.0',
        ratings_count=info.get('ratingsCount') or 0,
        average_rating=average_rating,
        categories=list(info.get('categories') or []),
        page_count=info.get('pageCount'),
        language=info.get('language'),
        preview_link=info.get('previewLink'),
        info_link=info.get('infoLink'),
    )


def format_book_for_database(volume: Dict[str, Any]) -> Dict[str, Any]:
    """Map a catalog volume to the fields of a Book row.

    Categories stay a list here; the book service encodes them on insert.
    """
    info = volume.get('volumeInfo') or {}
    authors = info.get('authors') or []

    return {
        'title': info.get('title') or 'Unknown Title',
        'author': ', '.join(authors) or None,
        'year': extract_year(info.get('publishedDate')),
        'cover_url': best_cover_url(info.get('imageLinks')),
        'synopsis': info.get('description') or None,
        'isbn': extract_isbn(info.get('industryIdentifiers')),
        'page_count': info.get('pageCount') or None,
        'language': info.get('language') or None,
        'categories': list(info.get('categories') or []) or None,
    }


class GoogleBooksClient:
    """Async client for the Google Books volumes API."""

    def __init__(self,
                 api_key: Optional[str] = None,
                 base_url: str = DEFAULT_GOOGLE_BOOKS_URL,
                 timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        """
        Args:
            api_key: Google Books key; used only when it looks valid
            base_url: Volumes endpoint
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
            rate_limiter: Token bucket shared by all requests of this client
        """
        self.google_books_url = base_url.rstrip('/')
        self.google_api_key = api_key or ''
        self.timeout = timeout
        self.transport = transport
        self.rate_limiter = rate_limiter or RateLimiter.per_minute(100)

        logger.debug(f"GoogleBooksClient initialized (keyed={self.has_valid_api_key})")

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "GoogleBooksClient":
        return cls(
            api_key=settings.google_books_api_key,
            base_url=settings.google_books_url,
            timeout=settings.google_books_timeout,
            transport=transport,
            rate_limiter=RateLimiter.per_minute(settings.google_books_rate_limit_per_minute),
        )

    @property
    def has_valid_api_key(self) -> bool:
        return is_valid_api_key(self.google_api_key)

    async def _send(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        await self.rate_limiter.acquire()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.get(url, params=params)

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        """GET with the API key when one is configured.

        If the keyed request is refused the same request is sent once more
        without the key.
        """
        if not self.has_valid_api_key:
            return await self._send(url, params)

        response = await self._send(url, {**params, 'key': self.google_api_key})
        if response.status_code in AUTH_FAILURE_STATUSES:
            logger.warning(f"Google Books refused keyed request ({response.status_code}), retrying without API key")
            response = await self._send(url, params)
        return response

    async def search_books(self, query: str, max_results: int = 20, order_by: str = 'relevance') -> Dict[str, Any]:
        """Free-text search. Returns the raw response body ({'totalItems': 0} for a blank query).

        Raises:
            CatalogError: if the catalog is unreachable or answers with an error
        """
        if not query or not query.strip():
            return {'totalItems': 0}

        params = {
            'q': query.strip(),
            'maxResults': max(1, min(max_results, MAX_RESULTS_LIMIT)),
        }
        if order_by:
            params['orderBy'] = order_by

        logger.debug(f"Searching Google Books for '{params['q']}' (maxResults={params['maxResults']})")
        try:
            response = await self._get(self.google_books_url, params)
        except httpx.HTTPError as e:
            logger.error(f"Google Books search failed: {e}")
            raise CatalogError(f"Google Books search failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Google Books API error: {response.status_code} {response.text[:200]}")
            raise CatalogError(f"Google Books API error: {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogError(f"Google Books returned invalid JSON: {e}") from e

        logger.debug(f"Google Books search returned {len(data.get('items') or [])} items")
        return data

    async def get_book_by_id(self, volume_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one volume by its catalog id. Returns None on any failure."""
        if not volume_id:
            return None

        url = f"{self.google_books_url}/{quote(volume_id, safe='')}"
        try:
            response = await self._get(url, {})
        except httpx.HTTPError as e:
            logger.error(f"Error fetching volume {volume_id}: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"Google Books API error {response.status_code} for volume {volume_id}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON for volume {volume_id}: {e}")
            return None

        if not isinstance(data, dict) or 'volumeInfo' not in data:
            logger.warning(f"Volume {volume_id} has no metadata")
            return None
        return data
