"""Catalog search: fetch, format, rank, truncate; plus a debounced searcher."""

import asyncio
import logging
from typing import List, Optional

from ..models.entities import SearchResult
from ..clients.books import format_book_for_app
from .ranking import sort_books_by_popularity

logger = logging.getLogger(__name__)

DEFAULT_FETCH_SIZE = 40
DEFAULT_RESULT_LIMIT = 20


async def search_catalog(catalog, query: str,
                         fetch_size: int = DEFAULT_FETCH_SIZE,
                         limit: int = DEFAULT_RESULT_LIMIT) -> List[SearchResult]:
    """Search the catalog and return the most popular results.

    More results than needed are fetched so the ranking has something to work
    with. Results without a real cover are dropped unless none have one.

    Raises:
        CatalogError: if the catalog request fails
    """
    if not query or not query.strip():
        return []

    response = await catalog.search_books(query, fetch_size, 'relevance')
    items = response.get('items') or []
    if not items:
        return []

    formatted = [format_book_for_app(item) for item in items]
    with_covers = [result for result in formatted if result.has_cover]

    ranked = sort_books_by_popularity(with_covers or formatted)
    logger.debug(f"Search '{query}': {len(items)} items, {len(with_covers)} with covers")
    return ranked[:limit]


class DebouncedSearch:
    """Runs only the latest search after a quiet period.

    Each ``submit`` cancels the previous search task, whether it is still
    waiting out the delay or already waiting on the catalog, so a superseded
    request never completes.
    """

    def __init__(self, catalog, delay: float = 0.5,
                 fetch_size: int = DEFAULT_FETCH_SIZE,
                 limit: int = DEFAULT_RESULT_LIMIT):
        self.catalog = catalog
        self.delay = delay
        self.fetch_size = fetch_size
        self.limit = limit
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self, query: str) -> List[SearchResult]:
        await asyncio.sleep(self.delay)
        return await search_catalog(self.catalog, query, self.fetch_size, self.limit)

    def submit(self, query: str) -> asyncio.Task:
        """Schedule a search for ``query``, cancelling the previous one."""
        self.cancel()
        self._task = asyncio.ensure_future(self._run(query))
        return self._task

    async def search(self, query: str) -> List[SearchResult]:
        """Submit and wait. Raises CancelledError if superseded by a newer query."""
        return await self.submit(query)

    def cancel(self):
        if self.pending:
            logger.debug("Cancelling superseded search")
            self._task.cancel()
        self._task = None

    async def aclose(self):
        """Cancel pending work and wait for it to unwind."""
        task = self._task if self.pending else None
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
