"""Application context: the objects every operation needs, with a lifecycle.

Instead of module-level globals, the database tables, catalog client, session
and theme live on one AppContext that the app creates at start-up and stops at
shutdown.
"""

import logging
from typing import Optional, Dict, Any

from .auth.session import SessionContext
from .clients.books import GoogleBooksClient
from .config import Settings
from .logging_config import setup_logging
from .models.database import setup_database, close_database
from .services.search import DebouncedSearch
from .theme import ThemeContext

logger = logging.getLogger(__name__)


class AppContext:
    """Holds settings, database tables, catalog client, session and theme."""

    def __init__(self,
                 settings: Optional[Settings] = None,
                 db_tables: Optional[Dict[str, Any]] = None,
                 catalog: Optional[GoogleBooksClient] = None,
                 session: Optional[SessionContext] = None,
                 theme: Optional[ThemeContext] = None,
                 configure_logging: bool = False):
        self.settings = settings or Settings.from_env()
        self.db_tables = db_tables
        self.catalog = catalog
        self.session = session or SessionContext()
        self.theme = theme or ThemeContext(self.settings.preferences_path)
        self.configure_logging = configure_logging
        self._owns_database = db_tables is None
        self._searcher: Optional[DebouncedSearch] = None
        self.started = False

    def start(self) -> "AppContext":
        """Open the database, build the catalog client and load the theme."""
        if self.started:
            return self
        if self.configure_logging:
            setup_logging(self.settings.log_level, self.settings.use_json_logs)
        if self.db_tables is None:
            self.db_tables = setup_database(self.settings.db_path)
        if self.catalog is None:
            self.catalog = GoogleBooksClient.from_settings(self.settings)
        self.theme.load()
        self.started = True
        logger.info("readinglog context started")
        return self

    def stop(self):
        """Persist the theme and close the database if this context opened it."""
        if not self.started:
            return
        if self._searcher is not None:
            self._searcher.cancel()
            self._searcher = None
        try:
            self.theme.save()
        except OSError as e:
            logger.warning(f"Could not save preferences to {self.theme.preferences_path}: {e}")
        finally:
            if self._owns_database and self.db_tables is not None:
                close_database(self.db_tables)
                self.db_tables = None
            self.started = False
        logger.info("readinglog context stopped")

    @property
    def searcher(self) -> DebouncedSearch:
        """Debounced search bound to this context's catalog."""
        if self._searcher is None:
            self._searcher = DebouncedSearch(
                self.catalog,
                delay=self.settings.search_debounce_seconds,
                fetch_size=self.settings.search_fetch_size,
                limit=self.settings.search_result_limit,
            )
        return self._searcher

    async def __aenter__(self) -> "AppContext":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if self._searcher is not None:
                await self._searcher.aclose()
        finally:
            self.stop()
