"""
readinglog API Clients Package.

This package provides the client for the external book catalog:
- GoogleBooksClient: Google Books volumes API
- mapping helpers from catalog volumes to search results and Book rows
"""

from .books import (
    GoogleBooksClient,
    format_book_for_app,
    format_book_for_database,
    extract_isbn,
    extract_year,
    best_cover_url,
    PLACEHOLDER_COVER,
)

__all__ = [
    'GoogleBooksClient',
    'format_book_for_app',
    'format_book_for_database',
    'extract_isbn',
    'extract_year',
    'best_cover_url',
    'PLACEHOLDER_COVER',
]
