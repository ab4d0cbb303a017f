#!/usr/bin/env python3
"""
Utility script to check the readinglog database.
Run from project root: python scripts/check_db.py
"""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from readinglog.config import Settings
from readinglog.errors import BackendError
from readinglog.logging_config import setup_logging
from readinglog.models import setup_database, close_database
from readinglog.services import get_book_club_suggestions, get_current_book_club_book

TABLES = ['books', 'user_books', 'book_ratings', 'book_quotes', 'book_club_suggestions']


def check_database():
    """Print row counts, the current club book and the top suggestions."""
    settings = Settings.from_env()
    logger = setup_logging(settings.log_level, settings.use_json_logs)
    print(f"Connecting to database at {settings.db_path}...")
    try:
        db_tables = setup_database(settings.db_path)
    except BackendError as e:
        logger.error(f"Could not open database: {e}")
        return

    try:
        print("\n--- Row counts ---")
        for name in TABLES:
            print(f"{name}: {db_tables[name].count}")

        current = get_current_book_club_book(db_tables)
        print("\n--- Current club book ---")
        if current is None:
            print("No current book set.")
        else:
            title = current.book.title if current.book else current.book_id
            print(f"{title} (set by {current.set_by} at {current.set_at})")

        suggestions = get_book_club_suggestions(db_tables)
        print("\n--- Suggestions ---")
        if not suggestions:
            print("No suggestions yet.")
        for suggestion in sorted(suggestions, key=lambda s: s.vote_count, reverse=True)[:10]:
            title = suggestion.book.title if suggestion.book else suggestion.book_id
            print(f"{suggestion.vote_count:>3} votes  {title}")
        print("------------------\n")
    except BackendError as e:
        logger.error(f"An error occurred while checking the database: {e}")
    finally:
        close_database(db_tables)


if __name__ == "__main__":
    check_database()
