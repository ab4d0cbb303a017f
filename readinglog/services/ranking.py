"""Popularity ranking for catalog search results.

Rated results (at least one rating and a non-zero average) always come first.
Among rated results the score is ``rating² × count + 2 × count``; when two
scores are within ``CLOSE_SCORE_MARGIN`` of each other the one with more
ratings wins. Unrated results keep their input order.
"""

from functools import cmp_to_key
from typing import Iterable, List, TypeVar

CLOSE_SCORE_MARGIN = 5

T = TypeVar('T')


def has_ratings(result) -> bool:
    return result.ratings_count > 0 and result.average_rating > 0


def popularity_score(average_rating: float, ratings_count: int) -> float:
    """Score for a rated result. Inputs are not range-checked."""
    return (average_rating ** 2 * ratings_count) + (ratings_count * 2)


def compare_popularity(a, b) -> float:
    """Comparator: negative if ``a`` sorts before ``b``."""
    a_rated = has_ratings(a)
    b_rated = has_ratings(b)

    if not a_rated and not b_rated:
        return 0
    if not a_rated:
        return 1
    if not b_rated:
        return -1

    score_a = popularity_score(a.average_rating, a.ratings_count)
    score_b = popularity_score(b.average_rating, b.ratings_count)

    if abs(score_a - score_b) < CLOSE_SCORE_MARGIN:
        return b.ratings_count - a.ratings_count

    return score_b - score_a


def sort_books_by_popularity(results: Iterable[T]) -> List[T]:
    """Return a new list ordered from most to least popular.

    ``sorted`` is stable, so entries that compare equal keep their input order.
    """
    return sorted(results, key=cmp_to_key(compare_popularity))
