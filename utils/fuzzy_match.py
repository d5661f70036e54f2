"""
Fuzzy string matching utilities.

Wraps the thefuzz library.  Used by the column resolver to point the operator
at a column that looks like a misspelt alias when a mandatory field is missing.
"""

import logging

from thefuzz import fuzz

logger = logging.getLogger(__name__)


def closest_column(
    aliases: list[str],
    columns: list[str],
    threshold: int = 80,
) -> tuple[str | None, int]:
    """
    Find the row column that best resembles any of *aliases*.

    Uses token_sort_ratio on lowercased names, so "Artikel Nummer Produkt"
    still scores high against "Artikel_Nummer_Produkt" once underscores are
    treated as spaces.

    Args:
        aliases: Known column names of one logical field.
        columns: Column names actually present in the row.
        threshold: Minimum score (0-100) to accept a match.

    Returns:
        (column_name, score) for the best column at or above threshold,
        or (None, 0) if nothing qualifies.
    """
    if not aliases or not columns:
        return None, 0

    best_column: str | None = None
    best_score: int = 0

    for column in columns:
        column_key = _comparable(column)
        for alias in aliases:
            score = fuzz.token_sort_ratio(column_key, _comparable(alias))
            if score > best_score:
                best_score = score
                best_column = column

    if best_score >= threshold:
        logger.debug(
            f"Closest column to {aliases} is '{best_column}' (score={best_score})"
        )
        return best_column, best_score

    return None, 0


def _comparable(name: str) -> str:
    return name.strip().lower().replace("_", " ")
