"""
Column resolver — finds which literal column carries a logical field.

The same field has appeared under different names across export formats
(e.g. the SKU is "Sku" in the WPML export and "Artikel_Nummer_Produkt" in the
ERP export).  The resolver returns the first alias present in the row; it
never touches the value itself.

Public API:
    resolve_column(row, field_name) → str | None
    get_value(row, field_name, default) → raw cell value
    require_value(row, field_name, row_index) → raw cell value or MissingColumnError
"""

import logging

from config.column_aliases import LOGICAL_FIELD_ALIASES
from processing.errors import MissingColumnError
from utils.fuzzy_match import closest_column

logger = logging.getLogger(__name__)


def resolve_column(row: dict, field_name: str) -> str | None:
    """
    Return the first alias of *field_name* that is a key of *row*.

    Args:
        row: One table row (column name → scalar).
        field_name: Logical field name from LOGICAL_FIELD_ALIASES.

    Returns:
        The matching column name, or None when no alias is present.

    Raises:
        KeyError: *field_name* is not a known logical field.
    """
    for alias in LOGICAL_FIELD_ALIASES[field_name]:
        if alias in row:
            return alias
    return None


def get_value(row: dict, field_name: str, default: object = None) -> object:
    """Raw value of a logical field, or *default* when no alias is present."""
    column = resolve_column(row, field_name)
    if column is None:
        return default
    return row[column]


def require_value(row: dict, field_name: str, row_index: int) -> object:
    """
    Raw value of a mandatory logical field.

    Raises:
        MissingColumnError: none of the aliases is present.  The error lists
            every alias searched and, when a row column looks like a
            misspelling of one, names that column.
    """
    column = resolve_column(row, field_name)
    if column is not None:
        return row[column]

    aliases = LOGICAL_FIELD_ALIASES[field_name]
    suggestion, _ = closest_column(aliases, list(row.keys()))
    logger.error(
        f"Row {row_index}: no column for '{field_name}' (searched {aliases})"
    )
    raise MissingColumnError(row_index, field_name, aliases, suggestion)
