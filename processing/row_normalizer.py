"""
Row normalizer — turns one loosely-typed table row into a NormalizedRecord.

Handles the coercions the export formats need:
  - price as number, bare string or "<amount> CHF" / "CHF <amount>",
    stored as integer minor units
  - minimum order quantity, dimensions (absent stays None, not 0)
  - pipe-separated lists (assets, up-/cross-sells, categories)
  - hierarchical categories reduced to their leaf segment
  - bulk discounts from the JSON column or from the "VP Staffel <N>" columns
  - unit + quantity-per-unit merged into one unit label
  - option-group values from the known attribute columns

Mandatory fields (config.column_aliases.MANDATORY_FIELDS) that are missing
or malformed raise RecordValidationError subclasses naming the row and the
columns searched.  Missing columns are reported before malformed values.

Public API:
    normalize_row(row, row_index) → NormalizedRecord
    normalize_rows(rows) → list[NormalizedRecord]
"""

import json
import logging
import math
import re

from config.catalog import (
    CATEGORY_PATH_SEPARATOR,
    CURRENCY_MARKER,
    DEFAULT_LANGUAGE,
    LIST_SEPARATOR,
    MINOR_UNITS_PER_MAJOR,
    SUPPORTED_LANGUAGES,
    UNIT_QUANTITY_TEMPLATE,
)
from config.column_aliases import (
    BULK_DISCOUNT_PREFIXES,
    MANDATORY_FIELDS,
    RESELLER_DISCOUNT_SUFFIX,
    TRUTHY_MARKERS,
)
from config.option_groups import IMPORT_OPTION_GROUPS
from processing.column_resolver import get_value, require_value, resolve_column
from processing.errors import MalformedValueError
from processing.models import BulkDiscount, NormalizedRecord, OptionGroupCandidate
from utils.slugs import make_slug

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")
_TIER_QUANTITY = re.compile(r"^\d+$")


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def normalize_rows(rows: list[dict]) -> list[NormalizedRecord]:
    """Normalize every row, keeping source order.  Aborts on the first error."""
    records = [normalize_row(row, index) for index, row in enumerate(rows)]
    logger.info(f"Normalized {len(records)} rows")
    return records


def normalize_row(row: dict, row_index: int) -> NormalizedRecord:
    """
    Extract and type-coerce one row.

    Args:
        row: Column name → scalar, as produced by the table reader.
        row_index: Position of the row in the table (for error messages).

    Returns:
        NormalizedRecord with all fields populated.

    Raises:
        MissingColumnError: a mandatory field has no column in the row.
        MalformedValueError: a present value cannot be coerced.
    """
    for field_name in MANDATORY_FIELDS:
        require_value(row, field_name, row_index)

    row = _merge_unit_quantity(dict(row), row_index)

    record_id = _require_text(row, "id", row_index)
    parent_id = _parse_parent_id(require_value(row, "parent_id", row_index))
    sku = _require_text(row, "sku", row_index)
    name = _require_text(row, "name", row_index)
    price = _parse_price(
        require_value(row, "price", row_index),
        row_index,
        allow_blank=parent_id is None,
    )

    slug = _optional_text(get_value(row, "slug")) or make_slug(name)

    return NormalizedRecord(
        row_index=row_index,
        id=record_id,
        parent_id=parent_id,
        sku=sku,
        name=name,
        slug=slug,
        price=price,
        language_code=_parse_language(get_value(row, "language"), row_index),
        translation_id=_optional_text(get_value(row, "translation_id")) or None,
        description=_optional_text(get_value(row, "description")),
        minimum_order_quantity=_parse_minimum_order_quantity(
            get_value(row, "minimum_order_quantity"), row_index
        ),
        length=_parse_dimension(get_value(row, "length"), "length", row_index),
        width=_parse_dimension(get_value(row, "width"), "width", row_index),
        height=_parse_dimension(get_value(row, "height"), "height", row_index),
        assets=_split_list(get_value(row, "assets")),
        up_sells=_split_list(get_value(row, "up_sells")),
        cross_sells=_split_list(get_value(row, "cross_sells")),
        categories=_parse_categories(row),
        reseller_discount_categories=_parse_reseller_discounts(row),
        bulk_discounts=_parse_bulk_discounts(row, row_index),
        option_groups=_extract_option_groups(row),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Scalar coercion
# ═══════════════════════════════════════════════════════════════════════════

def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _as_text(value: object) -> str:
    """Cell value as trimmed text; whole floats lose their '.0'."""
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _optional_text(value: object) -> str:
    return _as_text(value)


def _require_text(row: dict, field_name: str, row_index: int) -> str:
    raw = require_value(row, field_name, row_index)
    text = _as_text(raw)
    if not text:
        raise MalformedValueError(row_index, field_name, raw, "value is empty")
    return text


def _parse_parent_id(raw: object) -> str | None:
    """Blank and "0" both mean: this row is a top-level product."""
    text = _as_text(raw)
    if text in ("", "0"):
        return None
    return text


def _parse_language(raw: object, row_index: int) -> str:
    text = _as_text(raw).lower()
    if not text:
        return DEFAULT_LANGUAGE
    if text not in SUPPORTED_LANGUAGES:
        raise MalformedValueError(
            row_index, "language", raw,
            f"supported languages are {SUPPORTED_LANGUAGES}",
        )
    return text


def _parse_price(raw: object, row_index: int, allow_blank: bool = False) -> int:
    """
    Parse a price into minor units.

    Accepts numbers, bare numeric strings and strings carrying the currency
    marker ("12.50 CHF", "CHF 12.50").  Parent product rows may leave the
    price blank (price 0); variants may not.
    """
    if _is_blank(raw) and allow_blank:
        return 0

    amount = _parse_amount(raw)
    if amount is None:
        raise MalformedValueError(row_index, "price", raw, "not a price")
    if amount < 0:
        raise MalformedValueError(row_index, "price", raw, "price is negative")
    return _to_minor_units(amount)


def _parse_amount(raw: object) -> float | None:
    """Numeric value of *raw*, stripping the currency marker; None if invalid."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return None if math.isnan(raw) else float(raw)
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    try:
        amount = float(text)
    except ValueError:
        if CURRENCY_MARKER not in text:
            return None
        try:
            amount = float(text.replace(CURRENCY_MARKER, "").strip())
        except ValueError:
            return None

    if math.isnan(amount) or math.isinf(amount):
        return None
    return amount


def _to_minor_units(amount: float) -> int:
    return int(round(amount * MINOR_UNITS_PER_MAJOR))


def _parse_minimum_order_quantity(raw: object, row_index: int) -> int:
    if _is_blank(raw):
        return 0

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if math.isnan(raw):
            raise MalformedValueError(row_index, "minimum_order_quantity", raw)
        quantity = int(raw)
    else:
        match = _LEADING_INTEGER.match(str(raw))
        if match is None:
            raise MalformedValueError(
                row_index, "minimum_order_quantity", raw, "not an integer"
            )
        quantity = int(match.group(1))

    if quantity < 0:
        raise MalformedValueError(
            row_index, "minimum_order_quantity", raw, "quantity is negative"
        )
    return quantity


def _parse_dimension(raw: object, field_name: str, row_index: int) -> float | None:
    """Absent or blank → None so "unset" stays distinguishable from 0."""
    if _is_blank(raw):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise MalformedValueError(row_index, field_name, raw, "not a number")
    if math.isnan(value) or math.isinf(value):
        raise MalformedValueError(row_index, field_name, raw, "not a finite number")
    return value


# ═══════════════════════════════════════════════════════════════════════════
# Lists
# ═══════════════════════════════════════════════════════════════════════════

def _split_list(raw: object) -> list[str]:
    text = _as_text(raw)
    if not text:
        return []
    return [part.strip() for part in text.split(LIST_SEPARATOR) if part.strip()]


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _parse_categories(row: dict) -> list[str]:
    """Flat categories plus the leaf of every "A > B > C" path."""
    flat = _split_list(get_value(row, "categories"))
    leaves = [
        path.split(CATEGORY_PATH_SEPARATOR)[-1].strip()
        for path in _split_list(get_value(row, "hierarchical_categories"))
    ]
    return _unique(flat + [leaf for leaf in leaves if leaf])


def _parse_reseller_discounts(row: dict) -> list[str]:
    """
    The pipe-separated reseller discount column, plus every
    "<Name>_Rabattberechtigt" flag column that is switched on.
    """
    categories = _split_list(get_value(row, "reseller_discount_categories"))

    for column, value in row.items():
        if column == RESELLER_DISCOUNT_SUFFIX or not column.endswith(RESELLER_DISCOUNT_SUFFIX):
            continue
        if _as_text(value).lower() in TRUTHY_MARKERS:
            categories.append(column[: -len(RESELLER_DISCOUNT_SUFFIX)].strip())

    return _unique([c for c in categories if c])


# ═══════════════════════════════════════════════════════════════════════════
# Bulk discounts
# ═══════════════════════════════════════════════════════════════════════════

def _parse_bulk_discounts(row: dict, row_index: int) -> list[BulkDiscount]:
    """
    Prefer the JSON column; otherwise collect the "VP Staffel <N>" tiers.
    Tiers with a non-positive quantity or price are skipped.
    """
    raw_json = get_value(row, "bulk_discounts")
    if not _is_blank(raw_json):
        discounts = _parse_bulk_discount_json(raw_json, row_index)
    else:
        discounts = _scan_bulk_discount_tiers(row)
    return sorted(discounts, key=lambda discount: discount.quantity)


def _parse_bulk_discount_json(raw: object, row_index: int) -> list[BulkDiscount]:
    try:
        entries = json.loads(str(raw))
    except json.JSONDecodeError as exc:
        raise MalformedValueError(row_index, "bulk_discounts", raw, str(exc))

    if not isinstance(entries, list):
        raise MalformedValueError(
            row_index, "bulk_discounts", raw, "expected a JSON array"
        )

    discounts: list[BulkDiscount] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise MalformedValueError(
                row_index, "bulk_discounts", raw, "expected objects in the array"
            )
        quantity = _first_present(entry, ["qty", "quantity"])
        unit_price = _first_present(entry, ["unitPrice", "ppu", "price"])
        discount = _make_tier(quantity, unit_price)
        if discount is not None:
            discounts.append(discount)
    return discounts


def _scan_bulk_discount_tiers(row: dict) -> list[BulkDiscount]:
    discounts: list[BulkDiscount] = []
    for column, value in row.items():
        for prefix in BULK_DISCOUNT_PREFIXES:
            if not column.startswith(prefix + " "):
                continue
            tier = column[len(prefix):].strip()
            quantity = int(tier) if _TIER_QUANTITY.match(tier) else None
            discount = _make_tier(quantity, value)
            if discount is None:
                logger.debug(f"Skipping bulk discount column '{column}' = {value!r}")
            else:
                discounts.append(discount)
    return discounts


def _make_tier(quantity: object, unit_price: object) -> BulkDiscount | None:
    """BulkDiscount for a positive quantity and a positive price, else None."""
    if _is_blank(quantity) or _is_blank(unit_price):
        return None
    try:
        quantity_value = float(quantity)
    except (TypeError, ValueError):
        return None
    amount = _parse_amount(unit_price)

    if amount is None or amount <= 0:
        return None
    if quantity_value <= 0 or not quantity_value.is_integer():
        return None
    return BulkDiscount(quantity=int(quantity_value), price=_to_minor_units(amount))


def _first_present(entry: dict, keys: list[str]) -> object:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


# ═══════════════════════════════════════════════════════════════════════════
# Option groups
# ═══════════════════════════════════════════════════════════════════════════

def _merge_unit_quantity(row: dict, row_index: int) -> dict:
    """
    "Einheit" = "Bogen" and "Stückzahl pro Einheit" = 10 become a single
    unit label "Bogen (10 STK)".
    """
    unit_column = resolve_column(row, "unit")
    quantity = get_value(row, "quantity_per_unit")
    if unit_column is None or _is_blank(row[unit_column]) or _is_blank(quantity):
        return row

    quantity_text = _as_text(quantity)
    if _parse_amount(quantity_text) is None:
        raise MalformedValueError(
            row_index, "quantity_per_unit", quantity, "not a number"
        )

    row[unit_column] = UNIT_QUANTITY_TEMPLATE.format(
        unit=_as_text(row[unit_column]), quantity=quantity_text
    )
    return row


def _extract_option_groups(row: dict) -> list[OptionGroupCandidate]:
    candidates: list[OptionGroupCandidate] = []
    for group in IMPORT_OPTION_GROUPS:
        for column in group["column_keys"]:
            if column in row and not _is_blank(row[column]):
                values = _split_list(row[column])
                if values:
                    candidates.append(OptionGroupCandidate(group["code"], values))
                break
    return candidates
