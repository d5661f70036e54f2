"""
Catalog-wide constants: languages, well-known facets, price convention and
the separators used inside list-valued cells.
"""

# Languages the shop is translated into.  Rows without a language code are
# German.
SUPPORTED_LANGUAGES: list[str] = ["de", "fr"]
DEFAULT_LANGUAGE: str = "de"

# Languages every facet and option group must be translated into before the
# catalog may be synced (options only need the default language).
REQUIRED_GROUP_LANGUAGES: list[str] = ["de", "fr"]
REQUIRED_VALUE_LANGUAGES: list[str] = ["de"]

# Facets that must already exist in the vocabulary seed.
CATEGORY_FACET_CODE: str = "category"
RESELLER_DISCOUNT_FACET_CODE: str = "reseller-discount"
REQUIRED_FACET_CODES: list[str] = [
    CATEGORY_FACET_CODE,
    RESELLER_DISCOUNT_FACET_CODE,
]

# All prices are stored as integer minor units (Rappen).
CURRENCY_MARKER: str = "CHF"
MINOR_UNITS_PER_MAJOR: int = 100

# Separators inside list-valued cells
LIST_SEPARATOR: str = "|"
CATEGORY_PATH_SEPARATOR: str = ">"

# "Bogen" + 10 pieces per unit → "Bogen (10 STK)"
UNIT_QUANTITY_TEMPLATE: str = "{unit} ({quantity} STK)"
