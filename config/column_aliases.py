"""
Column alias configuration.

Maps logical record fields to the literal column names they have carried
across the historical export formats (WooCommerce/WPML exports and the
older ERP Excel exports).  Aliases are ordered: the first one present in a
row wins.

Used by processing/column_resolver.py.
"""

# ---------------------------------------------------------------------------
# Logical field → ordered list of column aliases.
# ---------------------------------------------------------------------------
LOGICAL_FIELD_ALIASES: dict[str, list[str]] = {
    "id": ["ID", "sku", "Artikel_Nr"],
    "parent_id": ["Parent Product ID", "Produktgruppe_Shop"],
    "sku": ["Sku", "Artikel_Nummer_Produkt"],
    "language": ["WPML Language Code"],
    "translation_id": ["WPML Translation ID"],
    "name": ["Title", "Artikelname_neu"],
    "slug": ["Slug"],
    "description": ["Content"],
    "length": ["Length", "Länge"],
    "width": ["Width", "Breite"],
    "height": ["Height", "Höhe"],
    "assets": ["Image URL", "Artikel_Bilder_Code"],
    "up_sells": ["Up-Sells"],
    "cross_sells": ["Cross-Sells"],
    "price": ["Einzelpreis", "Price"],
    "minimum_order_quantity": [
        "Mindestbestellmenge",
        "_feuerschutz_min_purchase_qty",
    ],
    "unit": ["Einheit", "Produkt Einheit", "Unité"],
    "quantity_per_unit": ["Stückzahl pro Einheit"],
    "bulk_discounts": ["_feuerschutz_bulk_discount"],
    "categories": ["Thema"],
    "hierarchical_categories": ["Produktkategorien"],
    "reseller_discount_categories": ["_Rabattberechtigt"],
}

# Fields every row must carry.  Absence raises MissingColumnError.
MANDATORY_FIELDS: list[str] = ["id", "parent_id", "sku", "name", "price"]

# ---------------------------------------------------------------------------
# Column families recognised by prefix/suffix rather than by exact name.
# ---------------------------------------------------------------------------

# "VP Staffel 10" → price per unit when ordering at least 10 pieces
BULK_DISCOUNT_PREFIXES: list[str] = ["VP Staffel"]

# "Schilder_Rabattberechtigt" = "Ja" → reseller discount category "Schilder"
RESELLER_DISCOUNT_SUFFIX: str = "_Rabattberechtigt"

# Cell values that switch a flag column on (compared lowercased)
TRUTHY_MARKERS: set[str] = {"ja", "oui", "yes", "true", "1", "x"}
