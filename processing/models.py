"""
Record and prototype data classes shared by the import stages.

NormalizedRecord is the typed content of one row.  ProductPrototype and
ProductVariantPrototype form the catalog tree the builder produces; they are
not yet persisted anywhere.

All prices are integer minor units (Rappen).
"""

from dataclasses import dataclass, field

from processing.vocabulary import VocabularyGroup


# ═══════════════════════════════════════════════════════════════════════════
# Row level
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class BulkDiscount:
    """Unit price when ordering at least *quantity* pieces."""

    quantity: int
    price: int


@dataclass
class OptionGroupCandidate:
    """Option group code plus the raw values a row lists for it."""

    code: str
    values: list[str] = field(default_factory=list)


@dataclass
class NormalizedRecord:
    """Validated content of one table row."""

    row_index: int
    id: str
    parent_id: str | None
    sku: str
    name: str
    slug: str
    price: int
    language_code: str = "de"
    translation_id: str | None = None
    description: str = ""
    minimum_order_quantity: int = 0
    length: float | None = None
    width: float | None = None
    height: float | None = None
    assets: list[str] = field(default_factory=list)
    up_sells: list[str] = field(default_factory=list)
    cross_sells: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    reseller_discount_categories: list[str] = field(default_factory=list)
    bulk_discounts: list[BulkDiscount] = field(default_factory=list)
    option_groups: list[OptionGroupCandidate] = field(default_factory=list)

    @property
    def is_variant(self) -> bool:
        return self.parent_id is not None


# ═══════════════════════════════════════════════════════════════════════════
# Catalog tree
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ProductTranslation:
    language_code: str
    name: str
    slug: str = ""
    description: str = ""


@dataclass
class ProductVariantPrototype:
    sku: str
    price: int
    parent_id: str | None = None
    translation_id: str | None = None
    previous_ids: list[str] = field(default_factory=list)
    translations: list[ProductTranslation] = field(default_factory=list)
    minimum_order_quantity: int = 0
    bulk_discounts: list[BulkDiscount] = field(default_factory=list)
    facet_value_codes: list[str] = field(default_factory=list)
    option_codes: list[tuple[str, str]] = field(default_factory=list)
    length: float | None = None
    width: float | None = None
    height: float | None = None
    assets: list[str] = field(default_factory=list)

    def option_code_in(self, group_code: str) -> str | None:
        for option_group_code, option_code in self.option_codes:
            if option_group_code == group_code:
                return option_code
        return None


@dataclass
class ProductPrototype:
    sku: str
    translation_id: str | None = None
    previous_ids: list[str] = field(default_factory=list)
    translations: list[ProductTranslation] = field(default_factory=list)
    length: float | None = None
    width: float | None = None
    height: float | None = None
    assets: list[str] = field(default_factory=list)
    up_sells: list[str] = field(default_factory=list)
    cross_sells: list[str] = field(default_factory=list)
    option_groups: list[VocabularyGroup] = field(default_factory=list)
    facet_value_codes: list[str] = field(default_factory=list)
    children: list[ProductVariantPrototype] = field(default_factory=list)

    def name_in(self, language_code: str) -> str | None:
        for translation in self.translations:
            if translation.language_code == language_code:
                return translation.name
        return None


@dataclass
class CatalogResult:
    """Output of one import run, handed to the remote sync."""

    products: list[ProductPrototype] = field(default_factory=list)
    facets: list[VocabularyGroup] = field(default_factory=list)
    option_groups: list[VocabularyGroup] = field(default_factory=list)
