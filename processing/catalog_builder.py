"""
Catalog builder — folds normalized records into products with variants.

Runs two passes over the records, strictly in source order:

  1. Fold: every record either becomes a new product/variant prototype or,
     when it is another language of an entity already seen (same
     translation id, or same SKU for untranslated products), adds a
     translation to it.  Option values and facet labels are resolved
     against the run's vocabulary; an earlier translation's choices are
     passed as suggestions so the operator is only asked when the context
     does not settle the match.
  2. Attach: every variant is attached to the product whose previous ids
     contain its parent id.  Facet values shared by all children stay on
     the product, diverging ones move down to the children.  Variants
     whose parent never appeared become the only child of a synthesized
     product.

Row order matters: earlier rows decide which vocabulary entries exist when
later rows are matched.

Public API:
    table_to_catalog(rows, context) → CatalogResult
    build_catalog(records, context) → CatalogResult
"""

import logging
from dataclasses import dataclass, field

from config.catalog import CATEGORY_FACET_CODE, RESELLER_DISCOUNT_FACET_CODE
from processing.errors import (
    InconsistentTranslationError,
    MalformedValueError,
    MissingOptionError,
)
from processing.models import (
    CatalogResult,
    NormalizedRecord,
    ProductPrototype,
    ProductTranslation,
    ProductVariantPrototype,
)
from processing.row_normalizer import normalize_rows
from processing.variant_compatibility import assert_unique_option_sets
from processing.vocabulary import ImportContext, VocabularyGroup, VocabularyItem
from processing.vocabulary_matcher import find_or_create

logger = logging.getLogger(__name__)

# Facets fed from record fields, in resolution order
_FACET_SOURCES: list[tuple[str, str]] = [
    (CATEGORY_FACET_CODE, "categories"),
    (RESELLER_DISCOUNT_FACET_CODE, "reseller_discount_categories"),
]


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class _FoldState:
    """Accumulators of the first pass."""

    products: list[ProductPrototype] = field(default_factory=list)
    variants: list[ProductVariantPrototype] = field(default_factory=list)
    products_by_key: dict[str, ProductPrototype] = field(default_factory=dict)
    variants_by_key: dict[str, ProductVariantPrototype] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def table_to_catalog(rows: list[dict], context: ImportContext) -> CatalogResult:
    """Normalize *rows* and build the catalog tree from them."""
    return build_catalog(normalize_rows(rows), context)


def build_catalog(
    records: list[NormalizedRecord],
    context: ImportContext,
) -> CatalogResult:
    """
    Build the product tree from normalized records.

    Args:
        records: Records in source order.
        context: Vocabulary of this run; facets and option groups are
            extended in place.

    Returns:
        CatalogResult with the products and the (mutated) vocabulary.

    Raises:
        InconsistentTranslationError: translations of one variant disagree
            on their options.
        MissingOptionError: a variant lacks an option its siblings declare.
        AmbiguousDuplicateError: two variants share all options.
    """
    state = _FoldState()

    for record in records:
        if record.is_variant:
            _fold_variant(state, record, context)
        else:
            _fold_product(state, record, context)

    logger.info(
        f"Folded {len(records)} records into {len(state.products)} products "
        f"and {len(state.variants)} variants"
    )

    products = _attach_variants(state.products, state.variants, context)

    for product in products:
        assert_unique_option_sets(product)
        if not product.children:
            logger.warning(f"Product {product.sku} has no variants")

    logger.info(f"Catalog built: {len(products)} products")

    return CatalogResult(
        products=products,
        facets=context.facets,
        option_groups=context.option_groups,
    )


# ═══════════════════════════════════════════════════════════════════════════
# First pass: products
# ═══════════════════════════════════════════════════════════════════════════

def _product_key(record: NormalizedRecord) -> str:
    if record.translation_id:
        return f"translation:{record.translation_id}"
    return f"sku:{record.sku}"


def _fold_product(state: _FoldState, record: NormalizedRecord, context: ImportContext) -> None:
    key = _product_key(record)
    existing = state.products_by_key.get(key)

    if existing is None:
        product = ProductPrototype(
            sku=record.sku,
            translation_id=record.translation_id,
            previous_ids=[record.id],
            translations=[_translation_of(record)],
            length=record.length,
            width=record.width,
            height=record.height,
            assets=list(record.assets),
            up_sells=list(record.up_sells),
            cross_sells=list(record.cross_sells),
            facet_value_codes=_resolve_facet_values(record, context, None),
        )
        state.products.append(product)
        state.products_by_key[key] = product
        logger.debug(f"Row {record.row_index}: new product {record.sku}")
        return

    _add_previous_id(existing.previous_ids, record.id)
    if existing.name_in(record.language_code) is not None:
        if record.translation_id:
            raise InconsistentTranslationError(
                f"Row {record.row_index}: product {record.sku} already has a "
                f"'{record.language_code}' translation (translation id "
                f"{record.translation_id})"
            )
        logger.warning(
            f"Row {record.row_index}: duplicate product row for {record.sku}, "
            f"merged into the first one"
        )
        return

    existing.translations.append(_translation_of(record))
    existing.facet_value_codes = _merge_codes(
        existing.facet_value_codes,
        _resolve_facet_values(record, context, existing.facet_value_codes),
    )
    _fill_missing_fields(existing, record)
    logger.debug(
        f"Row {record.row_index}: '{record.language_code}' translation of "
        f"product {existing.sku}"
    )


# ═══════════════════════════════════════════════════════════════════════════
# First pass: variants
# ═══════════════════════════════════════════════════════════════════════════

def _variant_key(record: NormalizedRecord) -> str:
    if record.translation_id:
        return f"translation:{record.translation_id}"
    return f"id:{record.parent_id}:{record.id}"


def _fold_variant(state: _FoldState, record: NormalizedRecord, context: ImportContext) -> None:
    key = _variant_key(record)
    existing = state.variants_by_key.get(key)

    if existing is None:
        variant = ProductVariantPrototype(
            sku=record.sku,
            price=record.price,
            parent_id=record.parent_id,
            translation_id=record.translation_id,
            previous_ids=[record.id],
            translations=[_translation_of(record)],
            minimum_order_quantity=record.minimum_order_quantity,
            bulk_discounts=list(record.bulk_discounts),
            facet_value_codes=_resolve_facet_values(record, context, None),
            option_codes=_resolve_new_options(record, context),
            length=record.length,
            width=record.width,
            height=record.height,
            assets=list(record.assets),
        )
        state.variants.append(variant)
        state.variants_by_key[key] = variant
        logger.debug(f"Row {record.row_index}: new variant {record.sku}")
        return

    if any(t.language_code == record.language_code for t in existing.translations):
        raise InconsistentTranslationError(
            f"Row {record.row_index}: variant {existing.sku} already has a "
            f"'{record.language_code}' translation (translation id "
            f"{record.translation_id})"
        )

    _add_previous_id(existing.previous_ids, record.id)
    existing.translations.append(_translation_of(record))
    existing.option_codes = _align_translated_options(existing, record, context)
    existing.facet_value_codes = _merge_codes(
        existing.facet_value_codes,
        _resolve_facet_values(record, context, existing.facet_value_codes),
    )
    logger.debug(
        f"Row {record.row_index}: '{record.language_code}' translation of "
        f"variant {existing.sku}"
    )


def _resolve_new_options(
    record: NormalizedRecord,
    context: ImportContext,
) -> list[tuple[str, str]]:
    """One (group code, option code) pair per option-group column of the row."""
    option_codes: list[tuple[str, str]] = []
    for candidate in record.option_groups:
        value = _single_value(record, candidate.code, candidate.values)
        group = context.option_group(candidate.code)
        option = find_or_create(
            group, value, record.language_code, None, context.disambiguator
        )
        option_codes.append((group.code, option.code))
    return option_codes


def _align_translated_options(
    variant: ProductVariantPrototype,
    record: NormalizedRecord,
    context: ImportContext,
) -> list[tuple[str, str]]:
    """
    Match a translation's option values onto the options the earlier
    translation chose.

    A translation may omit a group only if that group has a single option,
    which is then shared across languages.

    Raises:
        InconsistentTranslationError: the translation names another group
            set, or its value resolves to a different option.
    """
    candidates = {candidate.code: candidate for candidate in record.option_groups}
    earlier_groups = [group_code for group_code, _ in variant.option_codes]

    extra_groups = [code for code in candidates if code not in earlier_groups]
    if extra_groups:
        raise InconsistentTranslationError(
            f"Row {record.row_index}: variant {variant.sku} has option groups "
            f"{extra_groups} in '{record.language_code}' that earlier "
            f"translations do not have"
        )

    aligned: list[tuple[str, str]] = []
    for group_code, option_code in list(variant.option_codes):
        group = context.option_group(group_code)
        earlier_option = group.find_item(option_code)
        candidate = candidates.get(group_code)

        if candidate is None:
            if len(group.items) != 1:
                raise InconsistentTranslationError(
                    f"Row {record.row_index}: variant {variant.sku} has no "
                    f"value for option group '{group_code}' in "
                    f"'{record.language_code}'"
                )
            aligned.append((group_code, option_code))
            continue

        value = _single_value(record, group_code, candidate.values)
        suggestions = [earlier_option] if earlier_option is not None else None
        option = find_or_create(
            group, value, record.language_code, suggestions, context.disambiguator
        )
        if option.code != option_code:
            raise InconsistentTranslationError(
                f"Row {record.row_index}: '{value}' ({record.language_code}) of "
                f"variant {variant.sku} resolves to option '{option.code}' but "
                f"the earlier translation uses '{option_code}' in '{group_code}'"
            )
        aligned.append((group_code, option_code))

    return aligned


def _single_value(record: NormalizedRecord, group_code: str, values: list[str]) -> str:
    if len(values) != 1:
        raise MalformedValueError(
            record.row_index, group_code, " | ".join(values),
            "a variant selects exactly one option per group",
        )
    return values[0]


# ═══════════════════════════════════════════════════════════════════════════
# Second pass: attaching variants
# ═══════════════════════════════════════════════════════════════════════════

def _attach_variants(
    products: list[ProductPrototype],
    variants: list[ProductVariantPrototype],
    context: ImportContext,
) -> list[ProductPrototype]:
    result = list(products)
    synthesized = 0

    for variant in variants:
        parent = _find_parent(result, variant.parent_id)
        if parent is None:
            result.append(_promote_orphan(variant, context))
            synthesized += 1
        else:
            _attach(parent, variant, context)

    if synthesized:
        logger.info(f"Synthesized {synthesized} parent products for orphan variants")
    return result


def _find_parent(products: list[ProductPrototype], parent_id: str | None) -> ProductPrototype | None:
    for product in products:
        if parent_id in product.previous_ids:
            return product
    return None


def _attach(
    parent: ProductPrototype,
    variant: ProductVariantPrototype,
    context: ImportContext,
) -> None:
    _redistribute_facets(parent, variant)
    _complete_option_groups(parent, variant, context)
    parent.children.append(variant)
    logger.debug(f"Attached variant {variant.sku} to product {parent.sku}")


def _redistribute_facets(parent: ProductPrototype, variant: ProductVariantPrototype) -> None:
    """
    Keep on the parent only the facet values every child has.

    A parent value the new variant lacks is handed down to the children
    attached so far (they had it through the parent) and dropped from the
    parent.  The variant keeps only the values the parent does not carry.
    A variant row without any facet value inherits the parent's.
    """
    own_codes = list(variant.facet_value_codes) or list(parent.facet_value_codes)

    common: list[str] = []
    for code in list(parent.facet_value_codes):
        if code in own_codes:
            common.append(code)
            continue
        for child in parent.children:
            if code not in child.facet_value_codes:
                child.facet_value_codes.append(code)

    parent.facet_value_codes = common
    variant.facet_value_codes = [code for code in own_codes if code not in common]


def _complete_option_groups(
    parent: ProductPrototype,
    variant: ProductVariantPrototype,
    context: ImportContext,
) -> None:
    """
    Reconcile the variant's options with the groups its siblings use.

    A group the earlier siblings declare but the variant lacks is taken over
    only if it has a single option so far; the same holds the other way
    round for a group the variant introduces.  The parent's option-group
    subtrees are then extended with the variant's options.

    Raises:
        MissingOptionError: a group with several options is missing.
    """
    variant_groups = [group_code for group_code, _ in variant.option_codes]
    implied: list[tuple[str, str]] = []

    for group in list(parent.option_groups):
        if group.code in variant_groups:
            continue
        if len(group.items) != 1:
            raise MissingOptionError(
                f"Variant {variant.sku} of product {parent.sku} has no option "
                f"in group '{group.code}' (options: "
                f"{[item.code for item in group.items]})"
            )
        implied.append((group.code, group.items[0].code))

    declared = [group.code for group in parent.option_groups]
    for group_code, option_code in variant.option_codes:
        if group_code in declared or not parent.children:
            continue
        for sibling in parent.children:
            sibling.option_codes.append((group_code, option_code))
        logger.debug(
            f"Product {parent.sku}: earlier variants share option "
            f"'{group_code}/{option_code}' introduced by {variant.sku}"
        )

    variant.option_codes = variant.option_codes + implied

    subtrees = list(parent.option_groups)
    for group_code, option_code in variant.option_codes:
        subtree = _find_group(subtrees, group_code)
        if subtree is None:
            subtrees.append(context.option_group(group_code).copy_with_items([option_code]))
        elif subtree.find_item(option_code) is None:
            option = context.option_group(group_code).find_item(option_code)
            subtree.items = subtree.items + [option]
    parent.option_groups = subtrees


def _promote_orphan(variant: ProductVariantPrototype, context: ImportContext) -> ProductPrototype:
    """A product whose only child is *variant*, carrying the variant's shared fields."""
    product = ProductPrototype(
        sku=variant.parent_id,
        previous_ids=[variant.parent_id],
        translations=[
            ProductTranslation(t.language_code, t.name, t.slug, t.description)
            for t in variant.translations
        ],
        length=variant.length,
        width=variant.width,
        height=variant.height,
        assets=list(variant.assets),
        facet_value_codes=list(variant.facet_value_codes),
        option_groups=[
            context.option_group(group_code).copy_with_items([option_code])
            for group_code, option_code in variant.option_codes
        ],
        children=[variant],
    )
    variant.facet_value_codes = []
    logger.info(
        f"Variant {variant.sku}: parent {variant.parent_id} not found, "
        f"created product {product.sku}"
    )
    return product


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _translation_of(record: NormalizedRecord) -> ProductTranslation:
    return ProductTranslation(
        language_code=record.language_code,
        name=record.name,
        slug=record.slug,
        description=record.description,
    )


def _resolve_facet_values(
    record: NormalizedRecord,
    context: ImportContext,
    suggestion_codes: list[str] | None,
) -> list[str]:
    """
    Facet value codes for the record's category and reseller labels.

    *suggestion_codes* are the codes an earlier translation of the same
    entity resolved to, or None for a first translation.
    """
    codes: list[str] = []
    for facet_code, record_field in _FACET_SOURCES:
        facet = context.facet(facet_code)
        suggestions = _suggested_items(facet, suggestion_codes)
        for label in getattr(record, record_field):
            value = find_or_create(
                facet,
                label,
                record.language_code,
                suggestions,
                context.disambiguator,
                context.facet_value_codes(),
            )
            codes.append(value.code)
    return _merge_codes([], codes)


def _suggested_items(
    group: VocabularyGroup,
    codes: list[str] | None,
) -> list[VocabularyItem] | None:
    if codes is None:
        return None
    return [item for item in group.items if item.code in codes]


def _merge_codes(first: list[str], second: list[str]) -> list[str]:
    merged = list(first)
    for code in second:
        if code not in merged:
            merged.append(code)
    return merged


def _add_previous_id(previous_ids: list[str], record_id: str) -> None:
    if record_id not in previous_ids:
        previous_ids.append(record_id)


def _find_group(groups: list[VocabularyGroup], code: str) -> VocabularyGroup | None:
    for group in groups:
        if group.code == code:
            return group
    return None


def _fill_missing_fields(product: ProductPrototype, record: NormalizedRecord) -> None:
    """Dimensions and link lists a later translation supplies but the first lacked."""
    for dimension in ("length", "width", "height"):
        if getattr(product, dimension) is None:
            setattr(product, dimension, getattr(record, dimension))
    for list_field in ("assets", "up_sells", "cross_sells"):
        if not getattr(product, list_field):
            setattr(product, list_field, list(getattr(record, list_field)))
