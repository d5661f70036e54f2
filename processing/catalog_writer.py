"""
Catalog writer — JSON serialization of import results and vocabulary seeds.

The JSON written here is what the remote sync reads; the vocabulary seed is
a snapshot of the remote facets (and optionally option groups).

JSON layout (camelCase keys, as the remote API uses them):
    {"products": [...], "facets": [...], "optionGroups": [...]}

Public API:
    catalog_to_dict(result) → dict
    write_catalog_json(result, file_path) → None
    load_catalog_json(file_path) → CatalogResult
    catalog_from_dict(data) → CatalogResult
    load_vocabulary_json(file_path) → (facets, option_groups)
    vocabulary_from_dict(data) → (facets, option_groups)
"""

import json
import logging
from pathlib import Path

from processing.models import (
    BulkDiscount,
    CatalogResult,
    ProductPrototype,
    ProductTranslation,
    ProductVariantPrototype,
)
from processing.vocabulary import (
    FACET,
    OPTION_GROUP,
    Translation,
    VocabularyGroup,
    VocabularyItem,
    VocabularyKind,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def catalog_to_dict(result: CatalogResult) -> dict:
    """Plain-dict form of a CatalogResult, ready for json.dump."""
    return {
        "products": [_product_to_dict(product) for product in result.products],
        "facets": [_group_to_dict(facet) for facet in result.facets],
        "optionGroups": [_group_to_dict(group) for group in result.option_groups],
    }


def write_catalog_json(result: CatalogResult, file_path: Path) -> None:
    file_path = Path(file_path)
    with file_path.open("w", encoding="utf-8") as handle:
        json.dump(catalog_to_dict(result), handle, ensure_ascii=False, indent=2)
    logger.info(f"Wrote {len(result.products)} products to '{file_path.name}'")


def load_vocabulary_json(file_path: Path) -> tuple[list[VocabularyGroup], list[VocabularyGroup]]:
    """
    Read a vocabulary seed file.

    Returns:
        (facets, option_groups); option_groups is empty if the file has none.
    """
    file_path = Path(file_path)
    with file_path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    facets, option_groups = vocabulary_from_dict(data)
    logger.info(
        f"Loaded {len(facets)} facets and {len(option_groups)} option groups "
        f"from '{file_path.name}'"
    )
    return facets, option_groups


def vocabulary_from_dict(data: dict) -> tuple[list[VocabularyGroup], list[VocabularyGroup]]:
    """
    Build vocabulary groups from {"facets": [...], "optionGroups": [...]}.

    Facet entries list their items under "values", option groups under
    "options".
    """
    facets = [_group_from_dict(entry, FACET) for entry in data.get("facets", [])]
    option_groups = [
        _group_from_dict(entry, OPTION_GROUP)
        for entry in data.get("optionGroups", [])
    ]
    return facets, option_groups


def load_catalog_json(file_path: Path) -> CatalogResult:
    """
    Read a catalog previously written by write_catalog_json, so it can be
    validated (and synced) again without re-reading the source table.
    """
    file_path = Path(file_path)
    with file_path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    result = catalog_from_dict(data)
    logger.info(f"Loaded {len(result.products)} products from '{file_path.name}'")
    return result


def catalog_from_dict(data: dict) -> CatalogResult:
    """Inverse of catalog_to_dict."""
    facets, option_groups = vocabulary_from_dict(data)
    return CatalogResult(
        products=[_product_from_dict(entry) for entry in data.get("products", [])],
        facets=facets,
        option_groups=option_groups,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _translations_to_list(translations) -> list[dict]:
    return [
        {"languageCode": t.language_code, "name": t.name}
        for t in translations
    ]


def _translations_from_list(entries: list[dict]) -> list[Translation]:
    return [Translation(entry["languageCode"], entry["name"]) for entry in entries]


def _item_key(kind: VocabularyKind) -> str:
    return "values" if kind == FACET else "options"


def _group_to_dict(group: VocabularyGroup) -> dict:
    data = {
        "code": group.code,
        "translations": _translations_to_list(group.translations),
        _item_key(group.kind): [
            {
                **({"id": item.id} if item.id is not None else {}),
                "code": item.code,
                "translations": _translations_to_list(item.translations),
            }
            for item in group.items
        ],
    }
    if group.id is not None:
        data["id"] = group.id
    return data


def _group_from_dict(entry: dict, kind: VocabularyKind) -> VocabularyGroup:
    group = VocabularyGroup(
        code=entry["code"],
        translations=_translations_from_list(entry.get("translations", [])),
        kind=kind,
        id=entry.get("id"),
    )
    group.items = [
        VocabularyItem(
            code=item["code"],
            translations=_translations_from_list(item.get("translations", [])),
            group_code=group.code,
            id=item.get("id"),
        )
        for item in entry.get(_item_key(kind), [])
    ]
    return group


def _product_translations(translations) -> list[dict]:
    return [
        {
            "languageCode": t.language_code,
            "name": t.name,
            "slug": t.slug,
            "description": t.description,
        }
        for t in translations
    ]


def _variant_to_dict(variant: ProductVariantPrototype) -> dict:
    return {
        "sku": variant.sku,
        "parentId": variant.parent_id,
        "translationId": variant.translation_id,
        "previousIds": variant.previous_ids,
        "price": variant.price,
        "translations": _product_translations(variant.translations),
        "minimumOrderQuantity": variant.minimum_order_quantity,
        "bulkDiscounts": [
            {"quantity": d.quantity, "price": d.price}
            for d in variant.bulk_discounts
        ],
        "facetValueCodes": variant.facet_value_codes,
        "optionCodes": [list(pair) for pair in variant.option_codes],
        "length": variant.length,
        "width": variant.width,
        "height": variant.height,
        "assets": variant.assets,
    }


def _product_to_dict(product: ProductPrototype) -> dict:
    return {
        "sku": product.sku,
        "translationId": product.translation_id,
        "previousIds": product.previous_ids,
        "translations": _product_translations(product.translations),
        "length": product.length,
        "width": product.width,
        "height": product.height,
        "assets": product.assets,
        "upSells": product.up_sells,
        "crossSells": product.cross_sells,
        "optionGroups": [_group_to_dict(group) for group in product.option_groups],
        "facetValueCodes": product.facet_value_codes,
        "children": [_variant_to_dict(child) for child in product.children],
    }


def _product_translations_from_list(entries: list[dict]) -> list[ProductTranslation]:
    return [
        ProductTranslation(
            language_code=entry["languageCode"],
            name=entry["name"],
            slug=entry.get("slug", ""),
            description=entry.get("description", ""),
        )
        for entry in entries
    ]


def _variant_from_dict(entry: dict) -> ProductVariantPrototype:
    return ProductVariantPrototype(
        sku=entry["sku"],
        price=entry["price"],
        parent_id=entry.get("parentId"),
        translation_id=entry.get("translationId"),
        previous_ids=list(entry.get("previousIds", [])),
        translations=_product_translations_from_list(entry.get("translations", [])),
        minimum_order_quantity=entry.get("minimumOrderQuantity", 0),
        bulk_discounts=[
            BulkDiscount(quantity=d["quantity"], price=d["price"])
            for d in entry.get("bulkDiscounts", [])
        ],
        facet_value_codes=list(entry.get("facetValueCodes", [])),
        option_codes=[tuple(pair) for pair in entry.get("optionCodes", [])],
        length=entry.get("length"),
        width=entry.get("width"),
        height=entry.get("height"),
        assets=list(entry.get("assets", [])),
    )


def _product_from_dict(entry: dict) -> ProductPrototype:
    return ProductPrototype(
        sku=entry["sku"],
        translation_id=entry.get("translationId"),
        previous_ids=list(entry.get("previousIds", [])),
        translations=_product_translations_from_list(entry.get("translations", [])),
        length=entry.get("length"),
        width=entry.get("width"),
        height=entry.get("height"),
        assets=list(entry.get("assets", [])),
        up_sells=list(entry.get("upSells", [])),
        cross_sells=list(entry.get("crossSells", [])),
        option_groups=[
            _group_from_dict(group, OPTION_GROUP)
            for group in entry.get("optionGroups", [])
        ],
        facet_value_codes=list(entry.get("facetValueCodes", [])),
        children=[_variant_from_dict(child) for child in entry.get("children", [])],
    )
