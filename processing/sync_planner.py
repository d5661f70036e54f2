"""
Variant sync planner — decides per product which remote variants are
updated, deleted or (re)created.

Given the variants a product currently has remotely:
  - remote variants whose SKU is no longer a child are deleted
  - a child whose SKU exists remotely with exactly the same options is
    updated in place
  - a child whose SKU exists remotely with other options is deleted and
    created again (options of a remote variant cannot change)
  - a child with a new SKU is created

The plan is pure data; the remote sync applies it.

Public API:
    plan_variant_sync(product, remote_variants) → VariantSyncPlan
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from processing.errors import MissingOptionError
from processing.models import BulkDiscount, ProductPrototype, ProductVariantPrototype
from processing.variant_compatibility import is_compatible

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class RemoteVariant:
    """Snapshot of a variant as it exists in the remote store."""

    id: Any
    sku: str
    option_codes: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class VariantSyncPlan:
    """What to do with the variants of one product."""

    product_sku: str
    updates: list[tuple[Any, ProductVariantPrototype]] = field(default_factory=list)
    """(remote id, desired variant) pairs updated in place."""

    creations: list[ProductVariantPrototype] = field(default_factory=list)
    deletions: list[Any] = field(default_factory=list)
    """Remote ids to delete."""

    bulk_discounts: dict[str, list[BulkDiscount]] = field(default_factory=dict)
    """SKU → tiers, for every updated or created variant."""


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def plan_variant_sync(
    product: ProductPrototype,
    remote_variants: list[RemoteVariant],
) -> VariantSyncPlan:
    """
    Build the variant sync plan of one product.

    Args:
        product: Product prototype from the catalog builder.
        remote_variants: The product's variants in the remote store
            (empty for a product that does not exist yet).

    Returns:
        VariantSyncPlan with updates, creations and deletions.

    Raises:
        MissingOptionError: a variant to be created lacks an option in one
            of the product's option groups.
    """
    plan = VariantSyncPlan(product_sku=product.sku)
    remote_by_sku = {variant.sku: variant for variant in remote_variants}
    child_skus = {child.sku for child in product.children}

    plan.deletions = [
        variant.id for variant in remote_variants if variant.sku not in child_skus
    ]

    for child in product.children:
        remote = remote_by_sku.get(child.sku)

        if remote is not None and is_compatible(remote.option_codes, child.option_codes):
            plan.updates.append((remote.id, child))
        else:
            if remote is not None:
                logger.info(
                    f"Variant {child.sku}: options changed "
                    f"{sorted(remote.option_codes)} → {sorted(child.option_codes)}, "
                    f"recreating"
                )
                plan.deletions.append(remote.id)
            _assert_complete_options(product, child)
            plan.creations.append(child)

        plan.bulk_discounts[child.sku] = list(child.bulk_discounts)

    logger.debug(
        f"Product {product.sku}: {len(plan.updates)} updates, "
        f"{len(plan.creations)} creations, {len(plan.deletions)} deletions"
    )
    return plan


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _assert_complete_options(product: ProductPrototype, variant: ProductVariantPrototype) -> None:
    missing = [
        group.code
        for group in product.option_groups
        if group.find_item(variant.option_code_in(group.code) or "") is None
    ]
    if missing:
        raise MissingOptionError(
            f"Variant {variant.sku} lacks an option in the groups "
            f"{', '.join(missing)}"
        )
