"""
Variant compatibility — decides whether a remote variant can be updated in
place and guards against variants that only differ by SKU.

An existing variant may be updated only if its options are exactly the
options the new variant wants; anything else (missing, extra or different
options) means delete and recreate, since a variant's options cannot be
changed remotely.

Public API:
    is_compatible(existing_option_codes, desired_option_codes) → bool
    assert_unique_option_sets(product) → None or AmbiguousDuplicateError
"""

import logging
from typing import Iterable

from processing.errors import AmbiguousDuplicateError
from processing.models import ProductPrototype

logger = logging.getLogger(__name__)


def is_compatible(
    existing_option_codes: Iterable,
    desired_option_codes: Iterable,
) -> bool:
    """
    True iff both variants select exactly the same options.

    Option codes may be plain strings or (group_code, option_code) pairs, as
    long as both sides use the same form.  Order is irrelevant; duplicates
    on either side make the sets non-bijective and therefore incompatible.
    """
    existing = list(existing_option_codes)
    desired = list(desired_option_codes)

    if len(existing) != len(set(existing)) or len(desired) != len(set(desired)):
        return False
    return set(existing) == set(desired)


def assert_unique_option_sets(product: ProductPrototype) -> None:
    """
    Raise if two children select identical options under different SKUs.

    Two option-less children count as identical too: nothing would tell
    them apart in the shop.

    Raises:
        AmbiguousDuplicateError: naming both conflicting variants.
    """
    seen: dict[frozenset, object] = {}
    for child in product.children:
        key = frozenset(child.option_codes)
        earlier = seen.get(key)
        if earlier is not None and earlier.sku != child.sku:
            logger.error(
                f"Product {product.sku}: variants {earlier.sku} and {child.sku} "
                f"share options {sorted(key)}"
            )
            raise AmbiguousDuplicateError(product.sku, earlier, child)
        seen[key] = child
