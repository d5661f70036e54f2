"""
Tests for processing/sync_planner.py

Covers: in-place updates, delete + recreate on changed options, deletion
of vanished SKUs, creation of new SKUs, bulk discount tiers and the
missing-option guard.
"""

import pytest

from processing.errors import MissingOptionError
from processing.models import BulkDiscount, ProductPrototype, ProductVariantPrototype
from processing.sync_planner import RemoteVariant, plan_variant_sync
from processing.vocabulary import OPTION_GROUP, Translation, VocabularyGroup, VocabularyItem


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_color_group(*codes: str) -> VocabularyGroup:
    return VocabularyGroup(
        code="color",
        translations=[Translation("de", "Farbe"), Translation("fr", "Couleur")],
        kind=OPTION_GROUP,
        items=[VocabularyItem(code=code, group_code="color") for code in codes],
    )


def _make_variant(sku: str, color: str | None, tiers=()) -> ProductVariantPrototype:
    return ProductVariantPrototype(
        sku=sku,
        price=1000,
        option_codes=[("color", color)] if color else [],
        bulk_discounts=list(tiers),
    )


def _make_product(*children: ProductVariantPrototype) -> ProductPrototype:
    return ProductPrototype(
        sku="P1",
        option_groups=[_make_color_group("rot", "blau", "weiss")],
        children=list(children),
    )


# ═══════════════════════════════════════════════════════════════════════════
# plan_variant_sync
# ═══════════════════════════════════════════════════════════════════════════

class TestPlanVariantSync:
    def test_new_product_creates_all(self):
        red = _make_variant("V1", "rot")
        blue = _make_variant("V2", "blau")

        plan = plan_variant_sync(_make_product(red, blue), [])

        assert plan.product_sku == "P1"
        assert plan.creations == [red, blue]
        assert plan.updates == []
        assert plan.deletions == []

    def test_compatible_variant_updated_in_place(self):
        red = _make_variant("V1", "rot")
        plan = plan_variant_sync(
            _make_product(red), [RemoteVariant(id=7, sku="V1", option_codes=[("color", "rot")])]
        )

        assert plan.updates == [(7, red)]
        assert plan.creations == []
        assert plan.deletions == []

    def test_changed_options_recreate(self):
        blue = _make_variant("V2", "blau")
        plan = plan_variant_sync(
            _make_product(blue), [RemoteVariant(id=8, sku="V2", option_codes=[("color", "weiss")])]
        )

        assert plan.updates == []
        assert plan.deletions == [8]
        assert plan.creations == [blue]

    def test_vanished_sku_deleted(self):
        red = _make_variant("V1", "rot")
        remote = [
            RemoteVariant(id=7, sku="V1", option_codes=[("color", "rot")]),
            RemoteVariant(id=9, sku="OLD", option_codes=[("color", "blau")]),
        ]

        plan = plan_variant_sync(_make_product(red), remote)

        assert plan.deletions == [9]
        assert plan.updates == [(7, red)]

    def test_bulk_discounts_for_every_variant(self):
        tiers = [BulkDiscount(quantity=10, price=900)]
        red = _make_variant("V1", "rot", tiers)
        blue = _make_variant("V2", "blau")

        plan = plan_variant_sync(
            _make_product(red, blue), [RemoteVariant(id=7, sku="V1", option_codes=[("color", "rot")])]
        )

        assert plan.bulk_discounts == {"V1": tiers, "V2": []}

    def test_creation_without_option_raises(self):
        plain = _make_variant("V3", None)
        with pytest.raises(MissingOptionError):
            plan_variant_sync(_make_product(plain), [])

    def test_creation_with_unknown_option_raises(self):
        odd = _make_variant("V4", "gruen")
        with pytest.raises(MissingOptionError):
            plan_variant_sync(_make_product(odd), [])
