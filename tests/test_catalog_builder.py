"""
Tests for processing/catalog_builder.py

Covers:
  - Product identity (one product per SKU / translation id)
  - Translation merging for products and variants, options aligned across
    languages
  - Facet redistribution between parent and children
  - Option-group completion across siblings, MissingOptionError
  - Orphan variants promoted to synthesized products
  - Error cases: inconsistent translations, duplicate option sets,
    missing required facets
"""

import pytest

from processing.catalog_builder import build_catalog, table_to_catalog
from processing.errors import (
    AmbiguousDuplicateError,
    InconsistentTranslationError,
    MalformedValueError,
    MissingOptionError,
    MissingRequiredVocabularyError,
)
from processing.row_normalizer import normalize_rows
from processing.vocabulary import FACET, ImportContext, Translation, VocabularyGroup, VocabularyItem


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _ScriptedDisambiguator:
    """Answers with candidate indexes (None = "none of these") and records calls."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.calls = []

    def ask(self, prompt, candidates, render_item, allow_none=True):
        self.calls.append({"prompt": prompt, "candidates": list(candidates)})
        if not self.answers:
            raise AssertionError(f"Unexpected question: {prompt}")
        answer = self.answers.pop(0)
        return None if answer is None else candidates[answer]


def _make_facet(code: str, de: str, fr: str, items=()) -> VocabularyGroup:
    return VocabularyGroup(
        code=code,
        translations=[Translation("de", de), Translation("fr", fr)],
        kind=FACET,
        items=list(items),
    )


def _make_context(answers=None, category_items=()) -> ImportContext:
    facets = [
        _make_facet("category", "Kategorie", "Catégorie", category_items),
        _make_facet("reseller-discount", "Wiederverkäuferrabatt", "Rabais revendeur"),
    ]
    return ImportContext(facets=facets, disambiguator=_ScriptedDisambiguator(answers))


def _row(record_id, sku, parent="", language="de", trid="", title="Schild",
         price="10", columns: dict | None = None) -> dict:
    row = {
        "ID": record_id,
        "Parent Product ID": parent,
        "Sku": sku,
        "WPML Language Code": language,
        "WPML Translation ID": trid,
        "Title": title,
        "Price": price,
    }
    if columns:
        row.update(columns)
    return row


def _product(result, sku):
    return next(p for p in result.products if p.sku == sku)


def _child(product, sku):
    return next(c for c in product.children if c.sku == sku)


# ═══════════════════════════════════════════════════════════════════════════
# Product identity and translations
# ═══════════════════════════════════════════════════════════════════════════

class TestProducts:
    def test_one_product_per_sku(self):
        rows = [
            _row("1", "P1", price=""),
            _row("2", "P2", price=""),
            _row("3", "P1", price=""),
        ]
        result = table_to_catalog(rows, _make_context())

        assert [p.sku for p in result.products] == ["P1", "P2"]
        assert _product(result, "P1").previous_ids == ["1", "3"]
        assert len(_product(result, "P1").translations) == 1

    def test_translations_merged_by_translation_id(self):
        rows = [
            _row("1", "P1", trid="t1", title="Rettungsschild", price=""),
            _row("2", "P1", language="fr", trid="t1", title="Panneau de sauvetage", price=""),
        ]
        result = table_to_catalog(rows, _make_context())

        assert len(result.products) == 1
        product = result.products[0]
        assert [t.language_code for t in product.translations] == ["de", "fr"]
        assert product.name_in("fr") == "Panneau de sauvetage"
        assert product.previous_ids == ["1", "2"]

    def test_duplicate_language_with_translation_id_raises(self):
        rows = [
            _row("1", "P1", trid="t1", price=""),
            _row("2", "P1", trid="t1", price=""),
        ]
        with pytest.raises(InconsistentTranslationError):
            table_to_catalog(rows, _make_context())

    def test_later_translation_fills_missing_dimensions(self):
        rows = [
            _row("1", "P1", trid="t1", price=""),
            _row("2", "P1", language="fr", trid="t1", price="", columns={"Width": "30"}),
        ]
        result = table_to_catalog(rows, _make_context())
        assert result.products[0].width == 30.0

    def test_accepts_normalized_records(self):
        records = normalize_rows([_row("1", "P1", price="")])
        result = build_catalog(records, _make_context())
        assert [p.sku for p in result.products] == ["P1"]


# ═══════════════════════════════════════════════════════════════════════════
# Variants and options
# ═══════════════════════════════════════════════════════════════════════════

class TestVariants:
    def test_variant_attached_through_any_translation_id(self):
        rows = [
            _row("1", "P1", trid="t1", price=""),
            _row("2", "P1", language="fr", trid="t1", price=""),
            _row("12", "V1", parent="2", language="fr", trid="t11", columns={"Couleur": "Rouge"}),
        ]
        result = table_to_catalog(rows, _make_context())

        assert [c.sku for c in result.products[0].children] == ["V1"]

    def test_options_aligned_across_languages(self):
        context = _make_context()
        rows = [
            _row("1", "P1", trid="t1", price=""),
            _row("2", "P1", language="fr", trid="t1", price=""),
            _row("11", "V1", parent="1", trid="t11", price="12.50", columns={"Farbe": "Rot"}),
            _row("12", "V1", parent="2", language="fr", trid="t11", price="12.50",
                 columns={"Couleur": "Rouge"}),
        ]
        result = table_to_catalog(rows, context)

        variant = result.products[0].children[0]
        assert variant.option_codes == [("color", "rot")]
        assert variant.price == 1250
        assert [t.language_code for t in variant.translations] == ["de", "fr"]

        color = context.option_group("color")
        assert [item.code for item in color.items] == ["rot"]
        assert color.items[0].name_in("fr") == "Rouge"
        assert context.disambiguator.calls == []

        assert [g.code for g in result.products[0].option_groups] == ["color"]

    def test_translation_may_omit_single_option_group(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "V1", parent="1", trid="t11", columns={"Farbe": "Rot", "Grösse": "A4"}),
            _row("12", "V1", parent="1", language="fr", trid="t11", columns={"Taille": "A4"}),
        ]
        result = table_to_catalog(rows, _make_context())

        variant = result.products[0].children[0]
        assert set(variant.option_codes) == {("color", "rot"), ("size", "a4")}

    def test_translation_missing_multi_option_group_raises(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "V1", parent="1", trid="t11", columns={"Farbe": "Rot"}),
            _row("13", "V2", parent="1", trid="t13", columns={"Farbe": "Blau"}),
            _row("12", "V1", parent="1", language="fr", trid="t11"),
        ]
        with pytest.raises(InconsistentTranslationError):
            table_to_catalog(rows, _make_context())

    def test_translation_with_extra_group_raises(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "V1", parent="1", trid="t11", columns={"Farbe": "Rot"}),
            _row("12", "V1", parent="1", language="fr", trid="t11",
                 columns={"Couleur": "Rouge", "Taille": "A4"}),
        ]
        with pytest.raises(InconsistentTranslationError):
            table_to_catalog(rows, _make_context())

    def test_multiple_values_on_variant_raise(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "V1", parent="1", columns={"Farbe": "Rot|Blau"}),
        ]
        with pytest.raises(MalformedValueError):
            table_to_catalog(rows, _make_context())

    def test_single_option_group_shared_with_later_siblings(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot", "Grösse": "A4"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Blau"}),
            _row("13", "VC", parent="1", columns={"Farbe": "Weiss", "Grösse": "A3"}),
        ]
        result = table_to_catalog(rows, _make_context())

        product = result.products[0]
        assert ("size", "a4") in _child(product, "VB").option_codes
        assert {g.code: [i.code for i in g.items] for g in product.option_groups} == {
            "size": ["a4", "a3"],
            "color": ["rot", "blau", "weiss"],
        }

    def test_new_group_pushed_onto_earlier_siblings(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Blau", "Material": "Alu"}),
        ]
        result = table_to_catalog(rows, _make_context())

        assert ("material", "alu") in _child(result.products[0], "VA").option_codes

    def test_missing_multi_option_group_raises(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot", "Grösse": "A4"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Blau", "Grösse": "A3"}),
            _row("13", "VC", parent="1", columns={"Farbe": "Gelb"}),
        ]
        with pytest.raises(MissingOptionError):
            table_to_catalog(rows, _make_context())

    def test_identical_option_sets_raise(self):
        rows = [
            _row("1", "P1", price=""),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Rot"}),
        ]
        with pytest.raises(AmbiguousDuplicateError) as exc_info:
            table_to_catalog(rows, _make_context())
        assert {exc_info.value.first.sku, exc_info.value.second.sku} == {"VA", "VB"}
        assert exc_info.value.product_sku == "P1"


# ═══════════════════════════════════════════════════════════════════════════
# Facets
# ═══════════════════════════════════════════════════════════════════════════

class TestFacets:
    def test_values_shared_by_all_children_stay_on_parent(self):
        rows = [
            _row("1", "P1", price="", columns={"Thema": "Brandschutz|Rettung"}),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot", "Thema": "Brandschutz|Rettung"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Blau", "Thema": "Brandschutz|Aussen"}),
        ]
        result = table_to_catalog(rows, _make_context())

        product = result.products[0]
        assert product.facet_value_codes == ["brandschutz"]
        assert _child(product, "VA").facet_value_codes == ["rettung"]
        assert _child(product, "VB").facet_value_codes == ["aussen"]

    def test_every_child_effectively_has_parent_values(self):
        rows = [
            _row("1", "P1", price="", columns={"Thema": "Brandschutz|Rettung"}),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot", "Thema": "Brandschutz"}),
            _row("12", "VB", parent="1", columns={"Farbe": "Blau", "Thema": "Rettung|Aussen"}),
            _row("13", "VC", parent="1", columns={"Farbe": "Weiss"}),
        ]
        result = table_to_catalog(rows, _make_context())

        product = result.products[0]
        effective = {
            child.sku: set(product.facet_value_codes) | set(child.facet_value_codes)
            for child in product.children
        }
        assert effective["VA"] == {"brandschutz"}
        assert effective["VB"] == {"rettung", "aussen"}
        for child in product.children:
            assert not set(child.facet_value_codes) & set(product.facet_value_codes)

    def test_variant_without_categories_inherits_parent(self):
        rows = [
            _row("1", "P1", price="", columns={"Thema": "Brandschutz"}),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot"}),
        ]
        result = table_to_catalog(rows, _make_context())

        product = result.products[0]
        assert product.facet_value_codes == ["brandschutz"]
        assert product.children[0].facet_value_codes == []

    def test_seeded_values_reused(self):
        seeded = VocabularyItem(
            code="brandschutz",
            translations=[Translation("de", "Brandschutz"), Translation("fr", "Protection incendie")],
            group_code="category",
        )
        context = _make_context(category_items=[seeded])
        rows = [_row("1", "P1", price="", columns={"Thema": "brandschutz"})]

        result = table_to_catalog(rows, context)

        assert result.products[0].facet_value_codes == ["brandschutz"]
        assert len(context.facet("category").items) == 1

    def test_translated_labels_matched_with_operator_help(self):
        context = _make_context(answers=[0])
        rows = [
            _row("1", "P1", trid="t1", price="", columns={"Thema": "Brandschutz|Rettung"}),
            _row("2", "P1", language="fr", trid="t1", price="",
                 columns={"Thema": "Protection incendie|Sauvetage"}),
        ]
        result = table_to_catalog(rows, context)

        assert result.products[0].facet_value_codes == ["brandschutz", "rettung"]
        category = context.facet("category")
        assert category.find_item("brandschutz").name_in("fr") == "Protection incendie"
        assert category.find_item("rettung").name_in("fr") == "Sauvetage"
        assert len(context.disambiguator.calls) == 1

    def test_reseller_discount_facet(self):
        context = _make_context()
        rows = [_row("1", "P1", price="", columns={"Schilder_Rabattberechtigt": "Ja"})]

        result = table_to_catalog(rows, context)

        assert result.products[0].facet_value_codes == ["schilder"]
        assert context.facet("reseller-discount").find_item("schilder") is not None

    def test_facet_value_codes_unique_across_facets(self):
        context = _make_context()
        rows = [_row("1", "P1", price="", columns={
            "Thema": "Schilder",
            "_Rabattberechtigt": "Schilder",
        })]

        result = table_to_catalog(rows, context)

        assert result.products[0].facet_value_codes == ["schilder", "schilder-2"]


# ═══════════════════════════════════════════════════════════════════════════
# Orphan variants
# ═══════════════════════════════════════════════════════════════════════════

class TestOrphans:
    def _erp_row(self, article, group, categories, size="", name="Feuerlöscher"):
        return {
            "Artikel_Nr": article,
            "Produktgruppe_Shop": group,
            "Artikel_Nummer_Produkt": article,
            "Artikelname_neu": name,
            "Einzelpreis": "CHF 89.00",
            "Thema": categories,
            "Grösse": size,
        }

    def test_orphan_promoted_to_product(self):
        rows = [self._erp_row("5001", "GRP-1", "Brandschutz")]
        result = table_to_catalog(rows, _make_context())

        assert len(result.products) == 1
        product = result.products[0]
        assert product.sku == "GRP-1"
        assert product.previous_ids == ["GRP-1"]
        assert product.name_in("de") == "Feuerlöscher"
        assert product.facet_value_codes == ["brandschutz"]
        assert [c.sku for c in product.children] == ["5001"]
        assert product.children[0].facet_value_codes == []
        assert product.children[0].price == 8900

    def test_siblings_join_synthesized_product(self):
        rows = [
            self._erp_row("5001", "GRP-1", "Brandschutz", size="6 kg"),
            self._erp_row("5002", "GRP-1", "Brandschutz|Werkstatt", size="9 kg"),
        ]
        result = table_to_catalog(rows, _make_context())

        assert len(result.products) == 1
        product = result.products[0]
        assert [c.sku for c in product.children] == ["5001", "5002"]
        assert product.facet_value_codes == ["brandschutz"]
        assert _child(product, "5002").facet_value_codes == ["werkstatt"]
        assert [i.code for i in product.option_groups[0].items] == ["6-kg", "9-kg"]

    def test_optionless_siblings_raise(self):
        rows = [
            self._erp_row("5001", "GRP-1", "Brandschutz"),
            self._erp_row("5002", "GRP-1", "Brandschutz"),
        ]
        with pytest.raises(AmbiguousDuplicateError) as exc_info:
            table_to_catalog(rows, _make_context())
        assert exc_info.value.product_sku == "GRP-1"


# ═══════════════════════════════════════════════════════════════════════════
# Context
# ═══════════════════════════════════════════════════════════════════════════

class TestContext:
    def test_missing_required_facet(self):
        with pytest.raises(MissingRequiredVocabularyError) as exc_info:
            ImportContext(
                facets=[_make_facet("category", "Kategorie", "Catégorie")],
                disambiguator=_ScriptedDisambiguator(),
            )
        assert exc_info.value.code == "reseller-discount"

    def test_result_exposes_mutated_vocabulary(self):
        context = _make_context()
        rows = [
            _row("1", "P1", price="", columns={"Thema": "Brandschutz"}),
            _row("11", "VA", parent="1", columns={"Farbe": "Rot"}),
        ]
        result = table_to_catalog(rows, context)

        assert result.facets is context.facets
        assert [g.code for g in result.option_groups] == ["color"]
        assert context.facet("category").find_item("brandschutz") is not None
