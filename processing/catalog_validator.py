"""
Catalog validator — checks the built catalog before it is synced.

Runs four validation passes:
  1. Products: every product has a translation in the default language and
     at least one variant.
  2. Option groups: every group used by a product is translated into all
     required group languages, every option into the required value
     languages.
  3. Facets: every facet is translated into all required group languages.
  4. Facet values: every value is translated into the required value
     languages.

Nothing is raised; the report lists every problem so the operator can fix
the source sheet (or the remote vocabulary) in one go.

Public API:
    validate_catalog(result) → CatalogValidationReport
"""

import logging
from dataclasses import dataclass, field

from config.catalog import (
    DEFAULT_LANGUAGE,
    REQUIRED_GROUP_LANGUAGES,
    REQUIRED_VALUE_LANGUAGES,
)
from processing.models import CatalogResult
from processing.vocabulary import VocabularyGroup

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CatalogValidationReport:
    """Problems found in a built catalog."""

    total_products: int = 0
    total_variants: int = 0
    untranslated_products: list[str] = field(default_factory=list)
    """SKUs of products without a default-language translation."""

    products_without_variants: list[str] = field(default_factory=list)

    untranslated_option_groups: list[dict] = field(default_factory=list)
    """{"product": sku, "group": code, "missing": [languages]}"""

    untranslated_options: list[dict] = field(default_factory=list)
    """{"product": sku, "group": code, "option": code, "missing": [languages]}"""

    untranslated_facets: list[dict] = field(default_factory=list)
    """{"facet": code, "translations": rendered, "missing": [languages]}"""

    untranslated_facet_values: list[dict] = field(default_factory=list)
    """{"facet": code, "value": code, "missing": [languages]}"""

    is_clean: bool = True


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def validate_catalog(result: CatalogResult) -> CatalogValidationReport:
    """
    Validate a catalog built by the catalog builder.

    Args:
        result: Output of build_catalog().

    Returns:
        CatalogValidationReport; is_clean is False if any list is non-empty.
    """
    report = CatalogValidationReport()
    report.total_products = len(result.products)
    report.total_variants = sum(len(p.children) for p in result.products)

    _check_products(result, report)
    _check_facets(result.facets, report)

    report.is_clean = not (
        report.untranslated_products
        or report.products_without_variants
        or report.untranslated_option_groups
        or report.untranslated_options
        or report.untranslated_facets
        or report.untranslated_facet_values
    )

    logger.info(
        f"Catalog validation: {report.total_products} products, "
        f"{report.total_variants} variants, clean={report.is_clean}"
    )
    return report


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _missing_languages(entity, languages: list[str]) -> list[str]:
    return [lang for lang in languages if not entity.has_translation(lang)]


def _check_products(result: CatalogResult, report: CatalogValidationReport) -> None:
    for product in result.products:
        if product.name_in(DEFAULT_LANGUAGE) is None:
            report.untranslated_products.append(product.sku)
        if not product.children:
            report.products_without_variants.append(product.sku)

        for group in product.option_groups:
            missing = _missing_languages(group, REQUIRED_GROUP_LANGUAGES)
            if missing:
                report.untranslated_option_groups.append({
                    "product": product.sku,
                    "group": group.code,
                    "missing": missing,
                })
            for option in group.items:
                missing = _missing_languages(option, REQUIRED_VALUE_LANGUAGES)
                if missing:
                    report.untranslated_options.append({
                        "product": product.sku,
                        "group": group.code,
                        "option": option.code,
                        "missing": missing,
                    })


def _check_facets(facets: list[VocabularyGroup], report: CatalogValidationReport) -> None:
    for facet in facets:
        missing = _missing_languages(facet, REQUIRED_GROUP_LANGUAGES)
        if missing:
            report.untranslated_facets.append({
                "facet": facet.code,
                "translations": facet.render(),
                "missing": missing,
            })
        for value in facet.items:
            missing = _missing_languages(value, REQUIRED_VALUE_LANGUAGES)
            if missing:
                report.untranslated_facet_values.append({
                    "facet": facet.code,
                    "value": value.code,
                    "missing": missing,
                })
