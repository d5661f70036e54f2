"""
Command-line entry point — Catalog Import Reconciler.

Wires the import stages together:
  1. Read the catalog table (CSV or Excel)
  2. Load the vocabulary seed (facets / option groups snapshot as JSON)
  3. Normalize rows and build the product tree, asking the operator in the
     terminal whenever a label cannot be matched automatically
  4. Validate translations
  5. Write the catalog JSON for the remote sync

A catalog JSON written by an earlier run can be passed instead of a table;
steps 1-3 are then skipped and the file is validated and written again.

Contains NO business logic — only calls processing modules and reports.

Usage:
    python app.py catalog.xlsx out.json --vocabulary vocabulary.json
    python app.py previous-run.json out.json
"""

import argparse
import logging
import sys
from pathlib import Path

from processing.catalog_builder import table_to_catalog
from processing.catalog_validator import validate_catalog
from processing.catalog_writer import (
    load_catalog_json,
    load_vocabulary_json,
    write_catalog_json,
)
from processing.errors import CatalogImportError
from processing.table_reader import read_table
from processing.vocabulary import ImportContext
from utils.console_disambiguator import ConsoleDisambiguator

logger = logging.getLogger(__name__)

_CATALOG_SUFFIX = ".json"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile a product catalog export into products and variants."
    )
    parser.add_argument(
        "table",
        type=Path,
        help="Catalog export (.csv or .xlsx) or a catalog written by an earlier run (.json)",
    )
    parser.add_argument("output", type=Path, help="Catalog output (.json)")
    parser.add_argument(
        "--vocabulary",
        type=Path,
        help="Vocabulary seed (.json); required unless the input is a catalog .json",
    )
    parser.add_argument(
        "--allow-incomplete",
        action="store_true",
        help="Write the output even if translations are missing",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)
    if not _is_catalog_file(args.table) and args.vocabulary is None:
        parser.error("--vocabulary is required when importing a table")
    return args


def _is_catalog_file(path: Path) -> bool:
    return path.suffix.lower() == _CATALOG_SUFFIX


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if _is_catalog_file(args.table):
            result = load_catalog_json(args.table)
        else:
            rows = read_table(args.table)
            facets, option_groups = load_vocabulary_json(args.vocabulary)
            context = ImportContext(
                facets=facets,
                option_groups=option_groups,
                disambiguator=ConsoleDisambiguator(),
            )
            result = table_to_catalog(rows, context)
    except CatalogImportError as exc:
        logger.error(f"Import aborted: {exc}")
        return 1

    report = validate_catalog(result)
    if not report.is_clean:
        for sku in report.untranslated_products:
            logger.warning(f"Product {sku} has no German translation")
        for sku in report.products_without_variants:
            logger.warning(f"Product {sku} has no variants")
        for entry in report.untranslated_option_groups + report.untranslated_options:
            logger.warning(f"Missing translations: {entry}")
        for entry in report.untranslated_facets + report.untranslated_facet_values:
            logger.warning(f"Missing translations: {entry}")
        if not args.allow_incomplete:
            logger.error("Catalog is incomplete, nothing written")
            return 2

    write_catalog_json(result, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
