"""
Table reader — loads a CSV or Excel catalog export into ordered rows.

Every cell is read as text so SKUs like "00123" keep their leading zeros and
the row normalizer decides how to coerce each field.  Empty cells become ""
(the column stays present, which matters for mandatory columns such as the
parent id that are legitimately blank on product rows).  Rows without any
value are skipped.  Source row order is preserved.

Public API:
    read_table(file_path) → list[dict[str, str]]
"""

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

_CSV_SUFFIXES: set[str] = {".csv"}
_EXCEL_SUFFIXES: set[str] = {".xlsx", ".xlsm"}


def read_table(file_path: Path) -> list[dict[str, str]]:
    """
    Read the first sheet of an Excel file, or a UTF-8 CSV file.

    Args:
        file_path: Path to a .csv or .xlsx file.

    Returns:
        One dict per data row, column name → cell text.

    Raises:
        ValueError: unsupported file type.
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix in _CSV_SUFFIXES:
        logger.info(f"Reading CSV file '{file_path.name}'")
        dataframe = pd.read_csv(
            file_path,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8",
        )
    elif suffix in _EXCEL_SUFFIXES:
        logger.info(f"Reading Excel file '{file_path.name}'")
        dataframe = pd.read_excel(
            file_path,
            sheet_name=0,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl",
        )
    else:
        raise ValueError(
            f"Unsupported file type '{suffix}' for '{file_path.name}', "
            f"expected .csv or .xlsx"
        )

    rows = dataframe_to_rows(dataframe)
    logger.info(f"Read {len(rows)} rows from '{file_path.name}'")
    return rows


def dataframe_to_rows(dataframe: pd.DataFrame) -> list[dict[str, str]]:
    """
    Convert a DataFrame into row dicts, dropping rows without any value.

    Column names are stripped; NaN cells become "".
    """
    cleaned = dataframe.rename(columns=lambda column: str(column).strip())
    cleaned = cleaned.fillna("")

    rows: list[dict[str, str]] = []
    skipped = 0
    for record in cleaned.to_dict(orient="records"):
        row = {
            column: value.strip() if isinstance(value, str) else value
            for column, value in record.items()
            if not str(column).startswith("Unnamed:")
        }
        if all(value == "" for value in row.values()):
            skipped += 1
            continue
        rows.append(row)

    if skipped:
        logger.debug(f"Skipped {skipped} empty rows")
    return rows
