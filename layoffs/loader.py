"""
CSV loader for the raw layoffs export.

Reads the public ``layoffs.csv`` file (header row equal to the table
columns) and bulk-loads it into the source table.

Usage:
    python -m layoffs.main load data/raw/layoffs.csv
"""

import csv
from collections.abc import Iterator
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path

from loguru import logger
from sqlalchemy import Engine

from layoffs.config import INTEGER_COLUMNS, LAYOFF_COLUMNS, NULL_TOKEN, settings
from layoffs.database import write_records
from layoffs.records import LayoffRecord, Snapshot


def parse_integer(value: str | None) -> int | None:
    """Parse an integer cell; blanks and NULL are None, decimals are rounded."""
    if value is None:
        return None
    text = value.strip().replace(",", "")
    if not text or text.upper() == NULL_TOKEN:
        return None
    try:
        return int(Decimal(text).to_integral_value(rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValueError(f"Not an integer: {value!r}") from None


def parse_text(value: str | None) -> str | None:
    """Text cells are kept verbatim (whitespace included); NULL is None."""
    if value is None or value == NULL_TOKEN:
        return None
    return value


def iter_csv_rows(path: Path) -> Iterator[dict]:
    """Yield raw rows of a layoffs CSV file keyed by column name."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        header = [h.strip() for h in reader.fieldnames or []]
        missing = [c for c in LAYOFF_COLUMNS if c not in header]
        if missing:
            raise ValueError(f"{path} is missing columns: {', '.join(missing)}")
        reader.fieldnames = header

        for row in reader:
            yield row


def read_csv(path: Path | str) -> Snapshot:
    """Parse a layoffs CSV file into records, in file order."""
    path = Path(path)
    records = []
    for line, row in enumerate(iter_csv_rows(path), start=2):
        try:
            values = {
                col: parse_integer(row.get(col)) if col in INTEGER_COLUMNS else parse_text(row.get(col))
                for col in LAYOFF_COLUMNS
            }
        except ValueError as e:
            raise ValueError(f"{path}:{line}: {e}") from None
        records.append(LayoffRecord.from_row(values))

    logger.info(f"Parsed {len(records)} records from {path}")
    return tuple(records)


def load_csv(
    path: Path | str,
    table: str | None = None,
    replace: bool = False,
    bind: Engine | None = None,
) -> int:
    """
    Load a layoffs CSV file into the source table.

    Dates stay as text; typing them is part of cleaning.

    Returns:
        Number of rows loaded
    """
    table = table or settings.pipeline.source_table
    records = read_csv(path)
    return write_records(table, records, typed_date=False, replace=replace, bind=bind)
