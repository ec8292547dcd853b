"""
Exports of the cleaned dataset and of reports.

Files land in ``data/processed/`` and are written atomically.
"""

import csv
import io
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from layoffs.analysis import Report
from layoffs.config import LAYOFF_COLUMNS, settings
from layoffs.records import LayoffRecord
from layoffs.utils.files import atomic_write_json, atomic_write_text


def _to_csv(columns: list[str], rows: Iterable[Iterable]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return buffer.getvalue()


def export_records(
    records: Iterable[LayoffRecord],
    output_dir: Path | None = None,
    name: str = "layoffs_clean",
) -> dict[str, Path]:
    """
    Write the cleaned dataset as CSV and JSON.

    Returns:
        Paths of the written files keyed by format
    """
    output_dir = Path(output_dir or settings.pipeline.data_processed_dir)
    rows = [record.as_row() for record in records]

    paths = {
        "csv": atomic_write_text(
            output_dir / f"{name}.csv",
            _to_csv(LAYOFF_COLUMNS, ([row[c] for c in LAYOFF_COLUMNS] for row in rows)),
        ),
        "json": atomic_write_json(output_dir / f"{name}.json", rows, indent=2),
    }
    logger.info(f"Exported {len(rows)} records to {output_dir}")
    return paths


def export_reports(reports: Iterable[Report], output_dir: Path | None = None) -> Path:
    """Write reports to a single ``reports.json`` keyed by report name."""
    output_dir = Path(output_dir or settings.pipeline.data_processed_dir)
    payload = {
        report.name: {"title": report.title, "rows": report.as_dicts()}
        for report in reports
    }
    path = atomic_write_json(output_dir / "reports.json", payload, indent=2)
    logger.info(f"Exported {len(payload)} reports to {path}")
    return path
