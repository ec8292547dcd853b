#!/usr/bin/env python3
"""
World Layoffs - Data Pipeline Entry Point

Loads the raw layoffs export, cleans it into a staging table and runs the
exploratory reports.

Usage:
    python -m layoffs.main load data/raw/layoffs.csv
    python -m layoffs.main stage
    python -m layoffs.main clean
    python -m layoffs.main report all
    python -m layoffs.main status
"""

import json
import sys
from pathlib import Path

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from layoffs.analysis import REPORTS, Report, run_report
from layoffs.cleaning import CleaningPipeline
from layoffs.config import settings
from layoffs.database import (
    StagingExistsError,
    TableNotFoundError,
    count_rows,
    create_staging_copy,
    read_records,
    table_exists,
    write_records,
)
from layoffs.deduplication import find_duplicates
from layoffs.exporter import export_records, export_reports
from layoffs.loader import load_csv
from layoffs.normalizers import DateParseError
from layoffs.utils.logging import setup_logging

console = Console()

# Errors that end a command with a message instead of a traceback
PIPELINE_ERRORS = (TableNotFoundError, StagingExistsError, DateParseError, ValueError)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _print_report(report: Report, limit: int | None = None) -> None:
    table = Table(title=report.title)
    for column in report.columns:
        table.add_column(column)

    rows = report.rows if limit is None else report.rows[:limit]
    for row in rows:
        table.add_row(*("-" if v is None else str(v) for v in row))

    console.print(table)
    if limit is not None and len(report.rows) > limit:
        console.print(f"[dim]Showing {limit} of {len(report.rows)} rows[/dim]")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also log to this file (relative paths go to the processed directory)")
def cli(debug, log_file):
    """World Layoffs Data Pipeline"""
    if debug or log_file:
        setup_logging(level="DEBUG" if debug else None, log_file=log_file)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--table", default=None, help="Target table (default: source table)")
@click.option("--replace", is_flag=True, help="Overwrite the table if it exists")
def load(csv_path: Path, table: str | None, replace: bool):
    """Load a layoffs CSV export into the source table."""
    table = table or settings.pipeline.source_table
    try:
        loaded = load_csv(csv_path, table=table, replace=replace)
    except PIPELINE_ERRORS as e:
        logger.exception(f"Loading {csv_path} failed")
        _fail(f"Load failed: {e}")

    console.print(f"[green]Loaded {loaded} rows into {table}[/green]")


@cli.command()
@click.option("--replace", is_flag=True, help="Overwrite the staging table if it exists")
def stage(replace: bool):
    """Copy the source table into the staging table."""
    source = settings.pipeline.source_table
    target = settings.pipeline.staging_table
    try:
        copied = create_staging_copy(source, target, replace=replace)
    except PIPELINE_ERRORS as e:
        logger.exception("Staging failed")
        _fail(f"Staging failed: {e}")

    console.print(f"[green]Copied {copied} rows from {source} to {target}[/green]")


@cli.command()
@click.option("--limit", type=int, default=20, help="Number of rows to show")
def duplicates(limit: int):
    """Preview duplicate rows in the staging table."""
    try:
        records = read_records(settings.pipeline.staging_table)
    except PIPELINE_ERRORS as e:
        _fail(str(e))

    extra = find_duplicates(records)
    table = Table(title=f"Duplicate rows in {settings.pipeline.staging_table}")
    for column in ("company", "location", "industry", "total_laid_off", "date"):
        table.add_column(column)
    for record in extra[:limit]:
        table.add_row(
            record.company,
            record.location or "-",
            record.industry or "-",
            str(record.total_laid_off) if record.total_laid_off is not None else "-",
            str(record.event_date) if record.event_date is not None else "-",
        )

    console.print(table)
    console.print(f"\n[dim]{len(extra)} duplicate rows found[/dim]")


@cli.command()
@click.option(
    "--date-errors",
    type=click.Choice(["raise", "drop"]),
    default=None,
    help="Abort on an unparseable date, or drop that row",
)
@click.option(
    "--backfill-strategy",
    type=click.Choice(["first", "min"]),
    default=None,
    help="Which industry to use when a company has several",
)
@click.option("--export", "export_files", is_flag=True, help="Also write CSV/JSON to the processed directory")
def clean(date_errors: str | None, backfill_strategy: str | None, export_files: bool):
    """Clean the staging table into the clean table."""
    source = settings.pipeline.staging_table
    target = settings.pipeline.clean_table

    console.print("\n[bold blue]World Layoffs - Cleaning[/bold blue]")
    console.print(f"Staging table: {source}")
    console.print(f"Clean table: {target}\n")

    pipeline = CleaningPipeline(date_errors=date_errors, backfill_strategy=backfill_strategy)
    try:
        result = pipeline.run(read_records(source))
        write_records(target, result.records, typed_date=True, replace=True)
    except PIPELINE_ERRORS as e:
        logger.exception("Cleaning failed")
        _fail(f"Cleaning failed: {e}")

    summary = Table(title="Cleaning Summary")
    summary.add_column("Step")
    summary.add_column("Rows")
    summary.add_row("Read", str(result.records_in))
    summary.add_row("Duplicates removed", str(result.duplicates_removed))
    summary.add_row("Dates rejected", str(result.dates_rejected))
    summary.add_row("Industries backfilled", str(result.industries_backfilled))
    summary.add_row("Pruned (no measures)", str(result.records_pruned))
    summary.add_row("Written", str(result.records_out))
    console.print(summary)

    if export_files:
        paths = export_records(result.records)
        for fmt, path in paths.items():
            console.print(f"  {fmt}: {path}")


@cli.command()
@click.argument("name", type=click.Choice(list(REPORTS.keys()) + ["all"]))
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
@click.option("--limit", type=int, default=None, help="Maximum rows to show per report")
@click.option("--top-n", type=int, default=None, help="Ranking depth for top_companies")
@click.option("--export", "export_files", is_flag=True, help="Also write reports.json")
def report(name: str, as_json: bool, limit: int | None, top_n: int | None, export_files: bool):
    """
    Run exploratory reports on the clean table.

    NAME is a report name (e.g. 'rolling') or 'all'.
    """
    top_n = top_n or settings.pipeline.top_n
    try:
        records = read_records(settings.pipeline.clean_table)
    except PIPELINE_ERRORS as e:
        _fail(f"{e}. Run 'clean' first.")

    names = list(REPORTS.keys()) if name == "all" else [name]
    reports = [run_report(n, records, top_n=top_n) for n in names]

    if as_json:
        payload = {r.name: r.as_dicts()[:limit] if limit is not None else r.as_dicts() for r in reports}
        click.echo(json.dumps(payload, default=str, indent=2))
    else:
        for r in reports:
            _print_report(r, limit=limit)

    if export_files:
        path = export_reports(reports)
        console.print(f"[green]Reports written to {path}[/green]")


@cli.command()
def status():
    """Show row counts of the pipeline tables."""
    console.print("\n[bold blue]World Layoffs - Pipeline Status[/bold blue]\n")

    table = Table()
    table.add_column("Stage")
    table.add_column("Table")
    table.add_column("Rows")

    stages = [
        ("Source", settings.pipeline.source_table),
        ("Staging", settings.pipeline.staging_table),
        ("Clean", settings.pipeline.clean_table),
    ]
    for label, name in stages:
        rows = str(count_rows(name)) if table_exists(name) else "[yellow]missing[/yellow]"
        table.add_row(label, name, rows)

    console.print(table)


if __name__ == "__main__":
    cli()
