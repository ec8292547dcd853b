"""
Cleaning pipeline for the layoffs dataset.

Stages, in order:
1. Remove exact duplicates
2. Standardize text fields and parse dates
3. Blank industries to null, then backfill from the same company
4. Drop rows with no measure at all

Each stage returns a new snapshot; the input is never modified.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from layoffs.backfill import backfill_industry
from layoffs.config import settings
from layoffs.deduplication import remove_duplicates
from layoffs.normalizers import normalize_records
from layoffs.records import LayoffRecord, Snapshot


def prune_empty_measures(records: Iterable[LayoffRecord]) -> Snapshot:
    """Drop records missing both total_laid_off and percentage_laid_off."""
    return tuple(
        record for record in records
        if record.total_laid_off is not None or record.percentage_laid_off is not None
    )


@dataclass
class CleaningResult:
    """Result of a cleaning run."""
    records: Snapshot = ()
    records_in: int = 0
    duplicates_removed: int = 0
    dates_rejected: int = 0
    industries_backfilled: int = 0
    records_pruned: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def records_out(self) -> int:
        return len(self.records)

    @property
    def duration_seconds(self) -> float | None:
        """Calculate duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


class CleaningPipeline:
    """
    Runs the cleaning stages over a snapshot.

    Args:
        date_format: strptime format of the raw date text
        date_errors: "raise" to abort on a bad date, "drop" to reject the row
        backfill_strategy: "first" or "min", see backfill_industry
    """

    def __init__(
        self,
        date_format: str | None = None,
        date_errors: str | None = None,
        backfill_strategy: str | None = None,
    ):
        self.date_format = date_format or settings.pipeline.date_format
        self.date_errors = date_errors or settings.pipeline.date_errors
        self.backfill_strategy = backfill_strategy or settings.pipeline.backfill_strategy

    def run(self, records: Iterable[LayoffRecord]) -> CleaningResult:
        records = tuple(records)
        result = CleaningResult(records_in=len(records), started_at=datetime.utcnow())

        try:
            unique = remove_duplicates(records)
            result.duplicates_removed = len(records) - len(unique)

            normalized = normalize_records(
                unique,
                date_format=self.date_format,
                date_errors=self.date_errors,
            )
            result.dates_rejected = len(unique) - len(normalized)

            missing_before = sum(1 for r in normalized if not (r.industry or "").strip())
            filled = backfill_industry(normalized, strategy=self.backfill_strategy)
            missing_after = sum(1 for r in filled if r.industry is None)
            result.industries_backfilled = missing_before - missing_after

            pruned = prune_empty_measures(filled)
            result.records_pruned = len(filled) - len(pruned)
            logger.info(f"Pruning: dropped {result.records_pruned} records without measures")

            result.records = pruned

        except Exception as e:
            logger.error(f"Cleaning failed: {e}")
            result.errors.append(str(e))
            raise

        finally:
            result.completed_at = datetime.utcnow()

        logger.info(
            f"Cleaning complete: {result.records_in} in, {result.records_out} out, "
            f"{result.duration_seconds:.2f}s"
        )
        return result


def clean_records(records: Iterable[LayoffRecord], **options) -> Snapshot:
    """Clean a snapshot with the configured rules and return the result."""
    return CleaningPipeline(**options).run(records).records
