"""
Field normalization for layoff records.

Normalizers rewrite the inconsistent spellings found in the raw export
into one canonical form per value.
"""

from collections.abc import Iterable

from loguru import logger

from layoffs.records import Snapshot, LayoffRecord

from .dates import DEFAULT_DATE_FORMAT, DateParseError, parse_dates, parse_event_date
from .fields import canonical_industry, strip_country_punctuation, trim_company


def normalize_records(
    records: Iterable[LayoffRecord],
    date_format: str = DEFAULT_DATE_FORMAT,
    date_errors: str = "raise",
) -> Snapshot:
    """Apply every field rule, then type the dates."""
    records = tuple(records)
    standardized = tuple(
        record.evolve(
            company=trim_company(record.company),
            industry=canonical_industry(record.industry),
            country=strip_country_punctuation(record.country),
        )
        for record in records
    )
    changed = sum(1 for before, after in zip(records, standardized) if before != after)
    logger.info(f"Normalization: rewrote text fields of {changed} of {len(records)} records")

    return parse_dates(standardized, fmt=date_format, errors=date_errors)


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "DateParseError",
    "canonical_industry",
    "normalize_records",
    "parse_dates",
    "parse_event_date",
    "strip_country_punctuation",
    "trim_company",
]
