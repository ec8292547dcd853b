"""
Null and blank handling for the industry column.

Some events were exported without an industry even though another event
of the same company has one. Those gaps are filled from the company's
other rows.
"""

from collections.abc import Iterable

from loguru import logger

from layoffs.records import LayoffRecord, Snapshot

BACKFILL_STRATEGIES = ("first", "min")


def blank_to_null(records: Iterable[LayoffRecord]) -> Snapshot:
    """Turn empty or whitespace-only industries into None."""
    return tuple(
        record.evolve(industry=None)
        if record.industry is not None and not record.industry.strip()
        else record
        for record in records
    )


def industry_donors(records: Iterable[LayoffRecord]) -> dict[str, list[str]]:
    """Distinct non-null industries per company, in first-seen order."""
    donors: dict[str, list[str]] = {}
    for record in records:
        if record.industry is None:
            continue
        known = donors.setdefault(record.company, [])
        if record.industry not in known:
            known.append(record.industry)
    return donors


def backfill_industry(records: Iterable[LayoffRecord], strategy: str = "first") -> Snapshot:
    """
    Fill missing industries from other rows of the same company.

    Blank strings are turned into None first, so only None is filled.
    When a company has several different industries the pick is made by
    ``strategy``: "first" takes the one seen first in load order, "min"
    the alphabetically smallest.

    Args:
        records: Records to fill
        strategy: Tie-break between several candidate industries

    Returns:
        New snapshot; companies without any known industry keep None
    """
    if strategy not in BACKFILL_STRATEGIES:
        raise ValueError(f"Unknown backfill strategy: {strategy!r}")

    records = blank_to_null(records)
    donors = industry_donors(records)

    chosen = {}
    for company, industries in donors.items():
        if len(industries) > 1:
            logger.warning(f"Company {company!r} has {len(industries)} industries {industries}; using {strategy}")
        chosen[company] = industries[0] if strategy == "first" else min(industries)

    filled = 0
    result = []
    for record in records:
        if record.industry is None and record.company in chosen:
            record = record.evolve(industry=chosen[record.company])
            filled += 1
        result.append(record)

    missing = sum(1 for r in result if r.industry is None)
    logger.info(f"Backfill: filled {filled} industries, {missing} still missing")
    return tuple(result)
