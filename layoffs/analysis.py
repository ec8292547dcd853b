"""
Exploratory reports over the cleaned layoffs dataset.

All functions are read-only and follow SQL aggregate semantics:
- a sum skips missing values and is None when every value is missing
- grouping keeps a None group
- descending orders put None last
"""

from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from layoffs.records import LayoffRecord

T = TypeVar("T")

GROUPABLE_FIELDS = ("company", "location", "industry", "country", "stage")


@dataclass(frozen=True)
class MeasureMaxima:
    total_laid_off: int | None
    percentage_laid_off: Decimal | None


@dataclass(frozen=True)
class GroupTotal:
    key: Any
    total: int | None


@dataclass(frozen=True)
class MonthlyTotal:
    month: str
    total: int | None
    rolling_total: int | None


@dataclass(frozen=True)
class CompanyYearRank:
    company: str
    year: int
    total: int | None
    rank: int


@dataclass
class Report:
    """A named, tabular report ready for display or export."""
    name: str
    title: str
    columns: list[str]
    rows: list[tuple] = field(default_factory=list)

    def as_dicts(self) -> list[dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]


# =============================================================================
# Helpers
# =============================================================================

def sql_sum(values: Iterable[int | None]) -> int | None:
    """Sum ignoring None; None if there was nothing to add."""
    present = [v for v in values if v is not None]
    return sum(present) if present else None


def _desc_nulls_last(value) -> tuple:
    return (value is None, -value if value is not None else 0)


def _group_sum(
    records: Iterable[LayoffRecord],
    key: Callable[[LayoffRecord], Hashable],
) -> list[GroupTotal]:
    groups: dict[Hashable, list[int | None]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record.total_laid_off)
    return [GroupTotal(k, sql_sum(v)) for k, v in groups.items()]


def dense_rank(
    items: Iterable[T],
    key: Callable[[T], Any],
    descending: bool = True,
) -> list[tuple[int, T]]:
    """
    Rank items by ``key`` with dense ranking.

    Items are sorted once (missing keys last), then a single pass hands
    out ranks: equal keys share a rank and the next distinct key gets the
    following integer, so 100, 100, 80 rank 1, 1, 2. Ties keep their
    input order. Keys only need to be orderable, so text and dates work
    as well as numbers.
    """
    items = list(items)
    present = sorted((i for i in items if key(i) is not None), key=key, reverse=descending)
    missing = [i for i in items if key(i) is None]

    ranked = []
    rank = 0
    previous = object()
    for item in present + missing:
        value = key(item)
        if value != previous:
            rank += 1
            previous = value
        ranked.append((rank, item))
    return ranked


def rolling_totals(monthly: Iterable[tuple[str, int | None]]) -> list[int | None]:
    """Running sum over (month, total) pairs, taken in the given order."""
    running = None
    totals = []
    for _month, total in monthly:
        if total is not None:
            running = (running or 0) + total
        totals.append(running)
    return totals


# =============================================================================
# Reports
# =============================================================================

def measure_maxima(records: Iterable[LayoffRecord]) -> MeasureMaxima:
    """Largest layoff count and largest share laid off."""
    records = list(records)
    totals = [r.total_laid_off for r in records if r.total_laid_off is not None]
    percentages = [p for p in (r.percentage_value() for r in records) if p is not None]
    return MeasureMaxima(
        total_laid_off=max(totals) if totals else None,
        percentage_laid_off=max(percentages) if percentages else None,
    )


def full_loss_events(records: Iterable[LayoffRecord]) -> list[LayoffRecord]:
    """Events where the whole company was laid off, largest first."""
    matches = [r for r in records if r.percentage_value() == 1]
    return sorted(matches, key=lambda r: _desc_nulls_last(r.total_laid_off))


def date_range(records: Iterable[LayoffRecord]) -> tuple[date | None, date | None]:
    """Earliest and latest event date."""
    dates = [r.event_date for r in records if isinstance(r.event_date, date)]
    if not dates:
        return None, None
    return min(dates), max(dates)


def totals_by(records: Iterable[LayoffRecord], field_name: str) -> list[GroupTotal]:
    """Total laid off per value of ``field_name``, largest first."""
    if field_name not in GROUPABLE_FIELDS:
        raise ValueError(f"Cannot group by {field_name!r}; expected one of {GROUPABLE_FIELDS}")
    groups = _group_sum(records, lambda r: getattr(r, field_name))
    return sorted(groups, key=lambda g: _desc_nulls_last(g.total))


def totals_by_year(records: Iterable[LayoffRecord]) -> list[GroupTotal]:
    """Total laid off per year, most recent year first."""
    groups = _group_sum(records, lambda r: r.year)
    return sorted(groups, key=lambda g: _desc_nulls_last(g.key))


def totals_by_company_year(records: Iterable[LayoffRecord]) -> list[GroupTotal]:
    """Total laid off per (company, year), largest first."""
    groups = _group_sum(records, lambda r: (r.company, r.year))
    return sorted(groups, key=lambda g: _desc_nulls_last(g.total))


def monthly_totals(records: Iterable[LayoffRecord]) -> list[MonthlyTotal]:
    """Total laid off per month with a running total, oldest month first."""
    groups = _group_sum((r for r in records if r.month is not None), lambda r: r.month)
    groups.sort(key=lambda g: g.key)
    running = rolling_totals((g.key, g.total) for g in groups)
    return [MonthlyTotal(g.key, g.total, rt) for g, rt in zip(groups, running)]


def top_companies_per_year(records: Iterable[LayoffRecord], limit: int = 5) -> list[CompanyYearRank]:
    """
    Companies with the most layoffs in each year.

    Companies are dense-ranked by their yearly total within each year, so
    tied companies share a rank and a year can return more than ``limit``
    rows. Records without a date are left out.
    """
    by_year: dict[int, list[GroupTotal]] = {}
    for group in _group_sum((r for r in records if r.year is not None), lambda r: (r.company, r.year)):
        by_year.setdefault(group.key[1], []).append(group)

    ranking = []
    for year in sorted(by_year):
        for rank, group in dense_rank(by_year[year], key=lambda g: g.total):
            if rank > limit:
                break
            ranking.append(CompanyYearRank(group.key[0], year, group.total, rank))

    ranking.sort(key=lambda r: (r.year, r.rank, r.company))
    return ranking


# =============================================================================
# Report registry
# =============================================================================

def _group_report(name: str, title: str, label: str, groups: Sequence[GroupTotal]) -> Report:
    return Report(name, title, [label, "total_laid_off"], [(g.key, g.total) for g in groups])


def _maxima_report(records, **_):
    maxima = measure_maxima(records)
    return Report(
        "maxima",
        "Largest layoffs",
        ["max_total_laid_off", "max_percentage_laid_off"],
        [(maxima.total_laid_off, maxima.percentage_laid_off)],
    )


def _full_loss_report(records, **_):
    columns = ["company", "location", "industry", "total_laid_off", "date", "stage", "country", "funds_raised_millions"]
    rows = [tuple(r.as_row()[c] for c in columns) for r in full_loss_events(records)]
    return Report("full_loss", "Companies that laid off everyone", columns, rows)


def _date_range_report(records, **_):
    first, last = date_range(records)
    return Report("date_range", "Date range", ["first_date", "last_date"], [(first, last)])


def _field_report(field_name: str):
    def build(records, **_):
        return _group_report(
            f"by_{field_name}",
            f"Layoffs by {field_name}",
            field_name,
            totals_by(records, field_name),
        )
    return build


def _year_report(records, **_):
    return _group_report("by_year", "Layoffs by year", "year", totals_by_year(records))


def _company_year_report(records, **_):
    rows = [(g.key[0], g.key[1], g.total) for g in totals_by_company_year(records)]
    return Report("by_company_year", "Layoffs by company and year", ["company", "year", "total_laid_off"], rows)


def _monthly_report(records, **_):
    rows = [(m.month, m.total, m.rolling_total) for m in monthly_totals(records)]
    return Report("rolling", "Monthly layoffs with rolling total", ["month", "total_laid_off", "rolling_total"], rows)


def _top_companies_report(records, top_n: int = 5, **_):
    rows = [(r.year, r.rank, r.company, r.total) for r in top_companies_per_year(records, limit=top_n)]
    return Report(
        "top_companies",
        f"Top {top_n} companies per year",
        ["year", "rank", "company", "total_laid_off"],
        rows,
    )


REPORTS: dict[str, Callable[..., Report]] = {
    "maxima": _maxima_report,
    "full_loss": _full_loss_report,
    "date_range": _date_range_report,
    "by_company": _field_report("company"),
    "by_industry": _field_report("industry"),
    "by_country": _field_report("country"),
    "by_year": _year_report,
    "by_stage": _field_report("stage"),
    "rolling": _monthly_report,
    "by_company_year": _company_year_report,
    "top_companies": _top_companies_report,
}


def run_report(name: str, records: Iterable[LayoffRecord], top_n: int = 5) -> Report:
    """Build one report from the registry by name."""
    if name not in REPORTS:
        raise KeyError(f"Unknown report: {name}")
    return REPORTS[name](tuple(records), top_n=top_n)
