"""
Record types for the layoffs pipeline.

A snapshot is a tuple of LayoffRecord objects in load order. Every pipeline
stage takes a snapshot and returns a new one; records are frozen.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from layoffs.config import LAYOFF_COLUMNS

# Attribute names whose column name differs
_COLUMN_TO_FIELD = {"date": "event_date"}
_FIELD_TO_COLUMN = {v: k for k, v in _COLUMN_TO_FIELD.items()}


@dataclass(frozen=True)
class LayoffRecord:
    """
    One layoff event.

    There is no primary key: two records are the same event only if every
    field is equal. ``event_date`` holds the raw ``m/d/Y`` text until the
    date normalizer has run, and a ``date`` (or None) afterwards.
    """
    company: str
    location: str | None = None
    industry: str | None = None
    total_laid_off: int | None = None
    percentage_laid_off: str | None = None
    event_date: str | date | None = None
    stage: str | None = None
    country: str | None = None
    funds_raised_millions: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LayoffRecord":
        """Build a record from a row keyed by table column names."""
        values = {_COLUMN_TO_FIELD.get(col, col): row.get(col) for col in LAYOFF_COLUMNS}
        pct = values["percentage_laid_off"]
        if pct is not None and not isinstance(pct, str):
            values["percentage_laid_off"] = str(pct)
        return cls(**values)

    def as_row(self) -> dict[str, Any]:
        """Return the record as a dict keyed by table column names."""
        return {_FIELD_TO_COLUMN.get(f.name, f.name): getattr(self, f.name) for f in fields(self)}

    def dedup_key(self) -> tuple:
        """All descriptive fields, the equality group for deduplication."""
        return tuple(getattr(self, f.name) for f in fields(self))

    def percentage_value(self) -> Decimal | None:
        """Percentage laid off as a number, None if missing or not a finite number."""
        if self.percentage_laid_off is None:
            return None
        try:
            value = Decimal(str(self.percentage_laid_off).strip())
        except InvalidOperation:
            return None
        # NaN and Infinity parse but cannot be compared or summed
        return value if value.is_finite() else None

    @property
    def year(self) -> int | None:
        if isinstance(self.event_date, date):
            return self.event_date.year
        return None

    @property
    def month(self) -> str | None:
        """Event month as ``YYYY-MM``."""
        if isinstance(self.event_date, date):
            return self.event_date.strftime("%Y-%m")
        return None

    def evolve(self, **changes) -> "LayoffRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


Snapshot = tuple[LayoffRecord, ...]
