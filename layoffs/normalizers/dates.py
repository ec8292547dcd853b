"""
Date parsing for the textual ``date`` column.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Optional

from loguru import logger

from layoffs.config import NULL_TOKEN
from layoffs.records import LayoffRecord, Snapshot

DEFAULT_DATE_FORMAT = "%m/%d/%Y"


class DateParseError(ValueError):
    """Raised when a date value does not match the expected format."""

    def __init__(self, value: str, fmt: str, row: int | None = None):
        where = f" (row {row})" if row is not None else ""
        super().__init__(f"Cannot parse date {value!r} with format {fmt!r}{where}")
        self.value = value
        self.fmt = fmt
        self.row = row


def parse_event_date(value, fmt: str = DEFAULT_DATE_FORMAT) -> Optional[date]:
    """Parse a ``m/d/Y`` string into a date.

    Missing values (None, blank, "NULL") give None. A value that is already
    a date is returned unchanged, so parsing twice is harmless.

    Raises:
        DateParseError: if the text does not match ``fmt``
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text or text.upper() == NULL_TOKEN:
        return None

    try:
        return datetime.strptime(text, fmt).date()
    except ValueError:
        # Dates already written back as ISO text
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise DateParseError(text, fmt) from None


def parse_dates(
    records: Iterable[LayoffRecord],
    fmt: str = DEFAULT_DATE_FORMAT,
    errors: str = "raise",
) -> Snapshot:
    """
    Convert every record's event_date to a date.

    Args:
        records: Records whose event_date may still be text
        fmt: strptime format of the text dates
        errors: "raise" aborts the batch on the first bad value,
                "drop" rejects the record and keeps going

    Returns:
        New snapshot with typed dates
    """
    if errors not in ("raise", "drop"):
        raise ValueError(f"Unknown date error policy: {errors!r}")

    parsed = []
    for row, record in enumerate(records, start=1):
        try:
            event_date = parse_event_date(record.event_date, fmt)
        except DateParseError as e:
            if errors == "raise":
                raise DateParseError(e.value, fmt, row=row) from None
            logger.warning(f"Rejecting row {row} ({record.company}): bad date {e.value!r}")
            continue
        parsed.append(record.evolve(event_date=event_date))

    return tuple(parsed)
