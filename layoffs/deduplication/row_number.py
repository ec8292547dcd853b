"""Row-number deduplication over full-row equality groups."""

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable

from loguru import logger

from layoffs.records import LayoffRecord, Snapshot


def _full_row(record: LayoffRecord) -> Hashable:
    return record.dedup_key()


def assign_row_numbers(
    records: Iterable[LayoffRecord],
    key: Callable[[LayoffRecord], Hashable] = _full_row,
) -> list[tuple[int, LayoffRecord]]:
    """
    Number each record within its equality group, in load order.

    The first record of a group gets 1, its next copy 2, and so on.
    None values compare equal to each other, so two rows that are both
    missing the same field still fall in the same group.

    Args:
        records: Records in load order
        key: Function returning the group key of a record

    Returns:
        (row_number, record) pairs in the original order
    """
    seen: dict[Hashable, int] = defaultdict(int)
    numbered = []
    for record in records:
        group = key(record)
        seen[group] += 1
        numbered.append((seen[group], record))
    return numbered


def find_duplicates(records: Iterable[LayoffRecord]) -> Snapshot:
    """Return the extra copies (row number 2 and above)."""
    return tuple(record for row_num, record in assign_row_numbers(records) if row_num >= 2)


def remove_duplicates(records: Iterable[LayoffRecord]) -> Snapshot:
    """
    Keep the first copy of every record.

    Idempotent: running it on its own output changes nothing.
    """
    numbered = assign_row_numbers(records)
    kept = tuple(record for row_num, record in numbered if row_num == 1)
    removed = len(numbered) - len(kept)
    logger.info(f"Deduplication: removed {removed} duplicates from {len(numbered)} records")
    return kept
