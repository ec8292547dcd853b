"""
Deduplication pipeline components.

Duplicates are exact: two records are the same only when every descriptive
field matches. Near-duplicates (a typo in one field) are kept apart.
"""

from .row_number import assign_row_numbers, find_duplicates, remove_duplicates

__all__ = [
    "assign_row_numbers",
    "find_duplicates",
    "remove_duplicates",
]
