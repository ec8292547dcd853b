"""Utility modules for the layoffs pipeline."""

from layoffs.utils.files import atomic_write_json, atomic_write_text
from layoffs.utils.logging import setup_logging

__all__ = [
    "atomic_write_json",
    "atomic_write_text",
    "setup_logging",
]
