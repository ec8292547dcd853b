"""Atomic file writes for exported datasets and reports."""

import json
from pathlib import Path
from typing import Any


def atomic_write_text(dest_path: Path, content: str) -> Path:
    """
    Write text to file atomically.

    Args:
        dest_path: Final destination path
        content: Text to write (UTF-8)

    Returns:
        Path to written file
    """
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = dest_path.with_suffix(dest_path.suffix + ".tmp")

    try:
        temp_path.write_text(content, encoding="utf-8", newline="")
        temp_path.replace(dest_path)
        return dest_path
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write_json(dest_path: Path, data: Any, indent: int | None = None) -> Path:
    """
    Write JSON data atomically - only replaces target file on success.

    1. Writes to temp file in same directory
    2. Validates JSON is readable
    3. Renames temp to final (atomic on same filesystem)

    Dates and Decimals are serialized with ``str``.

    Args:
        dest_path: Final destination path
        data: Data to serialize as JSON
        indent: JSON indent (None for compact)

    Returns:
        Path to written file
    """
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = dest_path.with_suffix(dest_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, default=str, ensure_ascii=False, indent=indent)

        # Verify file is valid JSON
        with open(temp_path, encoding="utf-8") as f:
            json.load(f)

        temp_path.replace(dest_path)
        return dest_path

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise
