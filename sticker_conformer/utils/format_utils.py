"""
This module contains small helpers for formatting values and matching file
names. They are mostly used to keep log messages consistent.
"""

from pathlib import Path
from typing import Optional


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string.

    Args:
        size_bytes: The size in bytes.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_bytes)
    for unit in units:
        if size < 1024.0:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}".replace(".00", "")
        size /= 1024.0
    return f"{size:.2f} {units[-1]}".replace(".00", "")


def format_seconds(seconds: float) -> str:
    """Formats seconds for an ffmpeg argument: 3.0 -> "3", 2.5 -> "2.5"."""
    return f"{seconds:g}"


def file_extension(file_name: Optional[str]) -> str:
    """Returns the lowercased extension of a file name, including the dot."""
    if not file_name:
        return ""
    return Path(file_name).suffix.lower()

