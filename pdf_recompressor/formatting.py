"""
formatting.py - Display helpers for sizes, reductions and the quality control.
"""

import math

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_size(num_bytes: int, decimals: int = 2) -> str:
    """
    Human readable size using 1024-based units.

    Trailing zeros are dropped: 1536 -> "1.5 KB", 1024 -> "1 KB".
    """
    if num_bytes == 0:
        return "0 Bytes"

    k = 1024
    i = 0
    while i < len(SIZE_UNITS) - 1 and num_bytes >= k ** (i + 1):
        i += 1

    value = f"{num_bytes / k ** i:.{decimals}f}"
    if "." in value:
        value = value.rstrip("0").rstrip(".")
    return f"{value} {SIZE_UNITS[i]}"


def calculate_reduction(original_size: int, compressed_size: int) -> int:
    """Percentage saved, rounded half up and never negative."""
    if original_size == 0:
        return 0
    reduction = (original_size - compressed_size) / original_size * 100
    return max(0, int(math.floor(reduction + 0.5)))


def quality_from_slider(value: float) -> float:
    """
    Convert a compression percent control into a quality scalar.

    The control is inverted: a higher displayed percent means stronger
    compression, i.e. lower quality.
    """
    if not 0 <= value <= 100:
        raise ValueError(f"Slider value must be in [0, 100], got {value}")
    return (100 - value) / 100
