"""Human-readable size formatting helpers."""

from typing import Union

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]
KIBIBYTE = 1024
MEBIBYTE = KIBIBYTE * KIBIBYTE


def format_bytes(size: Union[int, float]) -> str:
    """Format a byte count using 1024-based units and two-decimal rounding.

    Trailing zeros are dropped, so 1048576 renders as "1 MB" and 1536
    as "1.5 KB". Values beyond the largest unit stay in terabytes.

    Args:
        size: Number of bytes (non-negative)

    Returns:
        Formatted size string
    """
    if size <= 0:
        return "0 B"

    unit_index = 0
    value = float(size)
    while value >= KIBIBYTE and unit_index < len(SIZE_UNITS) - 1:
        value /= KIBIBYTE
        unit_index += 1

    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {SIZE_UNITS[unit_index]}"


def abbreviate_path(path: str, max_length: int = 50) -> str:
    """Shorten a path by keeping its tail and prefixing '...'."""
    if len(path) <= max_length:
        return path
    return "..." + path[-(max_length - 3):]
