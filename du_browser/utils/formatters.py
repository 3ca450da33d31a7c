"""Formatting utilities for disk usage reports."""

import posixpath

SIZE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB"]


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable SI units.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human readable size string, e.g. ``"4 B"``, ``"1.0 kB"``, ``"12 kB"``.
    """
    if size_bytes < 10:
        return f"{size_bytes} B"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size_bytes >= 1000 ** (exponent + 1):
        exponent += 1

    value = int(size_bytes / 1000 ** exponent * 10 + 0.5) / 10
    if value < 10:
        return f"{value:.1f} {SIZE_UNITS[exponent]}"
    return f"{value:.0f} {SIZE_UNITS[exponent]}"


def format_percent(ratio: float) -> str:
    """Format a ratio as a percentage with one decimal, e.g. ``"22.2%"``."""
    return f"{ratio * 100:.1f}%"


def normalize_request_path(requested_path: str) -> str:
    """Normalize a requested logical path to an absolute POSIX path.

    Empty input means the root. ``..`` segments cannot climb above the root.
    """
    if not requested_path:
        return "/"
    return posixpath.normpath("/" + requested_path.lstrip("/"))


def parent_path(requested_path: str) -> str:
    """Parent of a normalized logical path; the root is its own parent."""
    return posixpath.dirname(requested_path) or "/"
