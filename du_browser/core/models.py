"""Data models for disk usage reports."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ReportEntry:
    """A single file or directory within a report.

    ``name`` is the entry's own path segment. ``children`` is None for files
    and a (possibly empty) report for directories.
    """
    name: str
    size: int
    ratio: float = 0.0
    is_directory: bool = False
    children: Optional[List["ReportEntry"]] = None


# Sibling entries under one directory, sorted by size descending.
Report = List[ReportEntry]


def report_total(report: Report) -> int:
    """Sum of the sizes of all entries in a report."""
    return sum(entry.size for entry in report)
