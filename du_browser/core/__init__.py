"""Core sizing, caching and encoding functionality."""

from .cache import PathCache
from .clock import FakeClock, RealClock
from .models import Report, ReportEntry, report_total
from .scanner import DirectoryScanner

__all__ = ["PathCache", "FakeClock", "RealClock", "Report", "ReportEntry",
           "report_total", "DirectoryScanner"]
