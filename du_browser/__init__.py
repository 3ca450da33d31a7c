"""
du-browser - Interactive disk usage breakdown over HTTP.

This package sizes directory trees, caches the results for a short window,
and serves them as streamed HTML pages, JSON and chart data.
"""

__version__ = "1.0.0"

from .core.cache import PathCache
from .core.scanner import DirectoryScanner
from .server.orchestrator import ReportOrchestrator

__all__ = ["PathCache", "DirectoryScanner", "ReportOrchestrator"]
