"""HTTP serving of disk usage reports."""

from .app import build_orchestrator, create_app
from .orchestrator import ReportOrchestrator, ReportStream
from .renderer import ReportRenderer

__all__ = ["build_orchestrator", "create_app", "ReportOrchestrator", "ReportStream", "ReportRenderer"]
