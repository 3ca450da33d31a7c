"""Utility modules for disk usage reports."""

from .formatters import format_file_size, format_percent, normalize_request_path, parent_path

__all__ = ["format_file_size", "format_percent", "normalize_request_path", "parent_path"]
