"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for structured logging and
resource map generation.
"""

from .errors import ERRORS, report_error, report_ok
from .log import log_message
from .resource_map import generate_resource_map_csv

__all__ = ["ERRORS", "report_error", "report_ok", "log_message", "generate_resource_map_csv"]
