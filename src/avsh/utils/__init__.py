"""Utility modules for avsh.

This package contains shared utilities for logging and output formatting.
"""

from avsh.utils.logging import configure_logging, get_logger
from avsh.utils.output import OutputFormatter, console, error_console

__all__ = [
    "OutputFormatter",
    "configure_logging",
    "console",
    "error_console",
    "get_logger",
]
