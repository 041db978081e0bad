"""Logging configuration for avsh.

Log output goes to stderr so it never mixes with the remote command's
output. Verbosity is controlled via CLI flags:
- No flag: level from the config file (WARNING by default)
- -v: INFO level
- -vv: DEBUG level
- -vvv: DEBUG level + paramiko debug output
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_loggers: dict[str, logging.Logger] = {}


def get_log_level(verbosity: int) -> int:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags (0-3).

    Returns:
        Logging level constant.
    """
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
        3: logging.DEBUG,
    }
    return levels.get(min(verbosity, 3), logging.WARNING)


def configure_logging(
    verbosity: int = 0,
    log_file: str | Path | None = None,
    log_level: str | None = None,
) -> None:
    """Configure logging for avsh.

    Args:
        verbosity: Number of -v flags from CLI (0-3).
        log_file: Optional path to log file. Always logs at DEBUG.
        log_level: Console level used when no -v flag was given.

    Example:
        >>> configure_logging(verbosity=2)  # DEBUG level
    """
    if verbosity == 0 and log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    else:
        level = get_log_level(verbosity)

    root_logger = logging.getLogger("avsh")
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # paramiko parses vagrant's ssh-config output
    paramiko_logger = logging.getLogger("paramiko")
    if verbosity >= 3:
        paramiko_logger.setLevel(logging.DEBUG)
        paramiko_logger.addHandler(console_handler)
    else:
        paramiko_logger.setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Creates child loggers under the 'avsh' namespace.

    Args:
        name: Name of the module (e.g., 'ssh', 'parsed_config').

    Returns:
        Configured logger instance.
    """
    full_name = f"avsh.{name}" if not name.startswith("avsh.") else name

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return _loggers[full_name]
