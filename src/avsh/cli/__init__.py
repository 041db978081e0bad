"""CLI module for avsh.

This package contains the Click command definition for the avsh CLI.
"""

from avsh.cli.main import cli

__all__ = ["cli"]
