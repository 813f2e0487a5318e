"""CLI commands for ignorectl.

This package contains all subcommand implementations.
"""

from ignorectl.cli.commands import clean, config, scan

__all__ = ["clean", "config", "scan"]
