"""CLI commands for RateWatch.

This package provides the command-line interface for RateWatch,
including alert management, rate snapshots and the alert checker.
"""

from ratewatch.cli.main import cli, main

__all__ = ["cli", "main"]
