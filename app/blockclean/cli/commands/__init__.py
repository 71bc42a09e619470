"""CLI commands for blockclean.

This package contains all subcommand implementations.
"""

from blockclean.cli.commands import clean, config, run, usage

__all__ = ["clean", "config", "run", "usage"]
