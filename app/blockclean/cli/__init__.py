"""CLI package for blockclean.

This package contains the Typer application and all subcommands.
"""

from blockclean.cli.main import app

__all__ = ["app"]
