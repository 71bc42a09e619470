"""Utility modules for blockclean.

This module exports commonly used utility functions.
"""

from blockclean.utils.formatting import (
    console,
    create_table,
    err_console,
    format_duration_ms,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from blockclean.utils.shell import CommandResult, run_command

__all__ = [
    "CommandResult",
    "console",
    "create_table",
    "err_console",
    "format_duration_ms",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "setup_logging",
]
