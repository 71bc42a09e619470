"""Shared Rich display functions for reclaim results.

Provides the result table and failure listing used by the ``run --once``
and ``clean`` commands.
"""

from rich.table import Table

from blockclean.reclaim.models import ReclaimResult
from blockclean.utils.formatting import (
    console,
    create_table,
    format_duration_ms,
    format_size,
    print_success,
    print_warning,
)


def create_results_table(results: list[ReclaimResult]) -> Table:
    """Create a table with one row per reclaim pass.

    Args:
        results: Completed reclaim passes.

    Returns:
        Rich Table with root, expiry, counts, freed size and failures.
    """
    table = create_table("Reclaim Results", "Root", "Expiry", "Files", "Dirs", "Freed", "Failures")
    for result in results:
        failures = (
            f"[error]{len(result.failures)}[/error]" if result.failures else "[muted]0[/muted]"
        )
        table.add_row(
            result.root,
            format_duration_ms(result.expiry_ms),
            str(result.files_deleted),
            str(result.dirs_deleted),
            f"[info]{format_size(result.bytes_freed)}[/info]",
            failures,
        )
    return table


def print_results(results: list[ReclaimResult]) -> None:
    """Print the results table followed by any failed deletions.

    Args:
        results: Completed reclaim passes.
    """
    if not results:
        print_warning("No reclaim pass completed.")
        return

    console.print(create_results_table(results))

    failures = [failure for result in results for failure in result.failures]
    for failure in failures:
        print_warning(f"Could not delete {failure.path}: {failure.error}")

    if not failures:
        total_files = sum(r.files_deleted for r in results)
        total_bytes = sum(r.bytes_freed for r in results)
        print_success(f"Removed {total_files} file(s), {format_size(total_bytes)} freed.")
