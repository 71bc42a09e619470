"""Shared types and helpers for CLI commands."""

from enum import Enum

from blockclean.core.capacity import CapacityProbe, get_probe


class ProbeChoice(str, Enum):
    """Available disk usage probes."""

    DF = "df"
    STATVFS = "statvfs"


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    TOML = "toml"


def make_probe(choice: ProbeChoice) -> CapacityProbe:
    """Create the probe selected on the command line."""
    return get_probe(choice.value)
