"""Disk capacity probing.

A :class:`CapacityProbe` reports how full the filesystem holding a path
is. :class:`CapacityMonitor` compares that figure with the configured
free-space threshold to decide whether a deep clean is needed.
"""

import logging
import math
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from blockclean.utils.shell import run_command

logger = logging.getLogger(__name__)


class CapacityProbeError(Exception):
    """Raised when disk usage cannot be determined."""


class CapacityProbe(ABC):
    """Abstract source of used-space percentages.

    Example:
        >>> probe = DfCapacityProbe()
        >>> probe.used_percent("/data/spark")
        42
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used on the command line."""

    @abstractmethod
    def used_percent(self, path: str | Path) -> int:
        """Return the used-space percentage of the filesystem holding ``path``.

        Raises:
            CapacityProbeError: If the usage cannot be determined.
        """


class DfCapacityProbe(CapacityProbe):
    """Reads usage from ``df -P``.

    The POSIX output format keeps each filesystem on one line, so the
    capacity column is the first ``N%`` token of the last line.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "df"

    def used_percent(self, path: str | Path) -> int:
        try:
            result = run_command(["df", "-P", str(path)], timeout=self._timeout)
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as e:
            raise CapacityProbeError(f"Cannot run df for {path}: {e}") from e

        if not result.success:
            raise CapacityProbeError(f"df failed for {path}: {result.error_summary}")
        return parse_df_output(result.stdout, path)


class StatvfsCapacityProbe(CapacityProbe):
    """Computes usage in-process from ``shutil.disk_usage``.

    Rounds up the same way ``df`` does, so both probes agree on a boundary.
    """

    @property
    def name(self) -> str:
        return "statvfs"

    def used_percent(self, path: str | Path) -> int:
        try:
            usage = shutil.disk_usage(path)
        except OSError as e:
            raise CapacityProbeError(f"Cannot stat filesystem for {path}: {e}") from e

        available = usage.used + usage.free
        if available <= 0:
            raise CapacityProbeError(f"Filesystem for {path} reports no capacity")
        return math.ceil(usage.used * 100 / available)


PROBES: dict[str, type[CapacityProbe]] = {
    "df": DfCapacityProbe,
    "statvfs": StatvfsCapacityProbe,
}


def get_probe(name: str) -> CapacityProbe:
    """Create a probe by name.

    Args:
        name: One of the keys of ``PROBES``.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return PROBES[name]()
    except KeyError:
        msg = f"Unknown capacity probe '{name}', expected one of: {', '.join(PROBES)}"
        raise ValueError(msg) from None


def parse_df_output(output: str, path: str | Path = "") -> int:
    """Extract the used percentage from ``df -P`` output.

    Args:
        output: Raw stdout of ``df -P <path>``.
        path: Queried path, for error messages.

    Returns:
        Used percentage as an integer.

    Raises:
        CapacityProbeError: If no percentage field can be found.
    """
    lines = [line for line in output.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        raise CapacityProbeError(f"Unexpected df output for {path}: {output!r}")

    for token in lines[-1].split():
        if token.endswith("%"):
            try:
                return int(token[:-1])
            except ValueError:
                break
    raise CapacityProbeError(f"No usage percentage in df output for {path}: {lines[-1]!r}")


class CapacityMonitor:
    """Decides whether a filesystem has dropped below its free-space threshold.

    Attributes:
        threshold: Minimum free space to maintain, in percent.
    """

    def __init__(self, threshold: int, probe: CapacityProbe | None = None) -> None:
        """Initialize the monitor.

        Args:
            threshold: Free-space threshold in percent (0-100).
            probe: Usage source. Defaults to DfCapacityProbe.
        """
        self.threshold = threshold
        self._probe = probe or DfCapacityProbe()

    def check_used_capacity(self, path: str | Path) -> bool:
        """Check whether the filesystem holding ``path`` is over threshold.

        Args:
            path: Directory on the filesystem to check.

        Returns:
            True if used space exceeds ``100 - threshold`` percent.

        Raises:
            CapacityProbeError: If the probe fails.
        """
        used = self._probe.used_percent(path)
        logger.info("%s now used %d%% space", path, used)
        return used > 100 - self.threshold
