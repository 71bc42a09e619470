"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

# Fixed "now" for reclaim tests, in epoch milliseconds
NOW_MS = 1_700_000_000_000


@pytest.fixture
def now_ms() -> int:
    """Fixed current time used by the reclaimer clock."""
    return NOW_MS


@pytest.fixture
def make_artifact(tmp_path: Path) -> Callable[[str, int], Path]:
    """Factory creating a file below tmp_path with a given age.

    The returned callable takes a path relative to tmp_path and an age in
    milliseconds relative to NOW_MS.
    """

    def _make(relative: str, age_ms: int) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("block data")
        mtime_ns = (NOW_MS - age_ms) * 1_000_000
        os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _make


@pytest.fixture
def df_output_45() -> str:
    """Sample `df -P` output for a filesystem at 45% used."""
    return """Filesystem     1024-blocks     Used Available Capacity Mounted on
/dev/nvme1n1     103081248 46386562  56694686      45% /data"""


@pytest.fixture
def df_output_85() -> str:
    """Sample `df -P` output for a filesystem at 85% used."""
    return """Filesystem     1024-blocks     Used Available Capacity Mounted on
/dev/nvme1n1     103081248 87619060  15462188      85% /data"""


@pytest.fixture
def df_output_malformed() -> str:
    """`df` output without a capacity column."""
    return """Filesystem     1024-blocks     Used Available
/dev/nvme1n1     103081248 87619060  15462188"""
