"""Unit tests for disk capacity probing.

Tests df output parsing, probe error handling and the threshold
comparison made by CapacityMonitor.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from blockclean.core.capacity import (
    CapacityMonitor,
    CapacityProbe,
    CapacityProbeError,
    DfCapacityProbe,
    StatvfsCapacityProbe,
    get_probe,
    parse_df_output,
)
from blockclean.utils.shell import CommandResult


class FixedProbe(CapacityProbe):
    """Probe returning a preset percentage."""

    def __init__(self, used: int) -> None:
        self.used = used
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "fixed"

    def used_percent(self, path: str | Path) -> int:
        self.calls.append(str(path))
        return self.used


class TestParseDfOutput:
    """Tests for parse_df_output."""

    def test_parses_percentage(self, df_output_45: str) -> None:
        """The capacity column is returned as an integer."""
        assert parse_df_output(df_output_45, "/data") == 45

    def test_parses_full_filesystem(self) -> None:
        """100% is a valid reading."""
        output = (
            "Filesystem 1024-blocks Used Available Capacity Mounted on\n"
            "/dev/sdb 10 10 0 100% /x\n"
        )
        assert parse_df_output(output) == 100

    def test_mount_point_with_percent_sign_ignored(self) -> None:
        """Only the first N% token is used."""
        output = (
            "Filesystem 1024-blocks Used Available Capacity Mounted on\n"
            "/dev/sdb 100 7 93 7% /mnt/50%\n"
        )
        assert parse_df_output(output) == 7

    def test_missing_percentage_raises(self, df_output_malformed: str) -> None:
        """Output without a capacity field is an error, not zero."""
        with pytest.raises(CapacityProbeError, match="No usage percentage"):
            parse_df_output(df_output_malformed, "/data")

    def test_header_only_raises(self) -> None:
        """A header without a filesystem line is an error."""
        with pytest.raises(CapacityProbeError, match="Unexpected df output"):
            parse_df_output("Filesystem 1024-blocks Used Available Capacity Mounted on\n")

    def test_non_numeric_percentage_raises(self) -> None:
        """A dash in the capacity column cannot be parsed."""
        output = "Filesystem 1024-blocks Used Available Capacity Mounted on\nproc 0 0 0 -% /proc\n"
        with pytest.raises(CapacityProbeError):
            parse_df_output(output, "/proc")


class TestDfCapacityProbe:
    """Tests for DfCapacityProbe."""

    def test_runs_posix_df(self, df_output_45: str) -> None:
        """df is run in POSIX mode for the given path."""
        df = CommandResult(stdout=df_output_45, stderr="", returncode=0)
        mock_run = MagicMock(return_value=df)
        with patch("blockclean.core.capacity.run_command", mock_run):
            used = DfCapacityProbe(timeout=5.0).used_percent(Path("/data"))

        assert used == 45
        mock_run.assert_called_once_with(["df", "-P", "/data"], timeout=5.0)

    def test_nonzero_exit_raises(self) -> None:
        """A failing df is an error carrying its stderr."""
        stderr = "df: /nope: No such file or directory"
        result = CommandResult(stdout="", stderr=stderr, returncode=1)
        with (
            patch("blockclean.core.capacity.run_command", return_value=result),
            pytest.raises(CapacityProbeError, match="No such file"),
        ):
            DfCapacityProbe().used_percent("/nope")

    def test_missing_binary_raises(self) -> None:
        """A missing df executable surfaces as a probe error."""
        with (
            patch("blockclean.core.capacity.run_command", side_effect=FileNotFoundError("df")),
            pytest.raises(CapacityProbeError, match="Cannot run df"),
        ):
            DfCapacityProbe().used_percent("/data")

    def test_timeout_raises(self) -> None:
        """A hung df surfaces as a probe error."""
        with (
            patch(
                "blockclean.core.capacity.run_command",
                side_effect=subprocess.TimeoutExpired(["df"], 30),
            ),
            pytest.raises(CapacityProbeError),
        ):
            DfCapacityProbe().used_percent("/data")

    def test_name(self) -> None:
        """The df probe is selectable as 'df'."""
        assert DfCapacityProbe().name == "df"


class TestStatvfsCapacityProbe:
    """Tests for StatvfsCapacityProbe."""

    def test_computes_percentage(self) -> None:
        """Used over used-plus-available, as df reports it."""
        usage = MagicMock(total=200, used=45, free=55)
        with patch("blockclean.core.capacity.shutil.disk_usage", return_value=usage):
            assert StatvfsCapacityProbe().used_percent("/data") == 45

    def test_rounds_up(self) -> None:
        """Fractions round up like df."""
        usage = MagicMock(total=3, used=1, free=2)
        with patch("blockclean.core.capacity.shutil.disk_usage", return_value=usage):
            assert StatvfsCapacityProbe().used_percent("/data") == 34

    def test_os_error_raises(self) -> None:
        """An unreadable filesystem surfaces as a probe error."""
        with (
            patch("blockclean.core.capacity.shutil.disk_usage", side_effect=OSError("boom")),
            pytest.raises(CapacityProbeError, match="boom"),
        ):
            StatvfsCapacityProbe().used_percent("/data")

    def test_real_filesystem(self, tmp_path: Path) -> None:
        """Against a real directory the figure is a valid percentage."""
        assert 0 <= StatvfsCapacityProbe().used_percent(tmp_path) <= 100


class TestGetProbe:
    """Tests for get_probe."""

    def test_known_names(self) -> None:
        """Both built-in probes can be created by name."""
        assert isinstance(get_probe("df"), DfCapacityProbe)
        assert isinstance(get_probe("statvfs"), StatvfsCapacityProbe)

    def test_unknown_name(self) -> None:
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown capacity probe"):
            get_probe("du")


class TestCapacityMonitor:
    """Tests for CapacityMonitor.check_used_capacity."""

    @pytest.mark.parametrize(
        ("threshold", "used", "expected"),
        [
            (60, 45, False),
            (60, 85, True),
            (60, 40, False),
            (60, 41, True),
            (0, 100, False),
            (0, 99, False),
            (100, 0, False),
            (100, 1, True),
        ],
    )
    def test_over_threshold(self, threshold: int, used: int, expected: bool) -> None:
        """True exactly when used% exceeds 100 - threshold."""
        monitor = CapacityMonitor(threshold, FixedProbe(used))
        assert monitor.check_used_capacity("/data") is expected

    def test_logs_usage(self, caplog: pytest.LogCaptureFixture) -> None:
        """The observed percentage is logged."""
        with caplog.at_level("INFO"):
            CapacityMonitor(60, FixedProbe(45)).check_used_capacity("/data")

        assert "/data now used 45% space" in caplog.text

    def test_probe_error_propagates(self) -> None:
        """A failed probe is not read as 'under threshold'."""
        probe = MagicMock(spec=CapacityProbe)
        probe.used_percent.side_effect = CapacityProbeError("df failed")

        with pytest.raises(CapacityProbeError):
            CapacityMonitor(60, probe).check_used_capacity("/data")

    def test_defaults_to_df(self, df_output_85: str) -> None:
        """Without an explicit probe, df is used."""
        result = CommandResult(stdout=df_output_85, stderr="", returncode=0)
        with patch("blockclean.core.capacity.run_command", return_value=result):
            assert CapacityMonitor(60).check_used_capacity("/data") is True
