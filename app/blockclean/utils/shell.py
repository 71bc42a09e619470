"""Running external commands for disk usage queries."""

import os
import subprocess
from dataclasses import dataclass

# Fixed locale so tool output (df headers, decimal marks) parses the same everywhere
_COMMAND_ENV = {**os.environ, "LC_ALL": "C"}


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of an external command.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Process exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0

    @property
    def error_summary(self) -> str:
        """First stderr line, or the exit status when stderr is empty."""
        lines = self.stderr.strip().splitlines()
        return lines[0] if lines else f"exit code {self.returncode}"


def run_command(args: list[str], *, timeout: float | None = 30.0) -> CommandResult:
    """Run ``args`` under the C locale and capture its output.

    A non-zero exit status is reported through the result, not raised.

    Raises:
        subprocess.TimeoutExpired: If the command outlives ``timeout`` seconds.
        FileNotFoundError: If the executable is missing.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        env=_COMMAND_ENV,
    )
    return CommandResult(completed.stdout, completed.stderr, completed.returncode)
