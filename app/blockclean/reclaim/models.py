"""Data structures describing reclaim passes.

Spark keeps two kinds of artifacts under each local directory:

    local-dir/
      blockmgr-<uuid>/          shuffle layout
        <hash-sub-dir>/
          shuffle_0_0.data
          shuffle_0_0.index
      spark-<uuid>/             cache layout
        <file>
"""

from dataclasses import dataclass, field
from enum import Enum


class ArtifactLayout(str, Enum):
    """Recognised top-level directory layouts, keyed by name prefix.

    Attributes:
        SHUFFLE: ``blockmgr*`` directories holding hash sub-directories.
        CACHE: ``spark*`` directories holding files directly.
    """

    SHUFFLE = "blockmgr"
    CACHE = "spark"

    @classmethod
    def for_name(cls, name: str) -> "ArtifactLayout | None":
        """Classify a top-level directory name.

        Returns:
            The matching layout, or None if the name is not recognised.
        """
        for layout in cls:
            if name.startswith(layout.value):
                return layout
        return None


@dataclass(frozen=True, slots=True)
class DeletionFailure:
    """A file or directory the reclaimer could not remove.

    Attributes:
        path: Path that was being deleted.
        error: Error message from the operating system.
    """

    path: str
    error: str


@dataclass(slots=True)
class ReclaimResult:
    """Outcome of one reclaim pass over a root directory.

    Attributes:
        root: Root directory that was cleaned.
        expiry_ms: Retention window used for the pass.
        files_deleted: Number of files removed.
        dirs_deleted: Number of emptied directories removed.
        bytes_freed: Total size of removed files.
        failures: Deletions that failed and were skipped.
    """

    root: str
    expiry_ms: int
    files_deleted: int = 0
    dirs_deleted: int = 0
    bytes_freed: int = 0
    failures: list[DeletionFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no deletion failed during the pass."""
        return not self.failures
