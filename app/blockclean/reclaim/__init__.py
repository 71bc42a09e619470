"""Reclaim passes over Spark local directories.

This module provides the artifact layout model, pass results and the
reclaimer that deletes expired files and prunes emptied directories.
"""

from blockclean.reclaim.models import ArtifactLayout, DeletionFailure, ReclaimResult
from blockclean.reclaim.reclaimer import DirectoryReclaimer, current_time_millis

__all__ = [
    "ArtifactLayout",
    "DeletionFailure",
    "DirectoryReclaimer",
    "ReclaimResult",
    "current_time_millis",
]
