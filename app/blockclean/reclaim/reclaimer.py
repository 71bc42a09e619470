"""Stale artifact removal for Spark local directories.

Walks the shuffle and cache layouts below a root directory, deletes files
whose modification time is older than the retention window and then
removes the directories those deletions left empty, deepest first.

Every deletion tolerates the target disappearing underneath it, so
passes over the same root may run concurrently.
"""

import errno
import logging
import os
import stat
import time
from collections.abc import Callable
from pathlib import Path

from blockclean.reclaim.models import ArtifactLayout, DeletionFailure, ReclaimResult

logger = logging.getLogger(__name__)

# Raised by rmdir when an entry appeared after the emptiness check
_NOT_EMPTY_ERRNOS = frozenset({errno.ENOTEMPTY, errno.EEXIST})


def current_time_millis() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class DirectoryReclaimer:
    """Deletes expired Spark artifacts and prunes emptied directories.

    A file is expired when ``now - mtime > expiry`` in milliseconds; a file
    exactly at the boundary is kept. A directory nested deeper than the
    recognised layouts is never descended into; it is removed only when
    its own mtime has expired and it is empty.

    Attributes:
        _clock: Returns the current time in milliseconds since the epoch.
    """

    def __init__(self, clock: Callable[[], int] = current_time_millis) -> None:
        """Initialize the reclaimer.

        Args:
            clock: Time source in epoch milliseconds.
        """
        self._clock = clock

    def reclaim(self, root: str | Path, expiry_ms: int) -> ReclaimResult:
        """Run one reclaim pass over ``root``.

        Shuffle directories (``blockmgr*``) are handled first: each hash
        sub-directory is emptied of expired files and pruned, then the
        block manager directory itself is pruned. Cache directories
        (``spark*``) follow, with the same treatment one level up. Other
        entries under ``root`` are not touched. Layout and hash directories
        that are symlinks are skipped rather than followed.

        Args:
            root: Existing root directory to clean.
            expiry_ms: Retention window in milliseconds.

        Returns:
            ReclaimResult describing what was removed and what failed.
        """
        root_path = Path(root)
        result = ReclaimResult(root=str(root_path), expiry_ms=expiry_ms)
        logger.info("Start clean %s with expiry %d ms", root_path, expiry_ms)

        for block_manager_dir in self._layout_dirs(root_path, ArtifactLayout.SHUFFLE):
            logger.info("Start check blockManager dir %s", block_manager_dir.name)
            for sub_dir in self._sub_dirs(block_manager_dir):
                logger.info("Start check sub dir %s", sub_dir.name)
                self._expire_files(sub_dir, expiry_ms, result)
                self._prune(sub_dir, result)
            self._prune(block_manager_dir, result)

        for cache_dir in self._layout_dirs(root_path, ArtifactLayout.CACHE):
            logger.info("Start check cache dir %s", cache_dir.name)
            self._expire_files(cache_dir, expiry_ms, result)
            self._prune(cache_dir, result)

        logger.info(
            "Finish clean %s: %d files and %d dirs deleted, %d bytes freed, %d failures",
            root_path,
            result.files_deleted,
            result.dirs_deleted,
            result.bytes_freed,
            len(result.failures),
        )
        return result

    def prune_empty(self, directory: str | Path) -> bool:
        """Delete ``directory`` if it currently has no entries.

        A directory that is missing, or that gains an entry between the
        check and the removal, is left as it is.

        Args:
            directory: Directory to prune.

        Returns:
            True if this call removed the directory.

        Raises:
            OSError: If the directory is empty but could not be removed.
        """
        try:
            with os.scandir(directory) as entries:
                if next(entries, None) is not None:
                    return False
        except FileNotFoundError:
            logger.debug("Dir %s already removed", directory)
            return False

        try:
            os.rmdir(directory)
        except FileNotFoundError:
            logger.debug("Dir %s already removed", directory)
            return False
        except OSError as e:
            if e.errno in _NOT_EMPTY_ERRNOS:
                logger.debug("Dir %s is no longer empty", directory)
                return False
            raise
        return True

    def is_expired(self, mtime_ms: int, expiry_ms: int) -> bool:
        """Staleness check: strictly older than the retention window."""
        return self._clock() - mtime_ms > expiry_ms

    def _layout_dirs(self, root: Path, layout: ArtifactLayout) -> list[Path]:
        """List top-level directories of ``root`` that follow ``layout``."""
        return [d for d in self._sub_dirs(root) if ArtifactLayout.for_name(d.name) == layout]

    def _sub_dirs(self, parent: Path) -> list[Path]:
        """List real (non-symlink) sub-directories of ``parent``, sorted by name."""
        dirs: list[Path] = []
        for entry in self._list(parent):
            try:
                if entry.is_dir(follow_symlinks=False):
                    dirs.append(Path(entry.path))
            except OSError as e:
                logger.warning("Cannot determine type of %s: %s", entry.path, e)
        return dirs

    def _list(self, directory: Path) -> list[os.DirEntry[str]]:
        """List the entries of ``directory``; a vanished directory lists as empty."""
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except FileNotFoundError:
            logger.debug("Dir %s disappeared before it could be listed", directory)
            return []
        except OSError as e:
            logger.warning("Cannot list dir %s: %s", directory, e)
            return []

    def _expire_files(self, directory: Path, expiry_ms: int, result: ReclaimResult) -> None:
        """Delete the expired entries directly inside ``directory``.

        Expired files are unlinked; expired sub-directories are pruned if empty.
        """
        for entry in self._list(directory):
            logger.debug("Check file %s", entry.name)
            try:
                info = entry.stat(follow_symlinks=False)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Cannot stat file %s: %s", entry.path, e)
                continue

            expired = self.is_expired(info.st_mtime_ns // 1_000_000, expiry_ms)
            if stat.S_ISDIR(info.st_mode):
                if expired:
                    self._prune(Path(entry.path), result)
                continue
            if expired:
                self._delete_file(Path(entry.path), info.st_size, result)

    def _delete_file(self, path: Path, size: int, result: ReclaimResult) -> None:
        """Delete one file, recording the outcome on ``result``."""
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("File %s already removed", path)
            return
        except OSError as e:
            logger.warning("Delete file %s fail: %s", path, e)
            result.failures.append(DeletionFailure(path=str(path), error=str(e)))
            return

        result.files_deleted += 1
        result.bytes_freed += size
        logger.info("Delete file %s success", path)

    def _prune(self, directory: Path, result: ReclaimResult) -> None:
        """Prune ``directory`` if empty, recording the outcome on ``result``."""
        try:
            removed = self.prune_empty(directory)
        except OSError as e:
            logger.warning("Delete dir %s fail: %s", directory, e)
            result.failures.append(DeletionFailure(path=str(directory), error=str(e)))
            return

        if removed:
            result.dirs_deleted += 1
            logger.info("Delete dir %s success", directory)
