"""Periodic scheduling of reclaim passes.

Each iteration submits a normal reclaim pass per root directory to a
worker pool, then checks the root's filesystem. A root that is still
over the free-space threshold gets a second pass with the shorter
deep-clean retention window. The loop then waits for the poll interval.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from blockclean.core.capacity import CapacityMonitor, CapacityProbe
from blockclean.core.config import CleanerConfig
from blockclean.reclaim.models import ReclaimResult
from blockclean.reclaim.reclaimer import DirectoryReclaimer

logger = logging.getLogger(__name__)


class RootDirectoryError(Exception):
    """Raised when a configured root directory is missing or not a directory."""


def validate_root(path: Path) -> None:
    """Check that a configured root exists and is a directory.

    Raises:
        RootDirectoryError: If the path is unusable.
    """
    if not path.exists():
        raise RootDirectoryError(f"this path {path} does not exist")
    if not path.is_dir():
        raise RootDirectoryError(f"this path {path} is not directory")


class CleanScheduler:
    """Runs reclaim passes for every configured root on a fixed interval.

    The pool holds up to two workers per root so a deep-clean pass never
    waits behind another root's normal pass. Threads are started on demand
    and kept for the life of the scheduler; the work queue is unbounded.

    Example:
        >>> scheduler = CleanScheduler(load_config())
        >>> scheduler.run_forever()
    """

    def __init__(
        self,
        config: CleanerConfig,
        *,
        probe: CapacityProbe | None = None,
        reclaimer: DirectoryReclaimer | None = None,
    ) -> None:
        """Initialize the scheduler and its worker pool.

        Args:
            config: Validated cleaner configuration.
            probe: Disk usage source. Defaults to ``df``.
            reclaimer: Reclaimer shared by all passes.
        """
        self._config = config
        self._monitor = CapacityMonitor(config.free_space_threshold, probe)
        self._reclaimer = reclaimer or DirectoryReclaimer()
        self._stop_event = threading.Event()
        self._pool = ThreadPoolExecutor(
            max_workers=len(config.cache_dirs) * 2,
            thread_name_prefix="reclaim",
        )

    @property
    def stopped(self) -> bool:
        """True once ``stop()`` has been requested."""
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to finish after the current iteration.

        Safe to call from a signal handler.
        """
        self._stop_event.set()

    def run_iteration(self) -> list[Future[ReclaimResult]]:
        """Dispatch one round of reclaim passes.

        Returns:
            Futures of the submitted passes, in submission order.

        Raises:
            RootDirectoryError: If a configured root is unusable.
            CapacityProbeError: If disk usage cannot be determined.
        """
        logger.info("Start clean job")
        futures: list[Future[ReclaimResult]] = []

        for root in self._config.cache_dirs:
            validate_root(root)

            futures.append(self._submit(root, self._config.file_expired_time))

            if self._monitor.check_used_capacity(root):
                logger.info("Start deep clean job for %s", root)
                futures.append(self._submit(root, self._config.deep_clean_file_expired_time))
                if self._monitor.check_used_capacity(root):
                    logger.warning(
                        "After deep clean %s used space still higher than %d%%",
                        root,
                        100 - self._config.free_space_threshold,
                    )

        return futures

    def run_forever(self) -> None:
        """Run iterations until ``stop()`` is called or a fatal error occurs.

        The pool is always shut down on exit, letting in-flight passes finish.

        Raises:
            RootDirectoryError: If a configured root is unusable.
            CapacityProbeError: If disk usage cannot be determined.
        """
        try:
            while not self._stop_event.is_set():
                self.run_iteration()
                self._stop_event.wait(self._config.sleep_seconds)
        finally:
            self.shutdown()

    def run_once(self) -> list[ReclaimResult]:
        """Run a single iteration and wait for its passes to finish.

        Returns:
            Results of the passes that completed without raising.
        """
        try:
            futures = self.run_iteration()
        finally:
            self.shutdown()
        return [f.result() for f in futures if f.exception() is None]

    def shutdown(self) -> None:
        """Stop accepting work and wait for in-flight passes."""
        logger.info("Waiting for running reclaim passes to finish")
        self._pool.shutdown(wait=True)

    def _submit(self, root: Path, expiry_ms: int) -> Future[ReclaimResult]:
        future = self._pool.submit(self._reclaimer.reclaim, root, expiry_ms)
        future.add_done_callback(_log_task_failure)
        return future


def _log_task_failure(future: Future[ReclaimResult]) -> None:
    """Report passes that raised, since nothing else reads their futures."""
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Reclaim pass failed: %s", error, exc_info=error)
