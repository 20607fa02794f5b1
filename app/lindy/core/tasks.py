"""Background task primitives.

Privileged helper calls and scans are slow (a polkit prompt can sit open
for minutes), so they run on a thread pool. Nothing here interrupts a
running external command: cancellation is cooperative and only decides
whether a finished result is still wanted.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Cooperative cancellation flag.

    Checked before a result is committed. Cancelling never stops the work
    already in flight; it only makes the result be thrown away.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class LatestOnly:
    """Hands out tokens so that only the newest run may commit.

    Example:
        >>> latest = LatestOnly()
        >>> first = latest.begin()
        >>> second = latest.begin()
        >>> first.cancelled
        True
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: CancellationToken | None = None

    def begin(self) -> CancellationToken:
        """Start a new run, superseding the previous one."""
        token = CancellationToken()
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = token
        return token

    def cancel(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = None


class SubmissionGuard:
    """Tracks targets with a privileged operation in flight.

    A second submission touching any in-flight target is refused, so each
    target has a single logical writer at a time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def try_acquire(self, targets: Iterable[str]) -> bool:
        """Claim all targets, or none if any is already claimed."""
        wanted = set(targets)
        with self._lock:
            if wanted & self._in_flight:
                return False
            self._in_flight |= wanted
            return True

    def release(self, targets: Iterable[str]) -> None:
        with self._lock:
            self._in_flight -= set(targets)

    def busy(self, target: str) -> bool:
        with self._lock:
            return target in self._in_flight


class TaskRunner:
    """Thread pool wrapper for helper calls and refreshes.

    Tasks submitted here are expected to resolve to an outcome value. An
    exception escaping a task is logged so it never disappears silently,
    and is still re-raised from ``Future.result()``.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="lindy")

    def submit(self, fn: Callable[..., T], *args: object, **kwargs: object) -> "Future[T]":
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "TaskRunner":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def _log_failure(future: "Future[object]") -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Background task failed: %s", error, exc_info=error)
