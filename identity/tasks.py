"""
Fire-and-forget background work.

Used for anything the caller should not wait on: sending mail, and
best-effort cleanup of used activation codes. Outstanding work is tracked so
that it can be drained before the process exits.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set


class BackgroundTasks(object):
    """A tracked pool of background workers."""

    def __init__(self, max_workers: int = 4,
                 logger: Optional[logging.Logger] = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix='background')
        self._logger = logger or logging.getLogger(__name__)
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        with self._lock:
            return len(self._pending)

    def run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) \
            -> Future:
        """
        Run ``func`` in the background.

        Any exception raised by ``func`` is logged with its traceback and
        then dropped; it never reaches the caller or the worker pool.
        """
        future = self._executor.submit(self._guard, func, *args, **kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._done)
        return future

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for outstanding tasks.

        Returns
        -------
        bool
            ``True`` if everything finished within ``timeout``.

        """
        with self._lock:
            pending = set(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Drain outstanding tasks and stop accepting new ones."""
        self._logger.info('waiting for background tasks to finish...')
        if not self.drain(timeout):
            self._logger.warning('%i background tasks still running',
                                 self.pending)
        self._executor.shutdown(wait=False)

    def _done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _guard(self, func: Callable[..., Any], *args: Any,
               **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except Exception:
            self._logger.exception('Unhandled error in background task %s',
                                   getattr(func, '__name__', repr(func)))
