"""Small thread-pool wrapper with per-task timeouts.

Chart rendering is CPU-heavy and occasionally hangs on pathological input,
so it runs on a bounded pool where the caller waits at most ``timeout_s``
per task instead of blocking report generation indefinitely.

Usage::

    pool = WorkerPool(max_workers=2)
    png = pool.run(render_chart, spec, timeout_s=10.0)
    pool.shutdown()
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, TypeVar

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_MAX_WORKERS = 2


class WorkerPool:
    """Fixed-size thread pool with lightweight metrics.

    Parameters
    ----------
    max_workers:
        Number of worker threads.
    thread_name_prefix:
        Prefix for worker-thread names (aids debugging / profiling).
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        thread_name_prefix: str = "labreport-worker",
    ) -> None:
        self._max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._total_tasks: int = 0
        self._timed_out_tasks: int = 0
        self._total_wait_s: float = 0.0
        self._metrics_lock = threading.Lock()
        self._alive = True

    # -- Public API -----------------------------------------------------------

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> Future[R]:
        """Submit a single callable; returns a ``Future``."""
        if not self._alive:
            raise RuntimeError("WorkerPool is shut down")
        with self._metrics_lock:
            self._total_tasks += 1
        return self._executor.submit(fn, *args, **kwargs)

    def run(self, fn: Callable[..., R], *args: Any, timeout_s: float, **kwargs: Any) -> R:
        """Run *fn* on the pool and wait at most *timeout_s* for its result.

        Raises ``concurrent.futures.TimeoutError`` when the deadline passes.
        The worker thread is not interrupted; its eventual result is dropped.
        Exceptions raised by *fn* propagate unchanged.
        """
        t0 = time.monotonic()
        fut = self.submit(fn, *args, **kwargs)
        try:
            return fut.result(timeout=timeout_s)
        except FutureTimeoutError:
            fut.cancel()
            with self._metrics_lock:
                self._timed_out_tasks += 1
            raise
        finally:
            with self._metrics_lock:
                self._total_wait_s += time.monotonic() - t0

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the pool.  Safe to call multiple times."""
        self._alive = False
        self._executor.shutdown(wait=wait, cancel_futures=True)

    # -- Observability --------------------------------------------------------

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def stats(self) -> dict[str, Any]:
        return {
            "max_workers": self._max_workers,
            "total_tasks": self._total_tasks,
            "timed_out_tasks": self._timed_out_tasks,
            "total_wait_s": round(self._total_wait_s, 4),
            "alive": self._alive,
        }
