# armory/scraper/limiter.py

from concurrent.futures import Future, ThreadPoolExecutor
import functools
import threading
from typing import Any, Callable


class ConcurrencyLimiter:
    """
    Caps how many calls run at the same time.

    Calls beyond the ceiling wait in submission order and start as soon as a
    running call finishes. There is no spacing between calls, only the
    ceiling. Every submission gets its own Future, so results stay attached
    to the call that produced them whatever order they complete in.

    Usage:
        with ConcurrencyLimiter(max_concurrent=32) as limiter:
            futures = [limiter.submit(fetch, match_id) for match_id in ids]
            results = [f.result() for f in futures]
    """

    def __init__(self, max_concurrent: int = 32, name: str = "armory-fetch"):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._executor = ThreadPoolExecutor(max_workers=max_concurrent, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._running = 0
        self.peak_running = 0

    def _track(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            self._running += 1
            self.peak_running = max(self.peak_running, self._running)
        try:
            return fn(*args, **kwargs)
        finally:
            with self._lock:
                self._running -= 1

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        return self._executor.submit(self._track, fn, *args, **kwargs)

    def wrap(self, fn: Callable[..., Any]) -> Callable[..., Future]:
        """Return a callable that schedules fn through the limiter."""

        @functools.wraps(fn)
        def limited(*args: Any, **kwargs: Any) -> Future:
            return self.submit(fn, *args, **kwargs)

        return limited

    def shutdown(self, cancel_pending: bool = False) -> None:
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)

    def __enter__(self) -> "ConcurrencyLimiter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(cancel_pending=exc_type is not None)
