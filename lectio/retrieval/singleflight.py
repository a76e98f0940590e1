"""Keyed deduplication of concurrent work."""

from __future__ import annotations

from concurrent.futures import Executor, Future
from threading import Lock
from typing import Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Run at most one job per key at a time; concurrent callers share its future.

    The entry is removed as soon as the job finishes, whether it succeeded or
    failed, so a failed key can be retried by the next caller.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor
        self._lock = Lock()
        self._flights: dict[str, Future[T]] = {}

    def submit(self, key: str, fn: Callable[[], T]) -> tuple[Future[T], bool]:
        """Return the future for ``key`` and whether this call started it."""

        with self._lock:
            future = self._flights.get(key)
            if future is not None:
                logger.debug("Joining in-flight work for {}", key)
                return future, False
            future = self._executor.submit(self._run, key, fn)
            self._flights[key] = future
            return future, True

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._flights

    def __len__(self) -> int:
        with self._lock:
            return len(self._flights)

    def _run(self, key: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        finally:
            with self._lock:
                self._flights.pop(key, None)


__all__ = ["SingleFlight"]
