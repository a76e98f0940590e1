"""Coordinate calendar resolution, remote retrieval and the local cache."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable

from loguru import logger

from lectio.config import RetrievalConfig
from lectio.errors import LectioError, RetrievalError, UnsupportedDateError
from lectio.extraction import ReadingExtractor
from lectio.extraction.text import collapse_newlines
from lectio.liturgy import CalendarResolver, LiturgicalIdentifier, check_supported
from lectio.models import LiturgicalDay, Reading, ReadingType
from lectio.remote import UsccbClient
from lectio.storage import ReadingStore

from .singleflight import SingleFlight


@dataclass(slots=True)
class RefreshSummary:
    """Outcome of storing the configured window."""

    requested: int = 0
    added: int = 0
    cached: int = 0
    failed: dict[str, str] = field(default_factory=dict)
    pruned: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


class RetrievalCoordinator:
    """Serve readings from the cache, fetching and storing them on a miss.

    Concurrent requests for the same liturgical day share a single fetch.
    Failures are raised as :class:`RetrievalError` chained to their cause and
    are never persisted.
    """

    def __init__(
        self,
        resolver: CalendarResolver,
        fetcher: UsccbClient,
        extractor: ReadingExtractor,
        reading_store: ReadingStore,
        config: RetrievalConfig | None = None,
        *,
        retention_count: int | None = None,
    ) -> None:
        self.resolver = resolver
        self.fetcher = fetcher
        self.extractor = extractor
        self.reading_store = reading_store
        self.config = config or RetrievalConfig()
        self.retention_count = retention_count
        self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="lectio-fetch")
        # Batch callers block on flights; a separate pool keeps them from starving it.
        self._batch_executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="lectio-batch"
        )
        self._flights: SingleFlight[list[Reading]] = SingleFlight(self._executor)

    def close(self) -> None:
        self._batch_executor.shutdown(wait=True)
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "RetrievalCoordinator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def resolve(self, day: date) -> LiturgicalIdentifier:
        return self.resolver.resolve(check_supported(day))

    def get(self, day: date, *, timeout: float | None = None) -> list[Reading]:
        """Return the readings for ``day``, fetching them on a cache miss.

        ``timeout`` bounds how long this caller waits for the fetch; on expiry
        ``TimeoutError`` is raised while the fetch runs on and still populates
        the cache.
        """

        identifier = self.resolve(day)
        cached = self._lookup(identifier)
        if cached is not None:
            logger.debug("Cache hit for {}", identifier.key)
            return self._present(cached)
        logger.debug("Cache miss for {}", identifier.key)
        return self._present(self._await(identifier, force=False, timeout=timeout))

    def name(self, day: date) -> str | None:
        """Published title of a cached day."""

        key = self.resolve(day).key
        return self._store_call(key, self.reading_store.name, key)

    def store(self, day: date, *, force: bool = False, timeout: float | None = None) -> bool:
        """Make sure ``day`` is cached; returns ``True`` when it was fetched.

        A cached day is left untouched, without network access, unless
        ``force`` is set.
        """

        identifier = self.resolve(day)
        if not force and self._lookup(identifier) is not None:
            logger.debug("{} already cached", identifier.key)
            return False
        self._await(identifier, force=force, timeout=timeout)
        return True

    def refresh(self, retention_count: int | None = None, *, today: date | None = None) -> RefreshSummary:
        """Store every day of the configured window concurrently, then prune.

        Pruning keeps ``retention_count`` days, falling back to the count the
        coordinator was built with; with neither, nothing is pruned.
        """

        summary = self.update(today=today)
        retention = retention_count if retention_count is not None else self.retention_count
        if retention is not None:
            summary.pruned = self.prune(retention)
        logger.info(
            "Refresh complete: {} requested, {} added, {} cached, {} failed, {} pruned",
            summary.requested,
            summary.added,
            summary.cached,
            len(summary.failed),
            summary.pruned,
        )
        return summary

    def update(self, *, today: date | None = None) -> RefreshSummary:
        """Store every day of the configured window without pruning."""

        today = today or date.today()
        summary = RefreshSummary()
        futures = {}
        for offset in range(-self.config.past_days, self.config.future_days + 1):
            day = today + timedelta(days=offset)
            try:
                check_supported(day)
            except UnsupportedDateError as exc:
                logger.warning("Skipping {}: {}", day, exc)
                continue
            futures[self._batch_executor.submit(self.store, day)] = day
        summary.requested = len(futures)

        for future in as_completed(futures):
            try:
                added = future.result()
            except RetrievalError as exc:
                logger.error("Failed to store {}: {}", exc.identifier, exc)
                summary.failed[exc.identifier] = exc.kind
                continue
            if added:
                summary.added += 1
            else:
                summary.cached += 1
        return summary

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------
    def list(self) -> list[LiturgicalDay]:
        return self._store_call("*", self.reading_store.list)

    def count(self) -> int:
        return self._store_call("*", self.reading_store.count)

    def delete(self, day: date) -> bool:
        return self.delete_key(self.resolve(day).key)

    def delete_key(self, key: str) -> bool:
        removed = self._store_call(key, self.reading_store.delete, key)
        if removed:
            logger.info("Removed {}", key)
        else:
            logger.info("{} was not cached", key)
        return removed

    def prune(self, retention_count: int) -> int:
        return self._store_call("*", self.reading_store.prune, retention_count)

    def purge(self) -> int:
        return self._store_call("*", self.reading_store.purge)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _store_call(self, key: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except LectioError as exc:
            raise RetrievalError(key, exc) from exc

    def _lookup(self, identifier: LiturgicalIdentifier) -> list[Reading] | None:
        return self._store_call(identifier.key, self.reading_store.lookup, identifier.key)

    def _await(self, identifier: LiturgicalIdentifier, *, force: bool, timeout: float | None) -> list[Reading]:
        future, started = self._flights.submit(identifier.key, lambda: self._populate(identifier, force=force))
        if not started:
            logger.debug("Waiting on in-flight fetch of {}", identifier.key)
        try:
            return future.result(timeout=timeout)
        except TimeoutError:
            if future.done():
                raise
            raise TimeoutError(f"Timed out after {timeout}s waiting for {identifier.key}") from None

    def _populate(self, identifier: LiturgicalIdentifier, *, force: bool) -> list[Reading]:
        key = identifier.key
        try:
            if not force:
                # Another flight may have stored the day since the caller's lookup.
                cached = self.reading_store.lookup(key)
                if cached is not None:
                    return cached

            document = self.fetcher.fetch(identifier)
            link = self.extractor.day_mass_link(document)
            if link:
                logger.debug("{} lists several Masses; following '{}'", key, link)
                document = self.fetcher.fetch_link(identifier, link)

            readings = self.extractor.extract(document, preserve_newlines=True)
            name = self.extractor.extract_title(document)
            self.reading_store.put(key, readings, name=name)
        except LectioError as exc:
            logger.debug("Retrieval of {} failed ({}): {}", key, exc.kind, exc)
            raise RetrievalError(key, exc) from exc

        logger.info("Stored {} ({} readings)", key, len(readings))
        return readings

    def _present(self, readings: list[Reading]) -> list[Reading]:
        if self.config.preserve_newlines:
            return list(readings)
        return [
            reading
            if reading.reading_type is ReadingType.PSALM
            else reading.with_content(collapse_newlines(reading.content))
            for reading in readings
        ]


__all__ = ["RefreshSummary", "RetrievalCoordinator"]
