"""SQLite-backed cache of extracted readings."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Sequence

from loguru import logger

from lectio.errors import StoreIntegrityError, StoreIoError
from lectio.models import LiturgicalDay, Reading, ReadingType, canonical_sort

from .migrations import apply_migrations


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ReadingStore:
    """Persist readings keyed by liturgical-day identifier.

    Every operation opens its own connection, so the store may be shared
    between threads. Writers serialize through ``BEGIN IMMEDIATE`` and wait up
    to ``busy_timeout`` seconds for the lock.
    """

    def __init__(self, path: Path | str, *, busy_timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.busy_timeout = busy_timeout
        with self._errors():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = self._open()
            try:
                applied = apply_migrations(conn)
            finally:
                conn.close()
        if applied:
            logger.debug("Applied {} schema migrations to {}", applied, self.path)

    # ------------------------------------------------------------------
    # Connection plumbing
    # ------------------------------------------------------------------
    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path), timeout=self.busy_timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout * 1000)}")
        return conn

    @contextmanager
    def _errors(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.IntegrityError as exc:
            raise StoreIntegrityError(f"Constraint violated in {self.path}: {exc}") from exc
        except (sqlite3.Error, OSError) as exc:
            raise StoreIoError(f"Storage failure in {self.path}: {exc}") from exc

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        with self._errors():
            conn = self._open()
            try:
                yield conn
            finally:
                conn.close()

    @contextmanager
    def _transaction(self, mode: str = "IMMEDIATE") -> Iterator[sqlite3.Connection]:
        with self._connection() as conn:
            conn.execute(f"BEGIN {mode}")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def lookup(self, key: str) -> list[Reading] | None:
        """Return the cached readings for ``key`` or ``None`` when absent."""

        with self._transaction("DEFERRED") as conn:
            if conn.execute("SELECT 1 FROM lectionary WHERE id = ?", (key,)).fetchone() is None:
                return None
            rows = conn.execute(
                "SELECT reading_type, location, content FROM reading WHERE lectionary_id = ?",
                (key,),
            ).fetchall()
        return canonical_sort(
            [
                Reading(
                    reading_type=ReadingType(row["reading_type"]),
                    location=row["location"],
                    content=row["content"],
                )
                for row in rows
            ]
        )

    def name(self, key: str) -> str | None:
        with self._connection() as conn:
            row = conn.execute("SELECT name FROM lectionary WHERE id = ?", (key,)).fetchone()
        if row is None or not row["name"]:
            return None
        return row["name"]

    def contains(self, key: str) -> bool:
        with self._connection() as conn:
            return conn.execute("SELECT 1 FROM lectionary WHERE id = ?", (key,)).fetchone() is not None

    def count(self) -> int:
        with self._connection() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM lectionary").fetchone()[0])

    def list(self) -> list[LiturgicalDay]:
        """All cached days ordered by identifier (chronologically)."""

        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT lectionary.id, lectionary.name, lectionary.inserted_at, COUNT(reading.id) AS reading_count
                FROM lectionary LEFT JOIN reading ON reading.lectionary_id = lectionary.id
                GROUP BY lectionary.id
                ORDER BY lectionary.id
                """
            ).fetchall()
        return [
            LiturgicalDay(
                id=row["id"],
                name=row["name"] or None,
                inserted_at=datetime.fromisoformat(row["inserted_at"]),
                reading_count=row["reading_count"],
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def put(self, key: str, readings: Sequence[Reading], *, name: str | None = None) -> None:
        """Store ``readings`` for ``key`` atomically, replacing any previous entry."""

        if not readings:
            raise StoreIntegrityError(f"Refusing to store '{key}' without readings")
        try:
            rows = [
                (key, ReadingType(reading.reading_type).value, reading.location, reading.content)
                for reading in readings
            ]
        except ValueError as exc:
            raise StoreIntegrityError(f"Unknown reading type for '{key}': {exc}") from exc

        with self._transaction() as conn:
            existing = conn.execute("SELECT 1 FROM lectionary WHERE id = ?", (key,)).fetchone()
            if existing is None:
                conn.execute(
                    "INSERT INTO lectionary (id, name, inserted_at) VALUES (?, ?, ?)",
                    (key, name or "", _utc_now()),
                )
            else:
                conn.execute("DELETE FROM reading WHERE lectionary_id = ?", (key,))
                conn.execute(
                    "UPDATE lectionary SET name = ?, inserted_at = ? WHERE id = ?",
                    (name or "", _utc_now(), key),
                )
            conn.executemany(
                "INSERT INTO reading (lectionary_id, reading_type, location, content) VALUES (?, ?, ?, ?)",
                rows,
            )
        logger.debug("Stored {} readings for {}", len(readings), key)

    def delete(self, key: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM lectionary WHERE id = ?", (key,))
        return cursor.rowcount > 0

    def prune(self, retention_count: int) -> int:
        """Keep the ``retention_count`` most recently inserted days; return the number removed."""

        if retention_count < 0:
            raise ValueError("retention_count must be non-negative")
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                DELETE FROM lectionary WHERE id NOT IN (
                    SELECT id FROM lectionary ORDER BY inserted_at DESC, rowid DESC LIMIT ?
                )
                """,
                (retention_count,),
            )
        removed = cursor.rowcount
        if removed:
            logger.info("Pruned {} cached days (keeping {})", removed, retention_count)
        return removed

    def purge(self) -> int:
        """Remove every cached day; returns the number removed."""

        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM lectionary")
        return cursor.rowcount


__all__ = ["ReadingStore"]
