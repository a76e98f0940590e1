"""Ordered schema migrations tracked by ``PRAGMA user_version``."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from loguru import logger

# Days cached before insertion times were recorded sort as the oldest.
LEGACY_INSERTED_AT = "1970-01-01T00:00:00.000000+00:00"


@dataclass(frozen=True, slots=True)
class Migration:
    version: int
    description: str
    statements: tuple[str, ...]


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        1,
        "create lectionary and reading tables",
        (
            """
            CREATE TABLE IF NOT EXISTS lectionary (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS reading (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                lectionary_id TEXT NOT NULL,
                reading_type TEXT NOT NULL,
                location TEXT NOT NULL,
                content TEXT NOT NULL,
                FOREIGN KEY (lectionary_id) REFERENCES lectionary(id) ON DELETE CASCADE,
                CHECK(reading_type IN ('first_reading', 'second_reading', 'psalm', 'gospel'))
            )
            """,
        ),
    ),
    Migration(
        2,
        "admit alleluia readings and drop entries cached without one",
        (
            """
            CREATE TABLE new_reading (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                lectionary_id TEXT NOT NULL,
                reading_type TEXT NOT NULL,
                location TEXT NOT NULL,
                content TEXT NOT NULL,
                FOREIGN KEY (lectionary_id) REFERENCES lectionary(id) ON DELETE CASCADE,
                CHECK(reading_type IN ('first_reading', 'second_reading', 'psalm', 'gospel', 'alleluia'))
            )
            """,
            "INSERT INTO new_reading SELECT * FROM reading",
            "DROP TABLE reading",
            "ALTER TABLE new_reading RENAME TO reading",
            """
            DELETE FROM reading WHERE lectionary_id IN (
                SELECT id FROM lectionary WHERE NOT EXISTS (
                    SELECT 1 FROM reading
                    WHERE reading_type = 'alleluia' AND lectionary_id = lectionary.id
                )
            )
            """,
            """
            DELETE FROM lectionary WHERE NOT EXISTS (
                SELECT 1 FROM reading
                WHERE reading_type = 'alleluia' AND lectionary_id = lectionary.id
            )
            """,
        ),
    ),
    Migration(
        3,
        "optional locations, one reading per type, insertion timestamps",
        (
            """
            CREATE TABLE new_lectionary (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL DEFAULT '',
                inserted_at TEXT NOT NULL
            )
            """,
            f"""
            INSERT INTO new_lectionary (id, name, inserted_at)
            SELECT id, name, '{LEGACY_INSERTED_AT}' FROM lectionary ORDER BY rowid
            """,
            """
            CREATE TABLE new_reading (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                lectionary_id TEXT NOT NULL,
                reading_type TEXT NOT NULL,
                location TEXT,
                content TEXT NOT NULL,
                FOREIGN KEY (lectionary_id) REFERENCES lectionary(id) ON DELETE CASCADE,
                CHECK(reading_type IN ('first_reading', 'second_reading', 'psalm', 'gospel', 'alleluia')),
                UNIQUE(lectionary_id, reading_type)
            )
            """,
            """
            INSERT INTO new_reading (id, lectionary_id, reading_type, location, content)
            SELECT id, lectionary_id, reading_type, NULLIF(TRIM(location), ''), content FROM reading
            WHERE id IN (SELECT MIN(id) FROM reading GROUP BY lectionary_id, reading_type)
            """,
            "DROP TABLE reading",
            "DROP TABLE lectionary",
            "ALTER TABLE new_lectionary RENAME TO lectionary",
            "ALTER TABLE new_reading RENAME TO reading",
            "CREATE INDEX IF NOT EXISTS idx_lectionary_inserted_at ON lectionary(inserted_at)",
        ),
    ),
)

LATEST_VERSION = MIGRATIONS[-1].version


def current_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def _detect_unversioned(conn: sqlite3.Connection) -> int:
    """Infer the schema version of files created before versions were recorded."""

    row = conn.execute("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'reading'").fetchone()
    if row is None:
        return 0
    return 2 if "alleluia" in row[0] else 1


def apply_migrations(conn: sqlite3.Connection) -> int:
    """Bring the schema up to :data:`LATEST_VERSION`; returns migrations applied.

    ``conn`` must be in autocommit mode. Each migration runs in its own
    ``BEGIN IMMEDIATE`` transaction and re-reads the version under the write
    lock, so concurrent openers apply every step exactly once.
    """

    # Table rebuilds require foreign keys off; the pragma is a no-op inside a transaction.
    conn.execute("PRAGMA foreign_keys = OFF")
    applied = 0
    try:
        for migration in MIGRATIONS:
            conn.execute("BEGIN IMMEDIATE")
            try:
                version = current_version(conn)
                if version == 0:
                    version = _detect_unversioned(conn)
                if version >= migration.version:
                    conn.execute(f"PRAGMA user_version = {version}")
                    conn.execute("COMMIT")
                    continue
                logger.info("Applying schema migration {}: {}", migration.version, migration.description)
                for statement in migration.statements:
                    conn.execute(statement)
                conn.execute(f"PRAGMA user_version = {migration.version}")
                conn.execute("COMMIT")
                applied += 1
            except BaseException:
                conn.execute("ROLLBACK")
                raise
    finally:
        conn.execute("PRAGMA foreign_keys = ON")
    return applied


__all__ = ["LATEST_VERSION", "LEGACY_INSERTED_AT", "MIGRATIONS", "Migration", "apply_migrations", "current_version"]
