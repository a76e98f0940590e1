"""Configuration for the local reading cache."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from .base import BaseConfig

DEFAULT_DB_PATH = Path("~/.local/share/lectio-diei/data.db")


class StorageConfig(BaseConfig):
    db_path: Path = Field(DEFAULT_DB_PATH, description="SQLite file holding cached readings ('~' is expanded)")
    retention_count: int = Field(60, description="Number of most recently stored days kept by 'db clean'", ge=0)
    busy_timeout: float = Field(5.0, description="Seconds a writer waits for a locked database", gt=0)

    def resolved_path(self, base_dir: Path | None = None) -> Path:
        """Return ``db_path`` expanded, anchoring relative paths at ``base_dir``."""

        path = self.db_path.expanduser()
        if not path.is_absolute() and base_dir is not None:
            path = (base_dir / path).resolve()
        return path


__all__ = ["DEFAULT_DB_PATH", "StorageConfig"]
