"""Application-level configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from lectio.config.base import BaseConfig
from lectio.config.calendar import CalendarConfig
from lectio.config.display import DisplayConfig
from lectio.config.remote import RemoteConfig
from lectio.config.retrieval import RetrievalConfig
from lectio.config.storage import StorageConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the whole application."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    log_file: Path | None = Field(None, description="Optional file receiving DEBUG logs (rotated at 1 MB)")

    storage: StorageConfig = Field(default_factory=StorageConfig, description="Local cache")
    remote: RemoteConfig = Field(default_factory=RemoteConfig, description="Remote readings source")
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig, description="Fetch window and workers")
    calendar: CalendarConfig = Field(default_factory=CalendarConfig, description="Calendar options")
    display: DisplayConfig = Field(default_factory=DisplayConfig, description="Terminal rendering")


__all__ = ["AppConfig"]
