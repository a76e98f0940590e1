"""Configuration namespace for lectio."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .calendar import CalendarConfig
from .display import DisplayConfig
from .remote import RemoteConfig
from .retrieval import RetrievalConfig
from .storage import StorageConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "CalendarConfig",
    "DisplayConfig",
    "RemoteConfig",
    "RetrievalConfig",
    "StorageConfig",
]
