"""Local reading cache."""

from .migrations import LATEST_VERSION, apply_migrations
from .store import ReadingStore

__all__ = ["LATEST_VERSION", "ReadingStore", "apply_migrations"]
