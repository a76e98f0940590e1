"""Shared helpers for CLI tests."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from pytest import MonkeyPatch

from lectio.config import AppConfig, RetrievalConfig, StorageConfig

from ..utils import FakeFetcher


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def make_app_config(base_dir: Path, *, future_days: int = 1, retention_count: int = 60) -> AppConfig:
    """Construct an in-memory AppConfig whose cache lives under ``base_dir``."""

    return AppConfig(
        logging_level="INFO",
        storage=StorageConfig(db_path=base_dir / "cache" / "data.db", retention_count=retention_count),
        retrieval=RetrievalConfig(past_days=0, future_days=future_days, max_workers=2),
    )


def patch_load_config(monkeypatch: MonkeyPatch, config: AppConfig) -> None:
    """Force the CLI to return the provided config instead of reading from disk."""

    def _fake_load_config(model: object, path: Path) -> AppConfig:
        if model is not AppConfig:
            raise AssertionError("Unexpected config model request")
        return config

    monkeypatch.setattr("lectio.cli.load_config", _fake_load_config)


def patch_fetcher(monkeypatch: MonkeyPatch, fetcher: FakeFetcher) -> FakeFetcher:
    """Serve remote documents from ``fetcher`` instead of the network."""

    monkeypatch.setattr("lectio.cli.UsccbClient", lambda *args, **kwargs: fetcher)
    return fetcher
