from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from lectio.config import AppConfig, BaseConfig, DisplayConfig, StorageConfig, load_config
from lectio.models import ReadingType


class ExampleConfig(BaseConfig):
    db_path: Path
    enabled: bool


def test_load_config_success(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text(
        """
        db_path = "./cache.db"
        enabled = true
        """.strip(),
        encoding="utf-8",
    )

    cfg = load_config(ExampleConfig, sample)

    assert cfg.db_path == Path("./cache.db")
    assert cfg.enabled is True


def test_load_config_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    with pytest.raises(FileNotFoundError):
        load_config(ExampleConfig, missing)


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    broken = tmp_path / "broken.toml"
    broken.write_text("enabled = [", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_config(ExampleConfig, broken)


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text("[storage]\nretention = 3\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(AppConfig, sample)


def test_defaults_without_sections() -> None:
    cfg = AppConfig()

    assert cfg.logging_level == "INFO"
    assert cfg.storage.retention_count == 60
    assert cfg.retrieval.future_days == 30
    assert cfg.remote.base_url == "https://bible.usccb.org"
    assert cfg.display.reading_order[0] is ReadingType.FIRST_READING


def test_app_config_example_file() -> None:
    """The shipped example documents every section with its defaults."""
    config_path = Path(__file__).resolve().parents[2] / "config" / "example.toml"
    cfg = load_config(AppConfig, config_path)

    assert cfg.logging_level == "INFO"
    assert cfg.log_file is None
    assert cfg.storage.db_path == Path("~/.local/share/lectio-diei/data.db")
    assert cfg.storage.retention_count == 60
    assert cfg.remote.read_timeout == 20.0
    assert cfg.retrieval.max_workers == 4
    assert cfg.calendar.ascension_on_sunday is True
    assert cfg.display.max_width == 80
    assert cfg.display.reading_order == [
        ReadingType.FIRST_READING,
        ReadingType.PSALM,
        ReadingType.SECOND_READING,
        ReadingType.ALLELUIA,
        ReadingType.GOSPEL,
    ]
    assert cfg.model_dump() == AppConfig().model_dump()


def test_display_rejects_repeated_readings() -> None:
    with pytest.raises(ValidationError):
        DisplayConfig(reading_order=["gospel", "gospel"])


def test_display_allows_zero_width() -> None:
    assert DisplayConfig(max_width=0).max_width == 0
    with pytest.raises(ValidationError):
        DisplayConfig(max_width=-1)


def test_storage_resolved_path(tmp_path: Path) -> None:
    relative = StorageConfig(db_path=Path("cache/data.db"))
    home = StorageConfig(db_path=Path("~/data.db"))

    assert relative.resolved_path(tmp_path) == (tmp_path / "cache" / "data.db").resolve()
    assert relative.resolved_path() == Path("cache/data.db")
    assert home.resolved_path(tmp_path) == Path.home() / "data.db"
