from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import pytest

from lectio.cli import main
from lectio.errors import NotFoundError
from lectio.liturgy import CalendarResolver
from lectio.storage import ReadingStore

from ..utils import FakeFetcher, sample_readings
from .utils import logger_to_stderr, make_app_config, patch_fetcher, patch_load_config


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    config_file = tmp_path / "config.toml"
    config_file.write_text("placeholder = true")
    return config_file


@pytest.fixture()
def fetcher(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeFetcher:
    patch_load_config(monkeypatch, make_app_config(tmp_path))
    return patch_fetcher(monkeypatch, FakeFetcher())


def _cache(tmp_path: Path) -> ReadingStore:
    return ReadingStore(tmp_path / "cache" / "data.db")


def test_main_without_command_warns(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    with logger_to_stderr():
        exit_code = main(["--config", str(config_path)])

    assert exit_code == 0
    assert "No command provided" in capsys.readouterr().err


def test_display_prints_day(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    exit_code = main(["--config", str(config_path), "display", "2023-10-04"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Wednesday of the Twenty-sixth Week in Ordinary Time" in out
    assert "Reading I: Genesis 1:1-2" in out
    assert "Gospel: John 10:11-18" in out
    assert fetcher.calls == {"100423": 1}


def test_display_selected_readings_from_cache(
    capsys: Any, tmp_path: Path, config_path: Path, fetcher: FakeFetcher
) -> None:
    key = CalendarResolver().resolve(date(2023, 10, 4)).key
    _cache(tmp_path).put(key, sample_readings(), name="Cached Day")

    exit_code = main(["--config", str(config_path), "display", "100423", "-r", "gospel"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Cached Day" in out
    assert "Gospel: John 10:11-18" in out
    assert "Reading I" not in out
    assert fetcher.total_calls == 0


def test_display_day_only(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    exit_code = main(["--config", str(config_path), "display", "2023-10-04", "--day-only"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Wednesday of the Twenty-sixth Week in Ordinary Time" in out
    assert "Gospel" not in out


def test_display_reports_retrieval_failure(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    fetcher.errors["100423"] = NotFoundError("no such page", status_code=404)

    exit_code = main(["--config", str(config_path), "display", "2023-10-04"])

    assert exit_code == 1
    assert "fetch.not_found" in capsys.readouterr().err


def test_display_rejects_invalid_date(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    exit_code = main(["--config", str(config_path), "display", "2023-13-40"])

    assert exit_code == 2
    assert "not a valid date" in capsys.readouterr().err
    assert fetcher.total_calls == 0


def test_resolve_prints_identifier(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    exit_code = main(["--config", str(config_path), "resolve", "2023-12-25"])

    assert exit_code == 0
    out = capsys.readouterr().out.strip()
    assert out.startswith("231225-")
    assert "Year B, Cycle II" in out


def test_db_store_then_show_and_count(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    assert main(["--config", str(config_path), "db", "store", "2023-10-04"]) == 0
    assert main(["--config", str(config_path), "db", "store", "2023-10-04"]) == 0
    assert main(["--config", str(config_path), "db", "count"]) == 0
    assert main(["--config", str(config_path), "db", "show"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[:3] == ["stored", "cached", "1"]
    assert lines[3].startswith("231004-")
    assert lines[3].endswith("Wednesday of the Twenty-sixth Week in Ordinary Time")
    assert fetcher.total_calls == 1


def test_db_store_force_refetches(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    main(["--config", str(config_path), "db", "store", "2023-10-04"])
    exit_code = main(["--config", str(config_path), "db", "store", "2023-10-04", "--force"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["stored", "stored"]
    assert fetcher.total_calls == 2


def test_db_update_prints_added(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    exit_code = main(["--config", str(config_path), "db", "update"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "2"
    assert fetcher.total_calls == 2


def test_db_update_fails_when_any_day_fails(capsys: Any, config_path: Path, fetcher: FakeFetcher) -> None:
    fetcher.errors[f"{date.today():%m%d%y}"] = NotFoundError("gone", status_code=404)

    exit_code = main(["--config", str(config_path), "db", "update"])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert captured.out.strip() == "1"
    assert "fetch.not_found" in captured.err


def test_db_refresh_prints_pruned_then_added(
    capsys: Any, tmp_path: Path, config_path: Path, fetcher: FakeFetcher
) -> None:
    cache = _cache(tmp_path)
    for key in ("200101-old-a", "200102-old-b"):
        cache.put(key, sample_readings())

    exit_code = main(["--config", str(config_path), "db", "refresh", "--retention", "2"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["2", "2"]
    assert cache.count() == 2


def test_db_remove_skips_invalid_dates(capsys: Any, tmp_path: Path, config_path: Path, fetcher: FakeFetcher) -> None:
    key = CalendarResolver().resolve(date(2023, 10, 4)).key
    _cache(tmp_path).put(key, sample_readings())

    exit_code = main(["--config", str(config_path), "db", "remove", "2023-10-04", "not-a-date", "2023-10-05"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "1"
    assert "not-a-date" in captured.err


def test_db_clean_and_purge(capsys: Any, tmp_path: Path, config_path: Path, fetcher: FakeFetcher) -> None:
    cache = _cache(tmp_path)
    for key in ("200101-a", "200102-b", "200103-c"):
        cache.put(key, sample_readings())

    assert main(["--config", str(config_path), "db", "clean", "--retention", "1"]) == 0
    assert main(["--config", str(config_path), "db", "purge"]) == 0

    assert capsys.readouterr().out.splitlines() == ["2", "1"]
    assert cache.count() == 0
