from __future__ import annotations

from pathlib import Path

from lectio.config.inspector import check_config, explain_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_check_config_ok(tmp_path: Path) -> None:
    path = _write(tmp_path, "[retrieval]\nfuture_days = 7\n")

    result, exit_code, config = check_config(path)

    assert exit_code == 0
    assert result["status"] == "ok"
    assert result["warnings"] == []
    assert config is not None
    assert config.retrieval.future_days == 7


def test_check_config_missing_file(tmp_path: Path) -> None:
    result, exit_code, config = check_config(tmp_path / "absent.toml")

    assert exit_code == 2
    assert config is None
    assert result["error"]["type"] == "missing_file"


def test_check_config_validation_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "[retrieval]\nmax_workers = 0\n")

    result, exit_code, _ = check_config(path)

    assert exit_code == 3
    assert result["error"]["type"] == "validation_error"
    assert result["error"]["details"][0]["loc"] == "retrieval.max_workers"


def test_check_config_invalid_format(tmp_path: Path) -> None:
    path = _write(tmp_path, "logging_level = \n")

    result, exit_code, _ = check_config(path)

    assert exit_code == 1
    assert result["error"]["type"] == "invalid_format"


def test_check_config_warnings(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
logging_level = "LOUD"

[storage]
retention_count = 5

[remote]
base_url = "bible.usccb.org"

[display]
reading_order = []
""",
    )

    result, exit_code, _ = check_config(path)

    assert exit_code == 0
    warnings = "\n".join(result["warnings"])
    assert len(result["warnings"]) == 4
    assert "logging_level" in warnings
    assert "retention_count" in warnings
    assert "reading_order" in warnings
    assert "base_url" in warnings


def test_explain_config_lists_nested_fields() -> None:
    fields = {entry["name"]: entry for entry in explain_config()}

    assert "storage.retention_count" in fields
    assert fields["storage.retention_count"]["default"] == 60
    assert fields["storage.db_path"]["default"] == "~/.local/share/lectio-diei/data.db"
    assert fields["display.reading_order"]["default"][0] == "first_reading"
    assert fields["log_file"]["type"] == "Optional[Path]"
    assert all(entry["required"] is False for entry in fields.values())
