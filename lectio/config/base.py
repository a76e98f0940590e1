"""Configuration base model and TOML loader."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Base class for configuration sections; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


def load_config(model: type[ConfigT], path: Path) -> ConfigT:
    """Load ``path`` as TOML and validate it against ``model``.

    Raises ``FileNotFoundError`` when the file is absent, ``ValueError`` when it
    is not valid TOML and ``pydantic.ValidationError`` on schema violations.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    return model.model_validate(raw)


__all__ = ["BaseConfig", "load_config"]
