"""Configuration for terminal rendering of readings."""

from __future__ import annotations

from pydantic import Field, field_validator

from lectio.models import CANONICAL_ORDER, ReadingType

from .base import BaseConfig


class DisplayConfig(BaseConfig):
    max_width: int = Field(80, description="Wrap width for reading bodies (0 disables wrapping)", ge=0)
    original_linebreaks: bool = Field(False, description="Print readings with the source's line breaks")
    reading_order: list[ReadingType] = Field(
        default_factory=lambda: list(CANONICAL_ORDER),
        description="Readings shown by 'display', in order",
    )

    @field_validator("reading_order")
    @classmethod
    def _unique_order(cls, value: list[ReadingType]) -> list[ReadingType]:
        if len(set(value)) != len(value):
            raise ValueError("reading_order must not repeat a reading type")
        return value


__all__ = ["DisplayConfig"]
