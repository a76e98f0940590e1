"""Regional options for the liturgical calendar."""

from __future__ import annotations

from pydantic import Field

from .base import BaseConfig


class CalendarConfig(BaseConfig):
    epiphany_on_sunday: bool = Field(True, description="Observe Epiphany on the Sunday between Jan 2 and Jan 8")
    ascension_on_sunday: bool = Field(True, description="Observe the Ascension on the Seventh Sunday of Easter")
    corpus_christi_on_sunday: bool = Field(True, description="Observe Corpus Christi on the Sunday after Trinity")


__all__ = ["CalendarConfig"]
