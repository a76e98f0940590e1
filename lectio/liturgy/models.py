"""Value types produced by the calendar resolver."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum, IntEnum


class Season(str, Enum):
    ADVENT = "advent"
    CHRISTMAS = "christmas"
    ORDINARY_TIME = "ordinary_time"
    LENT = "lent"
    TRIDUUM = "triduum"
    EASTER = "easter"


class Rank(IntEnum):
    """Precedence of a liturgical day; lower values win."""

    TRIDUUM = 1
    PRIVILEGED = 2
    SOLEMNITY = 3
    FEAST_OF_THE_LORD = 5
    SUNDAY = 6
    FEAST = 7
    PRIVILEGED_WEEKDAY = 9
    WEEKDAY = 13


@dataclass(frozen=True, slots=True)
class Celebration:
    """What a date celebrates before cycle metadata is attached."""

    code: str
    season: Season
    rank: Rank


@dataclass(frozen=True, slots=True)
class LiturgicalIdentifier:
    """Canonical identity of a liturgical day.

    ``key`` is the store primary key: the date (``yymmdd``, so keys sort
    chronologically) followed by the celebration code. ``source_key`` is the
    ``MMDDYY`` token the remote uses to address the day's document.
    """

    date: date
    code: str
    season: Season
    rank: Rank
    sunday_cycle: str
    weekday_cycle: str
    liturgical_year: int

    @property
    def key(self) -> str:
        return f"{self.date:%y%m%d}-{self.code}"

    @property
    def source_key(self) -> str:
        return f"{self.date:%m%d%y}"

    def describe(self) -> str:
        return (
            f"{self.code} ({self.season.value.replace('_', ' ')}, "
            f"Year {self.sunday_cycle}, Cycle {self.weekday_cycle})"
        )

    def __str__(self) -> str:
        return self.key


__all__ = ["Celebration", "LiturgicalIdentifier", "Rank", "Season"]
