"""Domain records shared across the retrieval pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class ReadingType(str, Enum):
    """Closed set of scripture roles within one day's lectionary entry."""

    FIRST_READING = "first_reading"
    SECOND_READING = "second_reading"
    PSALM = "psalm"
    GOSPEL = "gospel"
    ALLELUIA = "alleluia"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ReadingType.FIRST_READING: "Reading I",
    ReadingType.SECOND_READING: "Reading II",
    ReadingType.PSALM: "Responsorial Psalm",
    ReadingType.GOSPEL: "Gospel",
    ReadingType.ALLELUIA: "Alleluia",
}

# Order in which the readings are proclaimed at Mass.
CANONICAL_ORDER: tuple[ReadingType, ...] = (
    ReadingType.FIRST_READING,
    ReadingType.PSALM,
    ReadingType.SECOND_READING,
    ReadingType.ALLELUIA,
    ReadingType.GOSPEL,
)

REQUIRED_TYPES: frozenset[ReadingType] = frozenset(
    {ReadingType.FIRST_READING, ReadingType.PSALM, ReadingType.GOSPEL}
)


@dataclass(frozen=True, slots=True)
class Reading:
    """A single scripture reading with its normalized text."""

    reading_type: ReadingType
    location: str | None
    content: str

    def with_content(self, content: str) -> "Reading":
        return replace(self, content=content)


@dataclass(frozen=True, slots=True)
class LiturgicalDay:
    """A cached liturgical day as recorded by the store."""

    id: str
    name: str | None
    inserted_at: datetime
    reading_count: int


def canonical_sort(readings: list[Reading] | tuple[Reading, ...]) -> list[Reading]:
    """Return ``readings`` sorted into proclamation order."""

    position = {reading_type: index for index, reading_type in enumerate(CANONICAL_ORDER)}
    return sorted(readings, key=lambda reading: position.get(reading.reading_type, len(position)))


def index_by_type(readings: list[Reading] | tuple[Reading, ...]) -> dict[ReadingType, Reading]:
    return {reading.reading_type: reading for reading in readings}


__all__ = [
    "CANONICAL_ORDER",
    "LiturgicalDay",
    "REQUIRED_TYPES",
    "Reading",
    "ReadingType",
    "canonical_sort",
    "index_by_type",
]
