"""Plain-text rendering of a day's readings for the terminal."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass

from lectio.config import DisplayConfig
from lectio.extraction.text import collapse_newlines
from lectio.models import Reading, ReadingType, index_by_type


@dataclass(frozen=True, slots=True)
class DisplaySettings:
    reading_order: tuple[ReadingType, ...]
    original_linebreaks: bool = False
    max_width: int = 80
    day_only: bool = False

    @classmethod
    def from_config(
        cls,
        config: DisplayConfig,
        *,
        readings: list[ReadingType] | None = None,
        original_linebreaks: bool | None = None,
        max_width: int | None = None,
        day_only: bool = False,
    ) -> "DisplaySettings":
        """Command-line choices take precedence over the configured defaults."""

        return cls(
            reading_order=tuple(readings or config.reading_order),
            original_linebreaks=config.original_linebreaks if original_linebreaks is None else original_linebreaks,
            max_width=config.max_width if max_width is None else max_width,
            day_only=day_only,
        )


def render_day(title: str | None, readings: list[Reading], settings: DisplaySettings) -> str:
    """Render the day title followed by the selected readings."""

    heading = title or "Daily Readings"
    separator = "-" * (len(heading) + 4)
    lines = [separator, f"  {heading}  ", separator]
    if settings.day_only:
        return "\n".join(lines)

    by_type = index_by_type(readings)
    for reading_type in settings.reading_order:
        reading = by_type.get(reading_type)
        if reading is None:
            # Second readings and alleluias are absent on many days.
            continue
        lines.extend(render_reading(reading, settings, separator))
    return "\n".join(lines)


def render_reading(reading: Reading, settings: DisplaySettings, separator: str) -> list[str]:
    header = reading.reading_type.label
    if reading.location:
        header = f"{header}: {reading.location}"
    return ["", header, separator, _format_body(reading, settings), separator]


def _format_body(reading: Reading, settings: DisplaySettings) -> str:
    if reading.reading_type is ReadingType.PSALM or settings.original_linebreaks:
        return reading.content
    text = collapse_newlines(reading.content)
    if settings.max_width <= 0:
        return text
    return textwrap.fill(text, width=settings.max_width, break_long_words=False, break_on_hyphens=False)


__all__ = ["DisplaySettings", "render_day", "render_reading"]
