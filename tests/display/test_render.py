from __future__ import annotations

from lectio.config import DisplayConfig
from lectio.display import DisplaySettings, render_day, render_reading
from lectio.models import CANONICAL_ORDER, Reading, ReadingType

from ..utils import sample_readings

SEPARATOR = "-" * 10


def _settings(**overrides) -> DisplaySettings:
    values = {"reading_order": CANONICAL_ORDER, "max_width": 80}
    values.update(overrides)
    return DisplaySettings(**values)


def test_render_day_title_block() -> None:
    output = render_day("Tuesday", sample_readings(), _settings(day_only=True))

    assert output.splitlines() == ["-----------", "  Tuesday  ", "-----------"]


def test_render_day_default_title() -> None:
    output = render_day(None, [], _settings())

    assert "  Daily Readings  " in output


def test_render_day_follows_reading_order_and_skips_absent() -> None:
    settings = _settings(reading_order=(ReadingType.GOSPEL, ReadingType.SECOND_READING, ReadingType.FIRST_READING))

    output = render_day("Day", sample_readings(), settings)

    assert output.index("Gospel: John 10:11-18") < output.index("Reading I: Genesis 1:1-2")
    assert "Reading II" not in output
    assert "Responsorial Psalm" not in output


def test_header_without_location() -> None:
    reading = Reading(ReadingType.ALLELUIA, None, "R. Alleluia, alleluia.")

    lines = render_reading(reading, _settings(), SEPARATOR)

    assert lines[:3] == ["", "Alleluia", SEPARATOR]


def test_body_wraps_to_width() -> None:
    reading = Reading(ReadingType.GOSPEL, None, "one two three\nfour five six seven")

    lines = render_reading(reading, _settings(max_width=10), SEPARATOR)

    assert lines[3] == "one two\nthree four\nfive six\nseven"


def test_zero_width_disables_wrapping() -> None:
    reading = Reading(ReadingType.GOSPEL, None, "one two three\nfour five six seven")

    lines = render_reading(reading, _settings(max_width=0), SEPARATOR)

    assert lines[3] == "one two three four five six seven"


def test_psalm_keeps_line_breaks() -> None:
    reading = Reading(ReadingType.PSALM, None, "R. The Lord is my shepherd;\nthere is nothing I shall want.")

    lines = render_reading(reading, _settings(max_width=10), SEPARATOR)

    assert lines[3] == reading.content


def test_original_linebreaks_keeps_text() -> None:
    reading = Reading(ReadingType.GOSPEL, None, "one two three\nfour five six seven")

    lines = render_reading(reading, _settings(max_width=10, original_linebreaks=True), SEPARATOR)

    assert lines[3] == reading.content


def test_settings_from_config_prefers_overrides() -> None:
    config = DisplayConfig(max_width=60, original_linebreaks=True, reading_order=[ReadingType.GOSPEL])

    defaults = DisplaySettings.from_config(config)
    overridden = DisplaySettings.from_config(
        config,
        readings=[ReadingType.PSALM],
        original_linebreaks=False,
        max_width=0,
        day_only=True,
    )

    assert defaults == DisplaySettings((ReadingType.GOSPEL,), True, 60, False)
    assert overridden == DisplaySettings((ReadingType.PSALM,), False, 0, True)
