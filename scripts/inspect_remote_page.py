"""Utility script to check the remote markup for a range of days.

Fetches each day without touching the local cache and reports the section
headings, their structural fingerprint and whether extraction succeeds. Useful
when the remote changes its layout.
"""

from __future__ import annotations

import sys
import time
from datetime import timedelta
from pathlib import Path

import typer
from loguru import logger

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from lectio.errors import LectioError  # noqa: E402
from lectio.extraction import ReadingExtractor  # noqa: E402
from lectio.extraction.text import structure_fingerprint  # noqa: E402
from lectio.liturgy import CalendarResolver, parse_date  # noqa: E402
from lectio.remote import UsccbClient  # noqa: E402

app = typer.Typer(add_completion=False)


@app.command()
def main(
    start: str = typer.Option(..., help="First day (YYYY-MM-DD or MMDDYY)"),
    days: int = typer.Option(1, min=1, help="Number of consecutive days to inspect"),
    delay: float = typer.Option(1.0, min=0.0, help="Seconds to wait between requests"),
) -> None:
    """Report headings and extraction status for each requested day."""
    resolver = CalendarResolver()
    client = UsccbClient()
    extractor = ReadingExtractor()

    first = parse_date(start)
    failures = 0
    fingerprints: dict[str, int] = {}
    for offset in range(days):
        identifier = resolver.resolve(first + timedelta(days=offset))
        try:
            document = client.fetch(identifier)
            link = extractor.day_mass_link(document)
            if link:
                logger.info("{}: following day Mass link {}", identifier.key, link)
                document = client.fetch_link(identifier, link)
            headings = extractor.headings(document)
            fingerprint = structure_fingerprint(headings)
            fingerprints[fingerprint] = fingerprints.get(fingerprint, 0) + 1
            readings = extractor.extract(document)
        except LectioError as exc:
            failures += 1
            logger.error("{}: {} ({})", identifier.key, exc, exc.kind)
        else:
            logger.info(
                "{}: {} readings, fingerprint={} headings={}",
                identifier.key,
                len(readings),
                fingerprint,
                headings,
            )
        if delay and offset + 1 < days:
            time.sleep(delay)

    logger.info("Inspected {} days: {} failures, {} distinct layouts", days, failures, len(fingerprints))
    if failures:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
