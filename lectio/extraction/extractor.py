"""Structured reading extraction from remote documents."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from loguru import logger

from lectio.errors import EmptyBodyError, StructureChangedError
from lectio.models import REQUIRED_TYPES, Reading, ReadingType, canonical_sort
from lectio.remote import RawDocument

from .text import (
    classify_heading,
    element_text,
    normalize_heading,
    normalize_whitespace,
    strip_markers,
    structure_fingerprint,
)

_DAY_MASS_TEXT = "mass during the day"


@dataclass(frozen=True, slots=True)
class Region:
    """One heading-delimited section of a document."""

    heading: str
    reading_type: ReadingType | None
    body: Tag | None
    address: Tag | None


class ReadingExtractor:
    """Turn a remote document into readings in proclamation order.

    Regions are located by heading text rather than position, so reordered
    or additional sections do not break extraction. Unknown headings are
    skipped and a repeated heading keeps its first occurrence.
    """

    def __init__(self, parser: str = "html.parser") -> None:
        self.parser = parser

    def extract(self, document: RawDocument, *, preserve_newlines: bool = False) -> list[Reading]:
        soup = self._parse(document)
        regions = self.regions(soup)
        headings = tuple(region.heading for region in regions)
        fingerprint = structure_fingerprint(headings)

        readings: dict[ReadingType, Reading] = {}
        for region in regions:
            if region.reading_type is None:
                logger.debug("Skipping section '{}' in {}", region.heading, document.identifier)
                continue
            if region.reading_type in readings:
                logger.debug("Ignoring alternative '{}' in {}", region.heading, document.identifier)
                continue
            readings[region.reading_type] = self._read_region(
                document.identifier,
                region,
                headings=headings,
                fingerprint=fingerprint,
                preserve_newlines=preserve_newlines,
            )

        if not readings:
            raise StructureChangedError(
                "No reading regions found",
                identifier=document.identifier,
                headings=headings,
                fingerprint=fingerprint,
                missing=tuple(sorted(t.value for t in REQUIRED_TYPES)),
            )
        missing = tuple(sorted(t.value for t in REQUIRED_TYPES if t not in readings))
        if missing:
            raise StructureChangedError(
                f"Required readings missing: {', '.join(missing)}",
                identifier=document.identifier,
                headings=headings,
                fingerprint=fingerprint,
                missing=missing,
            )

        logger.debug(
            "Extracted {} readings from {} (fingerprint={})",
            len(readings),
            document.identifier,
            fingerprint,
        )
        return canonical_sort(list(readings.values()))

    def extract_title(self, document: RawDocument) -> str | None:
        """Return the day's title as published, if any."""

        soup = self._parse(document)
        heading = soup.select_one(".b-lectionary h2") or soup.find("h2")
        if heading is not None:
            title = normalize_whitespace(heading.get_text(" "))
            if title:
                return title
        if soup.title is not None:
            title = normalize_whitespace(soup.title.get_text(" ").split("|")[0])
            return title or None
        return None

    def day_mass_link(self, document: RawDocument) -> str | None:
        """Return the "Mass during the Day" link of a multi-Mass landing page."""

        soup = self._parse(document)
        for anchor in soup.find_all("a", href=True):
            if _DAY_MASS_TEXT in normalize_heading(anchor.get_text(" ")).lower():
                return anchor["href"]
        return None

    def headings(self, document: RawDocument) -> list[str]:
        return [region.heading for region in self.regions(self._parse(document))]

    def regions(self, soup: BeautifulSoup) -> list[Region]:
        """Split the document at its section headings.

        Each region's body and address are the first matching elements after
        its heading and before the next one, so sections that share a parent
        element never borrow each other's text.
        """

        nodes = [
            node
            for node in soup.select("h3.name") or soup.find_all(["h3", "h4"])
            if normalize_heading(node.get_text(" "))
        ]
        regions = []
        for node, following in zip(nodes, [*nodes[1:], None]):
            heading = normalize_heading(node.get_text(" "))
            body, address = _section_parts(node, following)
            regions.append(
                Region(heading=heading, reading_type=classify_heading(heading), body=body, address=address)
            )
        return regions

    def _parse(self, document: RawDocument) -> BeautifulSoup:
        return BeautifulSoup(document.html, self.parser)

    def _read_region(
        self,
        identifier: str,
        region: Region,
        *,
        headings: tuple[str, ...],
        fingerprint: str,
        preserve_newlines: bool,
    ) -> Reading:
        reading_type = region.reading_type
        assert reading_type is not None

        if region.body is None:
            raise StructureChangedError(
                f"Section '{region.heading}' has no content-body element",
                identifier=identifier,
                headings=headings,
                fingerprint=fingerprint,
            )
        content = normalize_whitespace(
            strip_markers(element_text(region.body)),
            preserve_newlines=preserve_newlines,
        )
        if not content:
            raise EmptyBodyError(
                f"Section '{region.heading}' has no text",
                identifier=identifier,
                reading_type=reading_type.value,
            )

        location = None
        if region.address is not None:
            location = normalize_whitespace(region.address.get_text(" ")) or None

        return Reading(reading_type=reading_type, location=location, content=content)


def _section_parts(heading: Tag, stop: Tag | None) -> tuple[Tag | None, Tag | None]:
    """Return the body and address elements between ``heading`` and ``stop``."""

    body = address = None
    for element in heading.next_elements:
        if element is stop:
            break
        if not isinstance(element, Tag):
            continue
        classes = element.get("class") or []
        if body is None and "content-body" in classes:
            body = element
        elif address is None and "address" in classes:
            address = element
        if body is not None and address is not None:
            break
    return body, address


__all__ = ["ReadingExtractor", "Region"]
