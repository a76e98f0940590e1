"""Text normalization helpers applied to reading regions."""

from __future__ import annotations

import hashlib
import re

from bs4 import NavigableString, Tag
from bs4.element import Comment

from lectio.models import ReadingType

# Psalm refrains cite their verse, e.g. "R. (8a)" or "R. (cf. 1)".
_REFRAIN_REFERENCE = re.compile(r"\bR\.\s*\((?:cf\.\s*)?\d[0-9a-z:,.\s-]*\)", re.IGNORECASE)
_FOOTNOTE_MARKER = re.compile(r"\[(?:[a-z]|\d{1,3})\]")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v\r]+")

_BLOCK_TAGS = {"p", "div", "li", "blockquote"}

HEADING_ALIASES: dict[str, ReadingType] = {
    "reading i": ReadingType.FIRST_READING,
    "reading 1": ReadingType.FIRST_READING,
    "first reading": ReadingType.FIRST_READING,
    "reading ii": ReadingType.SECOND_READING,
    "reading 2": ReadingType.SECOND_READING,
    "second reading": ReadingType.SECOND_READING,
    "responsorial psalm": ReadingType.PSALM,
    "gospel": ReadingType.GOSPEL,
    "alleluia": ReadingType.ALLELUIA,
    "alleluia see": ReadingType.ALLELUIA,
}


def normalize_heading(text: str) -> str:
    return " ".join(text.replace("\xa0", " ").split()).rstrip(":").strip()


def classify_heading(text: str) -> ReadingType | None:
    """Map a section heading to its reading type; unknown headings map to ``None``."""

    return HEADING_ALIASES.get(normalize_heading(text).lower())


def element_text(element: Tag) -> str:
    """Flatten ``element`` to text, turning ``<br>`` and block boundaries into newlines.

    ``<sup>`` elements (verse numbers) and comments are dropped.
    """

    parts: list[str] = []

    def _walk(node: Tag) -> None:
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                parts.append(str(child).strip("\n"))
                continue
            if not isinstance(child, Tag):
                continue
            if child.name == "br":
                parts.append("\n")
            elif child.name == "sup":
                continue
            elif child.name in _BLOCK_TAGS:
                parts.append("\n")
                _walk(child)
                parts.append("\n")
            else:
                _walk(child)

    _walk(element)
    return "".join(parts)


def strip_markers(text: str) -> str:
    """Remove refrain verse references and footnote markers."""

    text = _REFRAIN_REFERENCE.sub("R.", text)
    return _FOOTNOTE_MARKER.sub("", text)


def normalize_whitespace(text: str, *, preserve_newlines: bool = False) -> str:
    """Collapse redundant whitespace.

    Lines are trimmed and blank lines dropped. With ``preserve_newlines`` the
    remaining lines are joined by single line breaks, otherwise by spaces.
    """

    lines = []
    for line in text.replace("\xa0", " ").split("\n"):
        cleaned = _HORIZONTAL_SPACE.sub(" ", line).strip()
        if cleaned:
            lines.append(cleaned)
    return ("\n" if preserve_newlines else " ").join(lines)


def collapse_newlines(text: str) -> str:
    return normalize_whitespace(text, preserve_newlines=False)


def structure_fingerprint(headings: list[str] | tuple[str, ...]) -> str:
    """Short stable digest of the headings a document exposes."""

    joined = "|".join(normalize_heading(heading).lower() for heading in headings)
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()[:12]


__all__ = [
    "HEADING_ALIASES",
    "classify_heading",
    "collapse_newlines",
    "element_text",
    "normalize_heading",
    "normalize_whitespace",
    "strip_markers",
    "structure_fingerprint",
]
