"""Builders for remote documents and fake collaborators used across tests."""

from __future__ import annotations

import threading
from collections import Counter

from lectio.errors import LectioError
from lectio.liturgy import LiturgicalIdentifier
from lectio.models import Reading, ReadingType
from lectio.remote import RawDocument


def reading_block(heading: str, body: str, address: str | None = "Genesis 1:1-5") -> str:
    address_html = "" if address is None else f'<div class="address"><a href="#">{address}</a></div>'
    return f"""
    <div class="b-verse">
      <div class="innerblock">
        <div class="content-header">
          <h3 class="name">{heading}</h3>
          {address_html}
        </div>
        <div class="content-body">{body}</div>
      </div>
    </div>
    """


def lectionary_page(title: str | None, *blocks: str) -> str:
    title_html = "" if title is None else f"<h2>{title}</h2>"
    return f"""
    <html>
      <head><title>Daily Bible Reading | USCCB</title></head>
      <body>
        <div class="wr-block b-lectionary">
          <div class="innerblock">{title_html}<p>Lectionary: 100</p></div>
        </div>
        {''.join(blocks)}
      </body>
    </html>
    """


FIRST = reading_block(
    "Reading I",
    "<p>In the beginning, when God created the heavens and the earth,<br>\n"
    "the earth was a formless wasteland.</p>",
    "Genesis 1:1-2",
)
PSALM = reading_block(
    "Responsorial Psalm",
    "<p>R. (1) The Lord is my shepherd;<br>\nthere is nothing I shall want.</p>"
    "<p>In verdant pastures he gives me repose.</p>",
    "Psalm 23:1-3a",
)
ALLELUIA = reading_block(
    "Alleluia",
    "<p>R. Alleluia, alleluia.<br>\nI am the good shepherd, says the Lord.</p>",
    "John 10:14",
)
GOSPEL = reading_block(
    "Gospel",
    "<p>Jesus said to his disciples:<br>\n\"I am the good shepherd.\"</p>",
    "John 10:11-18",
)

WEEKDAY_PAGE = lectionary_page("Wednesday of the Twenty-sixth Week in Ordinary Time", FIRST, PSALM, ALLELUIA, GOSPEL)
LENTEN_PAGE = lectionary_page(
    "Tuesday of the Second Week of Lent",
    FIRST,
    PSALM,
    reading_block("Verse Before the Gospel", "<p>Cast away from you all the crimes you have committed.</p>"),
    GOSPEL,
)


def make_document(html: str, identifier: str = "231004-ordinary-26-wed") -> RawDocument:
    return RawDocument(identifier=identifier, url=f"https://bible.usccb.org/{identifier}", html=html)


def sample_readings() -> list[Reading]:
    return [
        Reading(ReadingType.FIRST_READING, "Genesis 1:1-2", "In the beginning\nGod created."),
        Reading(ReadingType.PSALM, "Psalm 23:1-3a", "R. The Lord is my shepherd;\nthere is nothing I shall want."),
        Reading(ReadingType.ALLELUIA, None, "R. Alleluia, alleluia."),
        Reading(ReadingType.GOSPEL, "John 10:11-18", "Jesus said to his disciples:\n\"I am the good shepherd.\""),
    ]


class FakeFetcher:
    """Serves canned pages by remote key and counts requests.

    ``gate`` (when set) blocks every fetch until released so tests can pile up
    concurrent callers behind a single in-flight request.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        *,
        default: str | None = WEEKDAY_PAGE,
        errors: dict[str, LectioError] | None = None,
        links: dict[str, str] | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.pages = pages or {}
        self.default = default
        self.errors = errors or {}
        self.links = links or {}
        self.gate = gate
        self.calls: Counter[str] = Counter()
        self.link_calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, identifier: LiturgicalIdentifier) -> RawDocument:
        with self._lock:
            self.calls[identifier.source_key] += 1
        if self.gate is not None:
            self.gate.wait(timeout=5)
        error = self.errors.get(identifier.source_key)
        if error is not None:
            raise error
        html = self.pages.get(identifier.source_key, self.default)
        assert html is not None, f"no page for {identifier.source_key}"
        return make_document(html, identifier.key)

    def fetch_link(self, identifier: LiturgicalIdentifier, link: str) -> RawDocument:
        with self._lock:
            self.link_calls.append(link)
        return make_document(self.links[link], identifier.key)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())
