"""HTTP client for the USCCB daily readings site."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

import requests
from loguru import logger

from lectio.errors import NetworkError, NotFoundError, RemoteFormatError
from lectio.liturgy import LiturgicalIdentifier

DEFAULT_BASE_URL = "https://bible.usccb.org"

_NOT_FOUND_STATUSES = {404, 410}
_TRANSIENT_STATUSES = {408, 429}
_HTML_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(frozen=True, slots=True)
class RawDocument:
    """A complete remote document for one liturgical day."""

    identifier: str
    url: str
    html: str


class UsccbClient:
    """Fetch per-day reading documents; one GET per call, never retried."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        connect_timeout: float = 5.0,
        read_timeout: float = 20.0,
        user_agent: str = "lectio-diei/0.4",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = (connect_timeout, read_timeout)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def document_url(self, identifier: LiturgicalIdentifier) -> str:
        return f"{self.base_url}/bible/readings/{identifier.source_key}.cfm"

    def fetch(self, identifier: LiturgicalIdentifier) -> RawDocument:
        """Retrieve the document for ``identifier`` or raise a :class:`FetchError`."""

        return self._get(identifier.key, self.document_url(identifier))

    def fetch_link(self, identifier: LiturgicalIdentifier, link: str) -> RawDocument:
        """Follow a link found in a previously fetched document."""

        return self._get(identifier.key, urljoin(self.document_url(identifier), link))

    def _get(self, key: str, url: str) -> RawDocument:
        logger.debug("Fetching {} from {}", key, url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            status = response.status_code
            # Accessing .text forces the full body; a broken stream surfaces here.
            body = response.text
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise NetworkError(f"Transport failure fetching {url}: {exc}", identifier=key, url=url) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request failed for {url}: {exc}", identifier=key, url=url) from exc

        if status in _NOT_FOUND_STATUSES:
            raise NotFoundError(f"No document at {url}", identifier=key, url=url, status_code=status)
        if status in _TRANSIENT_STATUSES or status >= 500:
            raise NetworkError(
                f"Remote answered {status} for {url}", identifier=key, url=url, status_code=status
            )
        if not 200 <= status < 300:
            raise RemoteFormatError(
                f"Unexpected status {status} for {url}", identifier=key, url=url, status_code=status
            )

        content_type = response.headers.get("Content-Type", "")
        if content_type and not content_type.lower().startswith(_HTML_TYPES):
            raise RemoteFormatError(
                f"Expected HTML from {url}, got '{content_type}'", identifier=key, url=url, status_code=status
            )
        if not body or not body.strip():
            raise RemoteFormatError(f"Empty body from {url}", identifier=key, url=url, status_code=status)

        logger.debug("Fetched {} ({} bytes)", key, len(body))
        return RawDocument(identifier=key, url=url, html=body)


__all__ = ["DEFAULT_BASE_URL", "RawDocument", "UsccbClient"]
