"""Exception taxonomy for the retrieval pipeline.

Every failure raised by the fetcher, the extractor or the store derives from
:class:`LectioError`. The coordinator wraps them in :class:`RetrievalError`
so callers can handle a single type while still inspecting the cause.
"""

from __future__ import annotations


class LectioError(Exception):
    """Base class for all pipeline failures."""

    kind = "lectio"


class UnsupportedDateError(ValueError):
    """Raised at the boundary for dates the calendar and remote cannot address."""


# ---------------------------------------------------------------------------
# Remote fetch
# ---------------------------------------------------------------------------
class FetchError(LectioError):
    """The remote document could not be retrieved in full."""

    kind = "fetch"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.url = url
        self.status_code = status_code


class NetworkError(FetchError):
    """Transient transport failure (timeouts, refused connections, 5xx)."""

    kind = "fetch.network"
    retryable = True


class NotFoundError(FetchError):
    """The remote has no document for the identifier."""

    kind = "fetch.not_found"


class RemoteFormatError(FetchError):
    """The remote answered with something that is not a usable document."""

    kind = "fetch.remote_format"


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
class ExtractError(LectioError):
    """Structured readings could not be extracted from a document."""

    kind = "extract"

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class StructureChangedError(ExtractError):
    """The markup no longer matches the expected shape."""

    kind = "extract.structure_changed"

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        headings: tuple[str, ...] = (),
        fingerprint: str = "",
        missing: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, identifier=identifier)
        self.headings = headings
        self.fingerprint = fingerprint
        self.missing = missing

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (identifier={self.identifier}, fingerprint={self.fingerprint}, headings={list(self.headings)})"


class EmptyBodyError(ExtractError):
    """A reading region was located but carried no text."""

    kind = "extract.empty_body"

    def __init__(self, message: str, *, identifier: str | None = None, reading_type: str | None = None) -> None:
        super().__init__(message, identifier=identifier)
        self.reading_type = reading_type


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
class StoreError(LectioError):
    """The local cache failed."""

    kind = "store"


class StoreIntegrityError(StoreError):
    """A constraint was violated; indicates a bug in a producer."""

    kind = "store.integrity"


class StoreIoError(StoreError):
    """The storage medium failed (locked, unreadable, disk full)."""

    kind = "store.io"


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------
class RetrievalError(LectioError):
    """Tagged failure returned to callers of the coordinator."""

    def __init__(self, identifier: str, cause: LectioError) -> None:
        super().__init__(f"Failed to retrieve '{identifier}': {cause}")
        self.identifier = identifier
        self.cause = cause

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.cause.kind

    @property
    def retryable(self) -> bool:
        return bool(getattr(self.cause, "retryable", False))


__all__ = [
    "EmptyBodyError",
    "ExtractError",
    "FetchError",
    "LectioError",
    "NetworkError",
    "NotFoundError",
    "RemoteFormatError",
    "RetrievalError",
    "StoreError",
    "StoreIntegrityError",
    "StoreIoError",
    "StructureChangedError",
    "UnsupportedDateError",
]
