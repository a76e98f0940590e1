"""Remote document retrieval."""

from .client import DEFAULT_BASE_URL, RawDocument, UsccbClient

__all__ = ["DEFAULT_BASE_URL", "RawDocument", "UsccbClient"]
