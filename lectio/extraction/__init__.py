"""Reading extraction from remote markup."""

from .extractor import ReadingExtractor, Region

__all__ = ["ReadingExtractor", "Region"]
