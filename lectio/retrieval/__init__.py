"""Cache-first retrieval of daily readings."""

from .coordinator import RefreshSummary, RetrievalCoordinator
from .singleflight import SingleFlight

__all__ = ["RefreshSummary", "RetrievalCoordinator", "SingleFlight"]
