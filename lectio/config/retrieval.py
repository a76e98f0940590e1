"""Configuration for the retrieval coordinator."""

from __future__ import annotations

from pydantic import Field

from .base import BaseConfig


class RetrievalConfig(BaseConfig):
    """Fetch window, concurrency and presentation of retrieved readings."""

    past_days: int = Field(
        0, description="Days before today stored by 'db update'/'db refresh' (today is always stored)", ge=0
    )
    future_days: int = Field(
        30,
        description="Days after today stored by 'db update'/'db refresh'; the window is past_days + 1 + future_days",
        ge=0,
    )
    max_workers: int = Field(4, description="Worker threads used for fetches", ge=1)
    preserve_newlines: bool = Field(
        False,
        description="Keep the source line breaks in reading bodies (psalms always keep them)",
    )


__all__ = ["RetrievalConfig"]
