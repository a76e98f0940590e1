"""Configuration for the remote readings source."""

from __future__ import annotations

from pydantic import Field

from .base import BaseConfig


class RemoteConfig(BaseConfig):
    base_url: str = Field("https://bible.usccb.org", description="Origin of the daily readings site")
    connect_timeout: float = Field(5.0, description="Connect timeout (seconds)", gt=0)
    read_timeout: float = Field(20.0, description="Read timeout (seconds)", gt=0)
    user_agent: str = Field("lectio-diei/0.4", description="User-Agent header sent with every request")


__all__ = ["RemoteConfig"]
