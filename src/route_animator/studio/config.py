"""Runtime settings read from the environment (and ``.env``)."""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Process-wide settings.

    ``MAPBOX_TOKEN``                 - enables the ``map`` layout basemap
    ``ROUTE_ANIMATOR_FFMPEG``        - ffmpeg executable (default ``ffmpeg``)
    ``ROUTE_ANIMATOR_HTTP_TIMEOUT``  - seconds for weather/map requests
    """

    mapbox_token: str = ""
    ffmpeg_binary: str = "ffmpeg"
    http_timeout: float = Field(default=10.0, gt=0)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> Settings:
        """Build settings from environment variables, loading ``.env`` first."""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))  # existing variables win over .env
        return cls(
            mapbox_token=os.environ.get("MAPBOX_TOKEN", ""),
            ffmpeg_binary=os.environ.get("ROUTE_ANIMATOR_FFMPEG", "ffmpeg"),
            http_timeout=os.environ.get("ROUTE_ANIMATOR_HTTP_TIMEOUT", "10"),
        )
