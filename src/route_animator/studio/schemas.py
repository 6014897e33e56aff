"""Pydantic request schemas for loading and exporting animations."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from route_animator.render.state import DisplayOptions


class LoadRequest(BaseModel):
    fps: float = Field(default=30.0, gt=0, le=120)
    duration_s: float = Field(default=20.0, gt=0, le=600)
    privacy_m: float = Field(default=120.0, ge=0)
    """Metres trimmed from each end for tracks longer than 50 points; 0 disables."""
    max_speed_ms: float | None = Field(default=None, gt=0)
    """Spike-rejection cap override; ``None`` picks cycling/running automatically."""
    options: DisplayOptions = Field(default_factory=DisplayOptions)
    fetch_weather: bool = False
    fetch_map: bool = False


class ExportSettings(BaseModel):
    quality: Literal["fast", "high"] = "fast"
    file_name: str = ""
    """Source file name; its stem prefixes the suggested output name."""
