"""Render-time state: display options and the immutable TrackState snapshot."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

from route_animator.timeline.models import Sample
from route_animator.timeline.resampler import frame_count_for

if TYPE_CHECKING:
    from PIL import Image

    from route_animator.services.weather import WeatherReading

Units = Literal["mph", "kmh"]
Layout = Literal["grid", "minimal", "paper", "transparent", "map"]
Aspect = Literal["vertical", "square", "wide"]
TitleAlign = Literal["left", "center", "right"]

ASPECT_SIZES: dict[str, tuple[int, int]] = {
    "vertical": (1080, 1920),
    "square": (1080, 1080),
    "wide": (1920, 1080),
}


def canvas_size(aspect: str) -> tuple[int, int]:
    """Pixel ``(width, height)`` of an aspect preset."""
    try:
        return ASPECT_SIZES[aspect]
    except KeyError:
        raise ValueError(f"Unknown aspect preset: {aspect!r}") from None


class DisplayOptions(BaseModel):
    """User-selected look of the animation.  Frozen: edits create a new instance."""

    model_config = ConfigDict(frozen=True)

    units: Units = "mph"
    layout: Layout = "grid"
    aspect: Aspect = "vertical"
    heat: bool = True
    splits: bool = True
    high_contrast: bool = False
    show_legend: bool = False
    legend_position: tuple[float, float] | None = None
    show_title: bool = True
    title_text: str = ""
    title_align: TitleAlign = "right"
    show_weather: bool = False
    background_alpha: float = Field(default=1.0, ge=0.0, le=1.0)


@dataclass(frozen=True)
class TrackState:
    """Everything the renderer needs for one frame, as an immutable snapshot.

    The preview loop and the exporter read the latest snapshot; option, pan
    and zoom changes build a new one with the ``with_*`` helpers instead of
    mutating shared fields.
    """

    samples: tuple[Sample, ...] = ()
    options: DisplayOptions = field(default_factory=DisplayOptions)
    pan: tuple[float, float] = (0.0, 0.0)
    zoom: float = 1.0
    fps: float = 30.0
    duration_s: float = 20.0
    name: str = ""
    """Track name (usually the file stem), used as the fallback title."""

    weather: WeatherReading | None = None
    background: Image.Image | None = field(default=None, compare=False, repr=False)
    """User image (transparent layout) or static map image (map layout)."""

    @property
    def size(self) -> tuple[int, int]:
        return canvas_size(self.options.aspect)

    @property
    def frame_count(self) -> int:
        return frame_count_for(self.fps, self.duration_s)

    @property
    def total_time_ms(self) -> float:
        if not self.samples:
            return 0.0
        return self.samples[-1].timestamp - self.samples[0].timestamp

    @property
    def total_distance_m(self) -> float:
        return self.samples[-1].distance_m if self.samples else 0.0

    def with_pan(self, x: float, y: float) -> TrackState:
        return dataclasses.replace(self, pan=(x, y))

    def with_zoom(self, zoom: float) -> TrackState:
        if zoom <= 0:
            raise ValueError("zoom must be > 0")
        return dataclasses.replace(self, zoom=zoom)

    def reset_view(self) -> TrackState:
        return dataclasses.replace(self, pan=(0.0, 0.0), zoom=1.0)

    def with_options(self, **changes) -> TrackState:
        """Return a copy with validated option *changes* applied."""
        options = DisplayOptions.model_validate({**self.options.model_dump(), **changes})
        return dataclasses.replace(self, options=options)

    def with_weather(self, weather: WeatherReading | None) -> TrackState:
        return dataclasses.replace(self, weather=weather)

    def with_background(self, image: Image.Image | None) -> TrackState:
        return dataclasses.replace(self, background=image)
