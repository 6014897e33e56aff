"""Resampled timeline data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Sample:
    """One evenly time-spaced point of the animation timeline.

    ``x``/``y`` are geographic longitude/latitude; screen projection happens
    per draw call in :class:`~route_animator.render.projector.Projector`.
    """

    x: float
    """Longitude in decimal degrees."""

    y: float
    """Latitude in decimal degrees."""

    elevation: float | None
    """Interpolated elevation in metres (None if either neighbour lacked one)."""

    timestamp: float
    """Unix time in milliseconds (fractional: grid spacing is exact)."""

    distance_m: float
    """Cumulative path distance from the first sample, in metres."""

    pace_min_per_km: float | None
    """Instantaneous pace; None for the first sample and when stationary."""

    @property
    def lat(self) -> float:
        return self.y

    @property
    def lon(self) -> float:
        return self.x

    def is_drawable(self) -> bool:
        """Return True if both coordinates are finite."""
        return math.isfinite(self.x) and math.isfinite(self.y)
