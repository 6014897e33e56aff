"""Track data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass


def valid_coordinates(lat: float, lon: float) -> bool:
    """Return True if *lat*/*lon* are finite and inside the WGS84 ranges."""
    return (
        math.isfinite(lat)
        and math.isfinite(lon)
        and -90.0 <= lat <= 90.0
        and -180.0 <= lon <= 180.0
    )


@dataclass(frozen=True)
class TrackPoint:
    """A single GPS fix from a recorded track.

    Raw points (straight from the GPX file) and cleaned points share this
    shape; cleaning passes build new lists rather than mutating points.
    """

    lat: float
    """Latitude in decimal degrees."""

    lon: float
    """Longitude in decimal degrees."""

    elevation: float | None
    """Elevation in metres, or None when the device did not record it."""

    timestamp: int
    """Unix time in milliseconds."""
