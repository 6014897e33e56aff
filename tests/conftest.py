"""Shared fixtures: GPX documents, track points and resampled samples."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from route_animator.timeline.resampler import TemporalResampler
from route_animator.track.models import TrackPoint

# 1 degree of latitude on the haversine sphere
METERS_PER_DEG_LAT = 6371000.0 * 3.141592653589793 / 180.0

T0 = datetime(2024, 5, 1, 7, 0, 0, tzinfo=timezone.utc)
T0_MS = int(T0.timestamp() * 1000)


def _gpx(coords, times=None, elevations=None, tag: str = "trkpt") -> str:
    rows = []
    for i, (lat, lon) in enumerate(coords):
        children = ""
        if elevations is not None and elevations[i] is not None:
            children += f"<ele>{elevations[i]}</ele>"
        if times is not None and times[i] is not None:
            children += f"<time>{times[i]}</time>"
        rows.append(f'<{tag} lat="{lat}" lon="{lon}">{children}</{tag}>')
    body = "\n".join(rows)
    if tag == "rtept":
        inner = f"<rte>{body}</rte>"
    else:
        inner = f"<trk><trkseg>{body}</trkseg></trk>"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        f"{inner}</gpx>"
    )


@pytest.fixture
def make_gpx():
    """Factory: ``make_gpx(coords, step_s=1, timed=True, elevations=None, tag="trkpt")``."""

    def _make(coords, step_s: float = 1.0, timed: bool = True, elevations=None, tag: str = "trkpt"):
        times = None
        if timed:
            times = [
                (T0 + timedelta(seconds=i * step_s)).strftime("%Y-%m-%dT%H:%M:%SZ")
                for i in range(len(coords))
            ]
        return _gpx(coords, times, elevations, tag)

    return _make


@pytest.fixture
def raw_gpx():
    """Factory exposing explicit per-point time strings."""
    return _gpx


@pytest.fixture
def make_points():
    """Factory: a straight northward track at constant *speed_ms*, one fix per *step_s*."""

    def _make(
        n: int,
        speed_ms: float = 3.0,
        step_s: float = 1.0,
        elevation: float | None = 100.0,
        start_lat: float = 45.0,
        lon: float = 7.0,
    ) -> list[TrackPoint]:
        dlat = speed_ms * step_s / METERS_PER_DEG_LAT
        return [
            TrackPoint(
                lat=start_lat + i * dlat,
                lon=lon,
                elevation=elevation,
                timestamp=T0_MS + int(i * step_s * 1000),
            )
            for i in range(n)
        ]

    return _make


@pytest.fixture
def make_samples(make_points):
    """Factory: resample a straight track onto *frame_count* samples."""

    def _make(frame_count: int = 60, n: int = 120, speed_ms: float = 3.0, **kwargs):
        return TemporalResampler().resample(make_points(n, speed_ms=speed_ms, **kwargs), frame_count)

    return _make
