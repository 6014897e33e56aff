"""TrackIngestor: reads GPX documents into TrackPoint sequences."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import gpxpy
import gpxpy.gpx

from route_animator.track.models import TrackPoint, valid_coordinates

_logger = logging.getLogger(__name__)

_SYNTHETIC_STEP_MS = 1000

_TIME_ELEMENT = re.compile(r"<(?:\w+:)?time\b[^>]*>.*?</(?:\w+:)?time>", re.DOTALL)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _to_ms(value: datetime | None) -> int | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


class TrackIngestor:
    """Parses GPX track or route points and normalizes their timestamps.

    Parameters
    ----------
    clock:
        Returns the current wall-clock time in milliseconds.  Used as the base
        for synthesized timestamps on untimed tracks; injected for testability.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _wall_clock_ms

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(self, path: str | Path) -> list[TrackPoint]:
        """Parse the GPX file at *path*.  Returns ``[]`` if it cannot be read."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            _logger.warning("Cannot read track file %s: %s", path, exc)
            return []
        return self.parse(data)

    def parse(self, data: bytes | str) -> list[TrackPoint]:
        """Parse GPX *data* into an ordered, de-duplicated point list.

        Track points are preferred; route points are used when the document
        has no track points.  Never raises: unreadable input yields ``[]``.
        """
        text = data.decode("utf-8-sig", errors="replace") if isinstance(data, bytes) else data
        gpx = self._load(text)
        if gpx is None:
            return []

        raw = self._collect(gpx)
        if not raw:
            _logger.warning("GPX document contains no track or route points")
            return []

        return self._normalize(raw)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load(self, text: str) -> gpxpy.gpx.GPX | None:
        try:
            return gpxpy.parse(text)
        except gpxpy.gpx.GPXXMLSyntaxException as exc:
            _logger.warning("Not a readable GPX document: %s", exc)
            return None
        except (gpxpy.gpx.GPXException, ValueError) as exc:
            _logger.info("GPX rejected (%s); retrying without timestamps", exc)

        # gpxpy may reject a malformed <time>; the track is then treated as untimed
        try:
            return gpxpy.parse(_TIME_ELEMENT.sub("", text))
        except (gpxpy.gpx.GPXException, ValueError) as exc:
            _logger.warning("Not a readable GPX document: %s", exc)
            return None

    def _collect(self, gpx: gpxpy.gpx.GPX) -> list[tuple[float, float, float | None, int | None]]:
        source = [
            point
            for track in gpx.tracks
            for segment in track.segments
            for point in segment.points
        ]
        if not source:
            source = [point for route in gpx.routes for point in route.points]

        raw: list[tuple[float, float, float | None, int | None]] = []
        dropped = 0
        for point in source:
            lat, lon = float(point.latitude), float(point.longitude)
            if not valid_coordinates(lat, lon):
                dropped += 1
                continue
            elevation = float(point.elevation) if point.elevation is not None else None
            raw.append((lat, lon, elevation, _to_ms(point.time)))

        if dropped:
            _logger.debug("Dropped %d points with invalid coordinates", dropped)
        return raw

    def _normalize(
        self, raw: list[tuple[float, float, float | None, int | None]]
    ) -> list[TrackPoint]:
        """Apply the timed/untimed rule, then collapse duplicate timestamps."""
        times = [t for _, _, _, t in raw]
        untimed = any(t is None for t in times) or any(
            times[i] <= times[i - 1] for i in range(1, len(times))
        )

        if untimed:
            base = self._clock()
            points = [
                TrackPoint(lat=lat, lon=lon, elevation=ele, timestamp=base + i * _SYNTHETIC_STEP_MS)
                for i, (lat, lon, ele, _) in enumerate(raw)
            ]
            _logger.info("Track is untimed; synthesized %d timestamps at 1 s cadence", len(points))
        else:
            points = sorted(
                (TrackPoint(lat=lat, lon=lon, elevation=ele, timestamp=t) for lat, lon, ele, t in raw),
                key=lambda p: p.timestamp,
            )

        deduped: list[TrackPoint] = []
        for p in points:
            if not deduped or p.timestamp != deduped[-1].timestamp:
                deduped.append(p)
        return deduped
