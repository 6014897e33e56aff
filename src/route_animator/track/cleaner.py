"""Track cleaning: elevation smoothing, GPS spike rejection, privacy trimming."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from route_animator.track.geo import path_length_m, point_distance_m
from route_animator.track.models import TrackPoint

_logger = logging.getLogger(__name__)


@dataclass
class CleanerConfig:
    """Tunable constants for :class:`TrackCleaner`.

    The speed caps are heuristics: an average above ``cycling_avg_speed_ms``
    is presumed to be a ride, anything slower a run or walk.
    """

    elevation_window: int = 7
    """Half-width of the elevation moving average (kernel = 2 * window + 1)."""

    spike_min_points: int = 10
    """Tracks shorter than this skip spike rejection."""

    cycling_avg_speed_ms: float = 4.0
    cycling_cap_ms: float = 20.0
    running_cap_ms: float = 9.0

    privacy_trim_m: float = 120.0
    """Default distance trimmed from each end by :meth:`TrackCleaner.clean`."""

    privacy_min_points: int = 50
    """:meth:`TrackCleaner.clean` only trims tracks with more points than this."""


class TrackCleaner:
    """Cleans a timestamp-ordered point list.

    Every pass returns a new list; input points are never mutated.

    Args:
        config: Tunable constants.  Defaults to :class:`CleanerConfig`.
    """

    def __init__(self, config: CleanerConfig | None = None) -> None:
        self.config = config or CleanerConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def clean(
        self,
        points: list[TrackPoint],
        max_speed_hint: float | None = None,
        privacy_m: float | None = None,
    ) -> list[TrackPoint]:
        """Run smoothing, spike rejection and privacy trimming in that order.

        Args:
            points: Ingested points, strictly increasing in timestamp.
            max_speed_hint: Overrides the heuristic speed cap (m/s).
            privacy_m: Trim distance per end; ``None`` uses the config default.
        """
        cfg = self.config
        trim = cfg.privacy_trim_m if privacy_m is None else privacy_m

        cleaned = self.smooth_elevation(points)
        cleaned = self.remove_spikes(cleaned, max_speed_hint)
        if trim > 0 and len(cleaned) > cfg.privacy_min_points:
            cleaned = self.trim_privacy(cleaned, trim)

        _logger.debug("Cleaned track: %d -> %d points", len(points), len(cleaned))
        return cleaned

    def smooth_elevation(self, points: list[TrackPoint]) -> list[TrackPoint]:
        """Replace each elevation with the mean of the elevations within the window.

        Points without an elevation keep ``None`` and are left out of their
        neighbours' averages.
        """
        w = self.config.elevation_window
        n = len(points)
        smoothed: list[TrackPoint] = []

        for i, pt in enumerate(points):
            if pt.elevation is None:
                smoothed.append(pt)
                continue
            window = [
                points[j].elevation
                for j in range(max(0, i - w), min(n - 1, i + w) + 1)
                if points[j].elevation is not None
            ]
            smoothed.append(dataclasses.replace(pt, elevation=sum(window) / len(window)))

        return smoothed

    def speed_cap(self, points: list[TrackPoint], max_speed_hint: float | None = None) -> float:
        """Return the spike-rejection speed cap (m/s) for *points*."""
        if max_speed_hint is not None:
            return max_speed_hint
        cfg = self.config
        if len(points) < 2:
            return cfg.running_cap_ms
        total_s = (points[-1].timestamp - points[0].timestamp) / 1000.0
        avg = path_length_m(points) / total_s if total_s > 0 else 0.0
        return cfg.cycling_cap_ms if avg > cfg.cycling_avg_speed_ms else cfg.running_cap_ms

    def remove_spikes(
        self, points: list[TrackPoint], max_speed_hint: float | None = None
    ) -> list[TrackPoint]:
        """Drop points that imply an impossible speed from the last kept point.

        Rejected points never become the anchor for later checks, so a single
        GPS jump cannot drag the following good points out with it.
        """
        if len(points) < self.config.spike_min_points:
            return list(points)

        cap = self.speed_cap(points, max_speed_hint)
        kept = [points[0]]
        for cur in points[1:]:
            prev = kept[-1]
            dt = (cur.timestamp - prev.timestamp) / 1000.0
            speed = point_distance_m(prev, cur) / dt if dt > 0 else 0.0
            if speed <= cap:
                kept.append(cur)

        if len(kept) < len(points):
            _logger.debug(
                "Rejected %d spike points (cap %.1f m/s)", len(points) - len(kept), cap
            )
        return kept

    def trim_privacy(self, points: list[TrackPoint], meters: float) -> list[TrackPoint]:
        """Cut *meters* of path from both ends of the track.

        The result is empty when the two cut points cross (track shorter than
        ``2 * meters``).
        """
        n = len(points)
        if n < 2 or meters <= 0:
            return list(points)

        start = 0
        dist = 0.0
        for i in range(1, n):
            dist += point_distance_m(points[i - 1], points[i])
            if dist >= meters:
                start = i
                break

        end = n - 1
        dist = 0.0
        for i in range(n - 1, 0, -1):
            dist += point_distance_m(points[i], points[i - 1])
            if dist >= meters:
                end = i
                break

        return points[start:end + 1]
