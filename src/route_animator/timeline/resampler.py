"""TemporalResampler: maps an irregular track onto a fixed-size time grid."""

from __future__ import annotations

from route_animator.timeline.models import Sample
from route_animator.track.geo import haversine_m
from route_animator.track.models import TrackPoint


def frame_count_for(fps: float, duration_s: float) -> int:
    """Number of frames for an animation of *duration_s* seconds at *fps*.

    Always at least 2 so that the first and last track points are both shown.
    """
    if fps <= 0 or duration_s <= 0:
        raise ValueError("fps and duration_s must be > 0")
    return max(2, round(fps * duration_s))


class TemporalResampler:
    """Resamples cleaned track points onto ``frame_count`` evenly spaced instants.

    Algorithm:
    1. Target time for index ``i`` is ``start + i / (frame_count - 1) * span``.
    2. A cursor advances monotonically through the input to find the
       bracketing pair ``a1.timestamp <= t < a2.timestamp`` (single O(n) pass).
    3. Position (and elevation, when both neighbours have one) is linearly
       interpolated inside the bracket.
    4. Distance and pace come from consecutive *output* samples, so the
       cumulative distance is non-decreasing by construction.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resample(
        self,
        points: list[TrackPoint],
        frame_count: int,
        start_ms: float | None = None,
        end_ms: float | None = None,
    ) -> list[Sample]:
        """Return exactly *frame_count* samples (``[]`` for empty input).

        Args:
            points: Cleaned points, strictly increasing in timestamp.
            frame_count: Output length; must be >= 2.
            start_ms: Grid start; defaults to the first point's timestamp.
            end_ms: Grid end; defaults to the last point's timestamp.

        Raises:
            ValueError: If *frame_count* < 2.
        """
        if frame_count < 2:
            raise ValueError("frame_count must be >= 2")
        if not points:
            return []

        start = float(points[0].timestamp if start_ms is None else start_ms)
        end = float(points[-1].timestamp if end_ms is None else end_ms)
        span = max(1.0, end - start)
        step_s = span / (frame_count - 1) / 1000.0

        n = len(points)
        j = 0
        cumulative = 0.0
        samples: list[Sample] = []

        for i in range(frame_count):
            t = start + (i / (frame_count - 1)) * span
            while j < n - 1 and points[j + 1].timestamp <= t:
                j += 1

            a1 = points[j]
            a2 = points[j + 1] if j + 1 < n else a1
            bracket = max(1.0, a2.timestamp - a1.timestamp)
            frac = min(1.0, max(0.0, (t - a1.timestamp) / bracket))

            lat = a1.lat + frac * (a2.lat - a1.lat)
            lon = a1.lon + frac * (a2.lon - a1.lon)
            if a1.elevation is not None and a2.elevation is not None:
                elevation = a1.elevation + frac * (a2.elevation - a1.elevation)
            else:
                elevation = None

            pace = None
            if samples:
                prev = samples[-1]
                d = haversine_m(prev.y, prev.x, lat, lon)
                cumulative += d
                speed = d / step_s
                pace = (1000.0 / speed) / 60.0 if speed > 0 else None

            samples.append(Sample(
                x=lon,
                y=lat,
                elevation=elevation,
                timestamp=t,
                distance_m=cumulative,
                pace_min_per_km=pace,
            ))

        return samples
