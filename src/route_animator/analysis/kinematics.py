"""KinematicsDeriver: speed, heat normalization, elevation gain, splits."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from route_animator.timeline.models import Sample
from route_animator.track.geo import haversine_m


@dataclass(frozen=True)
class SpeedRange:
    """Robust speed bounds (m/s) used to normalize heat colours."""

    lo: float
    hi: float


def time_step_s(samples: list[Sample]) -> float:
    """Fixed inter-sample time step in seconds (0 for fewer than 2 samples)."""
    if len(samples) < 2:
        return 0.0
    return (samples[-1].timestamp - samples[0].timestamp) / (len(samples) - 1) / 1000.0


class KinematicsDeriver:
    """Derives time-varying kinematics from an evenly spaced sample sequence.

    Args:
        lo_percentile: Lower heat bound as a fraction, default 5th percentile.
        hi_percentile: Upper heat bound as a fraction, default 95th percentile.
    """

    def __init__(self, lo_percentile: float = 0.05, hi_percentile: float = 0.95) -> None:
        if not 0.0 <= lo_percentile <= hi_percentile <= 1.0:
            raise ValueError("percentiles must satisfy 0 <= lo <= hi <= 1")
        self.lo_percentile = lo_percentile
        self.hi_percentile = hi_percentile

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------

    def segment_speeds(self, samples: list[Sample]) -> list[float]:
        """Ground speed (m/s) of each segment ``i-1 → i``; length ``n - 1``."""
        dt = time_step_s(samples)
        speeds: list[float] = []
        for i in range(1, len(samples)):
            a, b = samples[i - 1], samples[i]
            d = haversine_m(a.y, a.x, b.y, b.x)
            speeds.append(d / dt if dt > 0 else 0.0)
        return speeds

    def speed_range(self, speeds: list[float]) -> SpeedRange:
        """Percentile bounds of *speeds*, interpolating between order statistics."""
        if not speeds:
            return SpeedRange(0.0, 0.0)
        lo, hi = np.percentile(
            np.asarray(speeds, dtype=float),
            [self.lo_percentile * 100.0, self.hi_percentile * 100.0],
        )
        return SpeedRange(float(lo), float(hi))

    @staticmethod
    def normalize(speed: float, bounds: SpeedRange) -> float:
        """Map *speed* into [0, 1]; outliers clamp, a flat range maps to 0.5."""
        if bounds.hi <= bounds.lo:
            return 0.5
        return min(1.0, max(0.0, (speed - bounds.lo) / (bounds.hi - bounds.lo)))

    # ------------------------------------------------------------------
    # Elevation
    # ------------------------------------------------------------------

    def cumulative_elevation_gain(self, samples: list[Sample]) -> list[float]:
        """Running climb total (m) at each index; descents add nothing.

        Pairs where either sample lacks an elevation contribute zero.
        """
        gains: list[float] = []
        total = 0.0
        for i, s in enumerate(samples):
            if i > 0:
                prev = samples[i - 1].elevation
                if prev is not None and s.elevation is not None and s.elevation > prev:
                    total += s.elevation - prev
            gains.append(total)
        return gains

    def elevation_gain(self, samples: list[Sample]) -> float:
        """Total climb (m) over the whole sequence."""
        gains = self.cumulative_elevation_gain(samples)
        return gains[-1] if gains else 0.0

    # ------------------------------------------------------------------
    # Splits and pace
    # ------------------------------------------------------------------

    @staticmethod
    def split_indices(samples: list[Sample], unit_m: float) -> list[int]:
        """First sample index reaching each whole *unit_m* below the total distance."""
        if not samples or unit_m <= 0:
            return []
        total = samples[-1].distance_m
        indices: list[int] = []
        j = 0
        mark = unit_m
        while mark < total:
            while j < len(samples) - 1 and samples[j].distance_m < mark:
                j += 1
            indices.append(j)
            mark += unit_m
        return indices

    @staticmethod
    def smoothed_pace(samples: list[Sample], index: int, window: int = 8) -> float | None:
        """Mean of the finite paces within ±*window* samples of *index*.

        Falls back to the sample's own pace when no windowed pace is finite.
        """
        if not samples:
            return None
        index = min(max(index, 0), len(samples) - 1)
        lo = max(0, index - window)
        hi = min(len(samples) - 1, index + window)
        paces = [
            samples[i].pace_min_per_km
            for i in range(lo, hi + 1)
            if samples[i].pace_min_per_km is not None and math.isfinite(samples[i].pace_min_per_km)
        ]
        if paces:
            return sum(paces) / len(paces)
        return samples[index].pace_min_per_km
