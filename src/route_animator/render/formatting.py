"""Unit-aware text formatting for the HUD."""

from __future__ import annotations

import math

from route_animator.track.geo import METERS_PER_KM, METERS_PER_MILE

_FEET_PER_METER = 3.280839895
_MS_TO_MPH = 2.23693629
_MS_TO_KMH = 3.6

UNKNOWN = "--"


def unit_length_m(units: str) -> float:
    """Split length in metres: one mile for ``'mph'``, one kilometre otherwise."""
    return METERS_PER_MILE if units == "mph" else METERS_PER_KM


def format_elapsed(ms: float) -> str:
    """``m:ss`` below an hour, ``h:mm:ss`` above."""
    s = round(ms / 1000)
    h, m, ss = s // 3600, (s % 3600) // 60, s % 60
    return f"{h}:{m:02d}:{ss:02d}" if h > 0 else f"{m}:{ss:02d}"


def format_distance(meters: float, units: str) -> str:
    """Miles (feet under ~1 mi) or kilometres (metres under 1 km)."""
    if units == "mph":
        miles = meters / METERS_PER_MILE
        return f"{miles:.2f} mi" if miles >= 0.95 else f"{miles * 5280:.0f} ft"
    return f"{meters / 1000:.2f} km" if meters >= 1000 else f"{meters:.0f} m"


def format_pace(min_per_km: float | None, units: str) -> str:
    """``'8:03 /mi'`` or ``'5:00 /km'``; :data:`UNKNOWN` when there is no pace."""
    if min_per_km is None or not math.isfinite(min_per_km):
        return UNKNOWN
    value = min_per_km * (METERS_PER_MILE / 1000 if units == "mph" else 1.0)
    mm = math.floor(value)
    ss = round((value - mm) * 60)
    if ss == 60:
        mm, ss = mm + 1, 0
    return f"{mm}:{ss:02d} /{'mi' if units == 'mph' else 'km'}"


def format_climb(meters: float, units: str) -> str:
    if units == "mph":
        return f"{meters * _FEET_PER_METER:.0f} ft"
    return f"{meters:.0f} m"


def to_display_speed(ms: float, units: str) -> float:
    """m/s → mph or km/h."""
    return ms * (_MS_TO_MPH if units == "mph" else _MS_TO_KMH)


def format_weather(temp_c: float, wind_kmh: float, units: str) -> str:
    if units == "mph":
        temp = round(temp_c * 9 / 5 + 32)
        wind = round(wind_kmh / 1.609344)
        return f"{temp}°F  |  Wind {wind} mph"
    return f"{round(temp_c)}°C  |  Wind {round(wind_kmh)} km/h"
