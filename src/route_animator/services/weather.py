"""Historical weather lookup via the Open-Meteo ERA5 archive.

Best effort: any network, HTTP or payload problem is logged and reported
as ``None`` so the weather overlay is simply omitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import requests

_logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)


@dataclass(frozen=True)
class WeatherReading:
    """Conditions at the hour nearest the activity's midpoint."""

    temp_c: float
    wind_kmh: float


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _utc(ms: float) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def _parse_hour(text: str) -> datetime:
    """Open-Meteo hours are ISO strings without offset, already in UTC."""
    dt = datetime.fromisoformat(text)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def nearest_index(times: list[str], target: datetime) -> int:
    """Index of the entry in *times* closest to *target* (first wins on ties)."""
    best, diff = 0, None
    for i, t in enumerate(times):
        d = abs((_parse_hour(t) - target).total_seconds())
        if diff is None or d < diff:
            best, diff = i, d
    return best


def parse_hourly(payload: dict, target: datetime) -> WeatherReading | None:
    """Pick temperature and wind for *target* from an hourly ERA5 payload."""
    hourly = payload.get("hourly") or {}
    times = hourly.get("time") or []
    temps = hourly.get("temperature_2m") or []
    winds = hourly.get("windspeed_10m") or []
    if not times or not temps or not winds:
        return None
    idx = nearest_index(times, target)
    if idx >= len(temps) or idx >= len(winds):
        return None
    temp, wind = temps[idx], winds[idx]
    if not isinstance(temp, (int, float)) or not isinstance(wind, (int, float)):
        return None
    return WeatherReading(temp_c=float(temp), wind_kmh=float(wind))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class OpenMeteoWeatherClient:
    """Open-Meteo ERA5 archive client.

    Args:
        session: ``requests`` session; injected in tests.
        timeout: Request timeout in seconds.
    """

    BASE_URL = "https://archive-api.open-meteo.com/v1/era5"

    def __init__(self, session: requests.Session | None = None, timeout: float = 10.0) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout

    def lookup(self, lat: float, lon: float, start_ms: float, end_ms: float) -> WeatherReading | None:
        """Weather at (*lat*, *lon*) nearest the midpoint of ``[start_ms, end_ms]``.

        Queries one day either side of the activity so that hours near
        midnight resolve.  Returns ``None`` on any failure.
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "start_date": (_utc(start_ms) - _DAY).date().isoformat(),
            "end_date": (_utc(end_ms) + _DAY).date().isoformat(),
            "hourly": "temperature_2m,windspeed_10m",
            "timezone": "UTC",
        }
        try:
            response = self._session.get(self.BASE_URL, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            _logger.warning("Weather lookup failed: %s", exc)
            return None

        try:
            reading = parse_hourly(payload, _utc((start_ms + end_ms) / 2))
        except (AttributeError, TypeError, ValueError) as exc:
            _logger.warning("Unexpected weather payload: %s", exc)
            return None
        if reading is None:
            _logger.warning("Weather payload had no usable hourly data")
        return reading
