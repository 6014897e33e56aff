"""Tests for OpenMeteoWeatherClient and hourly payload parsing."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

import requests

from route_animator.services.weather import (
    OpenMeteoWeatherClient,
    WeatherReading,
    nearest_index,
    parse_hourly,
)

# 2024-05-01 07:00 → 08:00 UTC
START_MS = 1714546800000
END_MS = START_MS + 3_600_000


def _payload() -> dict:
    return {
        "hourly": {
            "time": ["2024-05-01T06:00", "2024-05-01T07:00", "2024-05-01T08:00", "2024-05-01T09:00"],
            "temperature_2m": [9.5, 11.0, 12.5, 14.0],
            "windspeed_10m": [4.0, 6.0, 8.0, 10.0],
        }
    }


def _session(payload=None, exc: Exception | None = None) -> MagicMock:
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value.json.return_value = payload
    return session


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_nearest_index_picks_closest_hour():
    times = _payload()["hourly"]["time"]
    target = datetime(2024, 5, 1, 7, 40, tzinfo=timezone.utc)
    assert nearest_index(times, target) == 2


def test_nearest_index_tie_keeps_first():
    times = _payload()["hourly"]["time"]
    target = datetime(2024, 5, 1, 7, 30, tzinfo=timezone.utc)
    assert nearest_index(times, target) == 1


def test_parse_hourly_missing_arrays():
    assert parse_hourly({"hourly": {"time": []}}, datetime.now(timezone.utc)) is None
    assert parse_hourly({}, datetime.now(timezone.utc)) is None


def test_parse_hourly_null_value():
    payload = _payload()
    payload["hourly"]["temperature_2m"][1] = None
    target = datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    assert parse_hourly(payload, target) is None


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class TestLookup:
    def test_reading_at_midpoint(self):
        # midpoint 07:30 is a tie between 07:00 and 08:00 → first wins
        client = OpenMeteoWeatherClient(session=_session(_payload()))
        assert client.lookup(45.0, 7.0, START_MS, END_MS) == WeatherReading(11.0, 6.0)

    def test_request_spans_one_day_either_side(self):
        session = _session(_payload())
        OpenMeteoWeatherClient(session=session, timeout=3.0).lookup(45.0, 7.0, START_MS, END_MS)

        args, kwargs = session.get.call_args
        assert args[0] == OpenMeteoWeatherClient.BASE_URL
        params = kwargs["params"]
        assert params["start_date"] == "2024-04-30"
        assert params["end_date"] == "2024-05-02"
        assert params["hourly"] == "temperature_2m,windspeed_10m"
        assert params["timezone"] == "UTC"
        assert kwargs["timeout"] == 3.0

    def test_network_error_returns_none(self, caplog):
        client = OpenMeteoWeatherClient(session=_session(exc=requests.ConnectionError("offline")))
        with caplog.at_level(logging.WARNING):
            assert client.lookup(45.0, 7.0, START_MS, END_MS) is None
        assert "Weather lookup failed" in caplog.text

    def test_http_error_returns_none(self):
        session = _session(_payload())
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        assert OpenMeteoWeatherClient(session=session).lookup(45.0, 7.0, START_MS, END_MS) is None

    def test_bad_json_returns_none(self):
        session = _session()
        session.get.return_value.json.side_effect = ValueError("no json")
        assert OpenMeteoWeatherClient(session=session).lookup(45.0, 7.0, START_MS, END_MS) is None

    def test_empty_payload_returns_none(self):
        client = OpenMeteoWeatherClient(session=_session({"hourly": {}}))
        assert client.lookup(45.0, 7.0, START_MS, END_MS) is None

    def test_unexpected_payload_type_returns_none(self):
        client = OpenMeteoWeatherClient(session=_session(["not", "a", "dict"]))
        assert client.lookup(45.0, 7.0, START_MS, END_MS) is None
