"""Tests for HUD text formatting."""

from __future__ import annotations

import pytest

from route_animator.render.formatting import (
    UNKNOWN,
    format_climb,
    format_distance,
    format_elapsed,
    format_pace,
    format_weather,
    to_display_speed,
    unit_length_m,
)


@pytest.mark.parametrize(
    "ms, expected",
    [(0, "0:00"), (65_000, "1:05"), (599_400, "9:59"), (3_725_000, "1:02:05")],
)
def test_format_elapsed(ms, expected):
    assert format_elapsed(ms) == expected


@pytest.mark.parametrize(
    "meters, units, expected",
    [
        (1609.344, "mph", "1.00 mi"),
        (100.0, "mph", "328 ft"),
        (1500.0, "kmh", "1.50 km"),
        (999.0, "kmh", "999 m"),
    ],
)
def test_format_distance(meters, units, expected):
    assert format_distance(meters, units) == expected


class TestFormatPace:
    def test_kilometres(self):
        assert format_pace(5.0, "kmh") == "5:00 /km"

    def test_miles(self):
        assert format_pace(5.0, "mph") == "8:03 /mi"

    def test_seconds_rollover(self):
        assert format_pace(4.9999, "kmh") == "5:00 /km"

    @pytest.mark.parametrize("pace", [None, float("inf"), float("nan")])
    def test_unknown(self, pace):
        assert format_pace(pace, "kmh") == UNKNOWN


def test_format_climb():
    assert format_climb(100.0, "mph") == "328 ft"
    assert format_climb(100.0, "kmh") == "100 m"


def test_to_display_speed():
    assert to_display_speed(10.0, "mph") == pytest.approx(22.369, abs=1e-3)
    assert to_display_speed(10.0, "kmh") == pytest.approx(36.0)


def test_format_weather():
    assert format_weather(20.0, 10.0, "mph") == "68°F  |  Wind 6 mph"
    assert format_weather(20.0, 10.0, "kmh") == "20°C  |  Wind 10 km/h"


def test_unit_length():
    assert unit_length_m("mph") == pytest.approx(1609.344)
    assert unit_length_m("kmh") == 1000.0
