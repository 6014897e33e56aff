"""Tests for DisplayOptions and TrackState snapshots."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from route_animator.render.state import DisplayOptions, TrackState, canvas_size
from route_animator.services.weather import WeatherReading


@pytest.mark.parametrize(
    "aspect, size",
    [("vertical", (1080, 1920)), ("square", (1080, 1080)), ("wide", (1920, 1080))],
)
def test_canvas_size(aspect, size):
    assert canvas_size(aspect) == size


def test_canvas_size_unknown():
    with pytest.raises(ValueError):
        canvas_size("cinema")


class TestDisplayOptions:
    def test_defaults(self):
        opts = DisplayOptions()
        assert (opts.units, opts.layout, opts.aspect) == ("mph", "grid", "vertical")
        assert opts.heat and opts.splits and opts.show_title
        assert not opts.show_legend

    @pytest.mark.parametrize(
        "field, value",
        [("layout", "neon"), ("units", "knots"), ("background_alpha", 1.5), ("title_align", "top")],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            DisplayOptions(**{field: value})

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DisplayOptions().units = "kmh"


class TestTrackState:
    def test_empty_state(self):
        state = TrackState()
        assert state.size == (1080, 1920)
        assert state.frame_count == 600
        assert state.total_time_ms == 0.0
        assert state.total_distance_m == 0.0

    def test_totals_from_samples(self, make_samples):
        samples = tuple(make_samples(frame_count=11, n=101, speed_ms=2.0))
        state = TrackState(samples=samples)
        assert state.total_time_ms == pytest.approx(100_000.0)
        assert state.total_distance_m == pytest.approx(200.0, rel=1e-3)

    def test_edits_return_new_snapshots(self):
        state = TrackState()
        panned = state.with_pan(10.0, -5.0)
        zoomed = panned.with_zoom(2.5)

        assert state.pan == (0.0, 0.0)
        assert panned.pan == (10.0, -5.0)
        assert zoomed.zoom == 2.5 and zoomed.pan == (10.0, -5.0)
        assert zoomed.reset_view().pan == (0.0, 0.0)
        assert zoomed.reset_view().zoom == 1.0

    @pytest.mark.parametrize("zoom", [0.0, -1.0])
    def test_non_positive_zoom_rejected(self, zoom):
        with pytest.raises(ValueError):
            TrackState().with_zoom(zoom)

    def test_with_options_validates(self):
        state = TrackState().with_options(units="kmh", aspect="wide")
        assert state.options.units == "kmh"
        assert state.size == (1920, 1080)
        with pytest.raises(ValidationError):
            state.with_options(aspect="cinema")

    def test_with_weather(self):
        reading = WeatherReading(temp_c=12.0, wind_kmh=8.0)
        assert TrackState().with_weather(reading).weather == reading
