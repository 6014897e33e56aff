"""Tests for AnimationService: load pipeline, collaborators and export."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from route_animator.export.encoder import NullEncoder
from route_animator.export.pipeline import ExportOutcome
from route_animator.render.state import DisplayOptions
from route_animator.services.weather import WeatherReading
from route_animator.studio.config import Settings
from route_animator.studio.schemas import ExportSettings, LoadRequest
from route_animator.studio.service import AnimationService, LoadStatus
from route_animator.timeline.models import Sample

METERS_PER_DEG_LAT = 111194.92664455873

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _coords(n: int, step_m: float = 3.0) -> list[tuple[float, float]]:
    return [(45.0 + i * step_m / METERS_PER_DEG_LAT, 7.0) for i in range(n)]


def _sample(i: int, lat: float, x: float = 7.0) -> Sample:
    return Sample(x=x, y=lat, elevation=None, timestamp=i * 1000.0, distance_m=i * 10.0,
                  pace_min_per_km=None)


def _make_service(**kwargs) -> AnimationService:
    return AnimationService(Settings(ffmpeg_binary="ff", http_timeout=1.0), **kwargs)


@pytest.fixture
def gpx(make_gpx) -> str:
    return make_gpx(_coords(200), elevations=[100 + i * 0.1 for i in range(200)])


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


class TestLoad:
    def test_builds_state_on_frame_grid(self, gpx):
        request = LoadRequest(fps=3.0, duration_s=10.0, options=DisplayOptions(units="kmh"))
        result = _make_service().load(gpx, request, "morning.gpx")

        assert result.status is LoadStatus.OK
        state = result.state
        assert len(state.samples) == 30
        assert state.frame_count == 30
        assert state.options.units == "kmh"
        assert state.name == "morning"
        assert result.point_count < 200  # privacy trim applied

    def test_distance_monotone(self, gpx):
        state = _make_service().load(gpx, LoadRequest(fps=5.0, duration_s=8.0)).state
        distances = [s.distance_m for s in state.samples]
        assert distances == sorted(distances)
        assert distances[-1] == pytest.approx(597.0 - 240.0, abs=8.0)

    def test_privacy_zero_keeps_whole_track(self, gpx):
        result = _make_service().load(gpx, LoadRequest(privacy_m=0))
        assert result.point_count == 200

    def test_untimed_track_loads(self, make_gpx):
        result = _make_service().load(make_gpx(_coords(5), timed=False), LoadRequest(fps=1, duration_s=4))
        assert result.status is LoadStatus.OK
        assert len(result.state.samples) == 4
        assert result.state.total_time_ms == pytest.approx(4000.0)

    def test_single_point_is_insufficient(self, make_gpx):
        result = _make_service().load(make_gpx(_coords(1)))
        assert result.status is LoadStatus.INSUFFICIENT_DATA
        assert result.state.samples == ()
        assert result.message

    def test_unreadable_input_is_insufficient(self):
        result = _make_service().load(b"definitely not gpx", file_name="broken.gpx")
        assert result.status is LoadStatus.INSUFFICIENT_DATA
        assert result.point_count == 0

    def test_non_finite_samples_dropped(self, gpx):
        resampler = MagicMock()
        resampler.resample.return_value = [
            _sample(0, 45.0),
            _sample(1, float("nan")),
            _sample(2, 45.0002),
            _sample(3, 45.0003, x=float("inf")),
        ]
        state = _make_service(resampler=resampler).load(gpx).state

        assert [s.timestamp for s in state.samples] == [0.0, 2000.0]

    def test_too_few_drawable_samples_is_insufficient(self, gpx):
        resampler = MagicMock()
        resampler.resample.return_value = [_sample(0, 45.0), _sample(1, float("nan"))]
        result = _make_service(resampler=resampler).load(gpx)

        assert result.status is LoadStatus.INSUFFICIENT_DATA
        assert result.state.samples == ()

    def test_fully_trimmed_track_is_insufficient(self, make_gpx):
        # 60 points × 3 m = 177 m < 2 × 120 m
        result = _make_service().load(make_gpx(_coords(60)))
        assert result.status is LoadStatus.INSUFFICIENT_DATA


class TestCollaborators:
    def test_not_called_unless_requested(self, gpx):
        weather, maps = MagicMock(), MagicMock()
        _make_service(weather=weather, maps=maps).load(gpx)
        weather.lookup.assert_not_called()
        maps.fetch.assert_not_called()

    def test_weather_attached(self, gpx):
        weather = MagicMock()
        weather.lookup.return_value = WeatherReading(15.0, 9.0)
        result = _make_service(weather=weather).load(gpx, LoadRequest(fetch_weather=True))

        assert result.state.weather == WeatherReading(15.0, 9.0)
        lat, lon, start_ms, end_ms = weather.lookup.call_args.args
        assert lat == pytest.approx(45.0, abs=0.01) and lon == pytest.approx(7.0)
        assert start_ms < end_ms

    def test_weather_failure_leaves_overlay_empty(self, gpx):
        weather = MagicMock()
        weather.lookup.return_value = None
        result = _make_service(weather=weather).load(gpx, LoadRequest(fetch_weather=True))
        assert result.status is LoadStatus.OK
        assert result.state.weather is None

    def test_map_image_attached(self, gpx):
        maps = MagicMock()
        image = Image.new("RGB", (10, 10))
        maps.fetch.return_value = image
        request = LoadRequest(fetch_map=True, options=DisplayOptions(layout="map", aspect="square"))
        result = _make_service(maps=maps).load(gpx, request)

        assert result.state.background is image
        _, width, height = maps.fetch.call_args.args
        assert (width, height) == (1080, 1080)

    def test_default_clients_use_settings(self):
        service = _make_service()
        assert service.weather_client() is service.weather_client()
        assert service.map_client() is service.map_client()


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_export_with_injected_encoder(self, gpx):
        service = _make_service(renderer=MagicMock(**{"render.return_value": Image.new("RGB", (4, 4))}))
        state = service.load(gpx, LoadRequest(fps=1.0, duration_s=3.0), "morning.gpx").state
        encoder = NullEncoder(output=b"mp4")

        result = asyncio.run(service.export(state, ExportSettings(quality="high"), encoder=encoder))

        assert result.outcome is ExportOutcome.COMPLETED
        assert result.video == b"mp4"
        assert encoder.order == [0, 1, 2]
        assert result.filename == "morning_1080x1920_mph_hq.mp4"

    def test_default_encoder_is_ffmpeg(self, gpx):
        service = _make_service(renderer=MagicMock(**{"render.return_value": Image.new("RGB", (4, 4))}))
        state = service.load(gpx, LoadRequest(fps=2.0, duration_s=1.0)).state

        with patch("route_animator.studio.service.FfmpegEncoder") as encoder_cls:
            encoder_cls.return_value = NullEncoder()
            result = asyncio.run(service.export(state))

        encoder_cls.assert_called_once_with(fps=2.0, quality="fast", binary="ff")
        assert result.outcome is ExportOutcome.COMPLETED
        assert result.filename == "route_1080x1920_mph_fast.mp4"
