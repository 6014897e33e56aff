"""AnimationService: wraps the load and export pipelines for front ends."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum

from route_animator.export.encoder import FfmpegEncoder, FrameEncoder
from route_animator.export.pipeline import (
    CancelToken,
    ExportPipeline,
    ExportResult,
    ProgressCallback,
    export_filename,
)
from route_animator.render.renderer import FrameRenderer
from route_animator.render.state import TrackState
from route_animator.services.tiles import MapboxStaticClient
from route_animator.services.weather import OpenMeteoWeatherClient
from route_animator.studio.config import Settings
from route_animator.studio.schemas import ExportSettings, LoadRequest
from route_animator.timeline.resampler import TemporalResampler, frame_count_for
from route_animator.track.cleaner import TrackCleaner
from route_animator.track.ingest import TrackIngestor

_logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass
class LoadResult:
    status: LoadStatus
    state: TrackState
    message: str = ""
    point_count: int = 0
    """Points left after cleaning."""


class AnimationService:
    """Load → clean → resample → snapshot, and snapshot → MP4.

    Parameters
    ----------
    settings:
        Runtime settings.  Defaults to :meth:`Settings.from_env`.
    ingestor, cleaner, resampler, renderer:
        Pipeline stages; injected in tests.
    weather, maps:
        Optional network collaborators.  Default clients are built from
        *settings* on first use.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        ingestor: TrackIngestor | None = None,
        cleaner: TrackCleaner | None = None,
        resampler: TemporalResampler | None = None,
        renderer: FrameRenderer | None = None,
        weather: OpenMeteoWeatherClient | None = None,
        maps: MapboxStaticClient | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.ingestor = ingestor or TrackIngestor()
        self.cleaner = cleaner or TrackCleaner()
        self.resampler = resampler or TemporalResampler()
        self.renderer = renderer or FrameRenderer()
        self._weather = weather
        self._maps = maps

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, data: bytes | str, request: LoadRequest | None = None, file_name: str = "") -> LoadResult:
        """Build a :class:`TrackState` from a GPX document.

        Never raises for bad input: unreadable or too-short tracks come back
        as ``INSUFFICIENT_DATA`` with an empty snapshot.
        """
        req = request or LoadRequest()
        name = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
        empty = TrackState(options=req.options, fps=req.fps, duration_s=req.duration_s, name=name)

        # ------------------------------------------------------------------
        # Step 1: Ingest + clean
        # ------------------------------------------------------------------
        points = self.ingestor.parse(data)
        cleaned = self.cleaner.clean(points, max_speed_hint=req.max_speed_ms, privacy_m=req.privacy_m)
        if len(cleaned) < 2:
            _logger.warning("Not enough track points in %r (%d usable)", file_name, len(cleaned))
            return LoadResult(
                LoadStatus.INSUFFICIENT_DATA,
                empty,
                "Not enough points after cleaning.",
                len(cleaned),
            )

        # ------------------------------------------------------------------
        # Step 2: Resample onto the frame grid
        # ------------------------------------------------------------------
        frames = frame_count_for(req.fps, req.duration_s)
        samples = [s for s in self.resampler.resample(cleaned, frames) if s.is_drawable()]
        if len(samples) < 2:
            _logger.warning("Resampling of %r produced %d drawable samples", file_name, len(samples))
            return LoadResult(
                LoadStatus.INSUFFICIENT_DATA,
                empty,
                "Not enough drawable samples.",
                len(cleaned),
            )

        state = dataclasses.replace(empty, samples=tuple(samples))

        # ------------------------------------------------------------------
        # Step 3: Optional collaborators (best effort)
        # ------------------------------------------------------------------
        if req.fetch_weather:
            mid = samples[len(samples) // 2]
            reading = self.weather_client().lookup(
                mid.lat, mid.lon, samples[0].timestamp, samples[-1].timestamp
            )
            state = state.with_weather(reading)
        if req.fetch_map:
            w, h = state.size
            state = state.with_background(self.map_client().fetch(samples, w, h))

        _logger.info(
            "Loaded %r: %d points, %d samples, %.0f m",
            file_name,
            len(cleaned),
            len(samples),
            state.total_distance_m,
        )
        return LoadResult(LoadStatus.OK, state, "", len(cleaned))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export(
        self,
        state: TrackState,
        settings: ExportSettings | None = None,
        encoder: FrameEncoder | None = None,
        cancel: CancelToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExportResult:
        """Render and encode *state*; defaults to an :class:`FfmpegEncoder`."""
        opts = settings or ExportSettings()
        if encoder is None:
            encoder = FfmpegEncoder(
                fps=state.fps, quality=opts.quality, binary=self.settings.ffmpeg_binary
            )
        pipeline = ExportPipeline(self.renderer, encoder, on_progress)
        result = await pipeline.run(state, cancel)
        return dataclasses.replace(
            result, filename=export_filename(opts.file_name or state.name, state, opts.quality)
        )

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def weather_client(self) -> OpenMeteoWeatherClient:
        if self._weather is None:
            self._weather = OpenMeteoWeatherClient(timeout=self.settings.http_timeout)
        return self._weather

    def map_client(self) -> MapboxStaticClient:
        if self._maps is None:
            self._maps = MapboxStaticClient(
                self.settings.mapbox_token, timeout=self.settings.http_timeout
            )
        return self._maps
