"""FrameRenderer: pure ``(TrackState, progress) → frame`` rendering."""

from __future__ import annotations

import math
from dataclasses import dataclass

from PIL import Image

from route_animator.analysis.kinematics import KinematicsDeriver, SpeedRange
from route_animator.render.formatting import (
    format_climb,
    format_distance,
    format_elapsed,
    format_pace,
    format_weather,
    to_display_speed,
    unit_length_m,
)
from route_animator.render.projector import Padding, Projector
from route_animator.render.skins import ACCENT, Skin, paint_background, skin_for, speed_color
from route_animator.render.state import TrackState
from route_animator.render.surface import DrawingSurface, PillowSurface, rgba
from route_animator.timeline.models import Sample

PLACEHOLDER_TEXT = "Load a GPX track to preview"
DEFAULT_TITLE = "Your Activity"
_TITLE_MAX_CHARS = 80
_PULSE_SECONDS = 0.5
_SPARKS = 12


@dataclass
class _Frame:
    """Per-call derived values shared by the drawing passes."""

    state: TrackState
    skin: Skin
    samples: list[Sample]
    progress: float
    upto: int
    points: list[tuple[float, float]]
    speeds: list[float]
    bounds: SpeedRange
    splits: list[int]
    climb: list[float]
    w: int
    h: int

    @property
    def m(self) -> int:
        """Shorter canvas side; most stroke and marker sizes scale with it."""
        return min(self.w, self.h)


class FrameRenderer:
    """Renders one animation frame from a :class:`TrackState` snapshot.

    Stateless: no memory is kept between calls, so identical inputs always
    produce pixel-identical frames.  All sizes are fractions of the canvas.

    Args:
        kinematics: Speed/elevation deriver; injected for testability.
    """

    def __init__(self, kinematics: KinematicsDeriver | None = None) -> None:
        self._kin = kinematics or KinematicsDeriver()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, state: TrackState, progress: float) -> Image.Image:
        """Return the frame at *progress* ∈ [0, 1] as an RGB image."""
        w, h = state.size
        surface = PillowSurface(w, h)
        self.draw(surface, state, progress)
        return surface.to_image()

    def draw(self, surface: DrawingSurface, state: TrackState, progress: float) -> None:
        """Composite the frame onto *surface*, back to front."""
        progress = min(1.0, max(0.0, progress))
        skin = skin_for(state.options.layout)
        paint_background(surface, skin, state.background, state.options.background_alpha)

        if len(state.samples) < 2:
            self._placeholder(surface, skin)
            return

        frame = self._prepare(surface, state, skin, progress)
        opts = state.options

        if opts.high_contrast:
            self._outline(surface, frame)
        self._route(surface, frame)
        if opts.splits:
            self._splits(surface, frame)
        self._comet(surface, frame)
        self._hud(surface, frame)
        if opts.heat and opts.show_legend and frame.speeds:
            self._legend(surface, frame)
        self._elevation_strip(surface, frame)
        if opts.show_title:
            self._title(surface, frame)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _prepare(
        self, surface: DrawingSurface, state: TrackState, skin: Skin, progress: float
    ) -> _Frame:
        w, h = surface.width, surface.height
        m = min(w, h)
        samples = list(state.samples)

        hud_h = round(h * 0.12)
        strip_h = round(h * 0.12)
        side = round(m * 0.08)
        gap = round(m * 0.015)
        projector = Projector(
            samples,
            w,
            h,
            Padding(left=side, right=side, top=round(h * 0.03) + hud_h + gap, bottom=strip_h + gap),
            pan=state.pan,
            zoom=state.zoom,
        )

        speeds = self._kin.segment_speeds(samples)
        return _Frame(
            state=state,
            skin=skin,
            samples=samples,
            progress=progress,
            upto=max(1, math.floor(progress * (len(samples) - 1))),
            points=projector.project_all(samples),
            speeds=speeds,
            bounds=self._kin.speed_range(speeds),
            splits=self._kin.split_indices(samples, unit_length_m(state.options.units)),
            climb=self._kin.cumulative_elevation_gain(samples),
            w=w,
            h=h,
        )

    @staticmethod
    def _route_width(f: _Frame) -> int:
        return max(8, round(f.m * 0.012))

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _placeholder(self, surface: DrawingSurface, skin: Skin) -> None:
        w, h = surface.width, surface.height
        surface.text((round(w * 0.055), h / 2), PLACEHOLDER_TEXT, h * 0.025, skin.placeholder)

    def _outline(self, surface: DrawingSurface, f: _Frame) -> None:
        surface.polyline(f.points, f.skin.outline, self._route_width(f) + 4)

    def _route(self, surface: DrawingSurface, f: _Frame) -> None:
        width = self._route_width(f)
        if not (f.state.options.heat and len(f.speeds) == len(f.samples) - 1):
            surface.polyline(f.points, f.skin.route, width)
            return

        with surface.glow(round(f.m * 0.006)):
            for i in range(1, len(f.points)):
                t = self._kin.normalize(f.speeds[i - 1], f.bounds)
                surface.polyline([f.points[i - 1], f.points[i]], speed_color(t), width)

    def _splits(self, surface: DrawingSurface, f: _Frame) -> None:
        if not f.splits:
            return
        label_unit = "mi" if f.state.options.units == "mph" else "km"
        radius = max(8, round(f.m * 0.012))
        font = f.h * 0.022
        for n, idx in enumerate(f.splits, start=1):
            x, y = f.points[idx]
            surface.circle((x, y), radius, fill=f.skin.marker)
            surface.text((x + 10, y - 10), f"{n} {label_unit}", font, f.skin.marker)

        # pulse ring with sparks while the comet passes a split
        window = max(1, round(_PULSE_SECONDS * f.state.fps))
        accent = rgba(ACCENT)
        stroke = max(3, round(f.m * 0.012))
        for idx in f.splits:
            df = abs(f.upto - idx)
            if df > window:
                continue
            k = 1 - df / window
            ease = 1 - (1 - k) ** 2
            x, y = f.points[idx]
            ring = max(18, round(f.m * 0.04)) * (1 + 0.8 * ease)
            spark = round(f.m * (0.02 + 0.03 * ease))
            with surface.glow(round(f.m * 0.02)):
                surface.circle((x, y), ring, outline=accent, width=stroke)
                for s in range(_SPARKS):
                    ang = s / _SPARKS * math.tau
                    c, sn = math.cos(ang), math.sin(ang)
                    surface.polyline(
                        [(x + c * spark * 0.6, y + sn * spark * 0.6), (x + c * spark, y + sn * spark)],
                        accent,
                        stroke,
                    )

    def _comet(self, surface: DrawingSurface, f: _Frame) -> None:
        accent = rgba(ACCENT)
        with surface.glow(round(f.m * 0.018)):
            surface.polyline(f.points[: f.upto + 1], accent, max(10, round(f.m * 0.015)))
        surface.circle(f.points[f.upto], max(10, round(f.m * 0.017)), fill=accent)

    def _hud(self, surface: DrawingSurface, f: _Frame) -> None:
        w, h = f.w, f.h
        units = f.state.options.units
        left = round(w * 0.08)
        right = w - round(w * 0.08)
        surface.fill_rect(
            (round(w * 0.055), round(h * 0.03), round(w * 0.945), round(h * 0.15)),
            f.skin.hud_bg,
        )

        elapsed = f.state.total_time_ms * f.progress
        headline = f"{format_distance(self._distance_at(f), units)}  |  {format_elapsed(elapsed)}"
        surface.text((left, round(h * 0.085)), headline, h * 0.033, f.skin.hud_text)

        pace = self._kin.smoothed_pace(f.samples, f.upto)
        detail = (
            f"Pace: {format_pace(pace, units)}  |  Climb: {format_climb(f.climb[f.upto], units)}"
            f"  |  Total: {format_distance(f.state.total_distance_m, units)}"
            f" in {format_elapsed(f.state.total_time_ms)}"
        )
        size = self._fit(surface, detail, h * 0.024, right - left)
        surface.text((left, round(h * 0.115)), detail, size, f.skin.hud_subtext)

        weather = f.state.weather
        if f.state.options.show_weather and weather is not None:
            text = format_weather(weather.temp_c, weather.wind_kmh, units)
            surface.text((right, round(h * 0.085)), text, h * 0.022, f.skin.hud_text, anchor="rs")

    def _legend(self, surface: DrawingSurface, f: _Frame) -> None:
        w, h = f.w, f.h
        units = f.state.options.units
        legend_w = round(w * 0.14)
        bar_h = round(h * 0.012)
        x0, y0 = f.state.options.legend_position or (
            w - round(w * 0.08) - legend_w,
            round(h * 0.105) - 8,
        )

        surface.fill_rect((x0 - 8, y0 - 8, x0 + legend_w + 8, y0 + bar_h + 18), f.skin.legend_bg)
        for i in range(legend_w):
            color = speed_color(i / max(1, legend_w - 1))
            surface.fill_rect((x0 + i, y0, x0 + i + 1, y0 + bar_h), color)

        label = "mph" if units == "mph" else "km/h"
        font = h * 0.016
        white = rgba("#ffffff")
        lo = f"{to_display_speed(f.bounds.lo, units):.1f} {label}"
        hi = f"{to_display_speed(f.bounds.hi, units):.1f} {label}"
        surface.text((x0 - 6, y0 + bar_h + 16), lo, font, white)
        surface.text((x0 + legend_w + 6, y0 + bar_h + 16), hi, font, white, anchor="rs")

    def _elevation_strip(self, surface: DrawingSurface, f: _Frame) -> None:
        w, h = f.w, f.h
        strip_h = round(h * 0.12)
        pad = round(w * 0.08)
        top = h - strip_h
        surface.fill_rect((0, top, w, h), f.skin.strip_bg)
        surface.text(
            (round(w * 0.055), top + round(h * 0.04)), "Elevation", h * 0.02, f.skin.strip_label
        )

        known = [s.elevation for s in f.samples if s.elevation is not None]
        floor = min(known) if known else 0.0
        elevs = [s.elevation if s.elevation is not None else floor for s in f.samples]
        lo, hi = min(elevs), max(elevs)
        span = max(1.0, hi - lo)
        base_y = h - round(strip_h * 0.2)
        rise = strip_h - round(strip_h * 0.6)
        last = len(elevs) - 1

        def at(i: int) -> tuple[float, float]:
            return i / last * (w - 2 * pad) + pad, base_y - (elevs[i] - lo) / span * rise

        with surface.clip((0, top, w, h)):
            surface.polyline([at(i) for i in range(len(elevs))], f.skin.strip_line, 3)
            surface.circle(at(f.upto), 10, fill=rgba(ACCENT))

    def _title(self, surface: DrawingSurface, f: _Frame) -> None:
        w, h = f.w, f.h
        opts = f.state.options
        text = (opts.title_text.strip() or f.state.name or DEFAULT_TITLE)[:_TITLE_MAX_CHARS]
        y = h - round(h * 0.12) - round(h * 0.02)
        size = h * 0.028
        if opts.title_align == "left":
            surface.text((round(w * 0.055), y), text, size, f.skin.title)
        elif opts.title_align == "center":
            surface.text((w / 2, y), text, size, f.skin.title, anchor="ms")
        else:
            surface.text((w - round(f.m * 0.08), y), text, size, f.skin.title, anchor="rs")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _distance_at(f: _Frame) -> float:
        """Cumulative distance at the exact playback position (between samples)."""
        pos = f.progress * (len(f.samples) - 1)
        i = min(math.floor(pos), len(f.samples) - 2)
        frac = pos - i
        a, b = f.samples[i].distance_m, f.samples[i + 1].distance_m
        return a + (b - a) * frac

    @staticmethod
    def _fit(surface: DrawingSurface, text: str, size: float, max_width: float) -> float:
        """Shrink *size* so *text* fits in *max_width* pixels."""
        width = surface.text_width(text, size)
        if width <= max_width or width <= 0:
            return size
        return size * max_width / width
