"""Render a GPX track into an animated MP4 (or a single PNG still).

Usage:
  python scripts/render_route.py morning_run.gpx \\
      --duration 20 \\
      --aspect vertical \\
      --layout grid \\
      --units mph \\
      --quality high \\
      --output out.mp4

  python scripts/render_route.py morning_run.gpx --still 0.5 --output frame.png

The map layout needs MAPBOX_TOKEN (environment or .env).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from PIL import Image

from route_animator.export.pipeline import ExportOutcome, ExportPhase
from route_animator.render.state import DisplayOptions
from route_animator.studio.config import Settings
from route_animator.studio.schemas import ExportSettings, LoadRequest
from route_animator.studio.service import AnimationService, LoadStatus


def _progress(phase: ExportPhase, fraction: float) -> None:
    if phase is ExportPhase.IDLE:
        return
    print(f"\r     {phase.value:<8} {fraction * 100:5.1f}%", end="", flush=True)


def main() -> None:
    ap = argparse.ArgumentParser(description="Animate a GPX track into a video")
    ap.add_argument("gpx", help="GPX file to animate")
    ap.add_argument("--output", default=None, help="Output path (default: suggested name)")
    ap.add_argument("--duration", type=float, default=20.0, help="Animation length in seconds")
    ap.add_argument("--fps", type=float, default=30.0, help="Frames per second")
    ap.add_argument("--aspect", choices=["vertical", "square", "wide"], default="vertical")
    ap.add_argument(
        "--layout", choices=["grid", "minimal", "paper", "transparent", "map"], default="grid"
    )
    ap.add_argument("--units", choices=["mph", "kmh"], default="mph")
    ap.add_argument("--quality", choices=["fast", "high"], default="fast")
    ap.add_argument("--privacy-m", type=float, default=120.0, help="Metres hidden at each end")
    ap.add_argument("--max-speed", type=float, default=None, help="Spike cap override (m/s)")
    ap.add_argument("--no-heat", action="store_true", help="Solid route instead of speed colours")
    ap.add_argument("--no-splits", action="store_true", help="Hide mile/km split markers")
    ap.add_argument("--high-contrast", action="store_true", help="Outline the route")
    ap.add_argument("--legend", action="store_true", help="Show the speed legend")
    ap.add_argument("--title", default="", help="Title text (default: file name)")
    ap.add_argument("--title-align", choices=["left", "center", "right"], default="right")
    ap.add_argument("--weather", action="store_true", help="Fetch historical weather")
    ap.add_argument("--background", default=None, help="Image for the transparent layout")
    ap.add_argument("--background-alpha", type=float, default=1.0)
    ap.add_argument("--still", type=float, default=None, help="Render one PNG at this progress")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.gpx)
    if not path.is_file():
        print(f"  [!] File not found: {path}", file=sys.stderr)
        sys.exit(1)

    options = DisplayOptions(
        units=args.units,
        layout=args.layout,
        aspect=args.aspect,
        heat=not args.no_heat,
        splits=not args.no_splits,
        high_contrast=args.high_contrast,
        show_legend=args.legend,
        title_text=args.title,
        title_align=args.title_align,
        show_weather=args.weather,
        background_alpha=args.background_alpha,
    )
    request = LoadRequest(
        fps=args.fps,
        duration_s=args.duration,
        privacy_m=args.privacy_m,
        max_speed_ms=args.max_speed,
        options=options,
        fetch_weather=args.weather,
        fetch_map=args.layout == "map",
    )
    service = AnimationService(Settings.from_env())

    print(f"Track     : {path.name}")
    print(f"Canvas    : {args.aspect} / {args.layout} / {args.units}")
    print(f"Timing    : {args.duration:g}s @ {args.fps:g} fps")
    print()

    # ------------------------------------------------------------------
    # 1. Load + clean + resample
    # ------------------------------------------------------------------
    print("1/3  Loading track...")
    result = service.load(path.read_bytes(), request, path.name)
    if result.status is not LoadStatus.OK:
        print(f"  [!] {result.message}", file=sys.stderr)
        sys.exit(1)
    state = result.state
    print(f"     {result.point_count} points -> {len(state.samples)} samples")
    print(f"     {state.total_distance_m / 1000:.2f} km in {state.total_time_ms / 60000:.1f} min")
    if args.background:
        state = state.with_background(Image.open(args.background))

    # ------------------------------------------------------------------
    # 2. Still frame (optional)
    # ------------------------------------------------------------------
    if args.still is not None:
        print(f"2/3  Rendering still at {args.still:.2f}...")
        output = Path(args.output or f"{path.stem}_still.png")
        service.renderer.render(state, args.still).save(output)
        print(f"3/3  Saved {output}")
        return

    # ------------------------------------------------------------------
    # 2. Render frames + encode
    # ------------------------------------------------------------------
    print(f"2/3  Rendering {state.frame_count} frames...")
    settings = ExportSettings(quality=args.quality, file_name=path.name)
    export = asyncio.run(service.export(state, settings, on_progress=_progress))
    print()
    if export.outcome is not ExportOutcome.COMPLETED:
        print(f"  [!] Export {export.outcome.value}: {export.error or ''}", file=sys.stderr)
        sys.exit(1)

    # ------------------------------------------------------------------
    # 3. Save
    # ------------------------------------------------------------------
    output = Path(args.output or export.filename)
    output.write_bytes(export.video)
    print(f"3/3  Saved {output} ({len(export.video) / 1e6:.1f} MB)")


if __name__ == "__main__":
    main()
