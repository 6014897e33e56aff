"""ExportPipeline: renders every frame of a TrackState and encodes it to MP4."""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from PIL import Image

from route_animator.export.encoder import EncoderError, FrameEncoder, Quality
from route_animator.render.renderer import FrameRenderer
from route_animator.render.state import TrackState

_logger = logging.getLogger(__name__)


class ExportPhase(str, Enum):
    IDLE = "idle"
    FRAMES = "frames"
    ENCODING = "encoding"


class ExportOutcome(str, Enum):
    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"


class CancelToken:
    """Cooperative cancellation flag checked by the pipeline before each frame."""

    def __init__(self) -> None:
        self._canceled = False

    def cancel(self) -> None:
        self._canceled = True

    @property
    def canceled(self) -> bool:
        return self._canceled


@dataclass
class ExportResult:
    """Outcome of one export run."""

    outcome: ExportOutcome
    video: bytes = b""
    frames_written: int = 0
    error: str | None = None
    """Failure cause when ``outcome`` is ``FAILED``."""
    filename: str = ""
    """Suggested output file name, filled in by the caller that knows the source."""


ProgressCallback = Callable[[ExportPhase, float], None]


def export_filename(file_name: str, state: TrackState, quality: Quality) -> str:
    """Suggested download name, e.g. ``morning_run_1080x1920_mph_fast.mp4``."""
    stem = PurePath(file_name).stem if file_name else ""
    w, h = state.size
    suffix = "fast" if quality == "fast" else "hq"
    return f"{stem or 'route'}_{w}x{h}_{state.options.units}_{suffix}.mp4"


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class ExportPipeline:
    """Drives renderer → encoder for a whole animation.

    Frames are rendered at progress ``i / (frame_count - 1)`` and written in
    strict index order; control returns to the event loop between frames so
    a preview or cancel request stays responsive.  The encoder is finalized
    exactly once, after the last frame.

    Args:
        renderer: Frame renderer (pure).
        encoder: Frame sink; see :class:`~route_animator.export.encoder.FrameEncoder`.
        on_progress: Optional ``(phase, fraction)`` callback.
    """

    def __init__(
        self,
        renderer: FrameRenderer,
        encoder: FrameEncoder,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._renderer = renderer
        self._encoder = encoder
        self._on_progress = on_progress
        self.phase = ExportPhase.IDLE

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, state: TrackState, cancel: CancelToken | None = None) -> ExportResult:
        """Export *state*; returns a result instead of raising on cancel/failure.

        Written frames are cleaned up on every exit that does not complete,
        including cancellation of the surrounding task.
        """
        total = state.frame_count
        written = 0
        completed = False
        try:
            self._set_phase(ExportPhase.FRAMES, 0.0)
            for i in range(total):
                if cancel is not None and cancel.canceled:
                    _logger.info("Export canceled after %d/%d frames", written, total)
                    return ExportResult(ExportOutcome.CANCELED, frames_written=written)

                image = self._renderer.render(state, i / (total - 1))
                await self._encoder.write_frame(i, encode_png(image))
                written += 1
                self._report(ExportPhase.FRAMES, written / total)
                await asyncio.sleep(0)

            self._set_phase(ExportPhase.ENCODING, 0.0)
            video = await self._encoder.finalize(
                lambda n: self._report(ExportPhase.ENCODING, min(1.0, n / total))
            )
            completed = True
            _logger.info("Export complete: %d frames, %d bytes", written, len(video))
            return ExportResult(ExportOutcome.COMPLETED, video=video, frames_written=written)

        except (EncoderError, OSError) as exc:
            _logger.warning("Export failed: %s", exc)
            return ExportResult(ExportOutcome.FAILED, frames_written=written, error=str(exc))
        finally:
            if not completed:
                await self._encoder.cleanup()
            self._set_phase(ExportPhase.IDLE, 0.0)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _set_phase(self, phase: ExportPhase, fraction: float) -> None:
        self.phase = phase
        self._report(phase, fraction)

    def _report(self, phase: ExportPhase, fraction: float) -> None:
        if self._on_progress is not None:
            self._on_progress(phase, fraction)
