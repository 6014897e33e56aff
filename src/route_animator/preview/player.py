"""PreviewPlayer: drives live playback of a TrackState through a Scheduler."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PIL import Image

from route_animator.preview.scheduler import Scheduler
from route_animator.render.renderer import FrameRenderer
from route_animator.render.state import TrackState

_logger = logging.getLogger(__name__)

FrameCallback = Callable[[Image.Image, float], None]


class PreviewPlayer:
    """Real-time preview loop.

    Each tick derives progress from the time elapsed since the start
    reference, renders one frame and schedules the next tick.  Reaching
    progress 1 draws the final frame and stops.  Pausing just cancels the
    pending tick.  Playing again resets the start reference, so playback
    starts over from the last :meth:`seek` position (0 by default).

    State changes (options, pan, zoom) are independent of playback:
    :meth:`update_state` swaps the snapshot and redraws immediately.

    Args:
        renderer: Frame renderer.
        scheduler: Tick source, see :class:`~route_animator.preview.scheduler.Scheduler`.
        state: Initial snapshot.
        on_frame: Receives ``(frame, progress)`` for every drawn frame.
    """

    def __init__(
        self,
        renderer: FrameRenderer,
        scheduler: Scheduler,
        state: TrackState,
        on_frame: FrameCallback,
    ) -> None:
        self._renderer = renderer
        self._scheduler = scheduler
        self._state = state
        self._on_frame = on_frame
        self._token: Any = None
        self._start: float | None = None
        self._offset = 0.0
        self.progress = 0.0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> TrackState:
        return self._state

    @property
    def playing(self) -> bool:
        return self._token is not None

    def play(self) -> None:
        """Start (or restart) playback from the seek position."""
        if self.playing or len(self._state.samples) < 2:
            return
        self._start = None
        self._token = self._scheduler.schedule(self._tick)

    def pause(self) -> None:
        """Stop scheduling ticks; the last frame stays on screen."""
        if self._token is not None:
            self._scheduler.cancel(self._token)
            self._token = None
        self._start = None

    def toggle(self) -> bool:
        """Pause if playing, otherwise play.  Returns the new playing flag."""
        if self.playing:
            self.pause()
        else:
            self.play()
        return self.playing

    def update_state(self, state: TrackState) -> None:
        """Adopt a new snapshot and redraw the current position synchronously."""
        self._state = state
        self._draw(self.progress)

    def seek(self, progress: float) -> None:
        """Jump to *progress* and draw it; a running playback continues from there."""
        self._offset = min(1.0, max(0.0, progress))
        self._start = None
        self._draw(self._offset)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _tick(self, now: float) -> None:
        self._token = None
        if self._start is None:
            self._start = now
        duration = self._state.duration_s
        p = min(1.0, self._offset + (now - self._start) / duration)
        self._draw(p)

        if p < 1.0:
            self._token = self._scheduler.schedule(self._tick)
            return

        self._draw(1.0)
        self._start = None
        self._offset = 0.0
        _logger.debug("Preview reached the end")

    def _draw(self, progress: float) -> None:
        self.progress = progress
        self._on_frame(self._renderer.render(self._state, progress), progress)
