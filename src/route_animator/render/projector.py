"""Projector: geographic samples → drawing-surface coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from route_animator.timeline.models import Sample

_MIN_EXTENT = 1e-9


@dataclass(frozen=True)
class Padding:
    """Pixel insets on each side of the drawable route area."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0


class Projector:
    """Aspect-fit projection of a route into a padded canvas area.

    The route's lon/lat bounding box is scaled uniformly to fit the free area
    (canvas minus *padding*), multiplied by *zoom*, centred, then shifted by
    *pan* pixels.  Screen Y grows downward, so latitude is inverted.

    Parameters
    ----------
    samples:
        Route samples; only ``x`` (lon) and ``y`` (lat) are used.
    width, height:
        Canvas size in pixels.
    padding:
        Insets of the free area.
    pan:
        User offset in pixels, applied after centring.
    zoom:
        User zoom factor; ``1.0`` fits the route exactly.
    """

    def __init__(
        self,
        samples: list[Sample],
        width: float,
        height: float,
        padding: Padding | None = None,
        pan: tuple[float, float] = (0.0, 0.0),
        zoom: float = 1.0,
    ) -> None:
        pad = padding or Padding()
        self.width = width
        self.height = height
        self.free_width = max(1.0, width - pad.left - pad.right)
        self.free_height = max(1.0, height - pad.top - pad.bottom)
        self._empty = not samples

        if self._empty:
            self.route_width = 0.0
            self.route_height = 0.0
            self.scale = 1.0
            return

        xs = [s.x for s in samples]
        ys = [s.y for s in samples]
        self._min_x = min(xs)
        self._max_y = max(ys)
        self.route_width = max(_MIN_EXTENT, max(xs) - self._min_x)
        self.route_height = max(_MIN_EXTENT, self._max_y - min(ys))

        base = min(self.free_width / self.route_width, self.free_height / self.route_height)
        self.scale = base * (zoom or 1.0)

        center_x = (self.free_width - self.route_width * self.scale) / 2
        center_y = (self.free_height - self.route_height * self.scale) / 2
        self._offset_x = pad.left + center_x + pan[0]
        self._offset_y = pad.top + center_y + pan[1]

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        """Map longitude *x* / latitude *y* to ``(screen_x, screen_y)``."""
        if self._empty:
            return self.width / 2, self.height / 2
        return (
            self._offset_x + (x - self._min_x) * self.scale,
            self._offset_y + (self._max_y - y) * self.scale,
        )

    def project(self, sample: Sample) -> tuple[float, float]:
        """Map a :class:`Sample` to screen coordinates."""
        return self.to_screen(sample.x, sample.y)

    def project_all(self, samples: list[Sample]) -> list[tuple[float, float]]:
        return [self.to_screen(s.x, s.y) for s in samples]
