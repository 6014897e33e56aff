"""2D drawing surface abstraction and its Pillow implementation.

The renderer only talks to :class:`DrawingSurface`, so an alternate backend
(GPU canvas, vector output) can be swapped in without touching frame logic.
"""

from __future__ import annotations

import contextlib
import functools
import math
from collections.abc import Iterator, Sequence
from typing import Protocol

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

Color = tuple[int, int, int, int]
Point = tuple[float, float]


def rgba(hex_color: str, alpha: float = 1.0) -> Color:
    """``'#22d3ee'`` + alpha in [0, 1] → ``(r, g, b, a)``."""
    h = hex_color.lstrip("#")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), round(alpha * 255))


class DrawingSurface(Protocol):
    """Drawing primitives used by the frame renderer."""

    width: int
    height: int

    def fill(self, color: Color) -> None: ...

    def fill_rect(self, box: tuple[float, float, float, float], color: Color) -> None: ...

    def polyline(self, points: Sequence[Point], color: Color, width: float) -> None: ...

    def circle(
        self,
        center: Point,
        radius: float,
        fill: Color | None = None,
        outline: Color | None = None,
        width: float = 1,
    ) -> None: ...

    def text(
        self, xy: Point, text: str, size: float, color: Color, anchor: str = "ls"
    ) -> None: ...

    def text_width(self, text: str, size: float) -> float: ...

    def draw_image(self, image: Image.Image, alpha: float = 1.0) -> None: ...

    def radial_shade(self, inner: float, outer: float, max_alpha: float) -> None: ...

    def vertical_shade(self, edge: float, max_alpha: float) -> None: ...

    def glow(self, radius: float) -> contextlib.AbstractContextManager: ...

    def clip(self, box: tuple[float, float, float, float]) -> contextlib.AbstractContextManager: ...


@functools.lru_cache(maxsize=64)
def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


@functools.lru_cache(maxsize=8)
def _radial_mask(width: int, height: int, inner: float, outer: float, max_alpha: float) -> Image.Image:
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float32)
    r = np.hypot(xx - width / 2, yy - height / 2)
    t = np.clip((r - inner) / max(outer - inner, 1e-6), 0.0, 1.0)
    return Image.fromarray((t * max_alpha * 255).round().astype(np.uint8))


@functools.lru_cache(maxsize=8)
def _vertical_mask(width: int, height: int, edge: float, max_alpha: float) -> Image.Image:
    y = np.arange(height, dtype=np.float32) / max(height - 1, 1)
    dist = np.minimum(y, 1.0 - y)
    t = np.clip(1.0 - dist / max(edge, 1e-6), 0.0, 1.0)
    column = (t * max_alpha * 255).round().astype(np.uint8)
    return Image.fromarray(np.repeat(column[:, None], width, axis=1))


def cover_fit(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale *image* to cover ``width × height`` and centre-crop the overflow."""
    r = max(width / image.width, height / image.height)
    w, h = max(1, math.ceil(image.width * r)), max(1, math.ceil(image.height * r))
    scaled = image.resize((w, h), Image.Resampling.LANCZOS)
    left, top = (w - width) // 2, (h - height) // 2
    return scaled.crop((left, top, left + width, top + height))


class PillowSurface:
    """Software raster surface backed by a Pillow RGB image.

    Colours carry alpha and are blended onto the canvas.  :meth:`glow` and
    :meth:`clip` redirect drawing to a transparent layer that is composited
    back when the block exits.

    Parameters
    ----------
    width, height:
        Canvas size in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._image = Image.new("RGB", (width, height), (0, 0, 0))
        self._layer: Image.Image | None = None
        self._draw = ImageDraw.Draw(self._image, "RGBA")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_image(self) -> Image.Image:
        """Return a copy of the current canvas."""
        return self._image.copy()

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def fill(self, color: Color) -> None:
        self.fill_rect((0, 0, self.width, self.height), color)

    def fill_rect(self, box: tuple[float, float, float, float], color: Color) -> None:
        x0, y0, x1, y1 = box
        self._draw.rectangle((x0, y0, x1 - 1, y1 - 1), fill=color)

    def polyline(self, points: Sequence[Point], color: Color, width: float) -> None:
        """Stroke *points* with round joins and caps."""
        if len(points) < 2:
            return
        w = max(1, round(width))
        self._draw.line(list(points), fill=color, width=w, joint="curve")
        if w > 2:
            r = w / 2
            for x, y in (points[0], points[-1]):
                self._draw.ellipse((x - r, y - r, x + r, y + r), fill=color)

    def circle(
        self,
        center: Point,
        radius: float,
        fill: Color | None = None,
        outline: Color | None = None,
        width: float = 1,
    ) -> None:
        x, y = center
        self._draw.ellipse(
            (x - radius, y - radius, x + radius, y + radius),
            fill=fill,
            outline=outline,
            width=max(1, round(width)),
        )

    def text(self, xy: Point, text: str, size: float, color: Color, anchor: str = "ls") -> None:
        self._draw.text(xy, text, fill=color, font=_font(max(1, round(size))), anchor=anchor)

    def text_width(self, text: str, size: float) -> float:
        return self._draw.textlength(text, font=_font(max(1, round(size))))

    def draw_image(self, image: Image.Image, alpha: float = 1.0) -> None:
        """Cover-fit *image* onto the canvas at *alpha* opacity."""
        fitted = cover_fit(image.convert("RGB"), self.width, self.height)
        if alpha >= 1.0:
            self._image.paste(fitted)
        else:
            self._image = Image.blend(self._image, fitted, max(0.0, alpha))
        self._redraw()

    def radial_shade(self, inner: float, outer: float, max_alpha: float) -> None:
        """Darken towards the edges: transparent inside *inner*, *max_alpha* at *outer*."""
        mask = _radial_mask(self.width, self.height, inner, outer, max_alpha)
        self._image.paste((0, 0, 0), (0, 0, self.width, self.height), mask)

    def vertical_shade(self, edge: float, max_alpha: float) -> None:
        """Darken the top and bottom *edge* fraction, fading to clear inwards."""
        mask = _vertical_mask(self.width, self.height, edge, max_alpha)
        self._image.paste((0, 0, 0), (0, 0, self.width, self.height), mask)

    # ------------------------------------------------------------------
    # Compositing
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def glow(self, radius: float) -> Iterator[None]:
        """Draw the block's shapes with a blurred halo of their own colour."""
        layer = self._push_layer()
        try:
            yield
        finally:
            self._pop_layer()
        if radius > 0:
            halo = layer.filter(ImageFilter.GaussianBlur(radius / 2))
            self._image.paste(halo, (0, 0), halo)
        self._image.paste(layer, (0, 0), layer)

    @contextlib.contextmanager
    def clip(self, box: tuple[float, float, float, float]) -> Iterator[None]:
        """Restrict the block's drawing to *box*."""
        layer = self._push_layer()
        try:
            yield
        finally:
            self._pop_layer()
        region = tuple(round(v) for v in box)
        mask = Image.new("L", layer.size, 0)
        mask.paste(layer.getchannel("A").crop(region), region[:2])
        self._image.paste(layer, (0, 0), mask)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _push_layer(self) -> Image.Image:
        if self._layer is not None:
            raise RuntimeError("nested glow/clip blocks are not supported")
        self._layer = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._layer)
        return self._layer

    def _pop_layer(self) -> None:
        self._layer = None
        self._redraw()

    def _redraw(self) -> None:
        self._draw = ImageDraw.Draw(self._image, "RGBA")
