"""Visual skins: per-layout palette and background painting."""

from __future__ import annotations

import math
from dataclasses import dataclass

from PIL import Image

from route_animator.render.surface import Color, DrawingSurface, rgba

ACCENT = "#22d3ee"


@dataclass(frozen=True)
class Skin:
    """Colours used by one layout."""

    name: str
    base: Color
    route: Color
    outline: Color
    marker: Color
    hud_bg: Color
    hud_text: Color
    hud_subtext: Color
    strip_bg: Color
    strip_line: Color
    strip_label: Color
    title: Color
    legend_bg: Color
    placeholder: Color


_DARK = dict(
    base=rgba("#0b0f14"),
    route=rgba("#ffffff", 0.9),
    outline=rgba("#000000", 0.6),
    marker=rgba("#ffffff"),
    hud_bg=rgba("#ffffff", 0.06),
    hud_text=rgba("#ffffff"),
    hud_subtext=rgba("#ffffff", 0.9),
    strip_bg=rgba("#ffffff", 0.06),
    strip_line=rgba("#ffffff", 0.6),
    strip_label=rgba("#ffffff"),
    title=rgba("#ffffff", 0.95),
    legend_bg=rgba("#000000", 0.18),
    placeholder=rgba("#ffffff"),
)

SKINS: dict[str, Skin] = {
    "grid": Skin(name="grid", **{**_DARK, "base": rgba("#0a0d12")}),
    "minimal": Skin(name="minimal", **_DARK),
    "transparent": Skin(name="transparent", **_DARK),
    "map": Skin(
        name="map",
        **{**_DARK, "hud_bg": rgba("#000000", 0.28), "legend_bg": rgba("#000000", 0.35)},
    ),
    "paper": Skin(
        name="paper",
        base=rgba("#f4efe8"),
        route=rgba("#000000", 0.7),
        outline=rgba("#000000", 0.35),
        marker=rgba("#000000"),
        hud_bg=rgba("#000000", 0.28),
        hud_text=rgba("#f3f3f3"),
        hud_subtext=rgba("#ffffff", 0.95),
        strip_bg=rgba("#000000", 0.08),
        strip_line=rgba("#000000", 0.55),
        strip_label=rgba("#111111"),
        title=rgba("#000000", 0.9),
        legend_bg=rgba("#000000", 0.35),
        placeholder=rgba("#111111"),
    ),
}


def skin_for(layout: str) -> Skin:
    try:
        return SKINS[layout]
    except KeyError:
        raise ValueError(f"Unknown layout: {layout!r}") from None


def speed_color(t: float) -> Color:
    """Heat ramp for a normalized speed: blue → cyan → yellow → red."""
    t = max(0.0, min(1.0, t))
    if t < 0.33:
        k = t / 0.33
        return (round(55 * k), round(100 + 155 * k), 255, 255)
    if t < 0.66:
        k = (t - 0.33) / 0.33
        return (round(55 + 200 * k), 255, round(255 - 255 * k), 255)
    k = (t - 0.66) / 0.34
    return (255, round(255 - 200 * k), 0, 255)


def paint_background(
    surface: DrawingSurface,
    skin: Skin,
    background: Image.Image | None = None,
    alpha: float = 1.0,
) -> None:
    """Fill the whole canvas with the skin's backdrop."""
    w, h = surface.width, surface.height
    surface.fill(skin.base)

    if skin.name == "grid":
        line = rgba("#ffffff", 0.06)
        step = max(1, round(min(w, h) * 0.04))
        for x in range(0, w + 1, step):
            surface.polyline([(x, 0), (x, h)], line, 1)
        for y in range(0, h + 1, step):
            surface.polyline([(0, y), (w, y)], line, 1)
        surface.radial_shade(min(w, h) * 0.2, max(w, h) * 0.7, 0.35)

    elif skin.name == "paper":
        line = rgba("#000000", 0.12)
        step = max(1, round(min(w, h) * 0.06))
        amp = round(step * 0.2)
        for y in range(round(h * 0.15), h - round(h * 0.2), step):
            contour = [(x, y + math.sin(x * 0.015) * amp) for x in range(0, w + 1, 12)]
            surface.polyline(contour, line, 1)
        surface.vertical_shade(0.05, 0.08)

    elif skin.name in ("transparent", "map") and background is not None:
        surface.draw_image(background, alpha if skin.name == "transparent" else 1.0)
