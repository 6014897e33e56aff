"""Projection and frame rendering.

Public API
----------
Projector       - geographic samples → canvas pixels
FrameRenderer   - (TrackState, progress) → RGB frame
TrackState      - immutable per-frame render snapshot
DisplayOptions  - user-selected look (units, layout, aspect, toggles)
PillowSurface   - Pillow-backed drawing surface
"""

from route_animator.render.projector import Padding, Projector
from route_animator.render.renderer import FrameRenderer
from route_animator.render.state import DisplayOptions, TrackState, canvas_size
from route_animator.render.surface import DrawingSurface, PillowSurface

__all__ = [
    "DisplayOptions",
    "DrawingSurface",
    "FrameRenderer",
    "Padding",
    "PillowSurface",
    "Projector",
    "TrackState",
    "canvas_size",
]
