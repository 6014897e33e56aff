"""Application layer: settings, request schemas and the AnimationService."""

from route_animator.studio.config import Settings
from route_animator.studio.schemas import ExportSettings, LoadRequest
from route_animator.studio.service import AnimationService, LoadResult, LoadStatus

__all__ = [
    "AnimationService",
    "ExportSettings",
    "LoadRequest",
    "LoadResult",
    "LoadStatus",
    "Settings",
]
