"""Video export.

Public API
----------
ExportPipeline  - renders all frames and drives an encoder
ExportResult    - outcome, video bytes, frames written
CancelToken     - cooperative cancellation flag
FfmpegEncoder   - PNG sequence → MP4 via an ffmpeg subprocess
NullEncoder     - in-memory encoder for tests
"""

from route_animator.export.encoder import EncoderError, FfmpegEncoder, FrameEncoder, NullEncoder
from route_animator.export.pipeline import (
    CancelToken,
    ExportOutcome,
    ExportPhase,
    ExportPipeline,
    ExportResult,
    export_filename,
)

__all__ = [
    "CancelToken",
    "EncoderError",
    "ExportOutcome",
    "ExportPhase",
    "ExportPipeline",
    "ExportResult",
    "FfmpegEncoder",
    "FrameEncoder",
    "NullEncoder",
    "export_filename",
]
