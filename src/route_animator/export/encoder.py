"""Frame encoders: FfmpegEncoder for real MP4 output, NullEncoder for tests."""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Literal, Protocol

_logger = logging.getLogger(__name__)

Quality = Literal["fast", "high"]

FRAME_PATTERN = "frame_%05d.png"
_FRAME_COUNTER = re.compile(r"frame=\s*(\d+)")
_LINE_BREAK = re.compile(r"[\r\n]+")

_PRESETS: dict[str, list[str]] = {
    "fast": ["-c:v", "mpeg4", "-q:v", "5"],
    "high": ["-c:v", "libx264", "-crf", "20", "-preset", "veryfast"],
}


class EncoderError(RuntimeError):
    """The video encoder could not produce output."""


class FrameEncoder(Protocol):
    """Sink for PNG frames that turns them into a video."""

    async def write_frame(self, index: int, data: bytes) -> None: ...

    async def finalize(self, on_frame: Callable[[int], None] | None = None) -> bytes: ...

    async def cleanup(self) -> None: ...


def parse_frame_counters(chunk: str) -> list[int]:
    """Extract every ``frame=`` counter from a chunk of ffmpeg stderr."""
    counters: list[int] = []
    for line in _LINE_BREAK.split(chunk):
        m = _FRAME_COUNTER.search(line)
        if m:
            counters.append(int(m.group(1)))
    return counters


def ffmpeg_args(binary: str, fps: float, quality: Quality, output: str) -> list[str]:
    """Full ffmpeg command line for a numbered PNG sequence in the cwd."""
    try:
        codec = _PRESETS[quality]
    except KeyError:
        raise ValueError(f"Unknown quality preset: {quality!r}") from None
    return [
        binary,
        "-y",
        "-framerate", f"{fps:g}",
        "-i", FRAME_PATTERN,
        "-v", "warning",
        "-stats",
        *codec,
        "-pix_fmt", "yuv420p",
        "-movflags", "+faststart",
        "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        output,
    ]  # fmt: skip


class NullEncoder:
    """In-memory encoder; records frames and calls for test assertions.

    Parameters
    ----------
    output:
        Bytes returned by :meth:`finalize`.
    fail:
        When set, :meth:`finalize` raises :class:`EncoderError` with this message.
    """

    def __init__(self, output: bytes = b"", fail: str | None = None) -> None:
        self.output = output
        self.fail = fail
        self.frames: dict[int, bytes] = {}
        self.order: list[int] = []
        self.finalized: int = 0
        self.cleanups: int = 0

    async def write_frame(self, index: int, data: bytes) -> None:
        """Record a frame."""
        self.frames[index] = data
        self.order.append(index)

    async def finalize(self, on_frame: Callable[[int], None] | None = None) -> bytes:
        """Report every recorded frame as encoded and return :attr:`output`."""
        self.finalized += 1
        if self.fail is not None:
            raise EncoderError(self.fail)
        if on_frame is not None:
            for n in range(1, len(self.frames) + 1):
                on_frame(n)
        return self.output

    async def cleanup(self) -> None:
        """Forget recorded frames."""
        self.cleanups += 1
        self.frames.clear()


class FfmpegEncoder:
    """Encodes a PNG sequence with an ``ffmpeg`` subprocess.

    Frames go to a private temporary directory as ``frame_00000.png`` and
    so on.  :meth:`finalize` runs ffmpeg there, streams its ``-stats`` output
    to report encoded frame counts, and returns the MP4 bytes.  The
    directory is removed after finalize or :meth:`cleanup`.

    Parameters
    ----------
    fps:
        Input frame rate.
    quality:
        ``"fast"`` (mpeg4) or ``"high"`` (libx264).
    binary:
        ffmpeg executable name or path.
    """

    def __init__(self, fps: float = 30.0, quality: Quality = "fast", binary: str = "ffmpeg") -> None:
        if quality not in _PRESETS:
            raise ValueError(f"Unknown quality preset: {quality!r}")
        self.fps = fps
        self.quality = quality
        self.binary = binary
        self._dir: Path | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def write_frame(self, index: int, data: bytes) -> None:
        """Store frame *index* as a numbered PNG."""
        try:
            path = self._workdir() / (FRAME_PATTERN % index)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise EncoderError(f"Cannot write frame {index}: {exc}") from exc

    async def finalize(self, on_frame: Callable[[int], None] | None = None) -> bytes:
        """Run ffmpeg over the stored frames and return the encoded MP4."""
        workdir = self._workdir()
        output = "out.mp4"
        args = ffmpeg_args(self.binary, self.fps, self.quality, output)
        _logger.debug("Running %s in %s", " ".join(args), workdir)
        try:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *args,
                    cwd=workdir,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise EncoderError(f"Cannot start {self.binary}: {exc}") from exc

            tail = await self._pump_stderr(proc.stderr, on_frame)
            code = await proc.wait()
            if code != 0:
                raise EncoderError(f"ffmpeg exited with status {code}: {tail.strip()[-500:]}")

            result = workdir / output
            if not result.exists():
                raise EncoderError("ffmpeg produced no output file")
            return await asyncio.to_thread(result.read_bytes)
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Delete the temporary frame directory, if any."""
        if self._dir is not None:
            await asyncio.to_thread(shutil.rmtree, self._dir, True)
            self._dir = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _workdir(self) -> Path:
        if self._dir is None:
            self._dir = Path(tempfile.mkdtemp(prefix="route_animator_"))
        return self._dir

    @staticmethod
    async def _pump_stderr(
        stream: asyncio.StreamReader | None, on_frame: Callable[[int], None] | None
    ) -> str:
        """Forward frame counters from *stream*; return the text seen."""
        if stream is None:
            return ""
        seen: list[str] = []
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                break
            text = chunk.decode("utf-8", errors="replace")
            seen.append(text)
            if on_frame is not None:
                for n in parse_frame_counters(text):
                    on_frame(n)
        return "".join(seen)
