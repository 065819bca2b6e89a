"""FFmpeg-based WebM duration fixer."""

import logging
import os
import shutil
import subprocess
import tempfile
from typing import ClassVar

from reelfix.delegates.base import BaseWebmFixer
from reelfix.errors import DelegateError

logger = logging.getLogger(__name__)


class FFmpegWebmFixer(BaseWebmFixer):
    """Fix WebM durations by letting FFmpeg rewrite the container.

    MediaRecorder writes WebM without a Segment duration. A stream-copy pass
    through FFmpeg writes a fresh Segment Info with the duration taken from
    the stream timestamps. Every packet is kept and frames are never
    re-encoded.
    """

    name: ClassVar[str] = "ffmpeg"
    priority: ClassVar[int] = 10

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout_seconds: int = 60):
        self.ffmpeg_path = ffmpeg_path
        self.timeout_seconds = timeout_seconds

    def is_available(self) -> bool:
        """Check if ffmpeg is available."""
        return shutil.which(self.ffmpeg_path) is not None

    def fix(self, data: bytes, duration_ms: float) -> bytes:
        """Remux the WebM file with FFmpeg.

        ``duration_ms`` is only used for logging; the written duration comes
        from the packets themselves.
        """
        with tempfile.TemporaryDirectory(prefix="reelfix-") as td:
            src = os.path.join(td, "input.webm")
            dst = os.path.join(td, "output.webm")
            with open(src, "wb") as f:
                f.write(data)

            cmd = [
                self.ffmpeg_path,
                "-hide_banner",
                "-loglevel",
                "error",
                "-y",
                "-i",
                src,
                "-map",
                "0",
                "-c",
                "copy",
                "-f",
                "webm",
                dst,
            ]
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired as e:
                raise DelegateError(f"ffmpeg timed out after {self.timeout_seconds}s") from e
            except FileNotFoundError as e:
                raise DelegateError(f"ffmpeg not found: {self.ffmpeg_path}") from e

            if result.returncode != 0:
                raise DelegateError(f"ffmpeg failed: {result.stderr.strip() or result.returncode}")
            if not os.path.exists(dst) or os.path.getsize(dst) == 0:
                raise DelegateError("ffmpeg produced no output")

            logger.debug(
                "[ffmpeg] remuxed %d -> %d bytes (measured %.3fs)",
                len(data),
                os.path.getsize(dst),
                duration_ms / 1000,
            )
            with open(dst, "rb") as f:
                return f.read()
