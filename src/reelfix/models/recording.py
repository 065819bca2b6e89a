"""Raw recording input models."""

from __future__ import annotations

import mimetypes
import os
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContainerKind(str, Enum):
    """Container formats the recorder can emit."""

    MP4 = "mp4"
    WEBM = "webm"

    @classmethod
    def from_mime(cls, mime_type: str) -> ContainerKind:
        """Classify a MIME type such as ``video/mp4;codecs=avc1``.

        Only WebM goes to the WebM fixer. Everything else, including
        ``video/quicktime`` for .mov files, is an ISO-BMFF container.
        """
        if "webm" in mime_type.lower():
            return cls.WEBM
        return cls.MP4

    @property
    def mime_type(self) -> str:
        return f"video/{self.value}"


class FrameRateInfo(BaseModel):
    """Recorder framerate telemetry with defaults applied."""

    target_frame_rate: float
    actual_frame_rate: float
    is_constant_framerate: bool
    total_frames: int

    @property
    def variance(self) -> float:
        """Absolute distance between measured and requested framerate."""
        return round(abs(self.actual_frame_rate - self.target_frame_rate), 3)


class RawRecording(BaseModel):
    """A recorded clip as handed over by the browser recorder.

    The recorder measures wall-clock duration itself because the container
    headers it writes are frequently zero or approximate. Framerate telemetry
    is optional.
    """

    data: bytes
    mime_type: str
    duration: float = Field(ge=0, allow_inf_nan=False)
    target_frame_rate: float | None = None
    actual_frame_rate: float | None = None
    is_constant_framerate: bool | None = None
    total_frames: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ContainerKind:
        return ContainerKind.from_mime(self.mime_type)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def frame_rate_info(self, default_frame_rate: float = 30.0) -> FrameRateInfo:
        """Resolve telemetry, filling in recorder defaults.

        Missing ``total_frames`` is estimated from duration and the measured
        framerate.
        """
        target = self.target_frame_rate if self.target_frame_rate is not None else default_frame_rate
        actual = self.actual_frame_rate if self.actual_frame_rate is not None else target
        total = self.total_frames
        if total is None:
            total = int(round(self.duration * actual))
        return FrameRateInfo(
            target_frame_rate=target,
            actual_frame_rate=actual,
            is_constant_framerate=bool(self.is_constant_framerate),
            total_frames=total,
        )

    @classmethod
    def from_file(
        cls,
        path: str,
        duration: float,
        mime_type: str | None = None,
        **telemetry: object,
    ) -> RawRecording:
        """Load a recording from disk.

        Args:
            path: Path to an MP4 or WebM file
            duration: Measured wall-clock duration in seconds
            mime_type: Explicit MIME type (guessed from the extension if omitted)
            **telemetry: Optional framerate telemetry fields

        Raises:
            FileNotFoundError: If the file does not exist
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"File not found: {path}")
        if mime_type is None:
            fallback = ContainerKind.WEBM if path.lower().endswith(".webm") else ContainerKind.MP4
            mime_type = mimetypes.guess_type(path)[0] or fallback.mime_type
        with open(path, "rb") as f:
            data = f.read()
        return cls(data=data, mime_type=mime_type, duration=duration, **telemetry)
