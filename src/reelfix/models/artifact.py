"""Processed artifact models."""

from __future__ import annotations

import os
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .boxes import PatchResult
from .recording import ContainerKind
from .reports import CompatibilityReport, QualityReport


def format_size(size_bytes: int | float) -> str:
    """Convert bytes to a short human-readable string (``1.9 MB``)."""
    if size_bytes < 0:
        return "N/A"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


class PatchMethod(str, Enum):
    """How the duration metadata was corrected."""

    BINARY_MP4 = "binary-mp4-fix"
    WEBM = "webm-fix"
    NONE = "none"


class ArtifactMetadata(BaseModel):
    """Metadata record attached to every processed clip.

    The sharing/download layer reads this record by its camelCase keys, so
    field names must not change. Use ``to_record()`` for that form.
    """

    recording_duration: float
    is_android: bool = False
    processed_at: datetime = Field(default_factory=datetime.now)
    instagram_compatible: bool = False
    fixed_duration: bool = False
    original_size: int
    processed_size: int
    format: ContainerKind
    target_frame_rate: float
    actual_frame_rate: float
    is_constant_framerate: bool
    frame_rate_variance: float
    total_frames: int
    quality_score: int
    processing_method: PatchMethod = PatchMethod.NONE

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Return the camelCase, JSON-compatible metadata record."""
        return self.model_dump(mode="json", by_alias=True)


class ProcessedArtifact(BaseModel):
    """Corrected clip ready to be shared or downloaded."""

    data: bytes = Field(repr=False)
    mime_type: str
    filename: str
    kind: ContainerKind
    patch_method: PatchMethod
    metadata: ArtifactMetadata
    quality: QualityReport
    compatibility: CompatibilityReport
    patch_result: PatchResult = Field(default_factory=PatchResult)

    model_config = ConfigDict(frozen=True)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_human(self) -> str:
        return format_size(len(self.data))

    def save(self, directory: str) -> str:
        """Write the clip to ``directory/filename`` and return its path."""
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, self.filename)
        with open(path, "wb") as f:
            f.write(self.data)
        return path
