"""Pydantic models for reelfix."""

from .artifact import ArtifactMetadata, PatchMethod, ProcessedArtifact, format_size
from .boxes import Box, DurationFields, PatchResult
from .recording import ContainerKind, FrameRateInfo, RawRecording
from .reports import READY, CompatibilityReport, QualityReport

__all__ = [
    # Input
    "RawRecording",
    "ContainerKind",
    "FrameRateInfo",
    # Boxes
    "Box",
    "DurationFields",
    "PatchResult",
    # Reports
    "QualityReport",
    "CompatibilityReport",
    "READY",
    # Output
    "ProcessedArtifact",
    "ArtifactMetadata",
    "PatchMethod",
    "format_size",
]
