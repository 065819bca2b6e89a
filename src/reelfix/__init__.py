"""reelfix - duration repair and platform scoring for recorded clips.

Browser recorders emit MP4/WebM files whose duration headers are zero or
approximate. reelfix rewrites them to the measured duration, scores the clip
and checks it against social platform upload limits.

Usage:
    from reelfix import RawRecording, process_recording

    recording = RawRecording(
        data=blob,
        mime_type="video/mp4",
        duration=8.0,
        actual_frame_rate=30,
        is_constant_framerate=True,
    )
    artifact = process_recording(recording)

    if artifact.metadata.instagram_compatible:
        artifact.save("out/")

    # Metadata record for the sharing layer
    print(artifact.metadata.to_record())
"""

from reelfix._version import __version__
from reelfix.config import ReelfixConfig, load_config
from reelfix.delegates import BaseWebmFixer, FFmpegWebmFixer, get_webm_fixer
from reelfix.errors import (
    BoxError,
    BoxNotFoundError,
    DelegateError,
    FieldOverflowError,
    MalformedBoxError,
    OutOfBoundsError,
    PipelineError,
    ReelfixError,
)
from reelfix.formatters import format_default, format_json, format_quiet, to_dict
from reelfix.models import (
    ArtifactMetadata,
    CompatibilityReport,
    ContainerKind,
    PatchMethod,
    PatchResult,
    ProcessedArtifact,
    QualityReport,
    RawRecording,
)
from reelfix.patcher import DurationPatcher, patch_mp4_duration, read_mp4_duration
from reelfix.pipeline import ProcessingPipeline, ProcessingStage, ProgressEvent, process_recording
from reelfix.scoring import check_compatibility, score_quality
from reelfix.utils import ByteBuffer, find_box

__all__ = [
    # Version
    "__version__",
    # Main functions
    "process_recording",
    "patch_mp4_duration",
    "read_mp4_duration",
    "score_quality",
    "check_compatibility",
    "find_box",
    # Components
    "ProcessingPipeline",
    "ProcessingStage",
    "ProgressEvent",
    "DurationPatcher",
    "ByteBuffer",
    "BaseWebmFixer",
    "FFmpegWebmFixer",
    "get_webm_fixer",
    # Models
    "RawRecording",
    "ContainerKind",
    "ProcessedArtifact",
    "ArtifactMetadata",
    "PatchMethod",
    "PatchResult",
    "QualityReport",
    "CompatibilityReport",
    # Config
    "ReelfixConfig",
    "load_config",
    # Formatters
    "format_default",
    "format_json",
    "format_quiet",
    "to_dict",
    # Errors
    "ReelfixError",
    "BoxError",
    "BoxNotFoundError",
    "MalformedBoxError",
    "OutOfBoundsError",
    "FieldOverflowError",
    "DelegateError",
    "PipelineError",
]
