"""Recording processing pipeline.

Turns a RawRecording into a ProcessedArtifact in fixed stages:

    ANALYZING (10%) -> VALIDATING_FRAMERATE (25%, 40%) -> PATCHING_METADATA (60%)
    -> CHECKING_COMPATIBILITY (75%) -> FINALIZING (90%) -> DONE (100%)

A progress event is emitted on entering each stage. Box-level and WebM
fixer failures degrade the result but never stop the run; anything else
moves the pipeline to FAILED and is re-raised as PipelineError, after which
the caller should offer the original file instead.
"""

from __future__ import annotations

import logging
import time
import warnings
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from reelfix.config import ReelfixConfig
from reelfix.delegates import BaseWebmFixer, get_webm_fixer
from reelfix.errors import PipelineError
from reelfix.models import (
    ArtifactMetadata,
    CompatibilityReport,
    ContainerKind,
    FrameRateInfo,
    PatchMethod,
    PatchResult,
    ProcessedArtifact,
    QualityReport,
    RawRecording,
)
from reelfix.patcher import DurationPatcher
from reelfix.scoring import check_compatibility, score_quality, validate_duration
from reelfix.utils.buffer import ByteBuffer

logger = logging.getLogger(__name__)


class ProcessingStage(str, Enum):
    """Pipeline states, in execution order."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    VALIDATING_FRAMERATE = "validating_framerate"
    PATCHING_METADATA = "patching_metadata"
    CHECKING_COMPATIBILITY = "checking_compatibility"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class ProgressEvent(BaseModel):
    """Progress notification sent to the caller."""

    percent: int = Field(ge=0, le=100)
    message: str
    stage: ProcessingStage

    model_config = ConfigDict(frozen=True)


ProgressCallback = Callable[[ProgressEvent], None]


def _no_progress(event: ProgressEvent) -> None:
    pass


class ProcessingPipeline:
    """Repairs, scores and packages one recording at a time.

    All inputs are passed explicitly; the pipeline keeps no state between
    runs other than ``stage``, which reflects the most recent run. Use one
    instance per concurrent run.

    Args:
        config: Configuration (defaults to ReelfixConfig())
        webm_fixer: WebM duration fixer. When omitted, the first available
            fixer is looked up on demand (unless disabled in config).
        patcher: MP4 duration patcher (built from config when omitted)
        progress: Callback receiving a ProgressEvent per stage
        clock: Returns the current time in seconds, used for filenames
    """

    def __init__(
        self,
        config: ReelfixConfig | None = None,
        webm_fixer: BaseWebmFixer | None = None,
        patcher: DurationPatcher | None = None,
        progress: ProgressCallback | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or ReelfixConfig()
        self.webm_fixer = webm_fixer
        self.patcher = patcher or DurationPatcher(
            strategy=self.config.patch.box_search,
            movie_timescale=self.config.patch.movie_timescale,
            max_depth=self.config.patch.max_depth,
        )
        self.progress = progress or _no_progress
        self.clock = clock
        self.stage = ProcessingStage.PENDING

    def _enter(self, stage: ProcessingStage, percent: int, message: str) -> None:
        self.stage = stage
        logger.debug("[pipeline] %3d%% %s", percent, message)
        self.progress(ProgressEvent(percent=percent, message=message, stage=stage))

    def run(self, recording: RawRecording, is_android: bool = False) -> ProcessedArtifact:
        """Process a recording.

        Args:
            recording: Raw recording (never modified)
            is_android: Whether the clip was recorded on Android, as detected
                by the caller

        Returns:
            The processed artifact

        Raises:
            PipelineError: If processing could not complete
        """
        self.stage = ProcessingStage.PENDING
        try:
            return self._run(recording, is_android)
        except Exception as e:
            failed_in = self.stage
            self.stage = ProcessingStage.FAILED
            logger.error("[pipeline] processing failed during %s: %s", failed_in.value, e)
            if isinstance(e, PipelineError):
                raise
            raise PipelineError(f"Processing failed during {failed_in.value}: {e}") from e

    def _run(self, recording: RawRecording, is_android: bool) -> ProcessedArtifact:
        kind = recording.kind
        label = kind.value.upper()

        self._enter(ProcessingStage.ANALYZING, 10, f"Analyzing {label} video...")
        buffer = ByteBuffer(recording.data)
        if kind == ContainerKind.MP4:
            declared = self.patcher.read_duration(buffer)
            logger.info(
                "[pipeline] %s, recorded %.2fs, header says %s",
                label,
                recording.duration,
                f"{declared:.2f}s" if declared is not None else "nothing",
            )

        self._enter(ProcessingStage.VALIDATING_FRAMERATE, 25, "Validating framerate...")
        frames = recording.frame_rate_info(self.config.recorder.default_frame_rate)
        if not frames.is_constant_framerate:
            logger.warning(
                "[pipeline] variable framerate (%.1ffps, target %.1ffps)",
                frames.actual_frame_rate,
                frames.target_frame_rate,
            )
        if not validate_duration(recording.duration, self.config.recorder.min_duration):
            logger.warning(
                "[pipeline] %.2fs is shorter than the %.1fs platform minimum",
                recording.duration,
                self.config.recorder.min_duration,
            )
        mode = "constant" if frames.is_constant_framerate else "variable"
        self._enter(
            ProcessingStage.VALIDATING_FRAMERATE,
            40,
            f"Framerate {frames.actual_frame_rate:g}fps ({mode})",
        )

        if kind == ContainerKind.MP4:
            self._enter(ProcessingStage.PATCHING_METADATA, 60, "Fixing MP4 duration metadata...")
            patch_result = self.patcher.patch(buffer, recording.duration)
            fixed = patch_result.any_patched
            data = buffer.to_bytes() if fixed else recording.data
            method = PatchMethod.BINARY_MP4 if fixed else PatchMethod.NONE
        else:
            self._enter(ProcessingStage.PATCHING_METADATA, 60, "Fixing WebM duration...")
            patch_result = PatchResult()
            data, fixed = self._fix_webm(recording)
            method = PatchMethod.WEBM if fixed else PatchMethod.NONE

        self._enter(ProcessingStage.CHECKING_COMPATIBILITY, 75, "Checking platform compatibility...")
        is_mp4 = kind == ContainerKind.MP4
        quality = score_quality(
            recording.duration,
            frames.actual_frame_rate,
            frames.is_constant_framerate,
            len(data),
            is_mp4,
        )
        compatibility = check_compatibility(
            len(data),
            is_mp4,
            recording.duration,
            frames.actual_frame_rate,
            frames.is_constant_framerate,
        )
        logger.info("[pipeline] quality %d/100, %s", quality.score, compatibility.reason)

        self._enter(ProcessingStage.FINALIZING, 90, "Finalizing...")
        artifact = self._package(
            recording, data, method, fixed, frames, quality, compatibility, patch_result, is_android
        )

        if compatibility.instagram:
            message = "Video ready for Instagram!"
        else:
            message = f"Video ready ({compatibility.reason})"
        self._enter(ProcessingStage.DONE, 100, message)
        return artifact

    def _resolve_fixer(self) -> BaseWebmFixer | None:
        if self.webm_fixer is not None:
            return self.webm_fixer
        if not self.config.webm.enabled:
            return None
        return get_webm_fixer(self.config.webm.ffmpeg_path, self.config.webm.timeout_seconds)

    def _fix_webm(self, recording: RawRecording) -> tuple[bytes, bool]:
        """Run the WebM fixer, falling back to the original bytes."""
        fixer = self._resolve_fixer()
        if fixer is None:
            logger.warning("[pipeline] no WebM duration fixer available, keeping original")
            return recording.data, False
        try:
            fixed = fixer.fix(recording.data, recording.duration * 1000)
        except Exception as e:
            warnings.warn(f"{fixer.name} duration fix failed: {e}", stacklevel=2)
            return recording.data, False
        logger.info("[pipeline] WebM duration fixed by %s: %.2fs", fixer.name, recording.duration)
        return fixed, True

    def _package(
        self,
        recording: RawRecording,
        data: bytes,
        method: PatchMethod,
        fixed: bool,
        frames: FrameRateInfo,
        quality: QualityReport,
        compatibility: CompatibilityReport,
        patch_result: PatchResult,
        is_android: bool,
    ) -> ProcessedArtifact:
        kind = recording.kind
        now = self.clock()
        filename = f"{self.config.output.prefix}_{int(now * 1000)}.{kind.value}"
        metadata = ArtifactMetadata(
            recording_duration=recording.duration,
            is_android=is_android,
            processed_at=datetime.fromtimestamp(now),
            instagram_compatible=compatibility.instagram,
            fixed_duration=fixed,
            original_size=len(recording.data),
            processed_size=len(data),
            format=kind,
            target_frame_rate=frames.target_frame_rate,
            actual_frame_rate=frames.actual_frame_rate,
            is_constant_framerate=frames.is_constant_framerate,
            frame_rate_variance=frames.variance,
            total_frames=frames.total_frames,
            quality_score=quality.score,
            processing_method=method,
        )
        return ProcessedArtifact(
            data=data,
            mime_type=recording.mime_type,
            filename=filename,
            kind=kind,
            patch_method=method,
            metadata=metadata,
            quality=quality,
            compatibility=compatibility,
            patch_result=patch_result,
        )


def process_recording(
    recording: RawRecording,
    is_android: bool = False,
    config: ReelfixConfig | None = None,
    webm_fixer: BaseWebmFixer | None = None,
    progress: ProgressCallback | None = None,
) -> ProcessedArtifact:
    """Process a recording with a fresh pipeline.

    This is the main entry point. See ProcessingPipeline for the arguments.

    Raises:
        PipelineError: If processing could not complete
    """
    pipeline = ProcessingPipeline(config=config, webm_fixer=webm_fixer, progress=progress)
    return pipeline.run(recording, is_android=is_android)
