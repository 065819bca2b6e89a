"""Tests for the processing pipeline."""

import re
from datetime import datetime

import pytest

from conftest import box_offsets, build_mp4, read_header

from reelfix.config import OutputConfig, ReelfixConfig, WebmConfig
from reelfix.delegates import BaseWebmFixer
from reelfix.errors import DelegateError, PipelineError
from reelfix.models import ContainerKind, PatchMethod, RawRecording
from reelfix.pipeline import ProcessingPipeline, ProcessingStage, process_recording

METADATA_KEYS = {
    "recordingDuration",
    "isAndroid",
    "processedAt",
    "instagramCompatible",
    "fixedDuration",
    "originalSize",
    "processedSize",
    "format",
    "targetFrameRate",
    "actualFrameRate",
    "isConstantFramerate",
    "frameRateVariance",
    "totalFrames",
    "qualityScore",
}


class FakeWebmFixer(BaseWebmFixer):
    """Fixer that appends a marker instead of rewriting EBML."""

    name = "fake"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[bytes, float]] = []

    def is_available(self) -> bool:
        return True

    def fix(self, data: bytes, duration_ms: float) -> bytes:
        self.calls.append((data, duration_ms))
        if self.fail:
            raise DelegateError("cannot parse EBML header")
        return data + b"FIXED"


@pytest.fixture
def mp4_recording() -> RawRecording:
    """The 2,000,000-byte, 8s, constant 30fps MP4 clip."""
    return RawRecording(
        data=build_mp4(tracks=2, total_size=2_000_000),
        mime_type="video/mp4;codecs=avc1.42E01E,mp4a.40.2",
        duration=8,
        actual_frame_rate=30,
        is_constant_framerate=True,
    )


@pytest.fixture
def webm_recording() -> RawRecording:
    return RawRecording(
        data=b"\x1aE\xdf\xa3" + b"\x00" * 1000,
        mime_type="video/webm;codecs=vp9,opus",
        duration=12.5,
        actual_frame_rate=30,
        is_constant_framerate=True,
    )


class TestMp4Pipeline:
    """Test MP4 processing end to end."""

    def test_end_to_end(self, mp4_recording):
        artifact = process_recording(mp4_recording)

        assert artifact.patch_result.mvhd_patched is True
        assert artifact.patch_result.tkhd_patched == 2
        assert artifact.patch_result.mdhd_patched == 2
        assert artifact.quality.score >= 85
        assert artifact.metadata.instagram_compatible is True
        assert re.fullmatch(r"ar_video_\d+\.mp4", artifact.filename)
        assert artifact.patch_method == PatchMethod.BINARY_MP4
        assert artifact.kind == ContainerKind.MP4
        assert artifact.mime_type == mp4_recording.mime_type
        assert len(artifact.data) == 2_000_000

        offset = box_offsets(artifact.data, "mvhd")[0]
        assert read_header(artifact.data, offset, "mvhd") == (1000, 8000)

    def test_recording_untouched(self, mp4_recording):
        original = mp4_recording.data
        artifact = process_recording(mp4_recording)
        assert mp4_recording.data is original
        assert artifact.data != original

    def test_metadata_record(self, mp4_recording):
        """Test the sharing-layer record keeps every camelCase field."""
        artifact = process_recording(mp4_recording, is_android=True)
        record = artifact.metadata.to_record()

        assert METADATA_KEYS <= set(record)
        assert record["recordingDuration"] == 8
        assert record["isAndroid"] is True
        assert record["fixedDuration"] is True
        assert record["originalSize"] == 2_000_000
        assert record["processedSize"] == 2_000_000
        assert record["format"] == "mp4"
        assert record["targetFrameRate"] == 30
        assert record["actualFrameRate"] == 30
        assert record["isConstantFramerate"] is True
        assert record["frameRateVariance"] == 0
        assert record["totalFrames"] == 240
        assert record["qualityScore"] == artifact.quality.score
        assert record["processingMethod"] == "binary-mp4-fix"
        assert isinstance(record["processedAt"], str)

    def test_unpatchable_mp4(self):
        """Test an MP4 without headers is passed through and flagged unfixed."""
        recording = RawRecording(data=b"\x00" * 4096, mime_type="video/mp4", duration=5)
        artifact = process_recording(recording)
        assert artifact.data == recording.data
        assert artifact.patch_method == PatchMethod.NONE
        assert artifact.metadata.fixed_duration is False
        assert artifact.patch_result.any_patched is False

    def test_telemetry_defaults(self):
        """Test missing telemetry defaults to 30fps variable framerate."""
        recording = RawRecording(data=build_mp4(), mime_type="video/mp4", duration=10)
        artifact = process_recording(recording)
        meta = artifact.metadata
        assert meta.target_frame_rate == 30
        assert meta.actual_frame_rate == 30
        assert meta.is_constant_framerate is False
        assert meta.total_frames == 300
        assert meta.instagram_compatible is False
        assert "constant framerate" in artifact.compatibility.reason

    def test_frame_rate_variance(self):
        recording = RawRecording(
            data=build_mp4(),
            mime_type="video/mp4",
            duration=10,
            target_frame_rate=30,
            actual_frame_rate=27.5,
            total_frames=275,
        )
        meta = process_recording(recording).metadata
        assert meta.frame_rate_variance == 2.5
        assert meta.total_frames == 275

    def test_max_quality_prefix(self, mp4_recording):
        config = ReelfixConfig(output=OutputConfig(max_quality=True))
        artifact = process_recording(mp4_recording, config=config)
        assert artifact.filename.startswith("max_quality_video_")

    def test_filename_uses_clock(self, mp4_recording):
        pipeline = ProcessingPipeline(clock=lambda: 1700000000.5)
        artifact = pipeline.run(mp4_recording)
        assert artifact.filename == "ar_video_1700000000500.mp4"

    def test_processed_at_uses_clock(self, mp4_recording):
        """Test the filename and processedAt come from the same clock reading."""
        pipeline = ProcessingPipeline(clock=lambda: 1700000000.5)
        artifact = pipeline.run(mp4_recording)
        assert artifact.metadata.processed_at == datetime.fromtimestamp(1700000000.5)


class TestProgress:
    """Test progress reporting."""

    def test_stage_sequence(self, mp4_recording):
        events = []
        pipeline = ProcessingPipeline(progress=events.append)
        pipeline.run(mp4_recording)

        assert [e.percent for e in events] == [10, 25, 40, 60, 75, 90, 100]
        assert [e.stage for e in events] == [
            ProcessingStage.ANALYZING,
            ProcessingStage.VALIDATING_FRAMERATE,
            ProcessingStage.VALIDATING_FRAMERATE,
            ProcessingStage.PATCHING_METADATA,
            ProcessingStage.CHECKING_COMPATIBILITY,
            ProcessingStage.FINALIZING,
            ProcessingStage.DONE,
        ]
        assert events[-1].message == "Video ready for Instagram!"
        assert pipeline.stage == ProcessingStage.DONE

    def test_progress_monotonic(self, webm_recording):
        events = []
        process_recording(webm_recording, webm_fixer=FakeWebmFixer(), progress=events.append)
        percents = [e.percent for e in events]
        assert percents == sorted(percents)
        assert percents[-1] == 100


class TestWebmPipeline:
    """Test WebM handling through the delegate."""

    def test_delegate_success(self, webm_recording):
        fixer = FakeWebmFixer()
        artifact = process_recording(webm_recording, webm_fixer=fixer)

        assert fixer.calls == [(webm_recording.data, 12500)]
        assert artifact.data.endswith(b"FIXED")
        assert artifact.patch_method == PatchMethod.WEBM
        assert artifact.metadata.fixed_duration is True
        assert artifact.metadata.processed_size == len(webm_recording.data) + 5
        assert artifact.metadata.instagram_compatible is False
        assert re.fullmatch(r"ar_video_\d+\.webm", artifact.filename)

    def test_delegate_failure_keeps_original(self, webm_recording):
        with pytest.warns(UserWarning, match="fake duration fix failed"):
            artifact = process_recording(webm_recording, webm_fixer=FakeWebmFixer(fail=True))

        assert artifact.data == webm_recording.data
        assert artifact.patch_method == PatchMethod.NONE
        assert artifact.metadata.fixed_duration is False

    def test_no_fixer_available(self, webm_recording):
        config = ReelfixConfig(webm=WebmConfig(enabled=False))
        artifact = process_recording(webm_recording, config=config)
        assert artifact.data == webm_recording.data
        assert artifact.metadata.fixed_duration is False


class TestFailure:
    """Test unrecoverable failures."""

    def test_packaging_failure_raises_pipeline_error(self, mp4_recording):
        def broken_clock() -> float:
            raise OSError("clock unavailable")

        pipeline = ProcessingPipeline(clock=broken_clock)
        with pytest.raises(PipelineError) as exc_info:
            pipeline.run(mp4_recording)

        assert isinstance(exc_info.value.__cause__, OSError)
        assert "finalizing" in str(exc_info.value)
        assert pipeline.stage == ProcessingStage.FAILED

    def test_no_done_event_after_failure(self, mp4_recording):
        events = []

        def progress(event):
            events.append(event)
            if event.stage == ProcessingStage.CHECKING_COMPATIBILITY:
                raise RuntimeError("UI went away")

        with pytest.raises(PipelineError):
            ProcessingPipeline(progress=progress).run(mp4_recording)
        assert events[-1].stage == ProcessingStage.CHECKING_COMPATIBILITY
