"""Tests for WebM duration fixers."""

import shutil
import subprocess

import pytest

from reelfix.delegates import FFmpegWebmFixer, get_fixer_status, get_webm_fixer
from reelfix.errors import DelegateError


def _ffprobe(path, *args: str) -> str:
    result = subprocess.run(
        ["ffprobe", "-v", "error", *args, "-of", "csv=p=0", str(path)],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _packet_count(path) -> int:
    return int(_ffprobe(path, "-select_streams", "v:0", "-count_packets", "-show_entries", "stream=nb_read_packets"))


def _format_duration(path) -> float:
    return float(_ffprobe(path, "-show_entries", "format=duration"))


class TestFFmpegWebmFixer:
    """Test FFmpegWebmFixer."""

    def test_name_and_priority(self):
        assert FFmpegWebmFixer.name == "ffmpeg"
        assert FFmpegWebmFixer.priority == 10

    def test_is_available(self):
        """Test availability check returns a boolean."""
        assert isinstance(FFmpegWebmFixer().is_available(), bool)
        assert FFmpegWebmFixer(ffmpeg_path="/nonexistent/ffmpeg").is_available() is False

    def test_missing_binary(self):
        fixer = FFmpegWebmFixer(ffmpeg_path="/nonexistent/ffmpeg")
        with pytest.raises(DelegateError, match="not found"):
            fixer.fix(b"\x1aE\xdf\xa3", 1000)

    def test_get_webm_fixer_none_when_missing(self):
        assert get_webm_fixer(ffmpeg_path="/nonexistent/ffmpeg") is None
        assert get_fixer_status("/nonexistent/ffmpeg") == {"ffmpeg": False}

    @pytest.mark.requires_ffmpeg
    def test_rejects_garbage(self, has_ffmpeg):
        if not has_ffmpeg:
            pytest.skip("ffmpeg not available")
        with pytest.raises(DelegateError):
            FFmpegWebmFixer().fix(b"not a webm file", 1000)

    @pytest.mark.requires_ffmpeg
    def test_keeps_every_packet(self, tmp_path, has_ffmpeg):
        """Test the remux never trims the stream to the measured duration."""
        if not has_ffmpeg or shutil.which("ffprobe") is None:
            pytest.skip("ffmpeg/ffprobe not available")
        src = tmp_path / "in.webm"
        generated = subprocess.run(
            [
                "ffmpeg", "-hide_banner", "-loglevel", "error", "-y",
                "-f", "lavfi", "-i", "testsrc=duration=2:size=64x64:rate=10",
                "-c:v", "libvpx", "-b:v", "100k", str(src),
            ],
            capture_output=True,
        )
        if generated.returncode != 0:
            pytest.skip("ffmpeg cannot encode VP8")

        # Measured duration shorter than the stream, as with a late recorder stop
        fixed = FFmpegWebmFixer().fix(src.read_bytes(), 1500)
        out = tmp_path / "out.webm"
        out.write_bytes(fixed)

        assert _packet_count(out) == _packet_count(src)
        assert _format_duration(out) == pytest.approx(2.0, abs=0.2)
