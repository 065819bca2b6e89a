"""WebM duration fixers for reelfix."""

from __future__ import annotations

from reelfix.delegates.base import BaseWebmFixer
from reelfix.delegates.ffmpeg import FFmpegWebmFixer


def get_available_fixers(ffmpeg_path: str = "ffmpeg", timeout_seconds: int = 60) -> list[BaseWebmFixer]:
    """Get available fixer instances, sorted by priority (lowest first)."""
    candidates: list[BaseWebmFixer] = [
        FFmpegWebmFixer(ffmpeg_path=ffmpeg_path, timeout_seconds=timeout_seconds),
    ]
    available = [fixer for fixer in candidates if fixer.is_available()]
    available.sort(key=lambda x: x.priority)
    return available


def get_webm_fixer(ffmpeg_path: str = "ffmpeg", timeout_seconds: int = 60) -> BaseWebmFixer | None:
    """Return the preferred available fixer, or None if there is none."""
    available = get_available_fixers(ffmpeg_path, timeout_seconds)
    return available[0] if available else None


def get_fixer_status(ffmpeg_path: str = "ffmpeg") -> dict[str, bool]:
    """Get availability status of all fixers.

    Returns:
        Dict mapping fixer names to availability status.
    """
    return {FFmpegWebmFixer.name: FFmpegWebmFixer(ffmpeg_path=ffmpeg_path).is_available()}


__all__ = [
    "BaseWebmFixer",
    "FFmpegWebmFixer",
    "get_available_fixers",
    "get_webm_fixer",
    "get_fixer_status",
]
