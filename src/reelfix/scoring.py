"""Quality scoring and social platform compatibility checks.

Both functions are pure: they look only at their arguments, so they can be
run on the raw recording before patching or on the finished artifact.
"""

from dataclasses import dataclass

from reelfix.models import READY, CompatibilityReport, QualityReport

MB = 1024 * 1024


@dataclass(frozen=True)
class PlatformLimits:
    """Upload constraints of one platform."""

    name: str
    max_size_bytes: int
    requires_mp4: bool = False
    min_duration: float | None = None
    max_duration: float | None = None
    min_fps: float | None = None
    max_fps: float | None = None
    requires_constant_framerate: bool = True

    def accepts(self, size_bytes: int, is_mp4: bool, duration: float, fps: float, is_constant: bool) -> bool:
        return violated_constraint(self, size_bytes, is_mp4, duration, fps, is_constant) is None


INSTAGRAM = PlatformLimits(
    name="Instagram",
    max_size_bytes=100 * MB,
    requires_mp4=True,
    min_duration=3,
    max_duration=60,
    min_fps=24,
    max_fps=60,
)
TIKTOK = PlatformLimits(
    name="TikTok",
    max_size_bytes=72 * MB,
    requires_mp4=True,
    min_duration=3,
    max_duration=60,
)
YOUTUBE = PlatformLimits(name="YouTube", max_size_bytes=256 * MB)
TWITTER = PlatformLimits(name="Twitter/X", max_size_bytes=512 * MB, max_duration=140)

PLATFORMS = {
    "instagram": INSTAGRAM,
    "tiktok": TIKTOK,
    "youtube": YOUTUBE,
    "twitter": TWITTER,
}


def violated_constraint(
    limits: PlatformLimits,
    size_bytes: int,
    is_mp4: bool,
    duration: float,
    fps: float,
    is_constant: bool,
) -> str | None:
    """Return a description of the first constraint the clip violates.

    Constraints are checked in priority order: format, size, too short, too
    long, variable framerate, framerate range.
    """
    if limits.requires_mp4 and not is_mp4:
        return f"{limits.name} requires MP4 format"
    if size_bytes > limits.max_size_bytes:
        return f"File too large for {limits.name} (max {limits.max_size_bytes // MB}MB)"
    if limits.min_duration is not None and duration < limits.min_duration:
        return f"Video too short for {limits.name} (min {limits.min_duration:g}s)"
    if limits.max_duration is not None and duration > limits.max_duration:
        return f"Video too long for {limits.name} (max {limits.max_duration:g}s)"
    if limits.requires_constant_framerate and not is_constant:
        return f"{limits.name} requires a constant framerate"
    if limits.min_fps is not None and limits.max_fps is not None:
        if not limits.min_fps <= fps <= limits.max_fps:
            return f"Framerate {fps:g}fps outside {limits.min_fps:g}-{limits.max_fps:g}fps"
    return None


def check_compatibility(
    size_bytes: int,
    is_mp4: bool,
    duration: float,
    fps: float,
    is_constant: bool,
) -> CompatibilityReport:
    """Check a clip against the upload limits of each platform.

    The reason reports the first violated constraint of Instagram, the
    strictest platform checked, or "ready" when it passes.
    """
    args = (size_bytes, is_mp4, duration, fps, is_constant)
    return CompatibilityReport(
        instagram=INSTAGRAM.accepts(*args),
        tiktok=TIKTOK.accepts(*args),
        youtube=YOUTUBE.accepts(*args),
        twitter=TWITTER.accepts(*args),
        reason=violated_constraint(INSTAGRAM, *args) or READY,
    )


def score_quality(
    duration: float,
    frame_rate: float,
    is_constant: bool,
    file_size_bytes: int,
    is_mp4: bool,
) -> QualityReport:
    """Score a clip from 0 to 100.

    Sub-scores:
        duration        20 for 3-60s, 10 for at least 2s
        framerate       30 constant ~30fps, 25 constant 24-60fps,
                        15 variable 24-60fps, otherwise 5
        format          20 for MP4, 10 otherwise
        size            15 between 2MB and 50MB, 10 under 100MB, otherwise 5
        platform bonus  15 for constant-framerate MP4 of at least 3s and 24fps
    """
    if 3 <= duration <= 60:
        duration_score = 20
    elif duration >= 2:
        duration_score = 10
    else:
        duration_score = 0

    in_range = 24 <= frame_rate <= 60
    if is_constant and 29 <= frame_rate <= 31:
        framerate_score = 30
    elif is_constant and in_range:
        framerate_score = 25
    elif not is_constant and in_range:
        framerate_score = 15
    else:
        framerate_score = 5

    format_score = 20 if is_mp4 else 10

    if 2 * MB < file_size_bytes < 50 * MB:
        size_score = 15
    elif file_size_bytes < 100 * MB:
        size_score = 10
    else:
        size_score = 5

    bonus = 15 if is_mp4 and is_constant and duration >= 3 and frame_rate >= 24 else 0

    subtotal = duration_score + framerate_score + format_score + size_score + bonus
    return QualityReport(
        score=min(100, subtotal),
        duration=duration_score,
        framerate=framerate_score,
        format=format_score,
        size=size_score,
        platform_bonus=bonus,
    )


def validate_duration(duration: float, minimum: float = 3.0) -> bool:
    """Check that a clip is long enough to be shared as a reel."""
    return duration >= minimum
