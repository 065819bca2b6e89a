"""Default output formatter - processing report."""

from reelfix.models import ProcessedArtifact


def _mark(value: bool) -> str:
    return "✓" if value else "✗"


def format_default(artifact: ProcessedArtifact) -> str:
    """Format a processed artifact as a readable report.

    Sections:
    - Output file and duration fix
    - Framerate telemetry
    - Quality score breakdown
    - Platform compatibility
    """
    meta = artifact.metadata
    lines = []

    lines.append("=" * 70)
    lines.append(f"File: {artifact.filename}")
    lines.append("=" * 70)

    lines.append("")
    lines.append("## DURATION FIX")
    lines.append(f"  Format:       {meta.format.value.upper()} ({artifact.mime_type})")
    lines.append(f"  Duration:     {meta.recording_duration:g}s")
    lines.append(f"  Method:       {artifact.patch_method.value}")
    lines.append(f"  Fixed:        {'yes' if meta.fixed_duration else 'no'}")
    result = artifact.patch_result
    if result.any_patched:
        lines.append(
            f"  Headers:      mvhd {_mark(result.mvhd_patched)}, "
            f"tkhd x{result.tkhd_patched}, mdhd x{result.mdhd_patched}"
        )
    lines.append(f"  Size:         {artifact.size_human} ({meta.original_size} -> {meta.processed_size} bytes)")

    lines.append("")
    lines.append("## FRAMERATE")
    lines.append(f"  Target:       {meta.target_frame_rate:g}fps")
    lines.append(f"  Actual:       {meta.actual_frame_rate:g}fps (variance {meta.frame_rate_variance:g})")
    lines.append(f"  Constant:     {'yes' if meta.is_constant_framerate else 'no'}")
    lines.append(f"  Frames:       {meta.total_frames}")

    quality = artifact.quality
    lines.append("")
    lines.append(f"## QUALITY: {quality.score}/100")
    lines.append(f"  Duration:     {quality.duration}")
    lines.append(f"  Framerate:    {quality.framerate}")
    lines.append(f"  Format:       {quality.format}")
    lines.append(f"  Size:         {quality.size}")
    lines.append(f"  Bonus:        {quality.platform_bonus}")

    compat = artifact.compatibility
    lines.append("")
    lines.append("## PLATFORMS")
    lines.append(f"  Instagram:    {_mark(compat.instagram)}")
    lines.append(f"  TikTok:       {_mark(compat.tiktok)}")
    lines.append(f"  YouTube:      {_mark(compat.youtube)}")
    lines.append(f"  Twitter/X:    {_mark(compat.twitter)}")
    lines.append(f"  Status:       {compat.reason}")

    return "\n".join(lines)
