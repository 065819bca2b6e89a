"""Quiet output formatter - one-line summary."""

from reelfix.models import ProcessedArtifact


def format_quiet(artifact: ProcessedArtifact) -> str:
    """Format an artifact as a one-line summary.

    Format: filename | duration | size | fixed: yes/no (method) | quality | status
    """
    meta = artifact.metadata
    parts = [
        artifact.filename,
        f"{meta.recording_duration:g}s",
        artifact.size_human,
    ]

    if meta.fixed_duration:
        parts.append(f"fixed: yes ({artifact.patch_method.value})")
    else:
        parts.append("fixed: no")

    parts.append(f"quality: {meta.quality_score}/100")
    parts.append(artifact.compatibility.reason)

    return " | ".join(parts)


def format_quiet_list(artifacts: list[ProcessedArtifact]) -> str:
    """Format multiple artifacts as one-line summaries."""
    return "\n".join(format_quiet(a) for a in artifacts)
