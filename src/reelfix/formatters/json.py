"""JSON output formatter."""

import json
from typing import Any

from reelfix.models import ProcessedArtifact


def to_dict(artifact: ProcessedArtifact) -> dict[str, Any]:
    """Convert an artifact to a JSON-compatible dictionary.

    The file contents are left out; ``metadata`` uses the camelCase record
    consumed by the sharing layer.

    Args:
        artifact: ProcessedArtifact object

    Returns:
        Dictionary representation
    """
    data = artifact.model_dump(mode="json", exclude={"data", "metadata"})
    data["metadata"] = artifact.metadata.to_record()
    return data


def format_json(artifact: ProcessedArtifact, indent: int = 2) -> str:
    """Format an artifact as a JSON string."""
    return json.dumps(to_dict(artifact), indent=indent, ensure_ascii=False)


def format_json_list(artifacts: list[ProcessedArtifact], indent: int = 2) -> str:
    """Format multiple artifacts as a JSON array."""
    data = [to_dict(a) for a in artifacts]
    return json.dumps(data, indent=indent, ensure_ascii=False)
