"""Configuration management for reelfix.

Supports loading configuration from:
1. Environment variables (REELFIX_*)
2. Config file (~/.reelfix/config.yaml)
3. Default values

Example config file (~/.reelfix/config.yaml):
    output:
      filename_prefix: "ar_video"
      max_quality: false
      output_dir: "~/Videos/reels"
    patch:
      box_search: "auto"
    webm:
      ffmpeg_path: "/usr/local/bin/ffmpeg"
      timeout_seconds: 60
    recorder:
      default_frame_rate: 30
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from reelfix.patcher import SEARCH_STRATEGIES

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".reelfix" / "config.yaml",
    Path.home() / ".config" / "reelfix" / "config.yaml",
    Path(".reelfix.yaml"),
]


@dataclass
class OutputConfig:
    """Artifact naming and output configuration."""

    filename_prefix: str = "ar_video"
    max_quality: bool = False
    max_quality_prefix: str = "max_quality_video"
    output_dir: str | None = None

    @property
    def prefix(self) -> str:
        """Filename prefix in effect."""
        return self.max_quality_prefix if self.max_quality else self.filename_prefix


@dataclass
class PatchConfig:
    """MP4 duration patching configuration."""

    box_search: str = "auto"
    movie_timescale: int = 1000
    max_depth: int = 8


@dataclass
class WebmConfig:
    """WebM duration fixer configuration."""

    enabled: bool = True
    ffmpeg_path: str = "ffmpeg"
    timeout_seconds: int = 60


@dataclass
class RecorderConfig:
    """Defaults for missing recorder telemetry."""

    default_frame_rate: float = 30.0
    min_duration: float = 3.0


@dataclass
class ReelfixConfig:
    """Main configuration for reelfix."""

    output: OutputConfig = field(default_factory=OutputConfig)
    patch: PatchConfig = field(default_factory=PatchConfig)
    webm: WebmConfig = field(default_factory=WebmConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)


def _load_yaml_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file if available."""
    try:
        import yaml
    except ImportError:
        return {}

    locations = [Path(path)] if path else CONFIG_LOCATIONS
    for config_path in locations:
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f)
                return data if data else {}
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with REELFIX_ prefix."""
    return os.environ.get(f"REELFIX_{key}", default)


def _parse_bool(value: str | None) -> bool | None:
    """Parse boolean from string."""
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes", "on")


def _bool_setting(env_key: str, section: dict[str, Any], name: str, default: bool) -> bool:
    env_value = _parse_bool(_get_env(env_key))
    if env_value is not None:
        return env_value
    return bool(section.get(name, default))


def load_config(path: str | None = None) -> ReelfixConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (REELFIX_*)
    2. Config file (``path``, or the first of CONFIG_LOCATIONS that exists)
    3. Default values

    Raises:
        ValueError: If a setting has an invalid value
    """
    file_config = _load_yaml_config(path)

    # Output config
    output_config = file_config.get("output", {})
    output_dir = _get_env("OUTPUT_DIR") or output_config.get("output_dir")
    output = OutputConfig(
        filename_prefix=_get_env("FILENAME_PREFIX") or output_config.get("filename_prefix", "ar_video"),
        max_quality=_bool_setting("MAX_QUALITY", output_config, "max_quality", False),
        max_quality_prefix=output_config.get("max_quality_prefix", "max_quality_video"),
        output_dir=os.path.expanduser(output_dir) if output_dir else None,
    )

    # Patch config
    patch_config = file_config.get("patch", {})
    patch = PatchConfig(
        box_search=_get_env("BOX_SEARCH") or patch_config.get("box_search", "auto"),
        movie_timescale=int(patch_config.get("movie_timescale", 1000)),
        max_depth=int(patch_config.get("max_depth", 8)),
    )
    if patch.box_search not in SEARCH_STRATEGIES:
        raise ValueError(
            f"Unknown box search strategy {patch.box_search!r} (expected one of: {', '.join(SEARCH_STRATEGIES)})"
        )

    # WebM config
    webm_config = file_config.get("webm", {})
    webm = WebmConfig(
        enabled=_bool_setting("WEBM_ENABLED", webm_config, "enabled", True),
        ffmpeg_path=_get_env("FFMPEG_PATH") or webm_config.get("ffmpeg_path", "ffmpeg"),
        timeout_seconds=int(_get_env("WEBM_TIMEOUT") or webm_config.get("timeout_seconds", 60)),
    )

    # Recorder config
    recorder_config = file_config.get("recorder", {})
    recorder = RecorderConfig(
        default_frame_rate=float(
            _get_env("DEFAULT_FRAME_RATE") or recorder_config.get("default_frame_rate", 30.0)
        ),
        min_duration=float(recorder_config.get("min_duration", 3.0)),
    )

    return ReelfixConfig(
        output=output,
        patch=patch,
        webm=webm,
        recorder=recorder,
    )
