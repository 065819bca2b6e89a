"""Dependency checking utilities."""

import shutil


def check_system_dependencies(ffmpeg_path: str = "ffmpeg") -> dict[str, bool]:
    """Check availability of system binaries.

    Args:
        ffmpeg_path: Name or path of the ffmpeg binary used for WebM fixes

    Returns:
        Dict mapping tool names to availability status.
    """
    return {"ffmpeg": shutil.which(ffmpeg_path) is not None}


def check_python_dependencies() -> dict[str, bool]:
    """Check availability of optional Python packages.

    Returns:
        Dict mapping package names to availability status.
    """
    packages = {}

    # PyYAML (config file support)
    try:
        import yaml  # noqa: F401

        packages["pyyaml"] = True
    except ImportError:
        packages["pyyaml"] = False

    return packages


def check_all_dependencies(ffmpeg_path: str = "ffmpeg") -> dict[str, dict[str, bool]]:
    """Check all dependencies.

    Returns:
        Dict with 'system' and 'python' keys containing availability dicts.
    """
    return {
        "system": check_system_dependencies(ffmpeg_path),
        "python": check_python_dependencies(),
    }

