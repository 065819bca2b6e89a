"""Utility functions for reelfix."""

from reelfix.models.artifact import format_size

from .buffer import ByteBuffer
from .container import (
    CONTAINER_BOXES,
    DURATION_BOXES,
    FULL_BOXES,
    find_box,
    scan_boxes,
    walk_boxes,
)
from .deps import (
    check_all_dependencies,
    check_python_dependencies,
    check_system_dependencies,
)

__all__ = [
    # Formatting
    "format_size",
    # Buffer
    "ByteBuffer",
    # Dependency checking
    "check_system_dependencies",
    "check_python_dependencies",
    "check_all_dependencies",
    # Box location
    "find_box",
    "scan_boxes",
    "walk_boxes",
    "CONTAINER_BOXES",
    "DURATION_BOXES",
    "FULL_BOXES",
]
