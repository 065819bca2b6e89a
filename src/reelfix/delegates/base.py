"""Base class for WebM duration fixers."""

from abc import ABC, abstractmethod
from typing import ClassVar


class BaseWebmFixer(ABC):
    """Abstract base class for WebM duration fixers.

    A fixer rewrites the Segment duration of a WebM file recorded from a
    live stream. reelfix treats fixers as black boxes: it hands over the
    bytes and the measured duration and receives corrected bytes back.

    Attributes:
        name: Human-readable name of the fixer
        priority: Lower numbers are preferred (default: 100)
    """

    name: ClassVar[str] = "base"
    priority: ClassVar[int] = 100

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this fixer can run on this system.

        Returns:
            True if all dependencies are available
        """
        pass

    @abstractmethod
    def fix(self, data: bytes, duration_ms: float) -> bytes:
        """Return a copy of the WebM file with its duration corrected.

        Args:
            data: WebM file contents
            duration_ms: Measured duration in milliseconds

        Returns:
            Corrected WebM file contents

        Raises:
            DelegateError: If the fix could not be applied
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority})"
