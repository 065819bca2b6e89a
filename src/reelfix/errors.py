"""Exception hierarchy for reelfix.

Box- and delegate-level errors are recoverable: the component that raises
them is also the one that catches them and degrades its result. Only
PipelineError is allowed to reach the caller.
"""


class ReelfixError(Exception):
    """Base class for all reelfix errors."""

    pass


class BoxError(ReelfixError):
    """Problem with a single MP4 box."""

    pass


class BoxNotFoundError(BoxError):
    """Expected box is absent from the container."""

    def __init__(self, tag: str):
        super().__init__(f"{tag} box not found")
        self.tag = tag


class MalformedBoxError(BoxError):
    """Box offsets or sizes are inconsistent with the buffer."""

    pass


class OutOfBoundsError(MalformedBoxError):
    """Read or write past the end of a ByteBuffer."""

    def __init__(self, offset: int, width: int, length: int):
        super().__init__(f"access of {width} bytes at offset {offset} exceeds buffer of {length} bytes")
        self.offset = offset
        self.width = width
        self.length = length


class FieldOverflowError(MalformedBoxError):
    """Value does not fit the width of the field being written."""

    pass


class DelegateError(ReelfixError):
    """External WebM duration fixer failed."""

    pass


class PipelineError(ReelfixError):
    """Unrecoverable failure while processing a recording.

    The caller should fall back to offering the original, unmodified file.
    """

    pass
