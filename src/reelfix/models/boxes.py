"""MP4 box structure models."""

from pydantic import BaseModel, Field


class Box(BaseModel):
    """A located MP4/ISO-BMFF box.

    Offsets are absolute positions in the buffer. ``header_size`` is 8 for a
    regular box and 16 when the box uses a 64-bit size.
    """

    tag: str
    offset: int
    size: int
    header_size: int = 8
    depth: int = 0
    version: int | None = None

    @property
    def body_offset(self) -> int:
        """Offset of the first byte after the box header."""
        return self.offset + self.header_size

    @property
    def end(self) -> int:
        """Offset one past the last byte of the box."""
        return self.offset + self.size


class DurationFields(BaseModel):
    """Resolved duration fields of one mvhd/tkhd/mdhd box."""

    tag: str
    timescale: int
    duration_ticks: int
    field_width: int  # 4 for version 0, 8 for version 1
    field_offset: int

    @property
    def seconds(self) -> float:
        """Duration in seconds."""
        if not self.timescale:
            return 0.0
        return self.duration_ticks / self.timescale


class PatchResult(BaseModel):
    """Outcome of a duration patch pass."""

    mvhd_patched: bool = False
    tkhd_patched: int = 0
    mdhd_patched: int = 0
    fields: list[DurationFields] = Field(default_factory=list)

    @property
    def any_patched(self) -> bool:
        """True if at least one box was rewritten."""
        return self.mvhd_patched or self.tkhd_patched > 0 or self.mdhd_patched > 0
