"""In-place MP4 duration header patching.

Browser recorders assemble MP4 files from a live chunk stream, so the
movie (mvhd), track (tkhd) and media (mdhd) headers often carry a zero or
approximate duration. The patcher rewrites those fields to the duration the
recorder measured, without touching any other byte of the file.

Field layout (offsets from the box start, 8-byte header):

    box      version 0            version 1
    mvhd     timescale @20 (u32)  timescale @28 (u32)
             duration  @24 (u32)  duration  @32 (u64)
    mdhd     same as mvhd         same as mvhd
    tkhd     duration  @28 (u32)  duration  @36 (u64)

tkhd durations are in movie timescale units. MediaRecorder output uses a
movie timescale of 1000, so tkhd is written against that constant.
"""

from __future__ import annotations

import logging
import math

from reelfix.errors import BoxError, BoxNotFoundError, FieldOverflowError, MalformedBoxError
from reelfix.models import Box, DurationFields, PatchResult
from reelfix.utils.buffer import ByteBuffer
from reelfix.utils.container import DURATION_BOXES, scan_boxes, walk_boxes

logger = logging.getLogger(__name__)

MOVIE_TIMESCALE = 1000

SEARCH_STRATEGIES = ("auto", "walk", "scan")


def to_ticks(seconds: float, timescale: int) -> int:
    """Convert seconds to timescale ticks, rounding halves up."""
    if not math.isfinite(seconds):
        raise FieldOverflowError(f"duration {seconds} cannot be stored as ticks")
    return int(math.floor(seconds * timescale + 0.5))


def read_duration_fields(
    buffer: ByteBuffer, box: Box, movie_timescale: int = MOVIE_TIMESCALE
) -> DurationFields:
    """Resolve the current duration fields of an mvhd, tkhd or mdhd box.

    Raises:
        MalformedBoxError: If the version is unknown, the timescale is zero or
            a field lies outside the box or the buffer
    """
    body = box.body_offset
    version = buffer.read_u8(body)
    if version not in (0, 1):
        raise MalformedBoxError(f"{box.tag} at {box.offset} has unknown version {version}")
    width = 8 if version == 1 else 4

    if box.tag == "tkhd":
        timescale = movie_timescale
        duration_offset = body + (28 if version == 1 else 20)
    elif box.tag in ("mvhd", "mdhd"):
        timescale_offset = body + (20 if version == 1 else 12)
        timescale = buffer.read_u32(timescale_offset)
        if timescale == 0:
            raise MalformedBoxError(f"{box.tag} at {box.offset} has a zero timescale")
        duration_offset = timescale_offset + 4
    else:
        raise MalformedBoxError(f"{box.tag} has no duration field")

    if duration_offset + width > box.end:
        raise MalformedBoxError(
            f"{box.tag} at {box.offset} is too small ({box.size} bytes) for a v{version} header"
        )

    if width == 8:
        ticks = buffer.read_u64(duration_offset)
    else:
        ticks = buffer.read_u32(duration_offset)

    return DurationFields(
        tag=box.tag,
        timescale=timescale,
        duration_ticks=ticks,
        field_width=width,
        field_offset=duration_offset,
    )


class DurationPatcher:
    """Rewrites MP4 duration headers to a measured duration.

    Args:
        strategy: How boxes are located. ``walk`` follows declared box sizes
            from the file start, ``scan`` searches every offset for the tag,
            ``auto`` walks and falls back to scanning when the walk finds no
            duration boxes at all (e.g. a corrupted top-level header).
        movie_timescale: Timescale assumed for tkhd durations
        max_depth: Maximum container nesting followed by the walk
    """

    def __init__(
        self,
        strategy: str = "auto",
        movie_timescale: int = MOVIE_TIMESCALE,
        max_depth: int = 8,
    ):
        if strategy not in SEARCH_STRATEGIES:
            raise ValueError(f"Unknown box search strategy: {strategy!r}")
        self.strategy = strategy
        self.movie_timescale = movie_timescale
        self.max_depth = max_depth

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(strategy={self.strategy!r})"

    def locate(self, buffer: ByteBuffer) -> dict[str, list[Box]]:
        """Locate every mvhd, tkhd and mdhd box in the buffer."""
        if self.strategy in ("walk", "auto"):
            boxes = walk_boxes(buffer, max_depth=self.max_depth)
            found = {tag: [b for b in boxes if b.tag == tag] for tag in DURATION_BOXES}
            if self.strategy == "walk" or any(found.values()):
                return found
            logger.debug("[patcher] box walk found no duration boxes, scanning")
        return {tag: scan_boxes(buffer, tag) for tag in DURATION_BOXES}

    def read_duration(self, buffer: ByteBuffer) -> float | None:
        """Return the declared movie duration in seconds, or None."""
        movie_headers = self.locate(buffer)["mvhd"]
        if not movie_headers:
            return None
        try:
            return read_duration_fields(buffer, movie_headers[0], self.movie_timescale).seconds
        except MalformedBoxError as e:
            logger.debug("[patcher] unreadable mvhd: %s", e)
            return None

    def _patch_box(self, buffer: ByteBuffer, box: Box, target_seconds: float) -> DurationFields:
        fields = read_duration_fields(buffer, box, self.movie_timescale)
        ticks = to_ticks(target_seconds, fields.timescale)
        if fields.field_width == 8:
            buffer.write_u64(fields.field_offset, ticks)
        else:
            buffer.write_u32(fields.field_offset, ticks)
        logger.debug(
            "[patcher] %s at %d: %d -> %d ticks (timescale %d)",
            box.tag,
            box.offset,
            fields.duration_ticks,
            ticks,
            fields.timescale,
        )
        return fields.model_copy(update={"duration_ticks": ticks})

    def patch(self, buffer: ByteBuffer, target_seconds: float) -> PatchResult:
        """Patch all duration headers in place.

        Each box is patched independently; a missing or malformed box is
        logged and skipped. When nothing can be patched the buffer is left
        untouched and the result is all-false.

        Args:
            buffer: Buffer holding the MP4 file (modified in place)
            target_seconds: Measured duration to write

        Returns:
            PatchResult describing which headers were rewritten
        """
        result = PatchResult()
        boxes = self.locate(buffer)

        try:
            if not boxes["mvhd"]:
                raise BoxNotFoundError("mvhd")
            result.fields.append(self._patch_box(buffer, boxes["mvhd"][0], target_seconds))
            result.mvhd_patched = True
        except BoxError as e:
            logger.warning("[patcher] skipping movie header: %s", e)

        for tag in ("tkhd", "mdhd"):
            if not boxes[tag]:
                logger.debug("[patcher] no %s boxes found", tag)
            for box in boxes[tag]:
                try:
                    result.fields.append(self._patch_box(buffer, box, target_seconds))
                except BoxError as e:
                    logger.warning("[patcher] skipping %s: %s", tag, e)
                    continue
                if tag == "tkhd":
                    result.tkhd_patched += 1
                else:
                    result.mdhd_patched += 1

        if result.any_patched:
            logger.info(
                "[patcher] duration set to %.3fs (mvhd=%s, tkhd=%d, mdhd=%d)",
                target_seconds,
                result.mvhd_patched,
                result.tkhd_patched,
                result.mdhd_patched,
            )
        else:
            logger.warning("[patcher] no MP4 duration headers found to fix")
        return result


def patch_mp4_duration(
    data: bytes, target_seconds: float, strategy: str = "auto"
) -> tuple[bytes, PatchResult]:
    """Patch a copy of an MP4 file's duration headers.

    Args:
        data: MP4 file contents (never modified)
        target_seconds: Measured duration in seconds
        strategy: Box search strategy, see DurationPatcher

    Returns:
        Tuple of (patched bytes, PatchResult). The bytes equal the input when
        nothing was patched.
    """
    buffer = ByteBuffer(data)
    result = DurationPatcher(strategy=strategy).patch(buffer, target_seconds)
    if not result.any_patched:
        return bytes(data), result
    return buffer.to_bytes(), result


def read_mp4_duration(data: bytes, strategy: str = "auto") -> float | None:
    """Return the duration declared in an MP4 file's mvhd box, or None."""
    return DurationPatcher(strategy=strategy).read_duration(ByteBuffer(data))
