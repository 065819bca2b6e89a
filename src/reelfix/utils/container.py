"""MP4 box location utilities."""

from reelfix.errors import OutOfBoundsError
from reelfix.models import Box
from reelfix.utils.buffer import ByteBuffer

# MP4/MOV container boxes that can contain child boxes
CONTAINER_BOXES = [
    "moov",
    "trak",
    "mdia",
    "minf",
    "stbl",
    "edts",
    "dinf",
    "udta",
    "meta",
    "mvex",
    "moof",
    "traf",
]

# Boxes that start with a version byte and 24 bits of flags
FULL_BOXES = ["mvhd", "tkhd", "mdhd", "mehd"]

# Box tags rewritten by the duration patcher
DURATION_BOXES = ["mvhd", "tkhd", "mdhd"]

_HEADER_SIZE = 8


def _read_version(buffer: ByteBuffer, tag: str, body_offset: int) -> int | None:
    if tag not in FULL_BOXES:
        return None
    try:
        return buffer.read_u8(body_offset)
    except OutOfBoundsError:
        return None


def walk_boxes(buffer: ByteBuffer, max_depth: int = 8) -> list[Box]:
    """Walk the box tree by declared sizes.

    Reads each box header, recurses into container boxes and advances by the
    declared size. A box whose size is inconsistent with its parent ends the
    walk at that level, so payload bytes are never mistaken for boxes.

    Args:
        buffer: Buffer holding a complete or truncated MP4 file
        max_depth: Maximum depth to recurse into container boxes

    Returns:
        List of Box objects in file order (parents before children)
    """
    boxes: list[Box] = []

    def parse_boxes(start: int, end: int, depth: int) -> None:
        pos = start
        while pos + _HEADER_SIZE <= end:
            size = buffer.read_u32(pos)
            tag = buffer.read_tag(pos + 4)
            header_size = _HEADER_SIZE

            # Handle extended size
            if size == 1:
                if pos + 16 > end:
                    break
                size = buffer.read_u64(pos + 8)
                header_size = 16
            elif size == 0:
                size = end - pos

            if size < header_size or pos + size > end:
                break

            box = Box(
                tag=tag,
                offset=pos,
                size=size,
                header_size=header_size,
                depth=depth,
                version=_read_version(buffer, tag, pos + header_size),
            )
            boxes.append(box)

            # Recurse into container boxes
            if tag in CONTAINER_BOXES and depth < max_depth:
                data_start = pos + header_size
                if tag == "meta":
                    data_start += 4  # skip version/flags
                parse_boxes(data_start, pos + size, depth + 1)

            pos += size

    parse_boxes(0, len(buffer), 0)
    return boxes


def find_box(buffer: ByteBuffer, tag: str, from_offset: int = 0) -> int | None:
    """Find the first box with the given tag at or after ``from_offset``.

    This is a flat scan: every position where the tag bytes appear is a
    candidate, and it is accepted when the 32-bit size in front of it is at
    least a header long and stays inside the buffer. It finds boxes even when
    the surrounding structure is broken, but payload bytes that happen to
    spell a tag can produce false positives.

    Args:
        buffer: Buffer to search
        tag: Four-character box tag
        from_offset: Smallest box offset to return

    Returns:
        Offset of the box start (its size field), or None if not found
    """
    needle = tag.encode("latin-1")
    if len(needle) != 4:
        raise ValueError(f"box tag must be 4 characters: {tag!r}")

    length = len(buffer)
    pos = max(from_offset, 0) + 4
    while True:
        idx = buffer.find(needle, pos)
        if idx == -1:
            return None
        candidate = idx - 4
        if candidate + _HEADER_SIZE > length:
            return None
        size = buffer.read_u32(candidate)
        if size >= _HEADER_SIZE and candidate + size <= length:
            return candidate
        pos = idx + 1


def scan_boxes(buffer: ByteBuffer, tag: str) -> list[Box]:
    """Enumerate every box that ``find_box`` accepts for a tag."""
    boxes: list[Box] = []
    offset = find_box(buffer, tag)
    while offset is not None:
        boxes.append(
            Box(
                tag=tag,
                offset=offset,
                size=buffer.read_u32(offset),
                version=_read_version(buffer, tag, offset + _HEADER_SIZE),
            )
        )
        offset = find_box(buffer, tag, offset + 1)
    return boxes
