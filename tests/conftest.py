"""Pytest configuration and fixtures."""

import struct
import subprocess

import pytest


def command_exists(cmd: str) -> bool:
    """Check if a command exists in PATH."""
    try:
        subprocess.run(
            [cmd, "-version"],
            capture_output=True,
            timeout=5,
        )
        return True
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False


@pytest.fixture
def has_ffmpeg() -> bool:
    """Check if ffmpeg is available."""
    return command_exists("ffmpeg")


# ---------------------------------------------------------------------------
# MP4 box builders
# ---------------------------------------------------------------------------

_MATRIX = struct.pack(">9I", 0x10000, 0, 0, 0, 0x10000, 0, 0, 0, 0x40000000)


def box(tag: str, payload: bytes = b"") -> bytes:
    """Build a box with a 32-bit size header."""
    return struct.pack(">I4s", 8 + len(payload), tag.encode("ascii")) + payload


def full_box(tag: str, version: int, payload: bytes) -> bytes:
    """Build a full box (version byte + 24-bit flags)."""
    return box(tag, struct.pack(">B3s", version, b"\x00\x00\x00") + payload)


def mvhd(timescale: int = 1000, duration: int = 0, version: int = 0) -> bytes:
    if version == 1:
        times = struct.pack(">QQIQ", 0, 0, timescale, duration)
    else:
        times = struct.pack(">IIII", 0, 0, timescale, duration)
    rest = struct.pack(">IH10x", 0x10000, 0x100) + _MATRIX + b"\x00" * 24 + struct.pack(">I", 3)
    return full_box("mvhd", version, times + rest)


def tkhd(track_id: int = 1, duration: int = 0, version: int = 0) -> bytes:
    if version == 1:
        head = struct.pack(">QQIIQ", 0, 0, track_id, 0, duration)
    else:
        head = struct.pack(">IIIII", 0, 0, track_id, 0, duration)
    rest = b"\x00" * 8 + struct.pack(">HHHH", 0, 0, 0, 0) + _MATRIX + struct.pack(">II", 720 << 16, 1280 << 16)
    return full_box("tkhd", version, head + rest)


def mdhd(timescale: int = 90000, duration: int = 0, version: int = 0) -> bytes:
    if version == 1:
        times = struct.pack(">QQIQ", 0, 0, timescale, duration)
    else:
        times = struct.pack(">IIII", 0, 0, timescale, duration)
    return full_box("mdhd", version, times + struct.pack(">HH", 0x55C4, 0))


def trak(track_id: int = 1, timescale: int = 90000, version: int = 0) -> bytes:
    hdlr = full_box("hdlr", 0, b"\x00" * 4 + b"vide" + b"\x00" * 12 + b"VideoHandler\x00")
    stbl = box("stbl", box("stsd", b"\x00" * 8))
    minf = box("minf", box("vmhd", b"\x00" * 12) + stbl)
    mdia = box("mdia", mdhd(timescale=timescale, version=version) + hdlr + minf)
    return box("trak", tkhd(track_id=track_id, version=version) + mdia)


def build_mp4(
    tracks: int = 2,
    version: int = 0,
    movie_timescale: int = 1000,
    track_timescales: tuple[int, ...] = (90000, 48000),
    mdat_payload: bytes = b"\x00" * 64,
    total_size: int | None = None,
) -> bytes:
    """Build a minimal MP4 file: ftyp, moov (mvhd + traks), mdat.

    Args:
        tracks: Number of trak boxes
        version: Version of every mvhd/tkhd/mdhd box
        movie_timescale: mvhd timescale
        track_timescales: mdhd timescales, cycled over the tracks
        mdat_payload: Contents of the mdat box
        total_size: Pad mdat so the file has exactly this many bytes
    """
    ftyp = box("ftyp", b"isom" + struct.pack(">I", 512) + b"isomiso2avc1mp41")
    traks = b"".join(
        trak(
            track_id=i + 1,
            timescale=track_timescales[i % len(track_timescales)],
            version=version,
        )
        for i in range(tracks)
    )
    moov = box("moov", mvhd(timescale=movie_timescale, version=version) + traks)
    head = ftyp + moov
    if total_size is not None:
        padding = total_size - len(head) - 8 - len(mdat_payload)
        if padding < 0:
            raise ValueError("total_size too small")
        mdat_payload = mdat_payload + b"\x00" * padding
    return head + box("mdat", mdat_payload)


def box_offsets(data: bytes, tag: str) -> list[int]:
    """Return the offset of every box header whose tag occurs in data."""
    needle = tag.encode("ascii")
    offsets = []
    idx = data.find(needle)
    while idx != -1:
        offsets.append(idx - 4)
        idx = data.find(needle, idx + 1)
    return offsets


def read_header(data: bytes, offset: int, tag: str) -> tuple[int, int]:
    """Read (timescale, duration) of an mvhd/mdhd box, or (1000, duration) of a tkhd."""
    version = data[offset + 8]
    if tag == "tkhd":
        if version == 1:
            return 1000, struct.unpack_from(">Q", data, offset + 36)[0]
        return 1000, struct.unpack_from(">I", data, offset + 28)[0]
    if version == 1:
        timescale, duration = struct.unpack_from(">IQ", data, offset + 28)
    else:
        timescale, duration = struct.unpack_from(">II", data, offset + 20)
    return timescale, duration


@pytest.fixture
def mp4_bytes() -> bytes:
    """Two-track version 0 MP4 with zero durations."""
    return build_mp4()
