"""bincrud file framing: the count header and length-prefixed frames.

    [count:int32 LE]
    repeat count times:
      [payloadLength:int32 LE][payload]

No magic, no version, no checksum. Disk is truth: every length is checked
against the bytes actually present before it is trusted.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO

from .errors import CorruptRecordError, TruncatedHeaderError
from .protocol import (
    FRAME_LEN_FMT,
    FRAME_LEN_LEN,
    HEADER_FMT,
    HEADER_LEN,
    MAX_RECORD_COUNT,
)


@dataclass
class FileHeader:
    """Store file header. Only ``count`` is persisted; ``last_updated`` lives in memory."""

    count: int = 0
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)


def pack_header(count: int) -> bytes:
    if not 0 <= count <= MAX_RECORD_COUNT:
        raise ValueError(f"record count {count} out of range")
    return struct.pack(HEADER_FMT, count)


def unpack_header(raw: bytes) -> FileHeader:
    if len(raw) < HEADER_LEN:
        raise TruncatedHeaderError(f"header needs {HEADER_LEN} bytes, got {len(raw)}")
    (count,) = struct.unpack_from(HEADER_FMT, raw, 0)
    if count < 0:
        raise CorruptRecordError(f"negative record count in header: {count}")
    return FileHeader(count=count)


def read_header(f: BinaryIO) -> FileHeader:
    """Read the header at offset 0, leaving the stream positioned at the first frame."""
    f.seek(0)
    return unpack_header(f.read(HEADER_LEN))


def write_header(f: BinaryIO, count: int) -> None:
    """Overwrite the header in place. The data region is not touched."""
    f.seek(0)
    f.write(pack_header(count))


def pack_frame(payload: bytes) -> bytes:
    return struct.pack(FRAME_LEN_FMT, len(payload)) + payload


def _frame_length(f: BinaryIO, end: int) -> int:
    start_off = f.tell()
    raw = f.read(FRAME_LEN_LEN)
    if len(raw) < FRAME_LEN_LEN:
        raise CorruptRecordError(f"truncated frame length at offset {start_off}")
    (length,) = struct.unpack(FRAME_LEN_FMT, raw)
    if length < 0:
        raise CorruptRecordError(f"negative frame length {length} at offset {start_off}")
    remaining = end - start_off - FRAME_LEN_LEN
    if length > remaining:
        raise CorruptRecordError(
            f"frame at offset {start_off} declares {length} bytes, only {remaining} remain"
        )
    return length


def read_frame(f: BinaryIO, end: int) -> bytes:
    """Read one frame at the current position. ``end`` is the file size."""
    length = _frame_length(f, end)
    return f.read(length)


def skip_frame(f: BinaryIO, end: int) -> int:
    """Step over one frame without reading its payload. Returns the new offset."""
    length = _frame_length(f, end)
    return f.seek(length, 1)
