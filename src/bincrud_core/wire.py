"""bincrud - little-endian field helpers shared by the entity codecs."""
from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from .errors import CorruptRecordError
from .protocol import (
    DECIMAL_MAX_COEFFICIENT,
    DECIMAL_MAX_SCALE,
    DECIMAL_SCALE_MASK,
    DECIMAL_SCALE_SHIFT,
    DECIMAL_SIGN_MASK,
    MAX_TICKS,
    TICKS_PER_MICROSECOND,
)

TICKS_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)


def datetime_to_ticks(value: datetime) -> int:
    """Convert a datetime to 100-ns ticks since 0001-01-01 UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - TICKS_EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    if micros < 0:
        raise ValueError(f"datetime {value.isoformat()} is before the tick epoch")
    return micros * TICKS_PER_MICROSECOND


def ticks_to_datetime(ticks: int) -> datetime:
    """Convert ticks back to an aware UTC datetime (microsecond resolution)."""
    if ticks < 0 or ticks > MAX_TICKS:
        raise CorruptRecordError(f"timestamp ticks out of range: {ticks}")
    return TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def decimal_to_words(value: Decimal) -> tuple[int, int, int, int]:
    """Split a Decimal into the lo/mid/hi/flags words of a 16-byte exact decimal."""
    if not value.is_finite():
        raise ValueError(f"cannot store non-finite decimal {value}")
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(str(d) for d in digits) or "0")
    if exponent > 0:
        coefficient *= 10**exponent
        scale = 0
    else:
        scale = -exponent
    if scale > DECIMAL_MAX_SCALE:
        raise ValueError(f"decimal scale {scale} exceeds {DECIMAL_MAX_SCALE}: {value}")
    if coefficient > DECIMAL_MAX_COEFFICIENT:
        raise ValueError(f"decimal coefficient does not fit in 96 bits: {value}")

    flags = scale << DECIMAL_SCALE_SHIFT
    if sign:
        flags |= DECIMAL_SIGN_MASK
    return (
        coefficient & 0xFFFFFFFF,
        (coefficient >> 32) & 0xFFFFFFFF,
        coefficient >> 64,
        flags,
    )


def words_to_decimal(lo: int, mid: int, hi: int, flags: int) -> Decimal:
    if flags & ~(DECIMAL_SIGN_MASK | DECIMAL_SCALE_MASK):
        raise CorruptRecordError(f"decimal flags have reserved bits set: {flags:#010x}")
    scale = (flags & DECIMAL_SCALE_MASK) >> DECIMAL_SCALE_SHIFT
    if scale > DECIMAL_MAX_SCALE:
        raise CorruptRecordError(f"decimal scale out of range: {scale}")
    coefficient = lo | (mid << 32) | (hi << 64)
    sign = 1 if flags & DECIMAL_SIGN_MASK else 0
    return Decimal((sign, tuple(int(c) for c in str(coefficient)), -scale))


def encode_text(value: str, max_len: int, field: str) -> bytes:
    """UTF-8 encode a text field, enforcing the width of its length prefix."""
    raw = value.encode("utf-8") if value else b""
    if len(raw) > max_len:
        raise ValueError(f"{field} is {len(raw)} bytes, limit is {max_len}")
    return raw


class PayloadReader:
    """Bounded cursor over one payload.

    Every read checks the remaining length first, so a declared size larger
    than the buffer raises CorruptRecordError instead of reading past the end.
    """

    def __init__(self, data: bytes, kind: str):
        self._view = memoryview(data)
        self._off = 0
        self.kind = kind

    @property
    def remaining(self) -> int:
        return len(self._view) - self._off

    def _need(self, n: int, what: str) -> None:
        if n > self.remaining:
            raise CorruptRecordError(
                f"{self.kind}: {what} needs {n} bytes at offset {self._off}, {self.remaining} remain"
            )

    def unpack(self, fmt: str, size: int, what: str) -> tuple:
        self._need(size, what)
        values = struct.unpack_from(fmt, self._view, self._off)
        self._off += size
        return values

    def text(self, length: int, what: str) -> str:
        if length < 0:
            raise CorruptRecordError(f"{self.kind}: negative {what} length {length}")
        self._need(length, what)
        raw = bytes(self._view[self._off:self._off + length])
        self._off += length
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"{self.kind}: {what} is not valid UTF-8") from e

    def finish(self) -> None:
        if self.remaining:
            raise CorruptRecordError(f"{self.kind}: {self.remaining} trailing bytes after last field")
