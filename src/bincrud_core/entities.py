"""bincrud entity kinds and their binary layouts.

Layouts are documented per class. All multi-byte numerics are little-endian,
text is UTF-8 behind a length prefix, and a zero length means the empty string.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import IntEnum

from .errors import CorruptRecordError
from .protocol import (
    INT32_MAX,
    INT64_MAX,
    INT64_MIN,
    ITEM_HEAD_FMT,
    ITEM_HEAD_LEN,
    ITEM_TAIL_FMT,
    ITEM_TAIL_LEN,
    ORDER_FMT,
    ORDER_LEN,
    UINT16_MAX,
    USER_HEAD_FMT,
    USER_HEAD_LEN,
    USER_ROLE_FMT,
    USER_ROLE_LEN,
    USER_STR_LEN_FMT,
    USER_STR_LEN_LEN,
)
from .wire import (
    PayloadReader,
    datetime_to_ticks,
    decimal_to_words,
    encode_text,
    ticks_to_datetime,
    words_to_decimal,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_u16(value: int, what: str) -> int:
    if not 0 <= value <= UINT16_MAX:
        raise ValueError(f"{what} {value} does not fit in 16 bits")
    return value


def _as_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", float(value)))[0]
    except OverflowError as e:
        raise ValueError(f"{value} does not fit in a 32-bit float") from e


@dataclass
class Item:
    """General item.

    Layout: [Tombstone(1) | Id(8) | ContentLen(4) | Content(N) | Ticks(8) | Price(16)]
    Size: 37 + N bytes
    """

    id: int = 0
    is_tombstone: bool = False
    content: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    price: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))

    def assign_id(self, value: int) -> None:
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"item id {value} does not fit in 64 bits")
        self.id = value

    def to_bytes(self) -> bytes:
        content = encode_text(self.content, INT32_MAX, "item content")
        head = struct.pack(ITEM_HEAD_FMT, 1 if self.is_tombstone else 0, self.id, len(content))
        tail = struct.pack(
            ITEM_TAIL_FMT,
            datetime_to_ticks(self.created_at),
            *decimal_to_words(self.price),
        )
        return head + content + tail

    @classmethod
    def from_bytes(cls, data: bytes) -> "Item":
        r = PayloadReader(data, "item")
        tombstone, item_id, content_len = r.unpack(ITEM_HEAD_FMT, ITEM_HEAD_LEN, "item header")
        content = r.text(content_len, "content")
        ticks, lo, mid, hi, flags = r.unpack(ITEM_TAIL_FMT, ITEM_TAIL_LEN, "timestamp/price")
        r.finish()
        return cls(
            id=item_id,
            is_tombstone=tombstone == 1,
            content=content,
            created_at=ticks_to_datetime(ticks),
            price=words_to_decimal(lo, mid, hi, flags),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "is_tombstone": self.is_tombstone,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "price": str(self.price),
        }


@dataclass
class Order:
    """Compact order.

    Layout: [Tombstone(1) | Id(2) | ItemId(2) | TotalPrice(4, float32)]
    Size: 9 bytes

    total_price is narrowed to float32 on construction so that the in-memory
    value is exactly the one that will be stored.
    """

    id: int = 0
    is_tombstone: bool = False
    item_id: int = 0
    total_price: float = 0.0

    def __post_init__(self) -> None:
        self.total_price = _as_float32(self.total_price)

    def assign_id(self, value: int) -> None:
        self.id = _check_u16(value, "order id")

    def to_bytes(self) -> bytes:
        return struct.pack(
            ORDER_FMT,
            1 if self.is_tombstone else 0,
            _check_u16(self.id, "order id"),
            _check_u16(self.item_id, "item id"),
            _as_float32(self.total_price),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Order":
        if len(data) != ORDER_LEN:
            raise CorruptRecordError(f"order: payload is {len(data)} bytes, expected {ORDER_LEN}")
        tombstone, order_id, item_id, total_price = struct.unpack(ORDER_FMT, data)
        return cls(id=order_id, is_tombstone=tombstone == 1, item_id=item_id, total_price=total_price)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "is_tombstone": self.is_tombstone,
            "item_id": self.item_id,
            "total_price": self.total_price,
        }


class UserRole(IntEnum):
    USER = 0
    ADMIN = 1


@dataclass
class User:
    """User account.

    Layout: [Tombstone(1) | Id(2) | UsernameLen(2) | Username(U) | PasswordLen(2) | Password(P) | Role(1)]
    Size: 8 + U + P bytes
    """

    id: int = 0
    is_tombstone: bool = False
    username: str = ""
    password: str = ""
    role: UserRole = UserRole.USER

    def __post_init__(self) -> None:
        self.role = UserRole(self.role)

    @property
    def display_text(self) -> str:
        return f"{self.username} ({self.role.name.title()})"

    def assign_id(self, value: int) -> None:
        self.id = _check_u16(value, "user id")

    def to_bytes(self) -> bytes:
        username = encode_text(self.username, UINT16_MAX, "username")
        password = encode_text(self.password, UINT16_MAX, "password")
        return b"".join([
            struct.pack(USER_HEAD_FMT, 1 if self.is_tombstone else 0, _check_u16(self.id, "user id")),
            struct.pack(USER_STR_LEN_FMT, len(username)),
            username,
            struct.pack(USER_STR_LEN_FMT, len(password)),
            password,
            struct.pack(USER_ROLE_FMT, int(self.role)),
        ])

    @classmethod
    def from_bytes(cls, data: bytes) -> "User":
        r = PayloadReader(data, "user")
        tombstone, user_id = r.unpack(USER_HEAD_FMT, USER_HEAD_LEN, "user header")
        (username_len,) = r.unpack(USER_STR_LEN_FMT, USER_STR_LEN_LEN, "username length")
        username = r.text(username_len, "username")
        (password_len,) = r.unpack(USER_STR_LEN_FMT, USER_STR_LEN_LEN, "password length")
        password = r.text(password_len, "password")
        (role,) = r.unpack(USER_ROLE_FMT, USER_ROLE_LEN, "role")
        r.finish()
        try:
            role = UserRole(role)
        except ValueError as e:
            raise CorruptRecordError(f"user: unknown role byte {role}") from e
        return cls(id=user_id, is_tombstone=tombstone == 1, username=username, password=password, role=role)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "is_tombstone": self.is_tombstone,
            "username": self.username,
            "role": self.role.name.lower(),
        }


ENTITY_KINDS: dict[str, type] = {
    "item": Item,
    "order": Order,
    "user": User,
}
