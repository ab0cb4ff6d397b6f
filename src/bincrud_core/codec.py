"""Codec and identifier capabilities shared by every entity kind."""
from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T", bound="Serializable")


@runtime_checkable
class Serializable(Protocol):
    """An entity that can write itself to a payload and rebuild itself from one."""

    def to_bytes(self) -> bytes: ...

    @classmethod
    def from_bytes(cls: type[T], data: bytes) -> T: ...


@runtime_checkable
class IdentityAssignable(Protocol):
    """An entity that accepts a store-assigned sequential identifier."""

    def assign_id(self, value: int) -> None: ...


def encode(entity: Serializable) -> bytes:
    return entity.to_bytes()


def decode(kind: type[T], data: bytes) -> T:
    return kind.from_bytes(data)
