"""Async sequential record store: one append-only file per entity kind."""
from __future__ import annotations

import asyncio
import copy
import os
from pathlib import Path
from typing import BinaryIO, Callable, Generic, TypeVar
from warnings import warn

from bincrud_core.codec import IdentityAssignable, Serializable
from bincrud_core.errors import StoreClosedError
from bincrud_core.framing import (
    FileHeader,
    pack_frame,
    pack_header,
    read_frame,
    read_header,
    skip_frame,
    write_header,
)
from bincrud_core.protocol import HEADER_LEN, MAX_RECORD_COUNT

T = TypeVar("T", bound=Serializable)

Sink = Callable[[str], None]


def _durable(f: BinaryIO) -> None:
    f.flush()
    os.fdatasync(f.fileno()) if hasattr(os, "fdatasync") else os.fsync(f.fileno())


class SequentialStore(Generic[T]):
    """Append-only record file for one entity kind.

    - Every public operation holds the instance's asyncio.Lock, so calls on
      one store are totally ordered by lock acquisition.
    - Blocking file I/O runs in a worker thread while the lock is held.
    - Append writes and syncs the frame first, then the header that counts
      it. An interruption in between leaves a valid prefix plus an orphan
      frame, which read_all reports and the next append overwrites.
    - The lock is created on first use and rebuilt when the store is used
      from a new event loop while idle, so one instance may serve several
      asyncio.run() calls.
    """

    def __init__(self, path: str | Path, entity_type: type[T], sink: Sink | None = None):
        self.path = Path(path)
        self.entity_type = entity_type
        self._sink = sink
        self._closed = False
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        # (header count, offset just past that many frames) as last seen on disk.
        self._data_end: tuple[int, int] | None = None

    def _emit(self, message: str) -> None:
        if self._sink is not None:
            self._sink(f"[{type(self).__name__}] {message}")

    def _guard(self) -> asyncio.Lock:
        if self._closed:
            raise StoreClosedError(f"{type(self).__name__} for {self.path} is closed")
        loop = asyncio.get_running_loop()
        if self._lock is None or (
            self._lock_loop is not loop and (not self._lock.locked() or self._lock_loop.is_closed())
        ):
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    # -- public operations --

    async def append(self, entity: T) -> None:
        async with self._guard():
            notes = await asyncio.to_thread(self._append_blocking, entity)
            for note in notes:
                self._emit(note)

    async def read_header(self) -> FileHeader | None:
        async with self._guard():
            header = await asyncio.to_thread(self._read_header_blocking)
            if header is None:
                self._emit(f"File does not exist: {self.path}")
            return header

    async def read_all(self) -> list[T]:
        async with self._guard():
            records, trailing = await asyncio.to_thread(self._read_all_blocking)
            if records is None:
                self._emit(f"File does not exist: {self.path}")
                return []
            self._emit(f"Read {len(records)} entities from: {self.path}")
            if trailing:
                warn(
                    f"{trailing} trailing bytes after {len(records)} records in {self.path}",
                    stacklevel=2,
                )
            return records

    async def close(self) -> None:
        """Release the lock primitive. No flush beyond what each write already did."""
        self._closed = True
        self._lock = None
        self._lock_loop = None

    async def __aenter__(self) -> "SequentialStore[T]":
        self._guard()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # -- blocking helpers (run in a worker thread under the lock) --

    def _create_file(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "wb") as f:
            f.write(pack_header(0))
            _durable(f)
        self._data_end = (0, HEADER_LEN)

    def _data_end_for(self, f: BinaryIO, count: int) -> int:
        """Offset just past the first `count` frames, rescanned unless the cache still matches disk."""
        size = os.fstat(f.fileno()).st_size
        if self._data_end is not None:
            cached_count, cached_end = self._data_end
            if cached_count == count and cached_end <= size:
                return cached_end
        f.seek(HEADER_LEN)
        for _ in range(count):
            skip_frame(f, size)
        return f.tell()

    def _append_blocking(self, entity: T) -> list[str]:
        notes: list[str] = []
        if not self.path.exists():
            self._create_file()
            notes.append(f"Created new file with header: {self.path}")

        with open(self.path, "r+b") as f:
            header = read_header(f)
            new_count = header.count + 1
            if new_count > MAX_RECORD_COUNT:
                raise ValueError(f"{self.path} already holds {header.count} records")

            # Stamp a copy; the caller's entity only takes the id once it is on disk.
            staged = entity
            if isinstance(entity, IdentityAssignable):
                staged = copy.copy(entity)
                staged.assign_id(new_count)
            frame = pack_frame(staged.to_bytes())

            data_end = self._data_end_for(f, header.count)
            f.seek(data_end)
            f.write(frame)
            f.truncate()
            _durable(f)

            write_header(f, new_count)
            _durable(f)
            self._data_end = (new_count, data_end + len(frame))

        if staged is not entity:
            entity.assign_id(new_count)

        notes.append(f"Updating header: {header.count} -> {new_count} entities")
        notes.append(f"Entity appended to: {self.path}")
        return notes

    def _read_header_blocking(self) -> FileHeader | None:
        if not self.path.exists():
            return None
        with open(self.path, "rb") as f:
            return read_header(f)

    def _read_all_blocking(self) -> tuple[list[T] | None, int]:
        if not self.path.exists():
            return None, 0
        with open(self.path, "rb") as f:
            end = os.fstat(f.fileno()).st_size
            header = read_header(f)
            records = [self.entity_type.from_bytes(read_frame(f, end)) for _ in range(header.count)]
            data_end = f.tell()
            self._data_end = (header.count, data_end)
            return records, end - data_end
