"""Store fault taxonomy."""
from __future__ import annotations


class StoreError(Exception):
    """Base class for faults raised by the store and its codecs."""


class TruncatedHeaderError(StoreError, ValueError):
    """Fewer than HEADER_LEN bytes were available where a header was expected."""


class CorruptRecordError(StoreError, ValueError):
    """A frame or payload violates the on-disk layout."""


class StoreClosedError(StoreError, RuntimeError):
    """The store was used after close()."""
