"""bincrud core - on-disk protocol, framing and entity codecs."""
from .codec import IdentityAssignable, Serializable, decode, encode
from .entities import ENTITY_KINDS, Item, Order, User, UserRole
from .errors import CorruptRecordError, StoreClosedError, StoreError, TruncatedHeaderError
from .framing import FileHeader

__all__ = [
    "IdentityAssignable", "Serializable", "decode", "encode",
    "ENTITY_KINDS", "Item", "Order", "User", "UserRole",
    "CorruptRecordError", "StoreClosedError", "StoreError", "TruncatedHeaderError",
    "FileHeader",
]
