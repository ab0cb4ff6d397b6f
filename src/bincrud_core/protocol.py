"""bincrud on-disk protocol constants.

Single source of truth for file layout, record layouts and field limits.
Keep this file stable. Store, verifier and exporter must remain synchronized.
"""

# File header: [Count(4)] = 4 bytes, int32 little-endian
HEADER_FMT = "<i"
HEADER_LEN = 4

# Frame: [PayloadLength(4) | Payload(PayloadLength)]
FRAME_LEN_FMT = "<i"
FRAME_LEN_LEN = 4

INT32_MAX = 2**31 - 1
MAX_RECORD_COUNT = INT32_MAX

# Item: [Tombstone(1) | Id(8) | ContentLen(4)] ... [Ticks(8) | Price(16)]
ITEM_HEAD_FMT = "<Bqi"
ITEM_HEAD_LEN = 13
ITEM_TAIL_FMT = "<qIIII"
ITEM_TAIL_LEN = 24

# Order: [Tombstone(1) | Id(2) | ItemId(2) | TotalPrice(4)] = 9 bytes
ORDER_FMT = "<BHHf"
ORDER_LEN = 9

# User: [Tombstone(1) | Id(2)] [Len(2) | Username] [Len(2) | Password] [Role(1)]
USER_HEAD_FMT = "<BH"
USER_HEAD_LEN = 3
USER_STR_LEN_FMT = "<H"
USER_STR_LEN_LEN = 2
USER_ROLE_FMT = "<B"
USER_ROLE_LEN = 1

UINT16_MAX = 0xFFFF
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Timestamps: 100-nanosecond ticks since 0001-01-01T00:00:00 UTC
TICKS_PER_MICROSECOND = 10
MAX_TICKS = 3_155_378_975_999_999_999  # 9999-12-31T23:59:59.9999999

# Exact decimal: 96-bit coefficient, scale 0..28, sign in flags bit 31
DECIMAL_MAX_SCALE = 28
DECIMAL_MAX_COEFFICIENT = 2**96 - 1
DECIMAL_SCALE_SHIFT = 16
DECIMAL_SIGN_MASK = 0x80000000
DECIMAL_SCALE_MASK = 0x00FF0000

# Default storage layout
DATA_DIRECTORY = "Data"
ITEM_FILE = "item.bin"
ORDER_FILE = "order.bin"
USER_FILE = "users.bin"

# Verifier thresholds
LONG_TEXT_BYTES = 10_000
