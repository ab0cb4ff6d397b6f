import struct
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bincrud_core.codec import IdentityAssignable, Serializable, decode, encode
from bincrud_core.entities import Item, Order, User, UserRole
from bincrud_core.errors import CorruptRecordError
from bincrud_core.wire import datetime_to_ticks, decimal_to_words, ticks_to_datetime, words_to_decimal

UTC = timezone.utc


@pytest.mark.parametrize("item", [
    Item(),
    Item(id=1, content="a", created_at=datetime(2024, 5, 17, 12, 30, 0, 123456, tzinfo=UTC), price=Decimal("19.99")),
    Item(id=-(2**63), is_tombstone=True, content="", created_at=datetime(1, 1, 1, tzinfo=UTC), price=Decimal("0")),
    Item(id=2**63 - 1, content="héllo wörld ✓", created_at=datetime.max.replace(tzinfo=UTC),
         price=Decimal(2**96 - 1)),
    Item(content="x" * 5000, price=Decimal("-79228162514264337593543950335")),
    Item(price=Decimal("0.0000000000000000000000000001")),
    Item(price=Decimal("1.00")),
])
def test_item_roundtrip(item):
    assert Item.from_bytes(item.to_bytes()) == item


def test_item_layout():
    item = Item(id=3, content="abc", created_at=datetime(2000, 1, 1, tzinfo=UTC), price=Decimal("19.99"))
    b = item.to_bytes()
    assert len(b) == 1 + 8 + 4 + 3 + 8 + 16
    assert b[0] == 0
    assert struct.unpack_from("<q", b, 1)[0] == 3
    assert struct.unpack_from("<i", b, 9)[0] == 3
    assert b[13:16] == b"abc"
    assert struct.unpack_from("<q", b, 16)[0] == 630822816000000000
    assert struct.unpack_from("<IIII", b, 24) == (1999, 0, 0, 2 << 16)


def test_decimal_words_match_known_values():
    assert decimal_to_words(Decimal("1.5")) == (15, 0, 0, 0x00010000)
    assert decimal_to_words(Decimal("-1")) == (1, 0, 0, 0x80000000)
    assert decimal_to_words(Decimal(2**64)) == (0, 0, 1, 0)
    assert decimal_to_words(Decimal("1E+2")) == (100, 0, 0, 0)
    assert words_to_decimal(15, 0, 0, 0x00010000) == Decimal("1.5")


def test_decimal_rejects_unrepresentable():
    with pytest.raises(ValueError):
        decimal_to_words(Decimal("NaN"))
    with pytest.raises(ValueError):
        decimal_to_words(Decimal("Infinity"))
    with pytest.raises(ValueError):
        decimal_to_words(Decimal("1E-29"))
    with pytest.raises(ValueError):
        decimal_to_words(Decimal(2**96))


def test_decimal_bad_flags_are_corrupt():
    with pytest.raises(CorruptRecordError):
        words_to_decimal(1, 0, 0, 0x00000001)
    with pytest.raises(CorruptRecordError):
        words_to_decimal(1, 0, 0, 29 << 16)


def test_ticks():
    assert datetime_to_ticks(datetime(1, 1, 1, tzinfo=UTC)) == 0
    assert datetime_to_ticks(datetime(2000, 1, 1)) == 630822816000000000
    assert ticks_to_datetime(630822816000000000) == datetime(2000, 1, 1, tzinfo=UTC)
    with pytest.raises(CorruptRecordError):
        ticks_to_datetime(-1)


def test_item_naive_datetime_is_utc():
    item = Item(created_at=datetime(2020, 2, 2, 2, 2, 2))
    assert item.created_at.tzinfo is UTC
    assert Item.from_bytes(item.to_bytes()).created_at == datetime(2020, 2, 2, 2, 2, 2, tzinfo=UTC)


def test_item_content_past_buffer_is_corrupt():
    b = bytearray(Item(content="abc").to_bytes())
    struct.pack_into("<i", b, 9, 1000)
    with pytest.raises(CorruptRecordError):
        Item.from_bytes(bytes(b))


def test_item_short_payload_is_corrupt():
    with pytest.raises(CorruptRecordError):
        Item.from_bytes(b"\x00" * 10)


def test_item_trailing_bytes_are_corrupt():
    with pytest.raises(CorruptRecordError):
        Item.from_bytes(Item().to_bytes() + b"\x00")


def test_order_example_payload():
    order = Order(id=7, is_tombstone=False, item_id=42, total_price=19.99)
    b = order.to_bytes()
    assert len(b) == 9
    assert b[:5] == b"\x00\x07\x00\x2a\x00"
    assert b[5:] == struct.pack("<f", 19.99)
    back = Order.from_bytes(b)
    assert back == order
    assert (back.id, back.is_tombstone, back.item_id) == (7, False, 42)
    assert back.total_price == struct.unpack("<f", struct.pack("<f", 19.99))[0]


@pytest.mark.parametrize("order", [
    Order(),
    Order(id=0xFFFF, is_tombstone=True, item_id=0xFFFF, total_price=3.4028234663852886e38),
    Order(id=1, item_id=0, total_price=-0.5),
])
def test_order_roundtrip(order):
    assert Order.from_bytes(order.to_bytes()) == order


def test_order_rejects_out_of_range():
    with pytest.raises(ValueError):
        Order(id=0x10000).to_bytes()
    with pytest.raises(ValueError):
        Order(item_id=-1).to_bytes()
    with pytest.raises(ValueError):
        Order(total_price=1e39)
    with pytest.raises(CorruptRecordError):
        Order.from_bytes(b"\x00" * 8)


def test_user_empty_password():
    user = User(id=1, username="alice", password="")
    b = user.to_bytes()
    assert b == b"\x00\x01\x00" + b"\x05\x00alice" + b"\x00\x00" + b"\x00"
    back = User.from_bytes(b)
    assert back.password == ""
    assert back == user


@pytest.mark.parametrize("user", [
    User(),
    User(id=0xFFFF, is_tombstone=True, username="root", password="s3cr3t", role=UserRole.ADMIN),
    User(id=2, username="zoë", password="pässwörd"),
    User(username="", password="only-password"),
])
def test_user_roundtrip(user):
    assert User.from_bytes(user.to_bytes()) == user


def test_user_size_and_display():
    user = User(username="bob", password="pw", role=UserRole.ADMIN)
    assert len(user.to_bytes()) == 8 + 3 + 2
    assert user.display_text == "bob (Admin)"
    assert User(username="eve").display_text == "eve (User)"


def test_user_decode_faults():
    b = bytearray(User(username="bob", password="pw").to_bytes())
    struct.pack_into("<H", b, 3, 500)
    with pytest.raises(CorruptRecordError):
        User.from_bytes(bytes(b))

    bad_role = User(username="bob").to_bytes()[:-1] + b"\x07"
    with pytest.raises(CorruptRecordError):
        User.from_bytes(bad_role)

    with pytest.raises(CorruptRecordError):
        User.from_bytes(b"\x00\x01")


def test_user_rejects_oversized_text():
    with pytest.raises(ValueError):
        User(username="x" * 0x10000).to_bytes()


def test_capabilities_are_uniform():
    for entity in (Item(), Order(), User()):
        assert isinstance(entity, Serializable)
        assert isinstance(entity, IdentityAssignable)
        entity.assign_id(9)
        assert entity.id == 9
        assert decode(type(entity), encode(entity)) == entity

    with pytest.raises(ValueError):
        Order().assign_id(0x10000)
    with pytest.raises(ValueError):
        User().assign_id(-1)
