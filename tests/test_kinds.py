import asyncio
from decimal import Decimal

import pytest

from bincrud_core.entities import UserRole
from bincrud_store.kinds import STORE_KINDS, ItemStore, OrderStore, UserStore, open_store


def test_kind_stores_use_their_own_files(tmp_path):
    data = tmp_path / "Data"

    async def go():
        items, orders, users = ItemStore(data), OrderStore(data), UserStore(data)
        item = await items.add_item("lamp", Decimal("12.30"))
        order = await orders.add_order(item.id, 24.6)
        admin = await users.add_user("root", "pw", UserRole.ADMIN)
        guest = await users.add_user("guest")
        return item, order, admin, guest, await users.read_all()

    item, order, admin, guest, users = asyncio.run(go())
    assert sorted(p.name for p in data.iterdir()) == ["item.bin", "order.bin", "users.bin"]
    assert (item.id, item.content, item.price) == (1, "lamp", Decimal("12.30"))
    assert (order.id, order.item_id) == (1, 1)
    assert (admin.id, guest.id) == (1, 2)
    assert [u.display_text for u in users] == ["root (Admin)", "guest (User)"]
    assert users[1].password == ""


def test_kind_stores_are_independent(tmp_path):
    async def go():
        await ItemStore(tmp_path).add_item("a", "1")
        await ItemStore(tmp_path).add_item("b", "2")
        return await OrderStore(tmp_path).read_header(), await ItemStore(tmp_path).read_header()

    orders_header, items_header = asyncio.run(go())
    assert orders_header is None
    assert items_header.count == 2


def test_open_store(tmp_path):
    for kind, cls in STORE_KINDS.items():
        assert isinstance(open_store(kind, tmp_path), cls)
    with pytest.raises(ValueError, match="unknown entity kind"):
        open_store("promotion", tmp_path)
