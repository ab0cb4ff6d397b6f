import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pyarrow.parquet as pq

from bincrud_core.entities import Item, User, UserRole
from bincrud_store.export import SCHEMAS, export_parquet
from bincrud_store.kinds import ItemStore, OrderStore, UserStore


def test_export_items(tmp_path):
    out = tmp_path / "out" / "items.parquet"
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    async def go():
        store = ItemStore(tmp_path / "Data")
        await store.append(Item(content="a", created_at=created, price=Decimal("1.25")))
        await store.append(Item(content="b", created_at=created, price=Decimal("-3"), is_tombstone=True))
        return await export_parquet(store, out)

    assert asyncio.run(go()) == 2
    table = pq.read_table(out)
    assert table.schema.equals(SCHEMAS[Item])
    rows = table.to_pylist()
    assert [r["id"] for r in rows] == [1, 2]
    assert [r["price"] for r in rows] == ["1.25", "-3"]
    assert [r["is_tombstone"] for r in rows] == [False, True]
    assert rows[0]["created_at"] == created


def test_export_users_omits_passwords(tmp_path):
    out = tmp_path / "users.parquet"

    async def go():
        store = UserStore(tmp_path)
        await store.append(User(username="root", password="hunter2", role=UserRole.ADMIN))
        return await export_parquet(store, out)

    assert asyncio.run(go()) == 1
    table = pq.read_table(out)
    assert "password" not in table.column_names
    assert table.to_pylist() == [{"id": 1, "is_tombstone": False, "username": "root", "role": "admin"}]


def test_export_empty_store(tmp_path):
    out = tmp_path / "orders.parquet"

    async def go():
        return await export_parquet(OrderStore(tmp_path), out)

    assert asyncio.run(go()) == 0
    table = pq.read_table(out)
    assert table.num_rows == 0
    assert table.column_names == ["id", "is_tombstone", "item_id", "total_price"]
