"""One store per entity kind, each bound to its own file under a data directory."""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from bincrud_core.entities import Item, Order, User, UserRole
from bincrud_core.protocol import DATA_DIRECTORY, ITEM_FILE, ORDER_FILE, USER_FILE

from .store import SequentialStore, Sink


class ItemStore(SequentialStore[Item]):
    FILE_NAME = ITEM_FILE

    def __init__(self, data_dir: str | Path = DATA_DIRECTORY, sink: Sink | None = None):
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(data_dir / self.FILE_NAME, Item, sink)

    async def add_item(self, content: str, price: Decimal | str | int) -> Item:
        item = Item(content=content, price=price)
        await self.append(item)
        return item


class OrderStore(SequentialStore[Order]):
    FILE_NAME = ORDER_FILE

    def __init__(self, data_dir: str | Path = DATA_DIRECTORY, sink: Sink | None = None):
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(data_dir / self.FILE_NAME, Order, sink)

    async def add_order(self, item_id: int, total_price: float) -> Order:
        order = Order(item_id=item_id, total_price=total_price)
        await self.append(order)
        return order


class UserStore(SequentialStore[User]):
    FILE_NAME = USER_FILE

    def __init__(self, data_dir: str | Path = DATA_DIRECTORY, sink: Sink | None = None):
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(data_dir / self.FILE_NAME, User, sink)

    async def add_user(self, username: str, password: str = "", role: UserRole = UserRole.USER) -> User:
        user = User(username=username, password=password, role=role)
        await self.append(user)
        return user


STORE_KINDS: dict[str, type[SequentialStore]] = {
    "item": ItemStore,
    "order": OrderStore,
    "user": UserStore,
}


def open_store(kind: str, data_dir: str | Path = DATA_DIRECTORY, sink: Sink | None = None) -> SequentialStore:
    try:
        cls = STORE_KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown entity kind {kind!r}; expected one of {sorted(STORE_KINDS)}") from None
    return cls(data_dir, sink)
