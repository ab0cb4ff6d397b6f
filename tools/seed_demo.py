import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

from bincrud_core.entities import Item, Order, User, UserRole
from bincrud_store.kinds import ItemStore, OrderStore, UserStore

# --- CONFIGURATION ---
ITEM_NAMES = ["keyboard", "mouse", "monitor", "headset", "webcam", "dock", "cable", "lamp"]
USERNAMES = ["alice", "bob", "carol", "dave"]


async def seed(data_dir: str, items: int = 8, orders: int = 12, tombstones: bool = False) -> Path:
    out = Path(data_dir)
    start_time = datetime.now(timezone.utc)
    rng = random.Random(15)  # stable demo data across runs

    item_store = ItemStore(out, print)
    order_store = OrderStore(out, print)
    user_store = UserStore(out, print)

    prices: list[Decimal] = []
    for i in range(items):
        price = Decimal(rng.randint(199, 49999)) / 100
        prices.append(price)
        await item_store.append(Item(
            content=ITEM_NAMES[i % len(ITEM_NAMES)],
            created_at=start_time + timedelta(seconds=i),
            price=price,
            # Tombstone is a caller-side convention; the store persists it untouched.
            is_tombstone=tombstones and i % 4 == 3,
        ))

    for _ in range(orders):
        item_id = rng.randint(1, items)
        qty = rng.randint(1, 3)
        await order_store.append(Order(item_id=item_id, total_price=float(prices[item_id - 1] * qty)))

    await user_store.append(User(username="admin", password="admin", role=UserRole.ADMIN))
    for name in USERNAMES:
        await user_store.append(User(username=name, password=""))

    for store in (item_store, order_store, user_store):
        await store.close()

    print(f"GENERATED: {out}")
    return out

if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/seed_demo.py DATA_DIR [--items N] [--orders N] [--tombstones]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_int(arg_list: list[str], opt: str, default: int) -> tuple[int, list[str]]:
        if opt not in arg_list:
            return default, arg_list
        i = arg_list.index(opt)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{opt} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    tombstones, args = pop_flag(args, "--tombstones")
    n_items, args = pop_int(args, "--items", 8)
    n_orders, args = pop_int(args, "--orders", 12)

    out = args[0] if len(args) > 0 else "Data"
    asyncio.run(seed(out, n_items, n_orders, tombstones))
