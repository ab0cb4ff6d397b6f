"""Parquet export of a store's records with an explicit schema per kind."""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from bincrud_core.entities import Item, Order, User

from .store import SequentialStore

# Tombstoned rows are exported as-is; filtering is the reader's business.
SCHEMAS: dict[type, pa.Schema] = {
    Item: pa.schema(
        [
            ("id", pa.int64()),
            ("is_tombstone", pa.bool_()),
            ("content", pa.string()),
            ("created_at", pa.timestamp("us", tz="UTC")),
            ("price", pa.string()),
        ]
    ),
    Order: pa.schema(
        [
            ("id", pa.uint16()),
            ("is_tombstone", pa.bool_()),
            ("item_id", pa.uint16()),
            ("total_price", pa.float32()),
        ]
    ),
    User: pa.schema(
        [
            ("id", pa.uint16()),
            ("is_tombstone", pa.bool_()),
            ("username", pa.string()),
            ("role", pa.string()),
        ]
    ),
}


def _rows(records: list) -> list[dict]:
    rows = []
    for rec in records:
        row = rec.to_dict()
        if isinstance(rec, Item):
            # Keep the datetime object; the exact decimal travels as text.
            row["created_at"] = rec.created_at
        rows.append(row)
    return rows


async def export_parquet(store: SequentialStore, out_path: Path) -> int:
    """Write every record of ``store`` to a Parquet file. Returns the row count."""
    schema = SCHEMAS[store.entity_type]
    records = await store.read_all()

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    if records:
        df = pd.DataFrame(_rows(records), columns=schema.names)
        table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    else:
        table = schema.empty_table()
    pq.write_table(table, out_path)
    return table.num_rows
