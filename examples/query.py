"""List live items from an exported items table."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <items.parquet> [min_price]")
        print("Example: bincrud export item items.parquet && python query.py items.parquet 10")
        sys.exit(1)

    table = Path(sys.argv[1])
    min_price = sys.argv[2] if len(sys.argv) > 2 else "0"

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW items AS SELECT * FROM '{table}'")

    # Tombstoned rows are still in the file; deletion is a reader-side filter.
    sql = """
    SELECT id, content, CAST(price AS DECIMAL(38, 10)) AS price, created_at
    FROM items
    WHERE NOT is_tombstone
      AND CAST(price AS DECIMAL(38, 10)) >= CAST(? AS DECIMAL(38, 10))
    ORDER BY id
    """

    print(f"--- Live items: {table} ---\n")

    df = con.execute(sql, [min_price]).fetchdf()
    if df.empty:
        print("No live items found.")
    else:
        for _, row in df.iterrows():
            print(f"#{row['id']}: {row['content']}")
            print(f"  Price: {row['price']}")
            print(f"  Created: {row['created_at']}")
            print()


if __name__ == "__main__":
    main()
