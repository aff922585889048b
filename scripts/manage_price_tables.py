#!/usr/bin/env python3
"""
Import or export the price tables stored in the database.

Stored tables replace the JSON file's table for their technique the next
time the app refreshes its pricing snapshot.

Usage:
    python scripts/manage_price_tables.py import <tables.json>
    python scripts/manage_price_tables.py export <tables.json>
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkquote import db
from inkquote.price_tables import PriceTableError, load_price_tables, save_price_tables
from inkquote.settings import get_settings


def import_tables(conn, path):
    try:
        tables = load_price_tables(path)
    except (FileNotFoundError, PriceTableError) as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    db.save_price_tables(conn, tables)
    print(f"✓ Imported {len(tables)} price table(s) from {path}")
    for technique, table in tables.items():
        print(f"  {technique.value:<14} min quantity {table.min_quantity:>4}, {len(table.quantity_tiers)} tier(s)")


def export_tables(conn, path):
    try:
        tables = db.load_price_tables(conn)
    except PriceTableError as e:
        print(f"✗ Error: stored price tables are invalid: {e}")
        sys.exit(1)

    if not tables:
        print("No price tables stored yet. Import a JSON file first.")
        sys.exit(1)

    save_price_tables(path, tables)
    print(f"✓ Exported {len(tables)} price table(s) to {path}")


def main():
    if len(sys.argv) != 3 or sys.argv[1] not in ("import", "export"):
        print(__doc__)
        sys.exit(1)

    command, path = sys.argv[1], sys.argv[2]
    db_path = get_settings().DATABASE_PATH

    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = db.connect(db_path)
    db.ensure_schema(conn)

    try:
        if command == "import":
            import_tables(conn, path)
        else:
            export_tables(conn, path)
    finally:
        conn.close()


if __name__ == '__main__':
    main()
