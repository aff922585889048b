"""
SQLite database module for Inkquote.

Stores the per-technique price tables edited by the admin and the quotes
generated by the pipeline.
"""
import json
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Mapping

import pandas as pd

from inkquote.domain import PriceTable, QuoteResult, Technique
from inkquote.price_tables import price_table_from_dict


def connect(db_path: str) -> sqlite3.Connection:
    """
    Connect to SQLite database.

    Creates the database file if it doesn't exist.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection object
    """
    conn = sqlite3.connect(db_path)
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    """
    Create the service_pricing and quotes tables if they don't exist.

    Safe to call multiple times (idempotent).

    Args:
        conn: SQLite connection object
    """
    cursor = conn.cursor()

    # One row per technique, the table itself stored as JSON
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS service_pricing (
            technique TEXT PRIMARY KEY,
            min_quantity INTEGER NOT NULL,
            payload TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS quotes (
            id TEXT PRIMARY KEY,
            created_at TIMESTAMP NOT NULL,
            item_count INTEGER NOT NULL,
            total_pieces INTEGER NOT NULL,
            services_total REAL,
            shipping_cost REAL,
            grand_total REAL,
            is_complete INTEGER NOT NULL,
            payload TEXT NOT NULL
        )
    """)

    conn.commit()


def save_price_tables(conn: sqlite3.Connection, tables: Mapping[Technique, PriceTable]) -> None:
    """
    Replace all stored price tables in a single transaction.

    Readers see either the previous set of tables or the new one, never a mix.

    Args:
        conn: SQLite connection object
        tables: Technique -> price table
    """
    with conn:
        conn.execute("DELETE FROM service_pricing")
        conn.executemany(
            "INSERT INTO service_pricing (technique, min_quantity, payload) VALUES (?, ?, ?)",
            [
                (technique.value, table.min_quantity, json.dumps(table.to_dict(), ensure_ascii=False))
                for technique, table in tables.items()
            ],
        )


def load_price_tables(conn: sqlite3.Connection) -> Dict[Technique, PriceTable]:
    """
    Load stored price tables.

    Returns an empty dict when nothing has been saved yet.

    Raises:
        PriceTableError: If a stored table fails validation
    """
    rows = conn.execute("SELECT payload FROM service_pricing").fetchall()
    tables: Dict[Technique, PriceTable] = {}
    for (payload,) in rows:
        table = price_table_from_dict(json.loads(payload))
        tables[table.technique] = table
    return tables


def insert_quote(conn: sqlite3.Connection, result: QuoteResult) -> None:
    """
    Store a processed quote.

    Quotes whose pricing failed are stored too, with NULL amounts.

    Args:
        conn: SQLite connection object
        result: Pipeline result to persist
    """
    total = result.total
    conn.execute(
        """
        INSERT INTO quotes (
            id, created_at, item_count, total_pieces,
            services_total, shipping_cost, grand_total, is_complete, payload
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            result.quote_id,
            datetime.now(timezone.utc).isoformat(),
            len(result.items),
            sum(item.total_quantity for item in result.items),
            total.services_total if total else None,
            total.shipping_cost if total else None,
            total.grand_total if total else None,
            int(bool(total and total.is_complete and not result.errors)),
            json.dumps(result.to_dict(), ensure_ascii=False),
        ),
    )

    conn.commit()


def fetch_quotes(conn: sqlite3.Connection) -> pd.DataFrame:
    """
    Fetch all stored quotes (without payload) as pandas DataFrame.

    Returns an empty DataFrame if no quote has been stored.

    Args:
        conn: SQLite connection object

    Returns:
        pandas DataFrame, newest quote first
    """
    query = """
        SELECT id, created_at, item_count, total_pieces,
               services_total, shipping_cost, grand_total, is_complete
        FROM quotes
        ORDER BY created_at DESC
    """
    df = pd.read_sql_query(query, conn)
    return df


def fetch_quote_payload(conn: sqlite3.Connection, quote_id: str) -> Dict:
    """
    Full stored payload of one quote.

    Raises:
        KeyError: If no quote has this id
    """
    row = conn.execute("SELECT payload FROM quotes WHERE id = ?", (quote_id,)).fetchone()
    if row is None:
        raise KeyError(f"Quote not found: {quote_id}")
    return json.loads(row[0])
