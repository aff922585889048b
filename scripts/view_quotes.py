#!/usr/bin/env python3
"""
View all saved quotes in the database.

Usage:
    python scripts/view_quotes.py
    python scripts/view_quotes.py <quote_id>
"""

import json
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkquote.db import connect, fetch_quote_payload, fetch_quotes
from inkquote.settings import get_settings


def main():
    db_path = get_settings().DATABASE_PATH

    if not os.path.exists(db_path):
        print(f"✗ Error: Quote database not found: {db_path}")
        print("  Calculate a quote in the app first: streamlit run app.py")
        sys.exit(1)

    conn = connect(db_path)

    if len(sys.argv) == 2:
        try:
            payload = fetch_quote_payload(conn, sys.argv[1])
        except KeyError as e:
            print(f"✗ Error: {e}")
            conn.close()
            sys.exit(1)
        conn.close()
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    df = fetch_quotes(conn)
    conn.close()

    if len(df) == 0:
        print("No quotes saved yet.")
        sys.exit(0)

    priced = df.dropna(subset=["grand_total"])

    print(f"Quote Database: {db_path}")
    print(f"Total quotes: {len(df)}")
    print(f"Complete quotes: {int(df['is_complete'].sum())}")
    print("")

    if len(priced) > 0:
        print("Summary Statistics:")
        print(f"  Grand total range: €{priced['grand_total'].min():.2f} - €{priced['grand_total'].max():.2f}")
        print(f"  Average grand total: €{priced['grand_total'].mean():.2f}")
        print(f"  Average pieces per quote: {df['total_pieces'].mean():.0f}")
        print("")

    print("All Quotes:")
    print("")
    print(f"{'ID':<38} {'Created':<26} {'Items':>6} {'Pieces':>7} {'Total':>12} {'Complete':>9}")
    print("-" * 102)

    for _, row in df.iterrows():
        total = f"€{row['grand_total']:.2f}" if row['grand_total'] == row['grand_total'] else "n/a"
        complete = "yes" if row['is_complete'] else "no"
        print(f"{row['id']:<38} {row['created_at'][:25]:<26} {row['item_count']:>6} {row['total_pieces']:>7} {total:>12} {complete:>9}")

    print("-" * 102)
    print("")
    print("Details: python scripts/view_quotes.py <quote_id>")


if __name__ == '__main__':
    main()
