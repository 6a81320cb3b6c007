#!/usr/bin/env python3
"""
Initializes the DuckDB migration database from a CSV export of the
WordPress ``wp_posts`` table (e.g. exported with phpMyAdmin or
``mysql -e "SELECT ID, post_content FROM wp_posts" --batch``).

Usage:
  python scripts/initialize_database.py \\
    --csv docs/wp_posts.csv \\
    --db data/migration.duckdb
"""

import argparse
import os

import duckdb
import pandas as pd

DB_PATH = "data/migration.duckdb"
CSV_PATH = "docs/wp_posts.csv"
TABLE_NAME = "wp_posts"


def initialize_database(csv_path: str = CSV_PATH, db_path: str = DB_PATH, table_name: str = TABLE_NAME,
                        replace: bool = False) -> int:
    """
    Creates the posts table in the DuckDB database and fills it with the
    rows of the CSV file.  Returns the number of rows loaded, or 0 when the
    table already exists and ``replace`` is not set.
    """
    # Make sure the data directory exists
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    con = duckdb.connect(database=db_path, read_only=False)
    try:
        existing_tables = con.execute("SHOW TABLES;").fetchall()
        if (table_name,) in existing_tables and not replace:
            print(f"Table '{table_name}' already exists. Nothing to do.")
            return 0

        print(f"Reading CSV file: {csv_path}")
        df = pd.read_csv(csv_path, dtype={"post_content": str}, keep_default_na=False)
        if "ID" not in df.columns or "post_content" not in df.columns:
            raise SystemExit(f"CSV must have 'ID' and 'post_content' columns, found: {list(df.columns)}")

        print(f"Creating table '{table_name}'...")
        con.register("df_temp", df)
        con.execute(f'CREATE OR REPLACE TABLE "{table_name}" AS SELECT * FROM df_temp')
        con.unregister("df_temp")

        print(f"Table '{table_name}' created with {len(df)} rows.")
        return len(df)
    finally:
        con.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load a wp_posts CSV export into the DuckDB migration database.")
    parser.add_argument("--csv", default=CSV_PATH, help=f"CSV export (default: {CSV_PATH})")
    parser.add_argument("--db", default=DB_PATH, help=f"DuckDB database (default: {DB_PATH})")
    parser.add_argument("--table", default=TABLE_NAME, help=f"Table name (default: {TABLE_NAME})")
    parser.add_argument("--replace", action="store_true", help="Replace the table if it already exists")
    args = parser.parse_args()
    initialize_database(args.csv, args.db, args.table, replace=args.replace)


if __name__ == "__main__":
    main()
