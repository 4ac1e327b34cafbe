#!/usr/bin/env python3
"""List the tables of a SQLite database file."""

import sys

from dbmanager import DbManager


def check_database(path: str) -> None:
    """Print the tables of a SQLite database."""
    config = {"driver": {"name": "sqlite", "arguments": [{"path": path}]}}

    with DbManager(config) as db_manager:
        driver = db_manager.get_driver()
        assert driver is not None
        table_names = driver.get_table_names()

        print(f"Database: {path} ({driver.get_encoding()})")
        print(f"Total tables: {len(table_names)}")
        print("-" * 80)

        for name in sorted(table_names):
            row = driver.fetch_one(f'SELECT COUNT(*) AS total FROM "{name}"')
            total = row["total"] if row else 0
            print(f"{name}: {total} rows")


if __name__ == "__main__":
    check_database(sys.argv[1] if len(sys.argv) > 1 else "db/dbmanager.demo.sq3")
