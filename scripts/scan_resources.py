#!/usr/bin/env python3
"""
Lists the resources every post of the migration database references and
exports them as (record_id, reference) rows, without downloading or
uploading anything.  Handy to size a migration before running it.

Usage:
  python scripts/scan_resources.py \\
    --config config/migration_config.json \\
    --output data/resources.csv
"""

from __future__ import annotations

import argparse
import csv
import os
import sys
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Tuple

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from resource_migrator.extractors.resource_extractor import extract_resources
from resource_migrator.migration_tool import ResourceMigrationTool
from resource_migrator.models import Record


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inventory the resources referenced by the posts.")
    parser.add_argument("--config", default="config/migration_config.json", help="Configuration file")
    parser.add_argument("--output", default="data/resources.csv", help="CSV file with (record_id, reference)")
    return parser.parse_args()


def scan(records: Iterable[Record], pattern) -> Tuple[List[Tuple[str, str]], Counter]:
    """Return every (record_id, reference) pair and a count of references per extension."""
    rows: List[Tuple[str, str]] = []
    by_extension: Counter[str] = Counter()
    for record in records:
        for reference in extract_resources(record.content, pattern):
            rows.append((str(record.id), reference))
            by_extension[reference.rsplit(".", 1)[-1].lower()] += 1
    return rows, by_extension


def write_rows_csv(rows: List[Tuple[str, str]], out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["record_id", "reference"])
        writer.writerows(rows)


def main() -> None:
    args = parse_args()
    tool = ResourceMigrationTool(config_file=args.config)
    store = tool.content_store
    store.connect()
    try:
        records = store.list_records()
    finally:
        store.close()

    rows, by_extension = scan(records, tool.pattern)
    write_rows_csv(rows, Path(args.output))

    print(f"Posts scanned: {len(records)}")
    print(f"Posts with resources: {len({r[0] for r in rows})}")
    print(f"Resources found: {len(rows)}")
    for ext, count in sorted(by_extension.items(), key=lambda x: (-x[1], x[0])):
        print(f"  .{ext}: {count}")
    print(f"File written: {args.output}")


if __name__ == "__main__":
    main()
