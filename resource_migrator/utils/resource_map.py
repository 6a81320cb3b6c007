"""
Generation of resource mapping CSV files.

The :func:`generate_resource_map_csv` helper writes a CSV file containing the
mapping of legacy resource URLs to their new CDN counterparts for every record
that was updated.  The resulting file can be used to configure redirects on
the legacy host so that hot-linked images keep working after migration.
"""

from __future__ import annotations

import csv
import os
from typing import Dict, Iterable


def generate_resource_map_csv(
    rows: Iterable[Dict[str, str]], *, origin: str = "", out_path: str = "reports/resource_map.csv"
) -> str:
    """Generate a CSV mapping old resource URLs to new CDN URLs.

    Parameters
    ----------
    rows:
        Iterable of dictionaries with ``RecordID``, ``OldURL`` and ``NewURL``
        keys.
    origin:
        Base URL of the legacy site.  Relative ``OldURL`` values are prefixed
        with it so that every row holds an absolute URL.
    out_path:
        Location of the CSV file to be written.  The parent directory is
        created automatically.

    Returns
    -------
    str
        The path of the generated CSV file.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["RecordID", "OldURL", "NewURL"])
        for row in rows:
            old_url = row.get("OldURL", "")
            if old_url.startswith("/") and origin:
                old_url = f"{origin.rstrip('/')}{old_url}"
            writer.writerow([row.get("RecordID", ""), old_url, row.get("NewURL", "")])
    return out_path
