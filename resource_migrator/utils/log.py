"""
Plain-text migration log.

Messages are echoed to stdout as ``[LEVEL] message`` and appended, with a
timestamp, to ``migration.log`` inside the report directory configured in
:mod:`resource_migrator.utils.errors`.
"""

from __future__ import annotations

import os
import sys
from datetime import datetime

from . import errors


def log_message(message: str, level: str = "INFO") -> None:
    """Log migration messages"""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{level}] {message}")

    # Save to log file
    try:
        with errors._write_lock:
            os.makedirs(errors.REPORT_DIR, exist_ok=True)
            with open(os.path.join(errors.REPORT_DIR, "migration.log"), "a", encoding="utf-8") as f:
                f.write(f"[{timestamp}] {level}: {message}\n")
    except OSError as e:
        print(f"[WARNING] could not write migration.log: {e}", file=sys.stderr)
