"""
Exceptions and structured reporting for the resource migration.

The :mod:`resource_migrator.utils.errors` module defines the exception
hierarchy used by the collaborators and centralizes the writing of report
entries for both failed and successful operations.  Each entry is appended to
a JSON Lines file under the report directory (``reports/migration`` by
default) so that the information can be reviewed or parsed after a run.

Two reporting functions are provided:

``report_error``
    Record an error that occurred for a record.  An optional exception can be
    supplied and will be serialized to the log.

``report_ok``
    Record a successful step for a record.  Additional key/value information
    can be attached to the entry via the ``extra`` parameter.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
import sys
import threading
from typing import Any, Dict, Optional


class MigrationError(Exception):
    """Base class for every error raised by the migration."""


class MigrationAbortedError(MigrationError):
    """Fatal error raised before any record has been dispatched."""


class PreFlightCheckError(MigrationAbortedError):
    """A collaborator could not be reached or authenticated."""


class ContentStoreError(MigrationError):
    """The content store failed to list or update records."""


class ObjectStoreError(MigrationError):
    """The object store rejected an upload or a deletion."""


class ObjectStoreAuthError(ObjectStoreError):
    """The object store credentials were refused."""


class FetchError(MigrationError):
    """A resource could not be downloaded from its origin."""


# Mapping of event codes used throughout the migration to descriptive messages.
# The keys include both error and success codes as the same lookup is used by
# :func:`report_error` and :func:`report_ok`.
ERRORS: Dict[str, str] = {
    "FETCH": "Failed to download resource",
    "UPLOAD": "Failed to upload resource to the object store",
    "PERSIST": "Failed to update record in the content store",
    "COMPENSATE": "Failed to delete uploaded object after a persist failure",
    "RESOURCE_MIGRATED": "Resource migrated successfully",
    "RECORD_UPDATED": "Record updated successfully",
}

REPORT_DIR = os.path.join("reports", "migration")

_write_lock = threading.Lock()


def set_report_dir(path: str) -> None:
    """Change the directory that receives the log and JSONL report files."""
    global REPORT_DIR
    REPORT_DIR = path


def _write_jsonl(filename: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``filename``."""
    with _write_lock:
        os.makedirs(REPORT_DIR, exist_ok=True)
        with open(os.path.join(REPORT_DIR, filename), "a", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
            f.write("\n")


def _write_report(filename: str, data: Dict[str, Any]) -> None:
    # A full disk or a removed report directory must not stop the migration
    try:
        _write_jsonl(filename, data)
    except OSError as e:
        print(f"[WARNING] could not write report entry to {filename}: {e}", file=sys.stderr)


def report_error(
    code: str,
    record_id: Any,
    exc: Optional[BaseException] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an error event for the record ``record_id``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    record_id:
        Identifier of the record associated with the error.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    extra:
        Optional dictionary of additional fields (e.g. the resource reference).
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "record_id": record_id,
    }
    if extra:
        entry.update(extra)
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {message} - record {record_id}")
    _write_report("errors.jsonl", entry)


def report_ok(code: str, record_id: Any, extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for the record ``record_id``."""
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "record_id": record_id,
    }
    if extra:
        entry.update(extra)
    print(f"[OK] {message} - record {record_id}")
    _write_report("success.jsonl", entry)
