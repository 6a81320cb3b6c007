"""
DuckDB-backed WordPress content store.

The migration database holds a copy of the ``wp_posts`` table (see
``scripts/initialize_database.py``).  Only the identifier and the HTML body
columns are read and written.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional

import duckdb

from resource_migrator.models import Record
from resource_migrator.utils.errors import ContentStoreError, PreFlightCheckError
from resource_migrator.utils.log import log_message

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _quote_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


class WordPressContentStore:
    """
    Reads and updates post content in a DuckDB database.

    A single connection is opened by :meth:`connect`; every query runs on its
    own cursor so that concurrent record workers never share one.
    """

    def __init__(
        self,
        database: str = "data/migration.duckdb",
        *,
        table: str = "wp_posts",
        id_column: str = "ID",
        content_column: str = "post_content",
        read_only: bool = False,
    ) -> None:
        self.database = database
        self.read_only = read_only
        self._table = _quote_identifier(table)
        self._id = _quote_identifier(id_column)
        self._content = _quote_identifier(content_column)
        self._con: Optional[duckdb.DuckDBPyConnection] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WordPressContentStore":
        return cls(
            cfg.get("database", "data/migration.duckdb"),
            table=cfg.get("table", "wp_posts"),
            id_column=cfg.get("id_column", "ID"),
            content_column=cfg.get("content_column", "post_content"),
        )

    def connect(self) -> None:
        """Open the database.  Raises :class:`PreFlightCheckError` on failure."""
        if self._con is not None:
            return
        if self.database != ":memory:" and not os.path.exists(self.database):
            raise PreFlightCheckError(f"Content database not found: {self.database}")
        try:
            self._con = duckdb.connect(database=self.database, read_only=self.read_only)
            self._con.execute(f"SELECT {self._id}, {self._content} FROM {self._table} LIMIT 0")
        except duckdb.Error as e:
            self.close()
            raise PreFlightCheckError(f"Could not open content store {self.database}: {e}") from e
        log_message(f"DB: connection established ({self.database})")

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        if self._con is None:
            raise ContentStoreError("Content store is not connected")
        return self._con

    def list_records(self) -> List[Record]:
        cur = self.connection.cursor()
        try:
            rows = cur.execute(
                f"SELECT {self._id}, {self._content} FROM {self._table} ORDER BY {self._id}"
            ).fetchall()
        except duckdb.Error as e:
            raise ContentStoreError(f"Could not list records: {e}") from e
        finally:
            cur.close()
        return [Record(id=row[0], content=row[1]) for row in rows]

    def update_record(self, record_id: Any, content: str) -> None:
        cur = self.connection.cursor()
        try:
            result = cur.execute(
                f"UPDATE {self._table} SET {self._content} = ? WHERE {self._id} = ?",
                [content, record_id],
            ).fetchone()
        except duckdb.Error as e:
            raise ContentStoreError(f"Update of record {record_id} failed: {e}") from e
        finally:
            cur.close()
        if result is not None and result[0] == 0:
            raise ContentStoreError(f"Record {record_id} does not exist")

    def close(self) -> None:
        if self._con is not None:
            self._con.close()
            self._con = None
            log_message("DB: connection closed")
