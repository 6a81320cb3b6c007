"""
High-level orchestration of the WordPress resource migration.

This module defines a :class:`ResourceMigrationTool` class that ties
together the extractor, the migrators, the rewriter and the stores into a
complete pipeline.  It connects to the content and object stores, lists the
posts, migrates every post concurrently and returns the aggregated
statistics.  A CSV mapping old resource URLs to their CDN copies is written
at the end.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``content_store`` section describes the DuckDB database,
the ``object_store`` section the Cloud Files account (credentials fall back
to the ``RACKSPACE_USERNAME`` / ``RACKSPACE_API_KEY`` environment variables)
and the ``migration`` section the legacy site and the concurrency bounds.
"""

from __future__ import annotations

import json
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional

from resource_migrator.extractors.resource_extractor import (
    DEFAULT_EXTENSIONS,
    DEFAULT_HOST,
    DEFAULT_PATH_PREFIXES,
    build_resource_pattern,
)
from resource_migrator.migrators.record_processor import RecordProcessor
from resource_migrator.migrators.resource_migrator import DEFAULT_ORIGIN, ResourceMigrator
from resource_migrator.models import GlobalStats, Record, RecordResult, RecordState
from resource_migrator.stores.base import ContentStore, Fetcher, ObjectStore
from resource_migrator.stores.content_store import WordPressContentStore
from resource_migrator.stores.fetcher import HttpFetcher
from resource_migrator.stores.object_store import CloudFilesObjectStore
from resource_migrator.utils.errors import MigrationAbortedError, MigrationError, set_report_dir
from resource_migrator.utils.log import log_message
from resource_migrator.utils.pre_flight_checks import run_pre_flight_checks
from resource_migrator.utils.resource_map import generate_resource_map_csv


def format_summary(stats: GlobalStats, elapsed: float) -> str:
    return (
        "PROCESS COMPLETED\n"
        f"It took roughly {int(elapsed)} seconds\n"
        f"Records: {stats.records} (updated: {stats.persisted}, degraded: {stats.degraded}, "
        f"without resources: {stats.no_resources})\n"
        f"Resources found: {stats.found} | processed: {stats.processed} | failed: {stats.failed}"
    )


class ResourceMigrationTool:
    """
    Encapsulates all state and behavior required to migrate the resources
    of a set of WordPress posts.  The stores and the fetcher can be injected;
    when omitted they are built from the configuration.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        content_store: Optional[ContentStore] = None,
        object_store: Optional[ObjectStore] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            # Default configuration
            config = {}

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("content_store", {})
        config["content_store"].setdefault("database", "data/migration.duckdb")
        config["content_store"].setdefault("table", "wp_posts")
        config["content_store"].setdefault("id_column", "ID")
        config["content_store"].setdefault("content_column", "post_content")

        config.setdefault("object_store", {})
        config["object_store"].setdefault("username", os.getenv("RACKSPACE_USERNAME", ""))
        config["object_store"].setdefault("api_key", os.getenv("RACKSPACE_API_KEY", ""))
        config["object_store"].setdefault("container", os.getenv("RACKSPACE_CONTAINER", ""))
        config["object_store"].setdefault("region", "DFW")
        config["object_store"].setdefault("use_ssl_cdn", False)
        config["object_store"].setdefault("timeout", 60)

        config.setdefault("migration", {})
        config["migration"].setdefault("origin", DEFAULT_ORIGIN)
        config["migration"].setdefault("host", DEFAULT_HOST)
        config["migration"].setdefault("path_prefixes", list(DEFAULT_PATH_PREFIXES))
        config["migration"].setdefault("extensions", list(DEFAULT_EXTENSIONS))
        config["migration"].setdefault("max_record_workers", 8)
        config["migration"].setdefault("max_resource_workers", 16)
        config["migration"].setdefault("fetch_timeout", 30)
        config["migration"].setdefault("spool_max_bytes", 5 * 1024 * 1024)
        config["migration"].setdefault("limit", None)
        config["migration"].setdefault("report_dir", os.path.join("reports", "migration"))
        config["migration"].setdefault("resource_map_csv", os.path.join("reports", "resource_map.csv"))

        self.config = config
        migration = config["migration"]
        set_report_dir(migration["report_dir"])

        self.content_store = content_store or WordPressContentStore.from_config(config["content_store"])
        self.object_store = object_store or CloudFilesObjectStore.from_config(config["object_store"])
        self.fetcher = fetcher or HttpFetcher(timeout=float(migration["fetch_timeout"]))
        self.pattern = build_resource_pattern(
            migration["host"], migration["path_prefixes"], migration["extensions"]
        )
        self.max_record_workers = max(1, int(migration["max_record_workers"]))
        self.max_resource_workers = max(1, int(migration["max_resource_workers"]))

    def log_message(self, message: str, level: str = "INFO") -> None:
        log_message(message, level)

    def connect(self) -> None:
        """Fatal pre-dispatch step: reach both stores or raise."""
        run_pre_flight_checks(self.content_store, self.object_store)

    def list_records(self) -> List[Record]:
        try:
            records = self.content_store.list_records()
        except MigrationError as e:
            raise MigrationAbortedError(f"Could not list records: {e}") from e
        limit = self.config["migration"].get("limit")
        if limit is not None:
            records = records[: int(limit)]
        return records

    def migrate_records(self, records: List[Record]) -> GlobalStats:
        """
        Migrate the resources of every record and return the totals.

        Records are processed on a pool of ``max_record_workers`` threads; the
        resources of all records share a second pool of
        ``max_resource_workers`` threads.  This method does not fail once
        dispatch has started: degraded records are part of the tally.

        :param records: The records listed from the content store.
        :return: The sum of every record's statistics.
        """
        stats = GlobalStats()
        results: List[RecordResult] = []
        migration = self.config["migration"]
        self.log_message(f"Migrating resources of {len(records)} posts.")

        with ThreadPoolExecutor(max_workers=self.max_resource_workers,
                                thread_name_prefix="resource") as resource_pool, \
                ThreadPoolExecutor(max_workers=self.max_record_workers,
                                   thread_name_prefix="record") as record_pool:
            migrator = ResourceMigrator(
                self.fetcher,
                self.object_store,
                origin=migration["origin"],
                spool_max_bytes=int(migration["spool_max_bytes"]),
            )
            processor = RecordProcessor(
                migrator, self.content_store, self.object_store, resource_pool, pattern=self.pattern
            )
            futures = {record_pool.submit(processor.process, record): record for record in records}
            for future in as_completed(futures):
                record = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    self.log_message(f"POST: processing of post {record.id} crashed: {e}", "ERROR")
                    result = RecordResult(record_id=record.id, state=RecordState.DEGRADED)
                results.append(result)
                stats.add(result)

        self.write_resource_map(results)
        return stats

    def write_resource_map(self, results: List[RecordResult]) -> None:
        out_path = self.config["migration"].get("resource_map_csv")
        if not out_path:
            return
        rows = [
            {"RecordID": str(result.record_id), "OldURL": old, "NewURL": new}
            for result in results
            if result.state is RecordState.PERSISTED
            for old, new in result.updates.items()
        ]
        try:
            generate_resource_map_csv(rows, origin=self.config["migration"]["origin"], out_path=out_path)
            self.log_message(f"Resource map CSV generated with {len(rows)} entries")
        except OSError as e:
            self.log_message(f"Failed to generate resource map: {e}", "ERROR")

    def run(self) -> GlobalStats:
        """
        Connect, list every record and migrate them.

        :raises MigrationAbortedError: when a store cannot be reached or the
            records cannot be listed.  Nothing has been dispatched then.
        """
        started = time.monotonic()
        try:
            self.connect()
            records = self.list_records()
            self.log_message(f"Found a total of {len(records)} posts.")
            stats = self.migrate_records(records)
        finally:
            close = getattr(self.content_store, "close", None)
            if close is not None:
                close()
        self.log_message(format_summary(stats, time.monotonic() - started))
        return stats
