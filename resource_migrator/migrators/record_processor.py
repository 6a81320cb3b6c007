"""
Per-record orchestration of the resource migration.

For one record the :class:`RecordProcessor` extracts the resource
references, migrates all of them on the shared resource pool, waits for every
outcome, rewrites the content with the successful ones and writes it back to
the content store.  When that write fails the objects uploaded for the record
are deleted again (best effort) and the record is reported as degraded; its
content in the store stays the original one.

The processor never raises.  Whatever happens to a resource or to the final
update only shows up in the returned :class:`RecordResult`.
"""

from __future__ import annotations

from concurrent.futures import Executor, as_completed
from typing import Dict, List, Optional, Pattern

from resource_migrator.extractors.resource_extractor import extract_resources
from resource_migrator.migrators.resource_migrator import ResourceMigrator
from resource_migrator.models import Record, RecordResult, RecordState, RecordStats, ResourceOutcome
from resource_migrator.parsers.content_rewriter import rewrite_content
from resource_migrator.stores.base import ContentStore, ObjectStore
from resource_migrator.utils.errors import report_error, report_ok
from resource_migrator.utils.log import log_message


class RecordProcessor:
    def __init__(
        self,
        migrator: ResourceMigrator,
        content_store: ContentStore,
        object_store: ObjectStore,
        resource_executor: Executor,
        *,
        pattern: Optional[Pattern[str]] = None,
    ) -> None:
        self.migrator = migrator
        self.content_store = content_store
        self.object_store = object_store
        self.resource_executor = resource_executor
        self.pattern = pattern

    def process(self, record: Record) -> RecordResult:
        stats = RecordStats()
        updates: Dict[str, str] = {}
        try:
            return self._process(record, stats, updates)
        except Exception as e:
            # Reached only when a step failed before the record was written back
            self.compensate(record, updates)
            log_message(f"POST: processing of post {record.id} failed: {e}", level="ERROR")
            return RecordResult(record_id=record.id, state=RecordState.DEGRADED, stats=stats, updates=updates)

    def _process(self, record: Record, stats: RecordStats, updates: Dict[str, str]) -> RecordResult:
        references = extract_resources(record.content, self.pattern)
        if not references:
            log_message(f"POST: Post {record.id} has no resources")
            return RecordResult(record_id=record.id, state=RecordState.NO_RESOURCES)

        # A relative path and its absolute URL name the same file: one dispatch, both mapped
        aliases: Dict[str, List[str]] = {}
        for reference in references:
            aliases.setdefault(self._source_for(reference), []).append(reference)
        futures = {
            self.resource_executor.submit(self.migrator.migrate, record.id, group[0]): group
            for group in aliases.values()
        }
        # Only this thread touches stats/updates, and only with settled outcomes
        for future in as_completed(futures):
            group = futures[future]
            try:
                outcome = future.result()
            except Exception as e:
                log_message(f"RESOURCE: {group[0]} crashed: {e}", level="ERROR")
                outcome = ResourceOutcome.failure(group[0], e)
            for reference in group:
                stats.record(outcome)
                if outcome.succeeded:
                    updates[reference] = outcome.new_location

        new_content = rewrite_content(record.content, updates)
        try:
            self.content_store.update_record(record.id, new_content)
        except Exception as e:
            self.compensate(record, updates)
            try:
                log_message(f"DB: update of post {record.id} failed: {e}", level="ERROR")
                report_error("PERSIST", record.id, e, {"uploaded": list(updates.values())})
            except Exception as report_exc:
                print(f"[WARNING] could not report failed update of post {record.id}: {report_exc}")
            return RecordResult(record_id=record.id, state=RecordState.DEGRADED, stats=stats, updates=updates)

        result = RecordResult(record_id=record.id, state=RecordState.PERSISTED, stats=stats, updates=updates)
        try:
            log_message(f"DB: correctly updated post {record.id} ({len(updates)} resources rewritten)")
            report_ok("RECORD_UPDATED", record.id, {"found": stats.found, "processed": stats.processed,
                                                     "failed": stats.failed})
        except Exception as e:
            # The record is stored; its objects are referenced and must stay
            print(f"[WARNING] could not report update of post {record.id}: {e}")
        return result

    def _source_for(self, reference: str) -> str:
        source_for = getattr(self.migrator, "source_for", None)
        return source_for(reference) if source_for is not None else reference

    def compensate(self, record: Record, updates: Dict[str, str]) -> None:
        """Delete the objects uploaded for ``record``; failures are only logged."""
        if not updates:
            return
        futures = {
            self.resource_executor.submit(self.object_store.delete_object, url): url
            for url in dict.fromkeys(updates.values())
        }
        for future in as_completed(futures):
            url = futures[future]
            try:
                future.result()
            except Exception as e:
                log_message(f"NET: couldn't delete resource {url}: {e}", level="ERROR")
                report_error("COMPENSATE", record.id, e, {"url": url})
            else:
                log_message(f"NET: deleted orphaned resource {url}", level="DEBUG")
