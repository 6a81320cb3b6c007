import csv
import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

import main as entry_point
from fakes import FakeContentStore, FakeFetcher, FakeObjectStore, cdn_location
from resource_migrator.migration_tool import ResourceMigrationTool, format_summary
from resource_migrator.migrators.record_processor import RecordProcessor
from resource_migrator.models import GlobalStats, Record
from resource_migrator.utils.errors import MigrationAbortedError, ObjectStoreAuthError, PreFlightCheckError

RECORDS = [
    Record(id=1, content="see /stuff/a.jpg and /stuff/a.jpg"),
    Record(id=2, content="no resources here"),
    Record(id=3, content='<img src="/stuff/ok.png"><img src="/stuff/broken.png">'),
    Record(id=4, content="/wp-content/uploads/x.zip http://www.macstories.net/stuff/y.gif"),
    Record(id=5, content="/stuff/missing.png"),
]


def make_tool(tmp_path, records=RECORDS, migration=None, **kwargs):
    config = {
        "migration": {
            "report_dir": str(tmp_path / "reports"),
            "resource_map_csv": str(tmp_path / "resource_map.csv"),
            **(migration or {}),
        }
    }
    content_store = kwargs.pop("content_store", None) or FakeContentStore(records, failing_updates=[4])
    object_store = kwargs.pop("object_store", None) or FakeObjectStore(failing_uploads=["broken.png"])
    fetcher = kwargs.pop("fetcher", None) or FakeFetcher(missing=["missing.png"])
    tool = ResourceMigrationTool(config, content_store=content_store, object_store=object_store, fetcher=fetcher)
    return tool, content_store, object_store


def test_global_stats_are_the_sum_of_record_stats(tmp_path):
    tool, content_store, object_store = make_tool(tmp_path)

    stats = tool.migrate_records(content_store.list_records())

    assert stats == GlobalStats(
        found=6, processed=4, failed=2, records=5, persisted=3, degraded=1, no_resources=1
    )
    assert stats.processed + stats.failed == stats.found
    # record 4 failed to persist: its two uploads were removed again
    assert sorted(object_store.deleted) == sorted([cdn_location(4, "/wp-content/uploads/x.zip"),
                                                 cdn_location(4, "http://www.macstories.net/stuff/y.gif")])
    assert content_store.records[4] == RECORDS[3].content
    assert 2 not in [record_id for record_id, _ in content_store.updates]


@pytest.mark.parametrize("record_workers,resource_workers", [(1, 1), (2, 3), (16, 32)])
def test_totals_do_not_depend_on_concurrency(tmp_path, record_workers, resource_workers):
    tool, content_store, _ = make_tool(
        tmp_path,
        migration={"max_record_workers": record_workers, "max_resource_workers": resource_workers},
    )
    stats = tool.migrate_records(content_store.list_records())
    assert (stats.found, stats.processed, stats.failed) == (6, 4, 2)


def test_run_connects_migrates_and_closes(tmp_path):
    tool, content_store, object_store = make_tool(tmp_path)

    stats = tool.run()

    assert object_store.authenticated
    assert content_store.closed
    assert stats.records == 5
    with open(tmp_path / "resource_map.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert {"RecordID": "1", "OldURL": "http://www.macstories.net/stuff/a.jpg",
            "NewURL": cdn_location(1, "/stuff/a.jpg")} in rows
    # degraded records are not part of the map
    assert all(row["RecordID"] != "4" for row in rows)


def test_limit_restricts_the_records(tmp_path):
    tool, _, _ = make_tool(tmp_path, migration={"limit": 2})
    stats = tool.run()
    assert stats.records == 2


def test_connection_failure_aborts_before_dispatch(tmp_path):
    content_store = FakeContentStore(RECORDS, connect_error=True)
    fetcher = FakeFetcher()
    tool, _, _ = make_tool(tmp_path, content_store=content_store, fetcher=fetcher)

    with pytest.raises(PreFlightCheckError):
        tool.run()
    assert content_store.list_calls == 0
    assert fetcher.calls == []
    assert content_store.updates == []


def test_object_store_auth_failure_is_fatal(tmp_path):
    object_store = FakeObjectStore(auth_error=ObjectStoreAuthError("401"))
    tool, content_store, _ = make_tool(tmp_path, object_store=object_store)

    with pytest.raises(MigrationAbortedError):
        tool.run()
    assert content_store.list_calls == 0
    assert content_store.closed


def test_listing_failure_is_fatal(tmp_path):
    content_store = FakeContentStore(RECORDS, list_error=True)
    tool, _, _ = make_tool(tmp_path, content_store=content_store)

    with pytest.raises(MigrationAbortedError):
        tool.run()
    assert content_store.updates == []
    assert content_store.closed


def test_config_file_values_and_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "migration": {"max_resource_workers": 3, "report_dir": str(tmp_path / "r")},
        "object_store": {"container": "media"},
    }), encoding="utf-8")

    tool = ResourceMigrationTool(config_file=str(path))

    assert tool.max_resource_workers == 3
    assert tool.max_record_workers == 8
    assert tool.object_store.container == "media"
    assert tool.content_store.database == "data/migration.duckdb"


def test_summary_mentions_totals_and_time():
    summary = format_summary(GlobalStats(found=3, processed=2, failed=1, records=2, persisted=1,
                                         no_resources=1), 12.7)
    assert "PROCESS COMPLETED" in summary
    assert "12 seconds" in summary
    assert "found: 3 | processed: 2 | failed: 1" in summary


def test_main_exits_non_zero_when_store_is_unreachable(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "content_store": {"database": str(tmp_path / "absent.duckdb")},
        "migration": {"report_dir": str(tmp_path / "reports")},
    }), encoding="utf-8")

    assert entry_point.main(["--config", str(path)]) == 1
    log = (tmp_path / "reports" / "migration.log").read_text(encoding="utf-8")
    assert "PROCESS ABORTED" in log


def test_crashing_record_worker_counts_as_degraded(tmp_path, monkeypatch):
    process = RecordProcessor.process

    def crash_on_record_3(self, record):
        if record.id == 3:
            raise RuntimeError("worker died")
        return process(self, record)

    monkeypatch.setattr(RecordProcessor, "process", crash_on_record_3)
    tool, content_store, _ = make_tool(tmp_path)

    stats = tool.migrate_records(content_store.list_records())

    assert stats == GlobalStats(
        found=4, processed=3, failed=1, records=5, persisted=2, degraded=2, no_resources=1
    )


def test_unwritable_report_directory_does_not_stop_the_run(tmp_path):
    blocked = tmp_path / "reports-on-a-full-disk"
    blocked.write_text("")
    tool, content_store, object_store = make_tool(tmp_path, migration={"report_dir": str(blocked)})

    stats = tool.run()

    assert stats == GlobalStats(
        found=6, processed=4, failed=2, records=5, persisted=3, degraded=1, no_resources=1
    )
    assert len(object_store.deleted) == 2
    assert content_store.closed
