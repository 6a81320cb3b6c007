import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fakes import FakeFetcher, FakeObjectStore, cdn_location
from resource_migrator.migrators.resource_migrator import (
    ResourceMigrator,
    object_name_for,
    resolve_reference,
)


def test_resolve_reference_prefixes_relative_paths_only():
    assert resolve_reference("/stuff/a.jpg") == "http://www.macstories.net/stuff/a.jpg"
    assert resolve_reference("/stuff/a.jpg", "https://old.example.com/") == "https://old.example.com/stuff/a.jpg"
    assert resolve_reference("https://macstories.net/stuff/a.jpg") == "https://macstories.net/stuff/a.jpg"


def test_object_name_is_scoped_by_record():
    name = object_name_for(42, "http://www.macstories.net/wp-content/uploads/2012/01/a.png")
    assert name.startswith("42_")
    assert name.endswith("_a.png")
    assert object_name_for("7", "http://host/stuff/My%20Pic.png").endswith("_My Pic.png")
    assert object_name_for(43, "http://www.macstories.net/wp-content/uploads/2012/01/a.png") != name


def test_object_name_tells_apart_files_with_the_same_name():
    first = object_name_for(42, "http://www.macstories.net/wp-content/uploads/2012/01/image.png")
    second = object_name_for(42, "http://www.macstories.net/wp-content/uploads/2013/05/image.png")
    assert first != second
    # the name only depends on the path, so both URL forms of a file agree
    assert object_name_for(42, "https://macstories.net/wp-content/uploads/2012/01/image.png") == first


def test_successful_migration():
    fetcher = FakeFetcher()
    store = FakeObjectStore()
    outcome = ResourceMigrator(fetcher, store).migrate(42, "/stuff/a.jpg")

    assert outcome.succeeded
    assert outcome.reference == "/stuff/a.jpg"
    assert outcome.new_location == cdn_location(42, "/stuff/a.jpg")
    assert fetcher.calls == ["http://www.macstories.net/stuff/a.jpg"]
    source = "http://www.macstories.net/stuff/a.jpg"
    assert store.objects[object_name_for(42, source)] == b"bytes of " + source.encode()


def test_fetch_failure_is_an_outcome_not_an_exception(report_dir):
    store = FakeObjectStore()
    outcome = ResourceMigrator(FakeFetcher(missing=["a.jpg"]), store).migrate(1, "/stuff/a.jpg")

    assert not outcome.succeeded
    assert outcome.new_location is None
    assert "404" in outcome.error
    assert store.objects == {}
    entries = [json.loads(line) for line in (report_dir / "errors.jsonl").read_text().splitlines()]
    assert entries[0]["code"] == "FETCH"
    assert entries[0]["reference"] == "/stuff/a.jpg"


def test_upload_failure_releases_the_buffer():
    store = FakeObjectStore(failing_uploads=["a.jpg"])
    outcome = ResourceMigrator(FakeFetcher(), store).migrate(1, "/stuff/a.jpg")

    assert not outcome.succeeded
    assert "refused" in outcome.error
    assert store.buffers[0].closed


def test_buffer_is_released_after_success_too():
    store = FakeObjectStore()
    ResourceMigrator(FakeFetcher(), store, spool_max_bytes=4).migrate(1, "/stuff/a.jpg")
    assert store.buffers[0].closed


def test_missing_url_from_store_counts_as_failure():
    class NoUrlStore(FakeObjectStore):
        def put_object(self, data, name):
            return None

    outcome = ResourceMigrator(FakeFetcher(), NoUrlStore()).migrate(1, "/stuff/a.jpg")
    assert not outcome.succeeded
