"""In-memory stand-ins for the content store, object store and fetcher."""

import threading
from typing import Dict, List, Optional

from resource_migrator.migrators.resource_migrator import object_name_for, resolve_reference
from resource_migrator.models import Record
from resource_migrator.utils.errors import (
    ContentStoreError,
    FetchError,
    ObjectStoreError,
    PreFlightCheckError,
)

CDN = "https://cdn.example.com"


def cdn_location(record_id, reference: str) -> str:
    """Where FakeObjectStore serves the object migrated for ``reference``."""
    return f"{CDN}/{object_name_for(record_id, resolve_reference(reference))}"


class FakeFetcher:
    def __init__(self, missing=()):
        self.missing = set(missing)
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        if any(m in url for m in self.missing):
            raise FetchError(f"404 for {url}")
        return f"bytes of {url}".encode()


class FakeObjectStore:
    def __init__(self, failing_uploads=(), failing_deletes=False, auth_error: Optional[Exception] = None):
        self.failing_uploads = set(failing_uploads)
        self.failing_deletes = failing_deletes
        self.auth_error = auth_error
        self.authenticated = False
        self.objects: Dict[str, bytes] = {}
        self.buffers = []
        self.deleted: List[str] = []
        self._lock = threading.Lock()

    def authenticate(self) -> None:
        if self.auth_error is not None:
            raise self.auth_error
        self.authenticated = True

    def put_object(self, data, name: str) -> str:
        self.buffers.append(data)
        payload = data.read() if hasattr(data, "read") else data
        if any(f in name for f in self.failing_uploads):
            raise ObjectStoreError(f"upload of {name} refused")
        with self._lock:
            self.objects[name] = payload
        return f"{CDN}/{name}"

    def delete_object(self, url: str) -> None:
        with self._lock:
            self.deleted.append(url)
        if self.failing_deletes:
            raise ObjectStoreError(f"delete of {url} refused")


class FakeContentStore:
    def __init__(self, records=(), failing_updates=(), connect_error=False, list_error=False):
        self.records = {r.id: r.content for r in records}
        self._order = [r.id for r in records]
        self.failing_updates = set(failing_updates)
        self.connect_error = connect_error
        self.list_error = list_error
        self.updates: List[tuple] = []
        self.list_calls = 0
        self.closed = False
        self._lock = threading.Lock()

    def connect(self) -> None:
        if self.connect_error:
            raise PreFlightCheckError("database unreachable")

    def list_records(self) -> List[Record]:
        self.list_calls += 1
        if self.list_error:
            raise ContentStoreError("SELECT failed")
        return [Record(id=i, content=self.records[i]) for i in self._order]

    def update_record(self, record_id, content: str) -> None:
        with self._lock:
            self.updates.append((record_id, content))
        if record_id in self.failing_updates:
            raise ContentStoreError(f"lock wait timeout on {record_id}")
        self.records[record_id] = content

    def close(self) -> None:
        self.closed = True
