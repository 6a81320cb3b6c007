"""
Migration of a single resource reference.

:class:`ResourceMigrator` downloads one resource from the legacy host and
stores it in the object store.  It never raises: every failure becomes a
failed :class:`~resource_migrator.models.ResourceOutcome`, is logged and is
written to the error report, so that the record can carry on with its other
resources.  Each reference is attempted exactly once.
"""

from __future__ import annotations

import hashlib
import posixpath
import tempfile
from typing import Any
from urllib.parse import unquote, urlparse

from resource_migrator.models import ResourceOutcome
from resource_migrator.stores.base import Fetcher, ObjectStore
from resource_migrator.utils.errors import ObjectStoreError, report_error, report_ok
from resource_migrator.utils.log import log_message

DEFAULT_ORIGIN = "http://www.macstories.net"


def resolve_reference(reference: str, origin: str = DEFAULT_ORIGIN) -> str:
    """Turn a site-relative reference into an absolute URL on ``origin``."""
    if reference.startswith(("http://", "https://")):
        return reference
    return f"{origin.rstrip('/')}/{reference.lstrip('/')}"


def object_name_for(record_id: Any, url: str) -> str:
    """
    Name of the stored object: ``<record_id>_<digest>_<last path segment>``.

    The digest covers the whole source path, so two uploads of one record that
    share a file name (``2012/01/image.png`` and ``2013/05/image.png``) get
    different objects.
    """
    path = unquote(urlparse(url).path)
    digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:8]
    return f"{record_id}_{digest}_{posixpath.basename(path)}"


class ResourceMigrator:
    def __init__(
        self,
        fetcher: Fetcher,
        object_store: ObjectStore,
        *,
        origin: str = DEFAULT_ORIGIN,
        spool_max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.fetcher = fetcher
        self.object_store = object_store
        self.origin = origin
        self.spool_max_bytes = spool_max_bytes

    def source_for(self, reference: str) -> str:
        return resolve_reference(reference, self.origin)

    def migrate(self, record_id: Any, reference: str) -> ResourceOutcome:
        source = self.source_for(reference)
        log_message(f"NET: downloading resource {source}", level="DEBUG")
        try:
            payload = self.fetcher.fetch(source)
        except Exception as e:
            log_message(f"NET: download of {source} failed: {e}", level="ERROR")
            report_error("FETCH", record_id, e, {"reference": reference, "source": source})
            return ResourceOutcome.failure(reference, e)

        name = object_name_for(record_id, source)
        log_message(f"NET: uploading {name}", level="DEBUG")
        # Large payloads roll over to disk; the buffer is dropped on every path
        with tempfile.SpooledTemporaryFile(max_size=self.spool_max_bytes) as buffer:
            try:
                buffer.write(payload)
                buffer.seek(0)
                new_location = self.object_store.put_object(buffer, name)
                if not new_location:
                    raise ObjectStoreError(f"No URL returned for {name}")
            except Exception as e:
                log_message(f"NET: upload of {name} failed: {e}", level="ERROR")
                report_error("UPLOAD", record_id, e, {"reference": reference, "object": name})
                return ResourceOutcome.failure(reference, e)

        log_message(f"RESOURCE: {reference} -> {new_location}")
        report_ok("RESOURCE_MIGRATED", record_id, {"reference": reference, "url": new_location})
        return ResourceOutcome.success(reference, new_location)
