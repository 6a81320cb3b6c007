"""
Interfaces of the collaborators injected into the migration.

Any object with the matching methods can be handed to
:class:`resource_migrator.migration_tool.ResourceMigrationTool`; the concrete
implementations live next to this module.
"""

from __future__ import annotations

from typing import Any, BinaryIO, List, Protocol, Union

from resource_migrator.models import Record


class ContentStore(Protocol):
    def connect(self) -> None: ...

    def list_records(self) -> List[Record]: ...

    def update_record(self, record_id: Any, content: str) -> None: ...


class ObjectStore(Protocol):
    def authenticate(self) -> None: ...

    def put_object(self, data: Union[bytes, BinaryIO], name: str) -> str: ...

    def delete_object(self, url: str) -> None: ...


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...
