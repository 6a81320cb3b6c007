"""
Rackspace Cloud Files helper for the resource migration.

This module implements the low-level interactions with the Cloud Files
(OpenStack Swift) REST API: API-key authentication against the Rackspace
identity service, lookup of the CDN URL of the target container, object
uploads and deletions.  Uploaded objects are addressed through the CDN, so
:meth:`CloudFilesObjectStore.put_object` returns a public CDN URL and
:meth:`CloudFilesObjectStore.delete_object` accepts one.

Usage example::

    store = CloudFilesObjectStore(username="me", api_key="...", container="media")
    store.authenticate()
    url = store.put_object(b"...", "42_screenshot.png")
    store.delete_object(url)

No retries are attempted: a failed call raises :class:`ObjectStoreError` and
the caller decides what to do with it.
"""

from __future__ import annotations

import mimetypes
from typing import Any, BinaryIO, Dict, Optional, Union
from urllib.parse import quote, unquote

import requests

from resource_migrator.utils.errors import ObjectStoreAuthError, ObjectStoreError
from resource_migrator.utils.log import log_message

IDENTITY_URL = "https://identity.api.rackspacecloud.com/v2.0/tokens"


class CloudFilesObjectStore:
    """
    Uploads objects to a single Cloud Files container.

    :meth:`authenticate` must be called once before any upload; it stores the
    auth token, the storage and CDN endpoints for ``region`` and the CDN URL of
    the container.  The instance is then shared read-only between workers.
    """

    def __init__(
        self,
        username: str,
        api_key: str,
        container: str,
        *,
        region: str = "DFW",
        identity_url: str = IDENTITY_URL,
        use_ssl_cdn: bool = False,
        timeout: float = 60.0,
    ) -> None:
        self.username = username
        self.api_key = api_key
        self.container = container
        self.region = region
        self.identity_url = identity_url
        self.use_ssl_cdn = use_ssl_cdn
        self.timeout = timeout
        self.token: Optional[str] = None
        self.storage_url: Optional[str] = None
        self.cdn_management_url: Optional[str] = None
        self.cdn_url: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "CloudFilesObjectStore":
        return cls(
            cfg.get("username", ""),
            cfg.get("api_key", ""),
            cfg.get("container", ""),
            region=cfg.get("region", "DFW"),
            identity_url=cfg.get("identity_url", IDENTITY_URL),
            use_ssl_cdn=bool(cfg.get("use_ssl_cdn", False)),
            timeout=float(cfg.get("timeout", 60.0)),
        )

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            raise ObjectStoreError("Object store is not authenticated")
        return {"X-Auth-Token": self.token}

    def _endpoint(self, catalog: Any, service: str) -> str:
        for entry in catalog or []:
            if entry.get("name") != service:
                continue
            for endpoint in entry.get("endpoints", []):
                if (endpoint.get("region") or "").upper() == self.region.upper():
                    return endpoint["publicURL"].rstrip("/")
        raise ObjectStoreAuthError(f"Service '{service}' not available in region {self.region}")

    def authenticate(self) -> None:
        """Obtain an auth token and resolve the container's CDN URL."""
        if not self.username or not self.api_key:
            raise ObjectStoreAuthError("Cloud Files username or API key missing")
        if not self.container:
            raise ObjectStoreAuthError("Cloud Files container name missing")
        payload = {
            "auth": {
                "RAX-KSKEY:apiKeyCredentials": {
                    "username": self.username,
                    "apiKey": self.api_key,
                }
            }
        }
        try:
            resp = requests.post(self.identity_url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            access = resp.json()["access"]
            self.token = access["token"]["id"]
        except requests.HTTPError as e:
            raise ObjectStoreAuthError(f"Authentication refused: {e}") from e
        except (requests.RequestException, ValueError, KeyError) as e:
            raise ObjectStoreAuthError(f"Authentication failed: {e}") from e

        catalog = access.get("serviceCatalog")
        self.storage_url = self._endpoint(catalog, "cloudFiles")
        self.cdn_management_url = self._endpoint(catalog, "cloudFilesCDN")
        log_message("NET: Cloud Files auth token received")
        self.cdn_url = self.get_cdn_url()

    def get_cdn_url(self) -> str:
        """Return the public CDN URL of the container (``X-Cdn-Uri``)."""
        url = f"{self.cdn_management_url}/{quote(self.container)}"
        try:
            resp = requests.head(url, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ObjectStoreAuthError(f"Could not read CDN settings of '{self.container}': {e}") from e
        header = "X-Cdn-Ssl-Uri" if self.use_ssl_cdn else "X-Cdn-Uri"
        cdn_url = resp.headers.get(header)
        if not cdn_url or resp.headers.get("X-Cdn-Enabled", "True").lower() != "true":
            raise ObjectStoreAuthError(f"Container '{self.container}' is not CDN enabled")
        return cdn_url.rstrip("/")

    def object_url(self, name: str) -> str:
        return f"{self.cdn_url}/{quote(name)}"

    def object_name(self, url: str) -> str:
        """Map a CDN URL produced by :meth:`put_object` back to its object name."""
        prefix = f"{self.cdn_url}/"
        if self.cdn_url and url.startswith(prefix):
            return unquote(url[len(prefix):])
        return unquote(url.rstrip("/").rsplit("/", 1)[-1])

    def put_object(self, data: Union[bytes, BinaryIO], name: str) -> str:
        """Upload ``data`` as ``name`` and return its CDN URL."""
        content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        url = f"{self.storage_url}/{quote(self.container)}/{quote(name)}"
        try:
            resp = requests.put(
                url,
                headers={**self._headers(), "Content-Type": content_type},
                data=data,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ObjectStoreError(f"Upload of {name} failed: {e}") from e
        return self.object_url(name)

    def delete_object(self, url: str) -> None:
        name = self.object_name(url)
        try:
            resp = requests.delete(
                f"{self.storage_url}/{quote(self.container)}/{quote(name)}",
                headers=self._headers(),
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ObjectStoreError(f"Deletion of {name} failed: {e}") from e
