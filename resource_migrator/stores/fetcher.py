from __future__ import annotations

from typing import Dict, Optional

import requests

from resource_migrator.utils.errors import FetchError

DEFAULT_USER_AGENT = "wordpress-resource-migrator/1.0"


class HttpFetcher:
    """Downloads resources from the legacy host with ``requests``."""

    def __init__(self, *, timeout: float = 30.0, user_agent: str = DEFAULT_USER_AGENT,
                 headers: Optional[Dict[str, str]] = None) -> None:
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent, **(headers or {})}

    def fetch(self, url: str) -> bytes:
        """
        Return the body of ``url``.

        :raises FetchError: on network errors and non-2xx responses.
        """
        try:
            resp = requests.get(url, headers=self.headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Download of {url} failed: {e}") from e
        return resp.content
