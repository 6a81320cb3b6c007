"""
Collaborators of the migration: the DuckDB content store holding the posts,
the Cloud Files object store receiving the resources and the HTTP fetcher
downloading them.
"""

from .content_store import WordPressContentStore
from .fetcher import HttpFetcher
from .object_store import CloudFilesObjectStore

__all__ = ["WordPressContentStore", "HttpFetcher", "CloudFilesObjectStore"]
