"""
Content transformations used by the migration pipeline.

Currently this subpackage exposes ``rewrite_content`` from
:mod:`resource_migrator.parsers.content_rewriter`.
"""

from .content_rewriter import rewrite_content

__all__ = ["rewrite_content"]
