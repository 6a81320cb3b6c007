"""
Extractors for post content.

This subpackage finds the resource references (legacy image and archive
URLs) embedded in a post's HTML.
"""

from .resource_extractor import DEFAULT_RESOURCE_PATTERN, build_resource_pattern, extract_resources

__all__ = ["DEFAULT_RESOURCE_PATTERN", "build_resource_pattern", "extract_resources"]
