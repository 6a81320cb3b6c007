"""
Discovery of migratable resources inside post content.

A resource is an image or archive stored under one of the legacy upload
prefixes of the WordPress site, written either as a site-relative path
(``/wp-content/uploads/2013/05/shot.png``) or as an absolute URL on the
legacy host (``http://www.macstories.net/stuff/beta.zip``).
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern

DEFAULT_HOST = "macstories.net"
DEFAULT_PATH_PREFIXES = ("stuff", "wp-content/uploads")
DEFAULT_EXTENSIONS = ("jpe?g", "gif", "png", "zip", "rar", "gz")


def build_resource_pattern(
    host: str = DEFAULT_HOST,
    path_prefixes: Iterable[str] = DEFAULT_PATH_PREFIXES,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Pattern[str]:
    """Compile the regular expression that recognizes resource references.

    ``extensions`` are regular expression fragments (``jpe?g`` is allowed);
    ``host`` and ``path_prefixes`` are matched literally.  The path part is
    matched lazily and never crosses whitespace, quotes or angle brackets, so
    two resources inside the same HTML attribute list stay separate.
    """
    prefixes = "|".join(re.escape(p.strip("/")) for p in path_prefixes)
    exts = "|".join(extensions)
    host_part = rf"(?:https?://(?:www\.)?{re.escape(host)})?" if host else ""
    return re.compile(rf"{host_part}/(?:{prefixes})/[^\s\"'<>]+?\.(?:{exts})")


DEFAULT_RESOURCE_PATTERN = build_resource_pattern()


def extract_resources(content: Optional[str], pattern: Optional[Pattern[str]] = None) -> List[str]:
    """Return the unique resource references found in ``content``.

    References are returned in the order of their first occurrence.  Content
    without any match (or no content at all) yields an empty list.
    """
    if not content:
        return []
    pattern = pattern or DEFAULT_RESOURCE_PATTERN
    # dict keeps first-seen order while dropping duplicates
    return list(dict.fromkeys(m.group(0) for m in pattern.finditer(content)))
