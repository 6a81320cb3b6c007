from __future__ import annotations

import re
from typing import Mapping


def rewrite_content(content: str, update_map: Mapping[str, str]) -> str:
    """
    Replace every occurrence of each key of ``update_map`` with its value.

    All keys are substituted in a single left-to-right pass over the original
    content, so replacement text is never scanned again for other keys.  When
    two keys could match at the same position (a relative path and the
    absolute URL that contains it) the longer one wins.

    :param content: The original post content.
    :param update_map: Mapping of old resource reference -> new URL.
    :return: The rewritten content, or ``content`` itself if the map is empty.
    """
    if not update_map:
        return content

    keys = sorted((k for k in update_map if k), key=len, reverse=True)
    if not keys:
        return content
    pattern = re.compile("|".join(re.escape(k) for k in keys))
    return pattern.sub(lambda m: update_map[m.group(0)], content)
