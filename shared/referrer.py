"""
Referrer normalization for grouping.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

DIRECT_REFERRER = "Direct / None"


def referrer_host(referer: Optional[str]) -> str:
    """Grouping key for a raw ``Referer`` header value.

    - absent/empty → ``"Direct / None"``
    - absolute URL → its hostname (``https://t.co/x?y=1`` → ``t.co``)
    - anything that does not parse as an absolute URL → the raw string
    """
    if not referer:
        return DIRECT_REFERRER
    try:
        parts = urlsplit(referer)
        host = parts.hostname if parts.scheme and parts.netloc else None
    except ValueError:
        host = None
    return host or referer
