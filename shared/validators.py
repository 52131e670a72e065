"""
Slug and destination validators — framework-agnostic, pure functions.

Normalization is applied identically at write time (create/update) and at
read time (redirect), so case and whitespace variants of a slug always
collide on one stored record.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import validators as _validators

SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 64

_SLUG_PATTERN = re.compile(
    rf"^[a-z0-9-]{{{SLUG_MIN_LENGTH},{SLUG_MAX_LENGTH}}}$"
)

# Structural route names a slug must never shadow
RESERVED_SLUGS = frozenset(
    {
        "api",
        "_next",
        "about",
        "pricing",
        "contact",
        "blogs",
        "blog",
        "error",
        "signin",
        "signup",
        "auth",
        "forgot-password",
        "reset-password",
        "dashboard",
        "admin",
        "site",
        "images",
        "favicon.ico",
        "sitemap.xml",
        "robots.txt",
        # this service's own top-level routes
        "links",
        "analytics",
        "health",
        "docs",
        "redoc",
        "openapi.json",
    }
)

ALLOWED_DESTINATION_SCHEMES = frozenset({"http", "https"})


def normalize_slug(value: str) -> str:
    """Trim surrounding whitespace and lowercase. Idempotent."""
    return value.strip().lower()


def is_slug_reserved(value: str) -> bool:
    return normalize_slug(value) in RESERVED_SLUGS


def validate_slug(value: str) -> bool:
    """Return True if the normalized *value* is 3-64 chars of ``[a-z0-9-]``."""
    return bool(_SLUG_PATTERN.match(normalize_slug(value)))


def validate_destination(url: str) -> bool:
    """Return True if *url* is an absolute http(s) URL.

    The scheme check runs first so that ``javascript:``, ``ftp:`` and
    scheme-less strings are rejected before the general URL validator.
    Single-label hosts (``localhost``, ``intranet``), underscores in host
    labels and unencoded spaces in the path are accepted; the redirect
    response percent-encodes the stored value.
    """
    if not url or url != url.strip():
        return False
    scheme = urlsplit(url).scheme.lower()
    if scheme not in ALLOWED_DESTINATION_SCHEMES:
        return False
    return bool(
        _validators.url(
            url.replace(" ", "%20"),
            simple_host=True,
            strict_query=False,
            rfc_2782=True,
        )
    )
