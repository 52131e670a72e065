"""
Client IP and edge-geo resolution from proxy headers.

Every header this service trusts is listed below as an ordered
``(header, provider)`` chain; the first non-empty value wins. Values are
taken as-is from the edge and are not independently verified.

Functions accept any mapping of header names to values. Starlette's
``Headers`` is already case-insensitive; plain dicts are lowercased first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence
from urllib.parse import unquote


@dataclass(frozen=True)
class TrustedHeader:
    name: str
    provider: str
    # Only the first comma-separated hop is taken as the client address
    first_hop_only: bool = False


CLIENT_IP_CHAIN: tuple[TrustedHeader, ...] = (
    TrustedHeader("x-forwarded-for", "proxy", first_hop_only=True),
    TrustedHeader("x-real-ip", "nginx"),
    TrustedHeader("cf-connecting-ip", "cloudflare"),
)

COUNTRY_CHAIN: tuple[TrustedHeader, ...] = (
    TrustedHeader("x-vercel-ip-country", "vercel"),
    TrustedHeader("cf-ipcountry", "cloudflare"),
)

CITY_CHAIN: tuple[TrustedHeader, ...] = (TrustedHeader("x-vercel-ip-city", "vercel"),)

REGION_CHAIN: tuple[TrustedHeader, ...] = (
    TrustedHeader("x-vercel-ip-country-region", "vercel"),
)


@dataclass(frozen=True)
class GeoInfo:
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None


def _lowered(headers: Mapping[str, str]) -> Mapping[str, str]:
    if hasattr(headers, "getlist"):
        return headers
    return {str(k).lower(): v for k, v in headers.items()}


def first_trusted_value(
    headers: Mapping[str, str], chain: Sequence[TrustedHeader]
) -> Optional[str]:
    """Walk *chain* in order and return the first non-empty header value."""
    lookup = _lowered(headers)
    for source in chain:
        raw = lookup.get(source.name)
        if not raw:
            continue
        value = raw.split(",")[0] if source.first_hop_only else raw
        value = value.strip()
        if value:
            return value
    return None


def get_client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """Best-effort client address from proxy headers, or ``None``."""
    return first_trusted_value(headers, CLIENT_IP_CHAIN)


def get_geo(headers: Mapping[str, str]) -> GeoInfo:
    """Country/city/region from trusted edge headers; absent when missing."""
    city = first_trusted_value(headers, CITY_CHAIN)
    return GeoInfo(
        country=first_trusted_value(headers, COUNTRY_CHAIN),
        # Vercel percent-encodes city names ("S%C3%A3o%20Paulo")
        city=unquote(city) if city else None,
        region=first_trusted_value(headers, REGION_CHAIN),
    )
