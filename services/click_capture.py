"""
Builds a click event from the raw request context.

Runs synchronously on the redirect path; every derivation is pure and
degrades to absent fields instead of raising.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional

from schemas.models.click import ClickDoc, ClickMeta
from schemas.models.link import LinkDoc
from shared.datetime_utils import utc_now
from shared.ip_utils import get_client_ip, get_geo
from shared.user_agent import classify_user_agent, get_bot_name


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None and not hasattr(headers, "getlist"):
        value = next(
            (v for k, v in headers.items() if str(k).lower() == name), None
        )
    return value or None


def build_click_event(
    link: LinkDoc,
    headers: Mapping[str, str],
    now: Optional[datetime] = None,
) -> ClickDoc:
    """Derive a ClickDoc for a resolved *link* from request *headers*."""
    user_agent = _header(headers, "user-agent")
    ua_info = classify_user_agent(user_agent)
    geo = get_geo(headers)

    return ClickDoc(
        created_at=now or utc_now(),
        meta=ClickMeta(link_id=link.id, slug=link.slug, owner_id=link.owner_id),
        ip=get_client_ip(headers),
        user_agent=user_agent,
        referer=_header(headers, "referer"),
        country=geo.country,
        city=geo.city,
        region=geo.region,
        device=ua_info.device,
        browser=ua_info.browser,
        os=ua_info.os,
        bot_name=get_bot_name(user_agent),
    )
