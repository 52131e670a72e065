"""
Response DTOs for link management endpoints.

Serialized with camelCase keys (``isActive``, ``clickCount``...).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.models.click import ClickDoc
from schemas.models.link import LinkDoc


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ClickEventResponse(_CamelModel):
    id: str
    link_id: str
    created_at: datetime
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    bot_name: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: ClickDoc) -> "ClickEventResponse":
        return cls(
            id=str(doc.id),
            link_id=str(doc.meta.link_id),
            created_at=doc.created_at,
            ip=doc.ip,
            user_agent=doc.user_agent,
            referer=doc.referer,
            country=doc.country,
            city=doc.city,
            region=doc.region,
            device=doc.device,
            browser=doc.browser,
            os=doc.os,
            bot_name=doc.bot_name,
        )


class LinkResponse(_CamelModel):
    id: str
    slug: str
    short_url: str
    destination: str
    title: Optional[str] = None
    is_active: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime
    click_count: int = 0

    @classmethod
    def from_doc(
        cls, doc: LinkDoc, *, short_url: str, click_count: int = 0
    ) -> "LinkResponse":
        return cls(
            id=str(doc.id),
            slug=doc.slug,
            short_url=short_url,
            destination=doc.destination,
            title=doc.title,
            is_active=doc.is_active,
            owner_id=doc.owner_id,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            click_count=click_count,
        )


class LinkDetailResponse(LinkResponse):
    """``GET /links/{id}`` — link plus its most recent click events."""

    recent_clicks: list[ClickEventResponse] = []
