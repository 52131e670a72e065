"""
Link management endpoints (authenticated).

POST   /links                 — create a link owned by the caller
GET    /links                 — list links in scope (admins may pass userId)
GET    /links/{id}            — one link with its most recent click events
PATCH  /links/{id}            — partial update (owner or admin)
DELETE /links/{id}            — hard delete; click events are kept
GET    /links/{id}/analytics  — windowed analytics for one link
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from config import AppSettings
from dependencies import (
    get_analytics_service,
    get_current_user,
    get_link_service,
    get_settings,
)
from schemas.dto.requests.analytics import AnalyticsQuery
from schemas.dto.requests.link import CreateLinkRequest, UpdateLinkRequest
from schemas.dto.responses.analytics import LinkAnalyticsResponse
from schemas.dto.responses.common import ERROR_RESPONSES, MessageResponse
from schemas.dto.responses.link import (
    ClickEventResponse,
    LinkDetailResponse,
    LinkResponse,
)
from schemas.models.user import Principal
from services.access_policy import resolve_owner_scope
from services.analytics_service import AnalyticsService
from services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["links"], responses=ERROR_RESPONSES)


@router.post("", response_model=LinkResponse, status_code=201)
async def create_link(
    body: CreateLinkRequest,
    principal: Principal = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
    settings: AppSettings = Depends(get_settings),
) -> LinkResponse:
    link = await service.create(principal, body)
    return LinkResponse.from_doc(link, short_url=settings.short_url(link.slug))


@router.get("", response_model=list[LinkResponse])
async def list_links(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    principal: Principal = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
    settings: AppSettings = Depends(get_settings),
) -> list[LinkResponse]:
    links = await service.list_links(resolve_owner_scope(principal, user_id))
    counts = await service.click_counts(links)
    return [
        LinkResponse.from_doc(
            link,
            short_url=settings.short_url(link.slug),
            click_count=counts.get(str(link.id), 0),
        )
        for link in links
    ]


@router.get("/{link_id}", response_model=LinkDetailResponse)
async def get_link(
    link_id: str,
    principal: Principal = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
    settings: AppSettings = Depends(get_settings),
) -> LinkDetailResponse:
    link = await service.get(principal, link_id)
    counts = await service.click_counts([link])
    recent = await service.recent_clicks(link)
    base = LinkResponse.from_doc(
        link,
        short_url=settings.short_url(link.slug),
        click_count=counts.get(str(link.id), 0),
    )
    return LinkDetailResponse(
        **base.model_dump(),
        recent_clicks=[ClickEventResponse.from_doc(doc) for doc in recent],
    )


@router.patch("/{link_id}", response_model=LinkResponse)
async def update_link(
    link_id: str,
    body: UpdateLinkRequest,
    principal: Principal = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
    settings: AppSettings = Depends(get_settings),
) -> LinkResponse:
    link = await service.update(principal, link_id, body)
    counts = await service.click_counts([link])
    return LinkResponse.from_doc(
        link,
        short_url=settings.short_url(link.slug),
        click_count=counts.get(str(link.id), 0),
    )


@router.delete("/{link_id}", response_model=MessageResponse)
async def delete_link(
    link_id: str,
    principal: Principal = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
) -> MessageResponse:
    await service.delete(principal, link_id)
    return MessageResponse(success=True, message="Link deleted.")


@router.get("/{link_id}/analytics", response_model=LinkAnalyticsResponse)
async def link_analytics(
    link_id: str,
    days: Optional[str] = Query(default=None),
    top: Optional[str] = Query(default=None),
    principal: Principal = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
    settings: AppSettings = Depends(get_settings),
) -> LinkAnalyticsResponse:
    query = AnalyticsQuery.from_params(settings.analytics, days=days, top=top)
    return await service.link_analytics(principal, link_id, query)
