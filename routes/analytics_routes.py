"""
Dashboard analytics (authenticated).

GET /analytics/overview — windowed totals over the caller's links. Admins get
the global view, or one owner's view with ``userId``; for anyone else
``userId`` is ignored.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from config import AppSettings
from dependencies import get_analytics_service, get_current_user, get_settings
from schemas.dto.requests.analytics import AnalyticsQuery
from schemas.dto.responses.analytics import OverviewResponse
from schemas.dto.responses.common import ERROR_RESPONSES
from schemas.models.user import Principal
from services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"], responses=ERROR_RESPONSES)


@router.get("/overview", response_model=OverviewResponse)
async def overview(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    days: Optional[str] = Query(default=None),
    top: Optional[str] = Query(default=None),
    principal: Principal = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
    settings: AppSettings = Depends(get_settings),
) -> OverviewResponse:
    query = AnalyticsQuery.from_params(settings.analytics, days=days, top=top)
    return await service.overview(principal, query, requested_owner_id=user_id)
