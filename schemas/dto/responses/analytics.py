"""
Response DTOs for analytics endpoints.

OverviewResponse      — GET /analytics/overview
LinkAnalyticsResponse — GET /links/{id}/analytics

``dailyCounts`` is sparse: days without events are omitted and must be read
as zero. Grouped counts are lists ordered by count descending.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schemas.dto.responses.link import ClickEventResponse


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class GroupCount(_CamelModel):
    label: str
    count: int


class TopLink(_CamelModel):
    id: str
    slug: str
    title: Optional[str] = None
    destination: str
    click_count: int


class AnalyticsScopeInfo(_CamelModel):
    owner_id: Optional[str] = None
    link_id: Optional[str] = None
    is_global: bool = False


class WindowStats(_CamelModel):
    """Fields shared by every windowed analytics response."""

    window_days: Union[int, float]
    window_start: datetime
    generated_at: datetime
    total_clicks: int
    window_clicks: int
    # to_camel would render these as "clicksLast24H" / "clicksLast7D"
    clicks_last_24h: int = Field(alias="clicksLast24h")
    clicks_last_7d: int = Field(alias="clicksLast7d")
    unique_clicks: int
    daily_counts: dict[str, int]
    countries: list[GroupCount]
    devices: list[GroupCount]


class OverviewResponse(WindowStats):
    scope: AnalyticsScopeInfo
    link_count: int
    top_links: list[TopLink]


class LinkSummary(_CamelModel):
    id: str
    slug: str
    title: Optional[str] = None
    destination: str
    is_active: bool
    created_at: datetime


class LinkAnalyticsResponse(WindowStats):
    link: LinkSummary
    browsers: list[GroupCount]
    os: list[GroupCount]
    referrers: list[GroupCount]
    recent_events: list[ClickEventResponse]
