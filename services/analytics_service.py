"""
Read-side analytics over the click-event log.

Every query is computed from "now" at execution time (nothing cached):
- all-time and windowed totals, trailing 24h and 7d counts (measured from
  now, independent of the window start)
- sparse daily counts by UTC date
- top-N groupings by country, device, browser, os and referrer host
- unique clicks as distinct non-null IPs in the window
- top links by all-time click volume

Scope is resolved by the access policy before any query runs: a non-admin
only ever reads events of their own links.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from config import AnalyticsSettings
from errors import NotFoundError
from repositories.click_repository import ClickRepository
from repositories.link_repository import LinkRepository
from schemas.dto.requests.analytics import AnalyticsQuery
from schemas.dto.responses.analytics import (
    AnalyticsScopeInfo,
    GroupCount,
    LinkAnalyticsResponse,
    LinkSummary,
    OverviewResponse,
    TopLink,
)
from schemas.dto.responses.link import ClickEventResponse
from schemas.models.link import LinkDoc
from schemas.models.user import Principal
from services.access_policy import ensure_can_operate, resolve_owner_scope
from services.aggregation_strategies import (
    AggregationStrategy,
    AggregationStrategyFactory,
    GroupedCounts,
)
from shared.datetime_utils import as_utc, utc_now, window_start
from shared.logging import get_logger, should_sample

log = get_logger(__name__)

# (response key, aggregation dimension)
OVERVIEW_GROUPS = (("countries", "country"), ("devices", "device"))
LINK_GROUPS = OVERVIEW_GROUPS + (
    ("browsers", "browser"),
    ("os", "os"),
    ("referrers", "referrer"),
)


@dataclass(frozen=True)
class AnalyticsScope:
    """The set of events a query may read."""

    owner_id: Optional[str] = None
    link_id: Any = None

    @property
    def is_global(self) -> bool:
        return self.owner_id is None and self.link_id is None

    def to_query(self) -> dict[str, Any]:
        if self.link_id is not None:
            return {"meta.link_id": self.link_id}
        if self.owner_id is not None:
            return {"meta.owner_id": self.owner_id}
        return {}

    def info(self) -> AnalyticsScopeInfo:
        return AnalyticsScopeInfo(
            owner_id=self.owner_id,
            link_id=str(self.link_id) if self.link_id is not None else None,
            is_global=self.is_global,
        )


def _since(base: dict[str, Any], start: datetime, end: Optional[datetime] = None) -> dict[str, Any]:
    bounds: dict[str, Any] = {"$gte": start}
    if end is not None:
        bounds["$lte"] = end
    return {**base, "created_at": bounds}


def _groups(ranked: GroupedCounts) -> list[GroupCount]:
    return [GroupCount(label=label, count=count) for label, count in ranked]


class AnalyticsService:
    def __init__(
        self,
        links: LinkRepository,
        clicks: ClickRepository,
        settings: AnalyticsSettings,
    ) -> None:
        self._links = links
        self._clicks = clicks
        self._settings = settings

    async def _run(self, strategy: AggregationStrategy, query: dict[str, Any]) -> Any:
        rows = await self._clicks.aggregate(strategy.build_pipeline(query))
        return strategy.format_results(rows)

    async def _window_stats(
        self,
        scope: AnalyticsScope,
        days: Union[int, float],
        top_n: int,
        groups: tuple[tuple[str, str], ...],
        now: datetime,
    ) -> dict[str, Any]:
        base = scope.to_query()
        start = window_start(days, now)
        windowed = _since(base, start, now)

        counts = await asyncio.gather(
            self._clicks.count(base),
            self._clicks.count(windowed),
            self._clicks.count(_since(base, now - timedelta(hours=24), now)),
            self._clicks.count(_since(base, now - timedelta(days=7), now)),
            self._run(AggregationStrategyFactory.create("unique"), windowed),
            self._run(AggregationStrategyFactory.create("day"), windowed),
        )
        grouped = await asyncio.gather(
            *(
                self._run(AggregationStrategyFactory.create(dimension, top_n), windowed)
                for _, dimension in groups
            )
        )
        total, in_window, last_24h, last_7d, unique, daily = counts

        stats: dict[str, Any] = {
            "window_days": days,
            "window_start": start,
            "generated_at": now,
            "total_clicks": total,
            "window_clicks": in_window,
            "clicks_last_24h": last_24h,
            "clicks_last_7d": last_7d,
            "unique_clicks": unique,
            "daily_counts": daily,
        }
        for (key, _), ranked in zip(groups, grouped):
            stats[key] = _groups(ranked)
        return stats

    async def top_links(
        self, links: list[LinkDoc], limit: int
    ) -> list[TopLink]:
        """Links ordered by all-time click count, newest first on ties."""
        counts = await self._clicks.counts_by_link(link.id for link in links)
        ranked = sorted(
            links,
            key=lambda link: (
                -counts.get(link.id, 0),
                -as_utc(link.created_at).timestamp(),
            ),
        )
        return [
            TopLink(
                id=str(link.id),
                slug=link.slug,
                title=link.title,
                destination=link.destination,
                click_count=counts.get(link.id, 0),
            )
            for link in ranked[:limit]
        ]

    async def overview(
        self,
        principal: Principal,
        query: AnalyticsQuery,
        requested_owner_id: Optional[str] = None,
    ) -> OverviewResponse:
        started = time.perf_counter()
        scope = AnalyticsScope(owner_id=resolve_owner_scope(principal, requested_owner_id))
        now = utc_now()

        links = await self._links.find_all(scope.owner_id)
        stats, top = await asyncio.gather(
            self._window_stats(
                scope,
                query.days,
                query.top,
                OVERVIEW_GROUPS,
                now,
            ),
            self.top_links(links, self._settings.analytics_overview_top_links),
        )

        if should_sample("analytics_query"):
            log.info(
                "analytics_query",
                kind="overview",
                principal_id=principal.id,
                owner_scope=scope.owner_id,
                days=query.days,
                duration_ms=int((time.perf_counter() - started) * 1000),
            )

        return OverviewResponse(
            scope=scope.info(),
            link_count=len(links),
            top_links=top,
            **stats,
        )

    async def link_analytics(
        self, principal: Principal, link_id: str, query: AnalyticsQuery
    ) -> LinkAnalyticsResponse:
        started = time.perf_counter()
        link = await self._links.find_by_id(link_id)
        if link is None:
            raise NotFoundError("Link not found.")
        ensure_can_operate(principal, link)

        scope = AnalyticsScope(link_id=link.id)
        now = utc_now()
        windowed = _since(scope.to_query(), window_start(query.days, now), now)

        stats, recent = await asyncio.gather(
            self._window_stats(
                scope,
                query.days,
                query.top,
                LINK_GROUPS,
                now,
            ),
            self._clicks.recent(windowed, self._settings.analytics_recent_events),
        )

        if should_sample("analytics_query"):
            log.info(
                "analytics_query",
                kind="link",
                principal_id=principal.id,
                link_id=str(link.id),
                days=query.days,
                duration_ms=int((time.perf_counter() - started) * 1000),
            )

        return LinkAnalyticsResponse(
            link=LinkSummary(
                id=str(link.id),
                slug=link.slug,
                title=link.title,
                destination=link.destination,
                is_active=link.is_active,
                created_at=link.created_at,
            ),
            recent_events=[ClickEventResponse.from_doc(doc) for doc in recent],
            **stats,
        )
