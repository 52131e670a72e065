"""
Request DTOs for analytics endpoints.

Query parameters arrive as raw strings and are parsed leniently: a missing
or malformed ``days`` falls back to the default window rather than failing
the request, and oversized windows are clamped.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from config import AnalyticsSettings
from shared.datetime_utils import clamp_top_n, clamp_window_days


class AnalyticsQuery(BaseModel):
    """Parsed ``days`` / ``top`` parameters shared by analytics endpoints."""

    model_config = ConfigDict(frozen=True)

    days: Union[int, float]
    top: int

    @classmethod
    def from_params(
        cls,
        settings: AnalyticsSettings,
        days: Optional[str] = None,
        top: Optional[str] = None,
    ) -> "AnalyticsQuery":
        return cls(
            days=clamp_window_days(
                days,
                default=settings.analytics_default_window_days,
                maximum=settings.analytics_max_window_days,
            ),
            top=clamp_top_n(
                top,
                default=settings.analytics_default_top_n,
                maximum=settings.analytics_max_top_n,
            ),
        )
