"""
Click event document model.

Maps to the `clicks` MongoDB time-series collection.

Time-series schema:
  timeField  = "created_at"
  metaField  = "meta"
  granularity = "seconds"

Events are append-only: written once by the click recorder, never updated or
deleted by the application. `meta.owner_id` is copied from the link at
capture time so owner-scoped aggregation needs no join; events of deleted
links stay attributed to their former owner.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from schemas.models.base import MongoBaseModel, PyObjectId


class ClickMeta(BaseModel):
    """The metaField subdocument for the time-series collection."""

    link_id: PyObjectId
    slug: str
    owner_id: str


class ClickDoc(MongoBaseModel):
    """Document model for the `clicks` time-series collection."""

    # Time-series timeField; authoritative for every windowed aggregation
    created_at: datetime

    # Time-series metaField
    meta: ClickMeta

    # Raw request context
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None

    # Derived fields; None when undetermined
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    device: Optional[str] = None  # Mobile | Tablet | Desktop
    browser: Optional[str] = None
    os: Optional[str] = None
    bot_name: Optional[str] = None
