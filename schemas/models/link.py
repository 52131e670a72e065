"""
Link document model.

Maps to the `links` MongoDB collection. `slug` is stored normalized and is
unique (enforced by a unique index, not by application locking).
`owner_id` is the account-service user id and never changes after creation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class LinkDoc(MongoBaseModel):
    """Document model for the `links` collection."""

    slug: str
    destination: str
    title: Optional[str] = None
    is_active: bool = True
    owner_id: str
    created_at: datetime
    updated_at: datetime
