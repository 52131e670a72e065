"""
Request DTOs for link management endpoints.

Bodies accept both camelCase (``isActive``) and snake_case (``is_active``)
keys. Format, reservation and uniqueness rules are enforced by the link
service, not here, so that every rejection carries the same error shape.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CreateLinkRequest(BaseModel):
    """Request body for ``POST /links``."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    slug: Optional[str] = None
    destination: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)


class UpdateLinkRequest(BaseModel):
    """Request body for ``PATCH /links/{id}``.

    One optional field per updatable attribute; ``None`` (or omitted) means
    "leave unchanged".
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    slug: Optional[str] = None
    destination: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    is_active: Optional[bool] = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.slug, self.destination, self.title, self.is_active)
        )
