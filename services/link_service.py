"""
Link management: create, read, update, delete with ownership checks.

Validation order for a slug is format → reservation → uniqueness. The
uniqueness pre-check gives a friendly answer in the common case; the unique
index is what decides concurrent races, and its DuplicateKeyError is mapped
to the same ConflictError.
"""

from __future__ import annotations

from typing import Any, Optional

from pymongo.errors import DuplicateKeyError

from errors import ConflictError, NotFoundError, ValidationError
from repositories.click_repository import ClickRepository
from repositories.link_repository import LinkRepository
from schemas.dto.requests.link import CreateLinkRequest, UpdateLinkRequest
from schemas.models.click import ClickDoc
from schemas.models.link import LinkDoc
from schemas.models.user import Principal
from services.access_policy import ensure_can_operate
from shared.datetime_utils import utc_now
from shared.logging import get_logger
from shared.validators import (
    SLUG_MAX_LENGTH,
    SLUG_MIN_LENGTH,
    is_slug_reserved,
    normalize_slug,
    validate_destination,
    validate_slug,
)

log = get_logger(__name__)

RECENT_CLICKS_LIMIT = 25

SLUG_IN_USE_MESSAGE = "Slug is already in use. Try another one."


def _checked_slug(raw: str) -> str:
    slug = normalize_slug(raw)
    if not validate_slug(slug):
        raise ValidationError(
            f"Slug must be {SLUG_MIN_LENGTH}-{SLUG_MAX_LENGTH} characters and only "
            "contain letters, numbers, or hyphens.",
            field="slug",
        )
    if is_slug_reserved(slug):
        raise ValidationError("Slug is reserved. Please choose another.", field="slug")
    return slug


def _checked_destination(raw: str) -> str:
    if not validate_destination(raw):
        raise ValidationError(
            "Destination must be a valid http(s) URL.", field="destination"
        )
    return raw


class LinkService:
    def __init__(self, links: LinkRepository, clicks: ClickRepository) -> None:
        self._links = links
        self._clicks = clicks

    async def create(self, principal: Principal, body: CreateLinkRequest) -> LinkDoc:
        if not body.slug or not body.destination:
            raise ValidationError("Slug and destination URL are required.")

        slug = _checked_slug(body.slug)
        destination = _checked_destination(body.destination)

        if await self._links.slug_exists(slug):
            raise ConflictError(SLUG_IN_USE_MESSAGE, field="slug")

        now = utc_now()
        link = LinkDoc(
            slug=slug,
            destination=destination,
            title=body.title,
            is_active=True,
            owner_id=principal.id,
            created_at=now,
            updated_at=now,
        )
        try:
            created = await self._links.insert(link)
        except DuplicateKeyError:
            raise ConflictError(SLUG_IN_USE_MESSAGE, field="slug") from None

        log.info("link_created", link_id=str(created.id), slug=slug, owner_id=principal.id)
        return created

    async def get(self, principal: Principal, link_id: str) -> LinkDoc:
        link = await self._links.find_by_id(link_id)
        if link is None:
            raise NotFoundError("Link not found.")
        ensure_can_operate(principal, link)
        return link

    async def list_links(self, owner_id: Optional[str]) -> list[LinkDoc]:
        """Links in an already-resolved owner scope (None = all links)."""
        return await self._links.find_all(owner_id)

    async def update(
        self, principal: Principal, link_id: str, body: UpdateLinkRequest
    ) -> LinkDoc:
        link = await self.get(principal, link_id)
        if not body.has_changes():
            return link

        fields: dict[str, Any] = {}
        if body.slug is not None:
            slug = _checked_slug(body.slug)
            if slug != link.slug:
                if await self._links.slug_exists(slug, exclude_id=link.id):
                    raise ConflictError(SLUG_IN_USE_MESSAGE, field="slug")
                fields["slug"] = slug
        if body.destination is not None:
            fields["destination"] = _checked_destination(body.destination)
        if body.title is not None:
            fields["title"] = body.title
        if body.is_active is not None:
            fields["is_active"] = body.is_active

        if not fields:
            return link

        fields["updated_at"] = utc_now()
        try:
            updated = await self._links.update(link.id, fields)
        except DuplicateKeyError:
            raise ConflictError(SLUG_IN_USE_MESSAGE, field="slug") from None
        if updated is None:
            # Deleted between the read and the write
            raise NotFoundError("Link not found.")

        log.info(
            "link_updated",
            link_id=str(link.id),
            fields=sorted(k for k in fields if k != "updated_at"),
        )
        return updated

    async def delete(self, principal: Principal, link_id: str) -> None:
        """Hard-delete a link. Its click events are kept as orphans."""
        link = await self.get(principal, link_id)
        if not await self._links.delete(link.id):
            raise NotFoundError("Link not found.")
        log.info("link_deleted", link_id=str(link.id), slug=link.slug)

    async def click_counts(self, links: list[LinkDoc]) -> dict[str, int]:
        counts = await self._clicks.counts_by_link(link.id for link in links)
        return {str(link.id): counts.get(link.id, 0) for link in links}

    async def recent_clicks(
        self, link: LinkDoc, limit: int = RECENT_CLICKS_LIMIT
    ) -> list[ClickDoc]:
        return await self._clicks.recent({"meta.link_id": link.id}, limit)
