"""
Slug resolution for the public redirect entry point.

Resolution re-reads the registry on every request (no slug cache), so an
activation toggle or destination edit applies to the very next redirect.
Only a known, active link yields its destination; every other outcome,
including storage errors and unreadable link documents, yields the fixed
error redirect and records nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from repositories.link_repository import LinkRepository
from schemas.models.link import LinkDoc
from services.click_capture import build_click_event
from services.click_recorder import ClickRecorder
from shared.logging import get_logger, hash_ip, should_sample
from shared.validators import normalize_slug, validate_slug

log = get_logger(__name__)


@dataclass(frozen=True)
class RedirectResult:
    location: str
    link: Optional[LinkDoc] = None
    event_submitted: bool = False

    @property
    def resolved(self) -> bool:
        return self.link is not None


class RedirectService:
    def __init__(
        self,
        links: LinkRepository,
        recorder: ClickRecorder,
        error_location: str = "/error",
    ) -> None:
        self._links = links
        self._recorder = recorder
        self._error_location = error_location

    async def resolve(self, raw_slug: str) -> Optional[LinkDoc]:
        """Return the active link for *raw_slug*, or None."""
        slug = normalize_slug(raw_slug)
        # Nothing outside the slug format can be stored, skip the lookup
        if not validate_slug(slug):
            return None
        try:
            link = await self._links.find_by_slug(slug)
        except Exception as e:
            log.error(
                "redirect_lookup_failed",
                slug=slug,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        if link is None or not link.is_active:
            return None
        return link

    async def handle_redirect(
        self, raw_slug: str, headers: Mapping[str, str]
    ) -> RedirectResult:
        link = await self.resolve(raw_slug)
        if link is None:
            return RedirectResult(location=self._error_location)

        submitted = False
        try:
            event = build_click_event(link, headers)
            submitted = self._recorder.submit(event)
        except Exception as e:
            log.error(
                "click_event_capture_failed",
                link_id=str(link.id),
                error=str(e),
                error_type=type(e).__name__,
            )

        if should_sample("link_redirect"):
            log.info(
                "link_redirect",
                slug=link.slug,
                link_id=str(link.id),
                event_submitted=submitted,
                ip_hash=hash_ip(event.ip) if submitted else None,
            )

        return RedirectResult(
            location=link.destination, link=link, event_submitted=submitted
        )
