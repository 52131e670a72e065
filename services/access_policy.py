"""
Ownership and role rules for links and analytics scope.

An actor may operate on a link iff the actor is ADMIN or owns the link.
Analytics scope: non-admins are always pinned to their own links; admins see
everything unless they ask for one owner.
"""

from __future__ import annotations

from typing import Optional

from errors import ForbiddenError
from schemas.models.link import LinkDoc
from schemas.models.user import Principal


def can_operate(principal: Principal, link: LinkDoc) -> bool:
    return principal.is_admin or principal.id == link.owner_id


def ensure_can_operate(principal: Principal, link: LinkDoc) -> None:
    if not can_operate(principal, link):
        raise ForbiddenError("Not authorized to access this link.")


def resolve_owner_scope(
    principal: Principal, requested_owner_id: Optional[str] = None
) -> Optional[str]:
    """Return the owner id a query is restricted to, or None for global scope.

    A non-admin's requested filter is ignored, never honoured.
    """
    if not principal.is_admin:
        return principal.id
    return requested_owner_id or None
