"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain async functions
used with FastAPI's Depends() system. Infrastructure handles (settings,
database, click recorder) live on app.state and are created by the
lifespan in app.py; repositories and services are built per request.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError
from repositories.click_repository import ClickRepository
from repositories.link_repository import LinkRepository
from schemas.models.user import Principal, Role
from services.analytics_service import AnalyticsService
from services.click_recorder import ClickRecorder
from services.link_service import LinkService
from services.redirect_service import RedirectService
from shared.logging import get_logger

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_recorder(request: Request) -> ClickRecorder:
    return request.app.state.recorder


async def get_link_repository(db=Depends(get_db)) -> LinkRepository:
    return LinkRepository(db)


async def get_click_repository(db=Depends(get_db)) -> ClickRepository:
    return ClickRepository(db)


async def get_link_service(
    links: LinkRepository = Depends(get_link_repository),
    clicks: ClickRepository = Depends(get_click_repository),
) -> LinkService:
    return LinkService(links, clicks)


async def get_analytics_service(
    links: LinkRepository = Depends(get_link_repository),
    clicks: ClickRepository = Depends(get_click_repository),
    settings: AppSettings = Depends(get_settings),
) -> AnalyticsService:
    return AnalyticsService(links, clicks, settings.analytics)


async def get_redirect_service(
    links: LinkRepository = Depends(get_link_repository),
    recorder: ClickRecorder = Depends(get_recorder),
    settings: AppSettings = Depends(get_settings),
) -> RedirectService:
    return RedirectService(links, recorder, error_location=settings.error_redirect_path)


def decode_principal(token: str, settings: AppSettings) -> Principal:
    """Verify a bearer token and return the principal it names.

    Raises AuthenticationError for any signature, expiry, audience, issuer
    or claim problem. A missing ``role`` claim means USER; an unknown role
    is rejected rather than silently downgraded.
    """
    cfg = settings.jwt
    if not cfg.verification_key:
        log.error("jwt_verification_key_missing")
        raise AuthenticationError("Authentication is not configured.")
    try:
        claims = jwt.decode(
            token,
            cfg.verification_key,
            algorithms=[cfg.algorithm],
            audience=cfg.jwt_audience,
            issuer=cfg.jwt_issuer,
            leeway=cfg.jwt_leeway_seconds,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired.") from None
    except jwt.InvalidTokenError as e:
        log.info("jwt_rejected", error_type=type(e).__name__)
        raise AuthenticationError("Invalid authentication token.") from None

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthenticationError("Invalid authentication token.")

    raw_role = claims.get("role") or Role.USER.value
    try:
        role = Role(str(raw_role).upper())
    except ValueError:
        raise AuthenticationError("Invalid authentication token.") from None

    return Principal(id=subject, role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: AppSettings = Depends(get_settings),
) -> Principal:
    """Resolve the authenticated principal or raise 401."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required.")
    return decode_principal(credentials.credentials, settings)
