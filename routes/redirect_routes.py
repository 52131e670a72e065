"""
Public redirect entry point.

GET /error   — landing target for unknown or inactive slugs
GET /{slug}  — 302 to the destination of an active link

The slug route is a catch-all and must be registered after every other router.
Redirects are never cacheable: an edit or deactivation must apply to the next
request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from dependencies import get_redirect_service
from errors import NotFoundError
from services.redirect_service import RedirectService

router = APIRouter(tags=["redirect"])

NO_STORE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate"}


@router.get("/error", include_in_schema=False)
async def link_error() -> JSONResponse:
    err = NotFoundError("Short link not found or inactive.")
    return JSONResponse(
        status_code=err.status_code, content=err.to_dict(), headers=NO_STORE_HEADERS
    )


@router.get("/{slug}", include_in_schema=False)
async def redirect_slug(
    slug: str,
    request: Request,
    service: RedirectService = Depends(get_redirect_service),
) -> RedirectResponse:
    result = await service.handle_redirect(slug, request.headers)
    return RedirectResponse(
        url=result.location, status_code=302, headers=NO_STORE_HEADERS
    )
