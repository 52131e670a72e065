"""Unit tests for request and response DTOs."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from config import AnalyticsSettings
from schemas.dto.requests.analytics import AnalyticsQuery
from schemas.dto.requests.link import CreateLinkRequest, UpdateLinkRequest
from schemas.dto.responses.analytics import GroupCount, TopLink
from schemas.dto.responses.common import ErrorResponse, HealthResponse, MessageResponse
from schemas.dto.responses.link import LinkResponse
from schemas.models.link import LinkDoc


class TestCreateLinkRequest:
    def test_all_optional_at_parse_time(self):
        body = CreateLinkRequest()
        assert body.slug is None
        assert body.destination is None

    def test_title_length_limit(self):
        with pytest.raises(ValidationError):
            CreateLinkRequest(slug="promo", destination="https://x.io", title="t" * 201)


class TestUpdateLinkRequest:
    def test_accepts_camel_case(self):
        body = UpdateLinkRequest.model_validate({"isActive": False})
        assert body.is_active is False

    def test_accepts_snake_case(self):
        body = UpdateLinkRequest.model_validate({"is_active": True})
        assert body.is_active is True

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({}, False),
            ({"slug": None}, False),
            ({"title": "New"}, True),
            ({"isActive": False}, True),
        ],
    )
    def test_has_changes(self, payload, expected):
        assert UpdateLinkRequest.model_validate(payload).has_changes() is expected


class TestAnalyticsQuery:
    def test_defaults(self):
        q = AnalyticsQuery.from_params(AnalyticsSettings())
        assert q.days == 30
        assert q.top == 10

    def test_clamped(self):
        q = AnalyticsQuery.from_params(AnalyticsSettings(), days="9999", top="1000")
        assert q.days == 180
        assert q.top == 50

    def test_invalid_days_fall_back(self):
        assert AnalyticsQuery.from_params(AnalyticsSettings(), days="abc").days == 30

    def test_fractional_days_kept(self):
        assert AnalyticsQuery.from_params(AnalyticsSettings(), days="1.5").days == 1.5


class TestLinkResponse:
    def test_serializes_camel_case(self):
        ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
        link = LinkDoc(
            _id=ObjectId(),
            slug="promo",
            destination="https://example.com",
            owner_id="user-1",
            created_at=ts,
            updated_at=ts,
        )
        data = LinkResponse.from_doc(
            link, short_url="https://lt.test/promo", click_count=3
        ).model_dump(by_alias=True)
        assert data["id"] == str(link.id)
        assert data["shortUrl"] == "https://lt.test/promo"
        assert data["isActive"] is True
        assert data["ownerId"] == "user-1"
        assert data["clickCount"] == 3


def test_top_link_alias():
    top = TopLink(id="x", slug="promo", destination="https://e.com", click_count=2)
    assert top.model_dump(by_alias=True)["clickCount"] == 2


def test_group_count():
    assert GroupCount(label="MY", count=2).model_dump() == {"label": "MY", "count": 2}


class TestCommonResponses:
    def test_error_response(self):
        e = ErrorResponse(error="nope", code="not_found")
        assert e.field is None

    def test_health_response(self):
        h = HealthResponse(status="healthy", checks={"mongodb": "ok"})
        assert h.checks["mongodb"] == "ok"

    def test_message_response(self):
        assert MessageResponse(success=True, message="Link deleted.").success is True
