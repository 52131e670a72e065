"""
Unit tests for the shared/ utility modules.

Covers:
- shared.validators      (normalize_slug, validate_slug, is_slug_reserved,
                          validate_destination)
- shared.datetime_utils  (as_utc, clamp_window_days, clamp_top_n, window_start)
- shared.ip_utils        (get_client_ip, get_geo)
- shared.user_agent      (classify_user_agent, get_bot_name)
- shared.referrer        (referrer_host)
- shared.logging         (should_sample, hash_ip, redact_sensitive_fields)
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest
from starlette.datastructures import Headers

import shared.logging as shared_logging
from shared.datetime_utils import as_utc, clamp_top_n, clamp_window_days, window_start
from shared.ip_utils import get_client_ip, get_geo
from shared.logging import hash_ip, redact_sensitive_fields, should_sample
from shared.referrer import DIRECT_REFERRER, referrer_host
from shared.user_agent import (
    DEVICE_DESKTOP,
    DEVICE_MOBILE,
    DEVICE_TABLET,
    classify_user_agent,
    get_bot_name,
)
from shared.validators import (
    RESERVED_SLUGS,
    is_slug_reserved,
    normalize_slug,
    validate_destination,
    validate_slug,
)

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)
IPAD_UA = (
    "Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)
CHROME_WINDOWS_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
GOOGLEBOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


# ---------------------------------------------------------------------------
# shared.validators — slugs
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [("promo", "promo"), ("  PrOmO  ", "promo"), ("\tSALE-2025\n", "sale-2025")],
)
def test_normalize_slug(raw, expected):
    assert normalize_slug(raw) == expected


@pytest.mark.parametrize("raw", ["promo", " Promo ", "MIXED-case-1", "  x  "])
def test_normalize_slug_is_idempotent(raw):
    once = normalize_slug(raw)
    assert normalize_slug(once) == once


@pytest.mark.parametrize(
    "slug, expected",
    [
        ("abc", True),
        ("a" * 64, True),
        ("sale-2025", True),
        ("  Promo  ", True),  # normalized before matching
        ("ab", False),
        ("a" * 65, False),
        ("my_slug", False),
        ("slug.with.dots", False),
        ("spaced slug", False),
        ("", False),
    ],
)
def test_validate_slug(slug, expected):
    assert validate_slug(slug) is expected


@pytest.mark.parametrize("reserved", sorted(RESERVED_SLUGS))
def test_reserved_slugs_in_every_case(reserved):
    assert is_slug_reserved(reserved)
    assert is_slug_reserved(reserved.upper())
    assert is_slug_reserved(f"  {reserved.title()} ")


def test_ordinary_slug_not_reserved():
    assert not is_slug_reserved("summer-sale")


# ---------------------------------------------------------------------------
# shared.validators — destinations
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com", True),
        ("http://example.com/path?q=1&x=", True),
        ("http://localhost:3000/x", True),
        ("http://intranet/page", True),
        ("https://my_host.example.com/", True),
        ("https://example.com/a b", True),
        ("http://203.0.113.9/landing", True),
        ("HTTPS://example.com/upper", True),
        ("ftp://example.com/file", False),
        ("javascript:alert(1)", False),
        ("mailto:someone@example.com", False),
        ("example.com", False),
        ("//example.com/no-scheme", False),
        (" https://example.com", False),
        ("https://", False),
        ("", False),
    ],
)
def test_validate_destination(url, expected):
    assert validate_destination(url) is expected


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


class TestAsUtc:
    def test_naive_assumed_utc(self):
        result = as_utc(datetime(2025, 1, 1, 12, 0))
        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_aware_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = as_utc(datetime(2025, 1, 1, 14, 0, tzinfo=plus_two))
        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_none(self):
        assert as_utc(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 30),
        ("", 30),
        ("abc", 30),
        ("0", 30),
        ("-5", 30),
        ("nan", 30),
        ("inf", 30),
        ("7", 7),
        (" 14 ", 14),
        ("0.5", 0.5),
        ("180", 180),
        ("9999", 180),
    ],
)
def test_clamp_window_days(raw, expected):
    assert clamp_window_days(raw, default=30, maximum=180) == expected


def test_clamp_window_days_integral_values_are_ints():
    assert isinstance(clamp_window_days("7.0", default=30, maximum=180), int)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 10), ("x", 10), ("0", 10), ("3", 3), ("2.7", 2), ("500", 50)],
)
def test_clamp_top_n(raw, expected):
    assert clamp_top_n(raw, default=10, maximum=50) == expected


def test_window_start():
    now = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert window_start(7, now) == datetime(2025, 3, 3, 12, 0, tzinfo=timezone.utc)
    assert window_start(0.5, now) == datetime(2025, 3, 10, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# shared.ip_utils
# ---------------------------------------------------------------------------


class TestClientIp:
    def test_first_forwarded_hop_wins(self):
        headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "X-Real-IP": "10.0.0.2"}
        assert get_client_ip(headers) == "203.0.113.7"

    def test_real_ip_before_cloudflare(self):
        headers = {"X-Real-IP": "198.51.100.4", "CF-Connecting-IP": "192.0.2.1"}
        assert get_client_ip(headers) == "198.51.100.4"

    def test_cloudflare_fallback(self):
        assert get_client_ip({"cf-connecting-ip": "192.0.2.1"}) == "192.0.2.1"

    def test_empty_forwarded_skipped(self):
        headers = {"X-Forwarded-For": " ", "X-Real-IP": "198.51.100.4"}
        assert get_client_ip(headers) == "198.51.100.4"

    def test_absent(self):
        assert get_client_ip({}) is None

    def test_starlette_headers(self):
        headers = Headers({"x-forwarded-for": "203.0.113.9"})
        assert get_client_ip(headers) == "203.0.113.9"


class TestGeo:
    def test_vercel_headers(self):
        geo = get_geo(
            {
                "X-Vercel-IP-Country": "BR",
                "X-Vercel-IP-City": "S%C3%A3o%20Paulo",
                "X-Vercel-IP-Country-Region": "SP",
            }
        )
        assert geo.country == "BR"
        assert geo.city == "São Paulo"
        assert geo.region == "SP"

    def test_cloudflare_country_fallback(self):
        geo = get_geo({"CF-IPCountry": "MY"})
        assert geo.country == "MY"
        assert geo.city is None
        assert geo.region is None

    def test_nothing_trusted(self):
        geo = get_geo({"X-Country": "US"})
        assert (geo.country, geo.city, geo.region) == (None, None, None)


# ---------------------------------------------------------------------------
# shared.user_agent
# ---------------------------------------------------------------------------


class TestClassifyUserAgent:
    def test_absent(self):
        info = classify_user_agent(None)
        assert (info.device, info.browser, info.os) == (None, None, None)

    def test_mobile(self):
        info = classify_user_agent(IPHONE_UA)
        assert info.device == DEVICE_MOBILE
        assert info.os == "iOS"

    def test_tablet_before_mobile(self):
        assert classify_user_agent(IPAD_UA).device == DEVICE_TABLET

    def test_desktop(self):
        info = classify_user_agent(CHROME_WINDOWS_UA)
        assert info.device == DEVICE_DESKTOP
        assert info.browser == "Chrome"
        assert info.os == "Windows"

    def test_unrecognized_is_desktop_with_unknown_families(self):
        info = classify_user_agent("totally-custom-client")
        assert info.device == DEVICE_DESKTOP
        assert info.browser is None
        assert info.os is None

    def test_parser_failure_degrades_to_desktop(self, mocker):
        mocker.patch("shared.user_agent.parse_ua", side_effect=RuntimeError("bad"))
        info = classify_user_agent(CHROME_WINDOWS_UA)
        assert info.device == DEVICE_DESKTOP
        assert info.browser is None


class TestBotName:
    def test_crawler_detected(self):
        assert get_bot_name(GOOGLEBOT_UA)

    def test_browser_is_not_a_bot(self):
        assert get_bot_name(CHROME_WINDOWS_UA) is None

    def test_absent(self):
        assert get_bot_name(None) is None


# ---------------------------------------------------------------------------
# shared.referrer
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, DIRECT_REFERRER),
        ("", DIRECT_REFERRER),
        ("https://t.co/abc?x=1", "t.co"),
        ("https://WWW.Google.com/search?q=a", "www.google.com"),
        ("http://news.example.org:8080/item", "news.example.org"),
        ("android-app://com.google.android.gm/", "com.google.android.gm"),
        ("not a url", "not a url"),
    ],
)
def test_referrer_host(raw, expected):
    assert referrer_host(raw) == expected


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


class TestShouldSample:
    def test_unknown_event_always_logged(self):
        assert should_sample("something_rare") is True

    def test_zero_rate_never_logged(self, monkeypatch):
        monkeypatch.setitem(shared_logging.SAMPLING_RATES, "link_redirect", 0.0)
        assert not any(should_sample("link_redirect") for _ in range(50))

    def test_full_rate_always_logged(self, monkeypatch):
        monkeypatch.setitem(shared_logging.SAMPLING_RATES, "link_redirect", 1.0)
        assert all(should_sample("link_redirect") for _ in range(50))


class TestHashIp:
    def test_passthrough_outside_production(self, monkeypatch):
        monkeypatch.setattr(shared_logging, "_hash_ips", False)
        assert hash_ip("203.0.113.7") == "203.0.113.7"

    def test_hashed_in_production(self, monkeypatch):
        monkeypatch.setattr(shared_logging, "_hash_ips", True)
        expected = hashlib.sha256(b"203.0.113.7").hexdigest()[:16]
        assert hash_ip("203.0.113.7") == expected

    def test_none(self):
        assert hash_ip(None) is None


def test_redact_sensitive_fields():
    event = {
        "event": "jwt_rejected",
        "authorization": "Bearer abc",
        "access_token": "abc",
        "client_secret": "xyz",
        "slug": "promo",
    }
    out = redact_sensitive_fields(None, "info", dict(event))
    assert out["authorization"] == "***REDACTED***"
    assert out["access_token"] == "***REDACTED***"
    assert out["client_secret"] == "***REDACTED***"
    assert out["slug"] == "promo"
    assert out["event"] == "jwt_rejected"
