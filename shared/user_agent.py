"""
User-agent classification — framework-agnostic.

Derives the device class (Mobile | Tablet | Desktop), browser and OS display
names through the ``user_agents`` parser (built on ``ua-parser``), and a bot
signature through ``crawlerdetect``.

Classification never raises: an absent user agent yields all-``None`` fields,
an unparseable one yields ``Desktop`` with unknown browser/OS.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from crawlerdetect import CrawlerDetect
from user_agents import parse as parse_ua

from shared.logging import get_logger

log = get_logger(__name__)

DEVICE_MOBILE = "Mobile"
DEVICE_TABLET = "Tablet"
DEVICE_DESKTOP = "Desktop"

# ua-parser's placeholder for "could not determine"
_UNKNOWN_FAMILY = "Other"

_crawler_detect = CrawlerDetect()


@dataclass(frozen=True)
class UserAgentInfo:
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None


def _family(value: Optional[str]) -> Optional[str]:
    if not value or value == _UNKNOWN_FAMILY:
        return None
    return value


def classify_user_agent(user_agent: Optional[str]) -> UserAgentInfo:
    """Return device/browser/OS for *user_agent*."""
    if not user_agent:
        return UserAgentInfo()

    try:
        ua = parse_ua(user_agent)
    except Exception as e:
        log.debug("user_agent_parse_failed", error=str(e), error_type=type(e).__name__)
        return UserAgentInfo(device=DEVICE_DESKTOP)

    if ua.is_tablet:
        device = DEVICE_TABLET
    elif ua.is_mobile:
        device = DEVICE_MOBILE
    else:
        device = DEVICE_DESKTOP

    return UserAgentInfo(
        device=device,
        browser=_family(ua.browser.family),
        os=_family(ua.os.family),
    )


def get_bot_name(user_agent: Optional[str]) -> Optional[str]:
    """Return the crawler signature matched by *user_agent*, or ``None``."""
    if not user_agent:
        return None
    try:
        if not _crawler_detect.isCrawler(user_agent):
            return None
        matches = _crawler_detect.getMatches()
    except Exception as e:
        log.debug("bot_detection_failed", error=str(e), error_type=type(e).__name__)
        return None
    if isinstance(matches, (list, tuple)):
        return str(matches[0]) if matches else "crawler"
    return str(matches) if matches else "crawler"
