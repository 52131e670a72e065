"""
Structured logging for the link tracker.

Provides:
- configure_logging(): set up structlog + stdlib logging from LoggingSettings
- get_logger(): get a configured logger instance
- should_sample(): decide whether a high-frequency event should be logged
- hash_ip(): hash client IP addresses for privacy in production

JSON output in production, pretty console output in development. Sensitive
keys are redacted by a processor before rendering.
"""

from __future__ import annotations

import hashlib
import logging
import random
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from config import LoggingSettings

# Sampling rates for high-frequency events; overwritten by configure_logging()
SAMPLING_RATES: dict[str, float] = {
    "link_redirect": 0.05,
    "analytics_query": 0.20,
}

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "authorization",
    "cookie",
    "token",
    "access_token",
    "secret",
    "password",
}

_hash_ips = False


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format UTC timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in ("level", "event", "timestamp", "logger"):
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            sensitive in lowered for sensitive in ("password", "token", "secret")
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_logging(settings: "LoggingSettings", env: str = "development") -> None:
    """
    Configure structlog and the stdlib root logger.

    Production (or LOG_FORMAT=json): JSON lines for easy parsing.
    Development: coloured console output.
    """
    global _hash_ips
    _hash_ips = env == "production"

    SAMPLING_RATES["link_redirect"] = settings.sample_rate_redirect
    SAMPLING_RATES["analytics_query"] = settings.sample_rate_analytics

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json" or env == "production":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("link_created", link_id="...", slug="promo")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """Return True if an event of *event_type* should be logged.

    Unknown event types are always logged.
    """
    sample_rate = SAMPLING_RATES.get(event_type, 1.0)
    if sample_rate >= 1.0:
        return True
    if sample_rate <= 0.0:
        return False
    return random.random() < sample_rate


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash an IP address for logging.

    In production returns the first 16 hex chars of its SHA-256; elsewhere
    returns the address unchanged for easier debugging.
    """
    if ip_address is None:
        return None
    if _hash_ips and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address
