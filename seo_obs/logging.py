"""
Structured Logging (structlog).

Every governance decision is logged as an event name plus key/value fields.
While an action is being validated its action_id, action_type and site_url
are bound into the structlog context, so events from the resolver, safety
validator and approval gate all carry them. User tokens never reach the log
output in full.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

from seo_config.settings import Settings

_TOKEN_KEYS = ("user_token", "userToken")


def mask_token(token: str) -> str:
    """Keep a short prefix so log lines can still be correlated per user."""
    if len(token) <= 8:
        return "***"
    return f"{token[:8]}***"


def redact_user_tokens(logger: Any, method_name: str, event_dict: dict) -> dict:
    for key in _TOKEN_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = mask_token(value)
    return event_dict


def add_service_context(settings: Settings):
    """Processor stamping every event with the service name and deployment."""
    service = settings.OTEL_SERVICE_NAME
    deployment = settings.ENVIRONMENT

    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("deployment", deployment)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """
    Configure structlog for structured logging.

    Output format: JSON (default) or text (dev)
    """
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=settings.LOG_LEVEL.upper()
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_context(settings),
        redact_user_tokens,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def bind_action_context(action_id: str, action_type: str, site_url: str) -> Iterator[None]:
    """Bind an action's identity into the log context for the enclosed block."""
    with structlog.contextvars.bound_contextvars(
        action_id=action_id, action_type=action_type, site_url=site_url
    ):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get configured logger."""
    return structlog.get_logger(name)
