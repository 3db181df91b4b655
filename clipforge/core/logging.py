"""Structured logging configuration using structlog.

Every event carries the application name and environment. Provider
credentials travel through many call sites as keyword arguments, so a
processor masks them before any renderer sees the event. Production logs
are JSON; other environments get console lines.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from clipforge.core.config import Config, get_config

# Event keys whose values are credentials
SECRET_KEYS = frozenset({"credential", "api_key", "authorization", "token", "proxy_auth_token"})
REDACTED = "***"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application name and environment to log events."""
    config = get_config()
    event_dict["app"] = config.app_name
    event_dict["env"] = config.app_env
    return event_dict


def redact_credentials(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values, keeping only whether one was present.

    Example:
        >>> redact_credentials(None, "info", {"event": "x", "credential": "sk-1"})
        {'event': 'x', 'credential': '***'}
    """
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _renderer(config: Config) -> list[Processor]:
    if config.is_production:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(colors=config.is_development),
    ]


def setup_logging() -> None:
    """Configure structlog over the standard library logger.

    The log level comes from configuration. Call once at startup; tests
    call it from conftest.
    """
    config = get_config()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        redact_credentials,
        *_renderer(config),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to a module name.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("Primary path failed", provider="Minimax", status=0)
    """
    return structlog.get_logger(name)
