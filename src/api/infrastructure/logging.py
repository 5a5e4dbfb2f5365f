"""Structlog configuration shared by the API and the pipeline workers.

Every event carries the service name and version so that relay,
projector and API log lines can be told apart once aggregated.
"""

import logging
import os
import sys

import structlog

from infrastructure.settings import get_settings
from infrastructure.version import __version__

SERVICE_NAME = "orderview"


def _add_service_info(_logger, _method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def _use_colors() -> bool:
    # FORCE_COLOR=1 enables colors outside a TTY (docker compose logs)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(component: str | None = None) -> None:
    """Configure structlog for this process.

    Args:
        component: Pipeline component running in this process
            (``relay`` or ``projector``); bound to every event when given.
    """
    level = logging.DEBUG if get_settings().debug else logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_info,
        structlog.processors.StackInfoRenderer(),
    ]
    if _use_colors():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    if component is not None:
        structlog.contextvars.bind_contextvars(component=component)
