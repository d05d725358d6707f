"""structlog setup for the ``otc_cloud`` logger namespace.

The package logs through stdlib loggers named ``otc_cloud.*``. An
application that embeds the client owns the root logger; ``configure_logging``
only attaches one handler to the ``otc_cloud`` logger and stops propagation,
so calling it twice (or after the host configured logging) never duplicates
output.

Each provisioning workflow binds an ``operation_id`` into
``operation_id_ctx``; the create call and every poll of the same resource
carry it.

Usage::

    from otc_cloud.observability import configure_logging

    configure_logging(level="DEBUG")
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import TextIO

import structlog

PACKAGE_LOGGER = "otc_cloud"

operation_id_ctx: ContextVar[str | None] = ContextVar("operation_id", default=None)


def _add_operation_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Attach the bound operation_id, if any."""
    oid = operation_id_ctx.get()
    if oid is not None:
        event_dict["operation_id"] = oid
    return event_dict


class _PackageHandler(logging.StreamHandler):
    """Marker type so reconfiguration can find and replace its own handler."""


def configure_logging(
    *,
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route ``otc_cloud.*`` structlog events to ``stream`` (stdout by default).

    Args:
        level: Log level name. Defaults to OTC_LOG_LEVEL env var or INFO.
        json_output: JSON lines when True, console rendering when False.
            Defaults to OTC_LOG_FORMAT env var == "json".
        stream: Destination; mostly useful for tests.

    Returns the configured package logger.
    """
    level = level or os.environ.get("OTC_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("OTC_LOG_FORMAT", "json") == "json"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_operation_id,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    handler = _PackageHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in package_logger.handlers if isinstance(h, _PackageHandler)]:
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.propagate = False
    return package_logger


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given name."""
    return structlog.get_logger(name)


def mask_secret(value: str | None) -> str:
    """Mask a token for log output, keeping only its edges."""
    if not value or len(value) < 8:
        return "********"
    return f"{value[:4]}********{value[-2:]}"
