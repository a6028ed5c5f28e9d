"""Structured logging for mimmoza.

structlog over the stdlib ``logging`` module, console output by default and
JSON when ``MIMMOZA_JSON_LOGS`` is set. Services wrap each review in
``review_context`` so that every event logged while scoring a dossier
carries the project nature or dossier id it belongs to.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

_configured: bool = False


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> None:
    """Configure structlog and the root stdlib logger once.

    Args:
        level: Log level name; defaults to the ``log_level`` setting
        json_output: JSON lines instead of console output; defaults to the
            ``json_logs`` setting
    """
    global _configured

    if _configured:
        return

    from mimmoza.core.settings import get_settings

    settings = get_settings()
    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = settings.json_logs

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stdout,
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger named after the calling module; configures logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


@contextmanager
def review_context(**fields: Any) -> Iterator[None]:
    """Bind review identifiers (``project_nature``, ``dossier_id``...) to
    every event logged inside the block. None values are not bound."""
    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield
