"""Stream logging configuration for configuration evaluation.

Every record carries the evaluation fields (``system``, ``project``,
``platform``, ``stage``, ``event``) as attributes, ``None`` when unbound, so
formatters and any orchestrator-side handler can read them directly. Other
bound context (``service``, ``environment``, ``path``...) rides along in
``record.context``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from packages.crate_shared.config.models import LoggingSettings

from . import fields
from .context import bind_context, evaluation_fields, get_context


class EvaluationContextFilter(logging.Filter):
    """Attach evaluation fields and remaining context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in evaluation_fields().items():
            setattr(record, name, value)
        extras = {
            key: value
            for key, value in get_context().items()
            if key not in fields.EVALUATION_FIELDS
        }
        setattr(record, "context", extras)
        return True


def _evaluation_items(record: logging.LogRecord) -> list[tuple[str, str]]:
    """Bound evaluation fields of ``record`` in canonical order."""
    items = []
    for name in fields.EVALUATION_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            items.append((name, value))
    return items


def _extra_items(record: logging.LogRecord) -> list[tuple[str, str]]:
    context = getattr(record, "context", None)
    if not isinstance(context, dict):
        return []
    return sorted(context.items())


class JsonFormatter(logging.Formatter):
    """One JSON object per line: core fields, evaluation fields, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        payload.update(_evaluation_items(record))
        payload.update(_extra_items(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Text line followed by ``key=value`` pairs, evaluation fields first."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        pairs = _evaluation_items(record) + _extra_items(record)
        if not pairs:
            return message
        return message + " " + " ".join(f"{key}={value}" for key, value in pairs)


def configure_logging(
    settings: LoggingSettings | None = None, *, stream: TextIO | None = None
) -> logging.Handler:
    """Install one root handler built from ``settings``.

    Logs go to stdout unless ``stream`` is given. Earlier root handlers are
    replaced, and ``service`` and ``environment`` are bound into the context.
    """
    settings = settings or LoggingSettings()

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setLevel(settings.level)
    handler.addFilter(EvaluationContextFilter())
    handler.setFormatter(JsonFormatter() if settings.json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(settings.level)
    root.addHandler(handler)

    bind_context(
        **{fields.SERVICE: settings.service, fields.ENVIRONMENT: settings.environment}
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger using Python's standard logging hierarchy."""
    return logging.getLogger(name)
