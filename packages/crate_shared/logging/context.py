"""Evaluation-scoped logging context.

The context is an immutable mapping held in a ``ContextVar``. Each evaluation
binds ``system``, each declaration or registration binds ``project`` (and
``stage`` while installing dependencies); nested scopes layer on top and are
unwound on exit.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

from . import fields

_EMPTY: Mapping[str, str] = MappingProxyType({})

_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar(
    "crate_build_log_context", default=_EMPTY
)


def _layer(values: Mapping[str, object]) -> Mapping[str, str]:
    """Return the current context with ``values`` stringified on top."""
    merged = dict(_LOG_CONTEXT.get())
    merged.update({str(key): str(value) for key, value in values.items() if value is not None})
    return MappingProxyType(merged)


def get_context() -> dict[str, str]:
    """Return a copy of the full logging context."""
    return dict(_LOG_CONTEXT.get())


def evaluation_fields() -> dict[str, str | None]:
    """Return every evaluation field, ``None`` where unbound."""
    context = _LOG_CONTEXT.get()
    return {name: context.get(name) for name in fields.EVALUATION_FIELDS}


def bind_context(**values: object) -> None:
    """Bind values for the rest of the current context; ``None`` is skipped."""
    _LOG_CONTEXT.set(_layer(values))


def clear_context(*keys: str) -> None:
    """Clear selected keys or the entire logging context."""
    if not keys:
        _LOG_CONTEXT.set(_EMPTY)
        return
    remaining = {key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys}
    _LOG_CONTEXT.set(MappingProxyType(remaining))


@contextmanager
def log_context(
    values: Mapping[str, object] | None = None, /, **extra: object
) -> Iterator[None]:
    """Layer ``values`` and ``extra`` onto the context for one block."""
    token = _LOG_CONTEXT.set(_layer({**(values or {}), **extra}))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)
