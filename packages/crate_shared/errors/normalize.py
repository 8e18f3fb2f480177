"""Exception normalization utilities for shared error contracts."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from . import codes
from .factories import make_error, not_found_error, validation_error
from .types import ErrorCategory, ErrorDetail


@runtime_checkable
class ReportableError(Protocol):
    """Exceptions that know how to describe themselves as ``ErrorDetail``."""

    def to_error(self) -> ErrorDetail:
        """Return the shared error shape for this exception."""


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Normalize a Python exception into a shared ``ErrorDetail``.

    Domain exceptions exposing ``to_error`` describe themselves; everything
    else falls back to a conservative generic mapping.
    """
    if isinstance(exc, ReportableError):
        return exc.to_error()

    if isinstance(exc, ValueError):
        return validation_error(str(exc), code=codes.INVALID_ARGUMENT, exception=exc)

    if isinstance(exc, (KeyError, FileNotFoundError)):
        return not_found_error(str(exc), exception=exc)

    return make_error(
        ErrorCategory.INTERNAL,
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        exception=exc,
    )
