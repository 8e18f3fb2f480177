"""Builders for ``ErrorDetail`` values.

Evaluation errors always point at a declaration field, so the builders take
``field`` and the originating exception directly and fold them into the
metadata under stable keys.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Final, Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail

FIELD_KEY: Final[str] = "field"
EXCEPTION_TYPE_KEY: Final[str] = "exception_type"

_DEFAULT_CODES: Final[Mapping[ErrorCategory, str]] = MappingProxyType(
    {
        ErrorCategory.VALIDATION: codes.VALIDATION_ERROR,
        ErrorCategory.NOT_FOUND: codes.NOT_FOUND,
        ErrorCategory.CONFLICT: codes.CONFLICT,
        ErrorCategory.INTERNAL: codes.INTERNAL_ERROR,
    }
)


def make_error(
    category: ErrorCategory,
    message: str,
    *,
    code: str | None = None,
    field: str | None = None,
    exception: BaseException | None = None,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Build an error, defaulting ``code`` from the category."""
    details = dict(metadata or {})
    if field is not None:
        details[FIELD_KEY] = field
    if exception is not None:
        details[EXCEPTION_TYPE_KEY] = type(exception).__name__
    return ErrorDetail(
        code=code or _DEFAULT_CODES.get(category, codes.INTERNAL_ERROR),
        message=message,
        category=category,
        metadata=details,
    )


def validation_error(message: str, **options: Any) -> ErrorDetail:
    return make_error(ErrorCategory.VALIDATION, message, **options)


def not_found_error(message: str, **options: Any) -> ErrorDetail:
    return make_error(ErrorCategory.NOT_FOUND, message, **options)


def conflict_error(message: str, **options: Any) -> ErrorDetail:
    return make_error(ErrorCategory.CONFLICT, message, **options)
