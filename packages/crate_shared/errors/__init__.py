"""Public shared error API for build-configuration evaluation."""

from . import codes
from .factories import conflict_error, make_error, not_found_error, validation_error
from .normalize import ReportableError, exception_to_error
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "ErrorCategory",
    "ErrorDetail",
    "ReportableError",
    "codes",
    "conflict_error",
    "exception_to_error",
    "make_error",
    "not_found_error",
    "validation_error",
]
