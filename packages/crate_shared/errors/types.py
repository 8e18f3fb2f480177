"""Canonical shared error types for build-configuration evaluation.

Errors raised while composing descriptors are converted into this
transport-agnostic shape before being reported to callers such as the
validation script.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """High-level error categories shared across evaluation boundaries."""

    UNSPECIFIED = "unspecified"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Structured error object used in diagnostics output."""

    code: str
    message: str
    category: ErrorCategory
    metadata: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly mapping of this error."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "metadata": dict(self.metadata),
        }
