"""Errors raised while composing and registering build descriptors.

Every error is fatal to the evaluation that raised it and names the
offending field so the diagnostic points straight at the declaration.
"""

from __future__ import annotations

from pathlib import Path

from packages.crate_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    not_found_error,
    validation_error,
)


class CrateConfigError(ValueError):
    """Base error for all build-configuration evaluation failures."""

    code: str = codes.VALIDATION_ERROR

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def to_error(self) -> ErrorDetail:
        """Return the shared error shape for this failure."""
        return validation_error(str(self), code=self.code, field=self.field, exception=self)


class InvalidDeclarationError(CrateConfigError):
    """Raised when a declaration is malformed (empty names, bad documents)."""

    code = codes.INVALID_DECLARATION


class InvalidPathError(CrateConfigError):
    """Raised when a project path does not reference an existing directory."""

    code = codes.INVALID_PATH

    def __init__(self, path: Path, *, field: str) -> None:
        super().__init__(f"path does not reference an existing directory: {path}", field=field)
        self.path = path


class DuplicateProjectError(CrateConfigError):
    """Raised when a project name is declared twice in one evaluation."""

    code = codes.DUPLICATE_PROJECT

    def __init__(self, name: str) -> None:
        super().__init__(f"project already declared: {name}", field=f"projects.{name}")
        self.name = name

    def to_error(self) -> ErrorDetail:
        return conflict_error(str(self), code=self.code, field=self.field, exception=self)


class UnknownProjectError(CrateConfigError):
    """Raised when a crate is registered without a declared project."""

    code = codes.UNKNOWN_PROJECT

    def __init__(self, name: str) -> None:
        super().__init__(f"no project declared with name: {name}", field=f"crates.{name}")
        self.name = name

    def to_error(self) -> ErrorDetail:
        return not_found_error(str(self), code=self.code, field=self.field, exception=self)


class UnknownPlatformError(CrateConfigError):
    """Raised when a target key is not in the platform catalog."""

    code = codes.UNKNOWN_PLATFORM

    def __init__(self, platform: str, *, field: str) -> None:
        super().__init__(f"unknown platform identifier: {platform}", field=field)
        self.platform = platform


class UnsupportedProfileSelectorError(CrateConfigError):
    """Raised when a platform without profiles is given a profile list."""

    code = codes.UNSUPPORTED_PROFILE_SELECTOR

    def __init__(self, platform: str, *, field: str) -> None:
        super().__init__(
            f"platform {platform} only supports the default profile selector",
            field=field,
        )
        self.platform = platform
