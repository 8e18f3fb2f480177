"""Tests for mapping evaluation failures onto the shared error shape."""

from __future__ import annotations

from pathlib import Path

from packages.crate_core.errors import (
    DuplicateProjectError,
    InvalidPathError,
    UnknownProjectError,
    UnsupportedProfileSelectorError,
)
from packages.crate_shared.errors import ErrorCategory, codes, exception_to_error, make_error


def test_duplicate_project_maps_to_conflict() -> None:
    error = exception_to_error(DuplicateProjectError("freenet-core"))

    assert error.code == codes.DUPLICATE_PROJECT
    assert error.category == ErrorCategory.CONFLICT
    assert error.metadata["field"] == "projects.freenet-core"
    assert error.metadata["exception_type"] == "DuplicateProjectError"
    assert error.message == "projects.freenet-core: project already declared: freenet-core"


def test_unknown_project_maps_to_not_found() -> None:
    error = exception_to_error(UnknownProjectError("freenet-core"))

    assert error.code == codes.UNKNOWN_PROJECT
    assert error.category == ErrorCategory.NOT_FOUND


def test_validation_failures_keep_their_codes() -> None:
    invalid_path = exception_to_error(
        InvalidPathError(Path("/missing"), field="projects.freenet-core.path")
    )
    unsupported = exception_to_error(
        UnsupportedProfileSelectorError("x86_64-unknown-linux-gnu", field="projects.a.targets")
    )

    assert invalid_path.code == codes.INVALID_PATH
    assert invalid_path.category == ErrorCategory.VALIDATION
    assert "/missing" in invalid_path.message
    assert unsupported.code == codes.UNSUPPORTED_PROFILE_SELECTOR


def test_generic_exceptions_use_fallback_mapping() -> None:
    value_error = exception_to_error(ValueError("bad input"))
    missing = exception_to_error(FileNotFoundError("crates.yaml"))
    unexpected = exception_to_error(RuntimeError())

    assert value_error.code == codes.INVALID_ARGUMENT
    assert value_error.metadata == {"exception_type": "ValueError"}
    assert missing.category == ErrorCategory.NOT_FOUND
    assert unexpected.category == ErrorCategory.INTERNAL
    assert unexpected.message == "unexpected exception"
    assert unexpected.to_dict()["category"] == "internal"


def test_make_error_defaults_code_from_category_and_folds_field() -> None:
    error = make_error(
        ErrorCategory.NOT_FOUND,
        "no such dependency set",
        field="projects.freenet-core.deps_config",
        metadata={"document": "crates.yaml"},
    )

    assert error.code == codes.NOT_FOUND
    assert error.metadata == {
        "document": "crates.yaml",
        "field": "projects.freenet-core.deps_config",
    }
