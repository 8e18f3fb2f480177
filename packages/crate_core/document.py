"""Pydantic schema and validation for crate declaration documents.

A declaration document is the YAML form of one build-configuration fragment::

    dependency_sets:
      common:
        build_and_link: [openssl.dev]
        build_time_only: [pkg-config]
    projects:
      freenet-core:
        path: .
        deps_config: common
        build_config: common
        targets:
          x86_64-unknown-linux-gnu: {default: true}
          wasm32-unknown-unknown: {profiles: ["all profiles"]}
    crates:
      freenet-core: {}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .dependencies import DependencyRole, DependencySet, declare_dependencies, dependency_set
from .errors import CrateConfigError, InvalidDeclarationError


class DependencySetDocument(BaseModel):
    """Packages per dependency role."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    build_time_only: list[str] = Field(default_factory=list)
    build_and_link: list[str] = Field(default_factory=list)

    def to_dependency_set(self) -> DependencySet:
        return dependency_set(
            declare_dependencies(DependencyRole.BUILD_TIME_ONLY, self.build_time_only),
            declare_dependencies(DependencyRole.BUILD_AND_LINK, self.build_and_link),
        )


class TargetDocument(BaseModel):
    """Mapping form of a target selector: exactly one of default/profiles."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    default: bool | None = None
    profiles: list[str] | None = None

    @model_validator(mode="after")
    def _validate_one_selector(self) -> "TargetDocument":
        """Require exactly one selector key."""
        if (self.default is None) == (self.profiles is None):
            raise ValueError("target must set exactly one of default or profiles")
        return self

    def selector_value(self) -> object:
        return self.default if self.default is not None else self.profiles


class ProjectDocument(BaseModel):
    """One project declaration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    deps_config: str | DependencySetDocument
    build_config: str | DependencySetDocument
    targets: dict[str, bool | list[str] | TargetDocument] = Field(default_factory=dict)

    def target_selectors(self) -> dict[str, object]:
        """Return targets with mapping-form selectors flattened."""
        return {
            platform: value.selector_value() if isinstance(value, TargetDocument) else value
            for platform, value in self.targets.items()
        }


class CrateDocument(BaseModel):
    """Crate registration marker; carries no options."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class DeclarationDocument(BaseModel):
    """Top-level declaration document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    dependency_sets: dict[str, DependencySetDocument] = Field(default_factory=dict)
    projects: dict[str, ProjectDocument] = Field(default_factory=dict)
    crates: dict[str, CrateDocument | None] = Field(default_factory=dict)

    def resolve_dependencies(
        self, value: str | DependencySetDocument, *, field: str
    ) -> DependencySet:
        """Resolve a named or inline dependency set."""
        if isinstance(value, DependencySetDocument):
            return value.to_dependency_set()
        named = self.dependency_sets.get(value)
        if named is None:
            raise InvalidDeclarationError(
                f"unknown dependency set '{value}'", field=field
            )
        return named.to_dependency_set()


def load_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def validate_document_data(data: Any) -> list[str]:
    """Return every diagnostic for a raw document; empty when valid."""
    if not isinstance(data, dict):
        return ["document must be a mapping"]
    try:
        document = DeclarationDocument.model_validate(data)
    except ValidationError as exc:
        return [
            f"schema error at {'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]

    errors: list[str] = []
    for set_name, set_document in document.dependency_sets.items():
        try:
            set_document.to_dependency_set()
        except CrateConfigError as exc:
            errors.append(f"dependency_sets.{set_name}.{exc}")

    for project_name, project in document.projects.items():
        for stage_field in ("deps_config", "build_config"):
            value = getattr(project, stage_field)
            field = f"projects.{project_name}.{stage_field}"
            if isinstance(value, str):
                if value not in document.dependency_sets:
                    errors.append(f"{field}: unknown dependency set '{value}'")
                continue
            try:
                value.to_dependency_set()
            except CrateConfigError as exc:
                errors.append(f"{field}.{exc}")

    return errors


def parse_document(data: Any, *, source: str = "document") -> DeclarationDocument:
    """Validate raw data and return the typed document."""
    errors = validate_document_data(data)
    if errors:
        raise InvalidDeclarationError("; ".join(errors), field=source)
    return DeclarationDocument.model_validate(data)


def load_document(path: Path) -> DeclarationDocument:
    """Load and validate one YAML declaration document."""
    if not path.exists():
        raise FileNotFoundError(f"declaration document not found: {path}")
    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise InvalidDeclarationError(f"invalid YAML: {exc}", field=str(path)) from exc
    return parse_document(data, source=str(path))
