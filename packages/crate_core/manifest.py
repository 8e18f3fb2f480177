"""Build descriptor records handed to the orchestrator.

A ``ProjectDescriptor`` identifies one crate by path, attaches dependency sets
to its ``deps`` and ``build`` stages, and maps platform triples to profile
selectors. Records are frozen; composition returns new records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Final, TypeAlias

from .dependencies import DependencySet
from .errors import InvalidDeclarationError

ALL_PROFILES: Final[str] = "all profiles"


@dataclass(frozen=True, slots=True)
class DefaultProfile:
    """Selector building exactly one output with the default profile."""

    def to_value(self) -> bool:
        return True


DEFAULT_PROFILE: Final[DefaultProfile] = DefaultProfile()


@dataclass(frozen=True, slots=True)
class ProfileList:
    """Selector building one output per named profile.

    ``ALL_PROFILES`` is passed through untouched; expanding it is the
    orchestrator's job.
    """

    profiles: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate profile names."""
        if len(self.profiles) == 0:
            raise InvalidDeclarationError("profile list must not be empty", field="profiles")
        if len(set(self.profiles)) != len(self.profiles):
            raise InvalidDeclarationError("profile list must not repeat names", field="profiles")
        for profile in self.profiles:
            if not isinstance(profile, str) or not profile.strip():
                raise InvalidDeclarationError(
                    "profile names must be non-empty strings", field="profiles"
                )

    def to_value(self) -> list[str]:
        return list(self.profiles)


ProfileSelector: TypeAlias = DefaultProfile | ProfileList


def profile_selector(value: object, *, field: str = "selector") -> ProfileSelector | None:
    """Normalize a raw selector.

    ``True`` selects the default profile. ``False``, ``None`` and an empty
    list mean "no target" and return ``None``. Profile lists keep their first
    occurrence order with duplicates dropped.
    """
    if isinstance(value, (DefaultProfile, ProfileList)):
        return value
    if value is True:
        return DEFAULT_PROFILE
    if value is False or value is None:
        return None
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise InvalidDeclarationError(
            "selector must be true or a list of profile names", field=field
        )
    profiles: list[str] = []
    for profile in value:
        if not isinstance(profile, str) or not profile.strip():
            raise InvalidDeclarationError("profile names must be non-empty strings", field=field)
        if profile not in profiles:
            profiles.append(profile)
    if not profiles:
        return None
    return ProfileList(profiles=tuple(profiles))


@dataclass(frozen=True, slots=True)
class ProjectDescriptor:
    """Composed build descriptor for one crate."""

    name: str
    path: Path
    deps_config: DependencySet
    build_config: DependencySet
    targets: Mapping[str, ProfileSelector] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the name and freeze the target mapping."""
        validate_package_name(self.name, field="name")
        object.__setattr__(self, "targets", MappingProxyType(dict(self.targets)))

    def __hash__(self) -> int:
        return hash(
            (
                self.name,
                self.path,
                self.deps_config,
                self.build_config,
                frozenset(self.targets.items()),
            )
        )

    def with_target(self, platform: str, selector: ProfileSelector) -> "ProjectDescriptor":
        """Return a copy with one target inserted or replaced."""
        targets = dict(self.targets)
        targets[platform] = selector
        return replace(self, targets=targets)

    def with_targets(self, targets: Mapping[str, ProfileSelector]) -> "ProjectDescriptor":
        """Return a copy with the whole target mapping replaced."""
        return replace(self, targets=dict(targets))

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly view of this descriptor."""
        return {
            "name": self.name,
            "path": str(self.path),
            "deps_config": self.deps_config.to_dict(),
            "build_config": self.build_config.to_dict(),
            "targets": {
                platform: selector.to_value()
                for platform, selector in sorted(self.targets.items())
            },
        }


@dataclass(frozen=True, slots=True)
class CrateRegistration:
    """Marker confirming a declared project is registered as a crate."""

    name: str

    def __post_init__(self) -> None:
        validate_package_name(self.name, field="name")


def validate_package_name(value: object, *, field: str) -> str:
    """Validate a crate/project name: non-blank, no surrounding whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidDeclarationError("package name must be a non-empty string", field=field)
    if value != value.strip():
        raise InvalidDeclarationError(
            f"package name must not start or end with whitespace: {value!r}", field=field
        )
    return value
