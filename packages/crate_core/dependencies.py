"""Native dependency declarations for crate builds.

A ``NativeDependencySpec`` names packages for one role. A ``DependencySet``
unions any number of specs; it is what projects attach to their ``deps`` and
``build`` stages.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidDeclarationError


class DependencyRole(str, Enum):
    """Why a native package is needed."""

    BUILD_TIME_ONLY = "build_time_only"
    BUILD_AND_LINK = "build_and_link"


class DependencyStage(str, Enum):
    """Lifecycle stage a dependency set is installed for."""

    DEPS = "deps"
    BUILD = "build"


@dataclass(frozen=True, slots=True)
class NativeDependencySpec:
    """Packages required for one dependency role."""

    role: DependencyRole
    packages: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate package references."""
        for index, package in enumerate(self.packages):
            validate_package_ref(package, field=f"{self.role.value}[{index}]")


@dataclass(frozen=True, slots=True)
class DependencySet:
    """Union of native dependency specs, keyed by role.

    Package references are held as sets: duplicates collapse and insertion
    order never affects equality.
    """

    build_time_only: frozenset[str] = frozenset()
    build_and_link: frozenset[str] = frozenset()

    @classmethod
    def from_specs(cls, specs: Iterable[NativeDependencySpec]) -> "DependencySet":
        """Union specs, merging packages that share a role."""
        by_role: dict[DependencyRole, set[str]] = {role: set() for role in DependencyRole}
        for spec in specs:
            by_role[spec.role].update(spec.packages)
        return cls(
            build_time_only=frozenset(by_role[DependencyRole.BUILD_TIME_ONLY]),
            build_and_link=frozenset(by_role[DependencyRole.BUILD_AND_LINK]),
        )

    def packages_for(self, role: DependencyRole) -> tuple[str, ...]:
        """Return packages for one role in a deterministic order."""
        if role is DependencyRole.BUILD_TIME_ONLY:
            return tuple(sorted(self.build_time_only))
        return tuple(sorted(self.build_and_link))

    def union(self, other: "DependencySet") -> "DependencySet":
        """Return the union of this set and ``other``."""
        return DependencySet(
            build_time_only=self.build_time_only | other.build_time_only,
            build_and_link=self.build_and_link | other.build_and_link,
        )

    def to_dict(self) -> dict[str, list[str]]:
        """Return a JSON-friendly mapping of role to sorted packages."""
        return {role.value: list(self.packages_for(role)) for role in DependencyRole}


DependencyInput = NativeDependencySpec | DependencySet | Iterable[NativeDependencySpec]


def declare_dependencies(
    role: DependencyRole | str, packages: Iterable[str]
) -> NativeDependencySpec:
    """Declare the packages needed for one role."""
    try:
        resolved_role = DependencyRole(role)
    except ValueError as exc:
        raise InvalidDeclarationError(
            f"unknown dependency role: {role}", field="role"
        ) from exc
    if isinstance(packages, str):
        raise InvalidDeclarationError(
            "packages must be a sequence of package references, not str",
            field=resolved_role.value,
        )
    return NativeDependencySpec(role=resolved_role, packages=tuple(packages))


def dependency_set(*specs: NativeDependencySpec) -> DependencySet:
    """Union specs into one ``DependencySet``."""
    return DependencySet.from_specs(specs)


def coerce_dependency_set(value: DependencyInput, *, field: str) -> DependencySet:
    """Normalize a spec, a set, or an iterable of specs into a ``DependencySet``."""
    if isinstance(value, DependencySet):
        return value
    if isinstance(value, NativeDependencySpec):
        return DependencySet.from_specs((value,))
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidDeclarationError(
            "expected a dependency set or native dependency specs", field=field
        )
    specs = tuple(value)
    for spec in specs:
        if not isinstance(spec, NativeDependencySpec):
            raise InvalidDeclarationError(
                "expected a dependency set or native dependency specs", field=field
            )
    return DependencySet.from_specs(specs)


def validate_package_ref(value: object, *, field: str) -> str:
    """Validate one package reference such as ``pkg-config`` or ``openssl.dev``."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidDeclarationError("package reference must be a non-empty string", field=field)
    if value != value.strip() or any(char.isspace() for char in value):
        raise InvalidDeclarationError(
            f"package reference must not contain whitespace: {value!r}", field=field
        )
    return value
