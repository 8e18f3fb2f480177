"""Orchestrator boundary consumed by configuration evaluation.

The real orchestrator compiles, links and installs native packages. This core
only talks to it through ``Orchestrator``. ``LocalOrchestrator`` is an
in-memory implementation used by the validation script and tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from packages.crate_shared.logging import fields, get_logger, log_context

from .dependencies import DependencySet, DependencyStage
from .manifest import ProjectDescriptor
from .targets import PlatformTarget, ensure_profile_support

_LOGGER = get_logger(__name__)


class Orchestrator(Protocol):
    """Interface the enclosing build orchestrator provides."""

    def check_project(self, descriptor: ProjectDescriptor) -> None:
        """Raise when ``descriptor`` could not be registered. Registers nothing."""

    def register_project(self, descriptor: ProjectDescriptor) -> None:
        """Register one fully composed project descriptor."""

    def install_native_dependencies(
        self, project: str, dependencies: DependencySet, stage: DependencyStage
    ) -> None:
        """Make native dependencies available to one stage of a project."""

    def resolve_path(self, path: Path) -> bool:
        """Return True when ``path`` references an existing directory."""


class LocalOrchestrator:
    """In-memory orchestrator recording registrations for one host platform."""

    def __init__(self, host_platform: PlatformTarget) -> None:
        self._host_platform = host_platform
        self._projects: dict[str, ProjectDescriptor] = {}
        self._installs: dict[tuple[str, DependencyStage], DependencySet] = {}

    @property
    def host_platform(self) -> PlatformTarget:
        return self._host_platform

    def check_project(self, descriptor: ProjectDescriptor) -> None:
        ensure_profile_support(descriptor, self._host_platform)

    def register_project(self, descriptor: ProjectDescriptor) -> None:
        self.check_project(descriptor)
        self._projects[descriptor.name] = descriptor
        with log_context({fields.PROJECT: descriptor.name}):
            _LOGGER.debug("Project handed to orchestrator")

    def install_native_dependencies(
        self, project: str, dependencies: DependencySet, stage: DependencyStage
    ) -> None:
        self._installs[(project, stage)] = dependencies

    def resolve_path(self, path: Path) -> bool:
        return path.is_dir()

    @property
    def projects(self) -> dict[str, ProjectDescriptor]:
        """Registered descriptors by project name."""
        return dict(self._projects)

    def installed(self, project: str, stage: DependencyStage) -> DependencySet | None:
        """Return the dependency set installed for one project stage."""
        return self._installs.get((project, stage))
