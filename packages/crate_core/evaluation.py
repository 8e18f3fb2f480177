"""One configuration evaluation: declare projects, then register crates.

An ``Evaluation`` owns the table of project descriptors for a single pass.
Only declaration and registration write to it, and writes are last-write-wins
per key. Nothing reaches the orchestrator until ``register`` is called.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from packages.crate_shared.logging import fields, get_logger, log_context

from .dependencies import DependencyInput, DependencyStage, coerce_dependency_set
from .document import DeclarationDocument
from .errors import DuplicateProjectError, InvalidPathError, UnknownProjectError
from .manifest import CrateRegistration, ProjectDescriptor, validate_package_name
from .orchestrator import LocalOrchestrator, Orchestrator
from .targets import (
    PlatformCatalog,
    PlatformTarget,
    add_target,
    effective_targets,
    normalize_targets,
)

_LOGGER = get_logger(__name__)


def declare_project(
    name: str,
    path: str | Path,
    deps_config: DependencyInput,
    build_config: DependencyInput,
    targets: Mapping[str, object] | None = None,
    *,
    catalog: PlatformCatalog | None = None,
) -> ProjectDescriptor:
    """Compose a standalone descriptor without touching any evaluation table.

    Path existence is not checked here; ``Evaluation.declare_project`` asks the
    orchestrator.
    """
    validate_package_name(name, field="projects")
    field = f"projects.{name}"
    return ProjectDescriptor(
        name=name,
        path=Path(path),
        deps_config=coerce_dependency_set(deps_config, field=f"{field}.deps_config"),
        build_config=coerce_dependency_set(build_config, field=f"{field}.build_config"),
        targets=normalize_targets(
            targets, catalog or PlatformCatalog(), field=f"{field}.targets"
        ),
    )


class Evaluation:
    """Declaration table and crate registration for one evaluation pass."""

    def __init__(
        self,
        *,
        orchestrator: Orchestrator,
        host_platform: PlatformTarget,
        catalog: PlatformCatalog | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._host_platform = host_platform
        self._catalog = catalog or PlatformCatalog()
        self._projects: dict[str, ProjectDescriptor] = {}
        self._registered: dict[str, ProjectDescriptor] = {}

    @property
    def host_platform(self) -> PlatformTarget:
        return self._host_platform

    @property
    def catalog(self) -> PlatformCatalog:
        return self._catalog

    def declare_project(
        self,
        name: str,
        path: str | Path,
        deps_config: DependencyInput,
        build_config: DependencyInput,
        targets: Mapping[str, object] | None = None,
    ) -> ProjectDescriptor:
        """Declare one project in this evaluation.

        Raises ``InvalidPathError`` when the orchestrator cannot resolve
        ``path`` to a directory and ``DuplicateProjectError`` when ``name`` was
        already declared.
        """
        descriptor = declare_project(
            name, path, deps_config, build_config, targets, catalog=self._catalog
        )
        if name in self._projects:
            raise DuplicateProjectError(name)
        if not self._orchestrator.resolve_path(descriptor.path):
            raise InvalidPathError(descriptor.path, field=f"projects.{name}.path")

        self._projects[name] = descriptor
        with log_context(
            {
                fields.EVENT: fields.PROJECT_DECLARED_EVENT,
                fields.PROJECT: name,
                fields.PATH: descriptor.path,
                fields.TARGET_COUNT: len(descriptor.targets),
            }
        ):
            _LOGGER.debug("Project declared")
        return descriptor

    def add_target(
        self, name: str, platform: PlatformTarget | str, selector: object
    ) -> ProjectDescriptor:
        """Insert or replace one target of a declared project."""
        descriptor = self.get_project(name)
        updated = add_target(descriptor, platform, selector, catalog=self._catalog)
        self._projects[name] = updated
        if updated is not descriptor:
            with log_context(
                {
                    fields.EVENT: fields.TARGET_ADDED_EVENT,
                    fields.PROJECT: name,
                    fields.PLATFORM: platform if isinstance(platform, str) else platform.triple,
                }
            ):
                _LOGGER.debug("Target added")
        return updated

    def get_project(self, name: str) -> ProjectDescriptor:
        """Return one declared descriptor by name."""
        try:
            return self._projects[name]
        except KeyError as exc:
            raise UnknownProjectError(name) from exc

    def list_projects(self) -> tuple[ProjectDescriptor, ...]:
        """Return declared descriptors sorted by name."""
        return tuple(self._projects[name] for name in sorted(self._projects))

    def resolved_descriptor(self, name: str) -> ProjectDescriptor:
        """Return a declared descriptor with the implicit host target applied."""
        descriptor = self.get_project(name)
        return descriptor.with_targets(effective_targets(descriptor, self._host_platform))

    def check(self, name: str) -> ProjectDescriptor:
        """Ask the orchestrator whether ``name`` would register, without registering it."""
        descriptor = self.resolved_descriptor(name)
        self._orchestrator.check_project(descriptor)
        return descriptor

    def register(self, name: str) -> CrateRegistration:
        """Hand the composed descriptor for ``name`` to the orchestrator.

        Registering an unchanged descriptor again is a no-op; a changed
        descriptor replaces the prior registration.
        """
        descriptor = self.resolved_descriptor(name)
        registration = CrateRegistration(name=name)
        context = {fields.PROJECT: name}

        if self._registered.get(name) == descriptor:
            with log_context({**context, fields.EVENT: fields.CRATE_REGISTRATION_UNCHANGED_EVENT}):
                _LOGGER.debug("Crate already registered with identical descriptor")
            return registration

        self._orchestrator.register_project(descriptor)
        for stage, dependencies in (
            (DependencyStage.DEPS, descriptor.deps_config),
            (DependencyStage.BUILD, descriptor.build_config),
        ):
            self._orchestrator.install_native_dependencies(name, dependencies, stage)
            with log_context({**context, fields.STAGE: stage.value}):
                _LOGGER.debug("Native dependencies installed")
        self._registered[name] = descriptor

        with log_context(
            {
                **context,
                fields.EVENT: fields.CRATE_REGISTERED_EVENT,
                fields.TARGET_COUNT: len(descriptor.targets),
            }
        ):
            _LOGGER.info("Crate registered")
        return registration

    def registered(self) -> dict[str, ProjectDescriptor]:
        """Descriptors handed to the orchestrator so far, by name."""
        return dict(self._registered)


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating one document for one host system."""

    system: str
    registrations: tuple[CrateRegistration, ...]
    descriptors: Mapping[str, ProjectDescriptor]

    def to_dict(self) -> dict[str, object]:
        return {
            "system": self.system,
            "crates": [registration.name for registration in self.registrations],
            "projects": {
                name: descriptor.to_dict()
                for name, descriptor in sorted(self.descriptors.items())
            },
        }


def evaluate_document(
    document: DeclarationDocument,
    *,
    orchestrator: Orchestrator,
    host_platform: PlatformTarget,
    catalog: PlatformCatalog | None = None,
    base_dir: Path | None = None,
) -> EvaluationResult:
    """Compose every declaration, then register every crate.

    All projects are declared and every crate is checked by the orchestrator
    before the first registration, so a failing evaluation registers nothing.
    """
    evaluation = Evaluation(
        orchestrator=orchestrator, host_platform=host_platform, catalog=catalog
    )
    for name, project in sorted(document.projects.items()):
        field = f"projects.{name}"
        path = Path(project.path)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        evaluation.declare_project(
            name,
            path,
            document.resolve_dependencies(project.deps_config, field=f"{field}.deps_config"),
            document.resolve_dependencies(project.build_config, field=f"{field}.build_config"),
            project.target_selectors(),
        )

    crate_names = sorted(document.crates)
    for name in crate_names:
        evaluation.check(name)
    registrations = tuple(evaluation.register(name) for name in crate_names)

    with log_context(
        {
            fields.EVENT: fields.EVALUATION_COMPLETED_EVENT,
            fields.SYSTEM: host_platform.triple,
        }
    ):
        _LOGGER.info("Evaluation completed with %d crate(s)", len(registrations))
    return EvaluationResult(
        system=host_platform.triple,
        registrations=registrations,
        descriptors=evaluation.registered(),
    )


def evaluate_for_systems(
    document: DeclarationDocument,
    systems: Iterable[str],
    *,
    orchestrator_factory: Callable[[PlatformTarget], Orchestrator] = LocalOrchestrator,
    catalog: PlatformCatalog | None = None,
    base_dir: Path | None = None,
) -> dict[str, EvaluationResult]:
    """Evaluate ``document`` once per host system, each in a fresh evaluation."""
    catalog = catalog or PlatformCatalog()
    results: dict[str, EvaluationResult] = {}
    for system in systems:
        host_platform = catalog.resolve_host(system, field="systems")
        with log_context({fields.SYSTEM: host_platform.triple}):
            results[host_platform.triple] = evaluate_document(
                document,
                orchestrator=orchestrator_factory(host_platform),
                host_platform=host_platform,
                catalog=catalog,
                base_dir=base_dir,
            )
    return results
