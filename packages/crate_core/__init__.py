"""Declarative crate build configuration: schema and composition."""

from .dependencies import (
    DependencyRole,
    DependencySet,
    DependencyStage,
    NativeDependencySpec,
    declare_dependencies,
    dependency_set,
)
from .document import DeclarationDocument, load_document, parse_document, validate_document_data
from .errors import (
    CrateConfigError,
    DuplicateProjectError,
    InvalidDeclarationError,
    InvalidPathError,
    UnknownPlatformError,
    UnknownProjectError,
    UnsupportedProfileSelectorError,
)
from .evaluation import (
    Evaluation,
    EvaluationResult,
    declare_project,
    evaluate_document,
    evaluate_for_systems,
)
from .manifest import (
    ALL_PROFILES,
    DEFAULT_PROFILE,
    CrateRegistration,
    DefaultProfile,
    ProfileList,
    ProfileSelector,
    ProjectDescriptor,
    profile_selector,
)
from .orchestrator import LocalOrchestrator, Orchestrator
from .targets import (
    PlatformCatalog,
    PlatformTarget,
    add_target,
    catalog_from_settings,
    effective_targets,
    ensure_profile_support,
    resolve_host_platform,
)

__all__ = [
    "ALL_PROFILES",
    "DEFAULT_PROFILE",
    "CrateConfigError",
    "CrateRegistration",
    "DeclarationDocument",
    "DefaultProfile",
    "DependencyRole",
    "DependencySet",
    "DependencyStage",
    "DuplicateProjectError",
    "Evaluation",
    "EvaluationResult",
    "InvalidDeclarationError",
    "InvalidPathError",
    "LocalOrchestrator",
    "NativeDependencySpec",
    "Orchestrator",
    "PlatformCatalog",
    "PlatformTarget",
    "ProfileList",
    "ProfileSelector",
    "ProjectDescriptor",
    "UnknownPlatformError",
    "UnknownProjectError",
    "UnsupportedProfileSelectorError",
    "add_target",
    "catalog_from_settings",
    "declare_dependencies",
    "declare_project",
    "dependency_set",
    "effective_targets",
    "ensure_profile_support",
    "evaluate_document",
    "evaluate_for_systems",
    "load_document",
    "parse_document",
    "profile_selector",
    "resolve_host_platform",
    "validate_document_data",
]
