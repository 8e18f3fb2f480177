"""Target platform catalog and target-matrix composition.

Platform identifiers are resolved through a catalog of known target triples
so that a typo fails loudly instead of producing an unreferenced target.
``PlatformCatalog.register`` is the extension point for platforms the
built-in set does not cover.
"""

from __future__ import annotations

import platform as _platform
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Final

from packages.crate_shared.config import CrateBuildSettings

from .errors import InvalidDeclarationError, UnknownPlatformError, UnsupportedProfileSelectorError
from .manifest import DEFAULT_PROFILE, ProfileSelector, ProjectDescriptor, profile_selector


@dataclass(frozen=True, slots=True)
class PlatformTarget:
    """One supported platform, identified by its canonical target triple."""

    triple: str
    aliases: frozenset[str] = frozenset()
    # Restricted execution environments such as wasm never host an evaluation.
    restricted: bool = False

    def __post_init__(self) -> None:
        if not self.triple or self.triple != self.triple.strip():
            raise InvalidDeclarationError("platform triple must be a non-empty string", field="triple")

    @property
    def identifiers(self) -> frozenset[str]:
        return self.aliases | {self.triple}


BUILTIN_PLATFORMS: Final[tuple[PlatformTarget, ...]] = (
    PlatformTarget("x86_64-unknown-linux-gnu", frozenset({"linux-x86_64"})),
    PlatformTarget("aarch64-unknown-linux-gnu", frozenset({"linux-aarch64"})),
    PlatformTarget("x86_64-unknown-linux-musl", frozenset({"linux-x86_64-musl"})),
    PlatformTarget("aarch64-unknown-linux-musl", frozenset({"linux-aarch64-musl"})),
    PlatformTarget("x86_64-apple-darwin", frozenset({"macos-x86_64"})),
    PlatformTarget("aarch64-apple-darwin", frozenset({"macos-aarch64"})),
    PlatformTarget("x86_64-pc-windows-msvc", frozenset({"windows-x86_64"})),
    PlatformTarget("wasm32-unknown-unknown", frozenset({"wasm-generic"}), restricted=True),
    PlatformTarget("wasm32-wasip1", frozenset({"wasm-wasi", "wasm32-wasi"}), restricted=True),
)

# (sys.platform prefix, platform.machine()) -> triple
_HOST_TRIPLES: Final[dict[tuple[str, str], str]] = {
    ("linux", "x86_64"): "x86_64-unknown-linux-gnu",
    ("linux", "amd64"): "x86_64-unknown-linux-gnu",
    ("linux", "aarch64"): "aarch64-unknown-linux-gnu",
    ("linux", "arm64"): "aarch64-unknown-linux-gnu",
    ("darwin", "x86_64"): "x86_64-apple-darwin",
    ("darwin", "arm64"): "aarch64-apple-darwin",
    ("win32", "amd64"): "x86_64-pc-windows-msvc",
    ("win32", "x86_64"): "x86_64-pc-windows-msvc",
}


class PlatformCatalog:
    """Known platforms addressable by triple or alias."""

    def __init__(self, platforms: Iterable[PlatformTarget] = BUILTIN_PLATFORMS) -> None:
        self._platforms: dict[str, PlatformTarget] = {}
        self._identifiers: dict[str, str] = {}
        for platform in platforms:
            self.register(platform)

    def register(self, platform: PlatformTarget) -> PlatformTarget:
        """Add a platform; re-registering an identical platform is a no-op."""
        existing = self._platforms.get(platform.triple)
        if existing is not None and existing != platform:
            raise InvalidDeclarationError(
                f"platform already registered with a different definition: {platform.triple}",
                field="platforms",
            )
        for identifier in platform.identifiers:
            owner = self._identifiers.get(identifier)
            if owner is not None and owner != platform.triple:
                raise InvalidDeclarationError(
                    f"platform identifier '{identifier}' already names {owner}",
                    field="platforms",
                )
        self._platforms[platform.triple] = platform
        for identifier in platform.identifiers:
            self._identifiers[identifier] = platform.triple
        return platform

    def resolve(self, identifier: str, *, field: str = "targets") -> PlatformTarget:
        """Return the platform for a triple or alias."""
        triple = self._identifiers.get(identifier)
        if triple is None:
            raise UnknownPlatformError(identifier, field=field)
        return self._platforms[triple]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identifiers

    def resolve_host(self, identifier: str, *, field: str = "systems") -> PlatformTarget:
        """Return a platform able to host an evaluation.

        Restricted environments such as wasm are build targets only.
        """
        platform = self.resolve(identifier, field=field)
        if platform.restricted:
            raise InvalidDeclarationError(
                f"restricted platform {platform.triple} cannot host an evaluation",
                field=field,
            )
        return platform


def catalog_from_settings(settings: CrateBuildSettings) -> PlatformCatalog:
    """Build the built-in catalog extended with ``evaluation.extra_platforms``."""
    catalog = PlatformCatalog()
    for extra in settings.evaluation.extra_platforms:
        catalog.register(
            PlatformTarget(
                triple=extra.triple,
                aliases=frozenset(extra.aliases),
                restricted=extra.restricted,
            )
        )
    return catalog


def detect_host_platform(catalog: PlatformCatalog) -> PlatformTarget:
    """Return the platform of the running interpreter."""
    system = next(
        (prefix for prefix in ("linux", "darwin", "win32") if sys.platform.startswith(prefix)),
        sys.platform,
    )
    machine = _platform.machine().lower()
    triple = _HOST_TRIPLES.get((system, machine))
    if triple is None:
        raise UnknownPlatformError(f"{system}/{machine}", field="evaluation.host_platform")
    return catalog.resolve_host(triple, field="evaluation.host_platform")


def resolve_host_platform(
    settings: CrateBuildSettings, catalog: PlatformCatalog
) -> PlatformTarget:
    """Return the configured host platform, detecting it when unset."""
    configured = settings.evaluation.host_platform
    if configured is None:
        return detect_host_platform(catalog)
    return catalog.resolve_host(configured, field="evaluation.host_platform")


def normalize_targets(
    targets: Mapping[str, object] | None,
    catalog: PlatformCatalog,
    *,
    field: str = "targets",
) -> dict[str, ProfileSelector]:
    """Resolve target keys to triples and normalize selectors.

    Entries whose selector normalizes to "no target" are dropped. When two
    identifiers name the same triple the later one wins.
    """
    normalized: dict[str, ProfileSelector] = {}
    for identifier, raw_selector in (targets or {}).items():
        entry_field = f"{field}.{identifier}"
        platform = catalog.resolve(identifier, field=entry_field)
        selector = profile_selector(raw_selector, field=entry_field)
        if selector is None:
            continue
        normalized[platform.triple] = selector
    return normalized


def add_target(
    descriptor: ProjectDescriptor,
    platform: PlatformTarget | str,
    selector: object,
    *,
    catalog: PlatformCatalog | None = None,
) -> ProjectDescriptor:
    """Return ``descriptor`` with one target inserted or replaced.

    The last selector written for a platform wins; selectors are never
    merged. An empty profile list (or ``False``) leaves the descriptor
    unchanged.
    """
    field = f"projects.{descriptor.name}.targets"
    if isinstance(platform, str):
        platform = (catalog or PlatformCatalog()).resolve(platform, field=field)
    normalized = profile_selector(selector, field=f"{field}.{platform.triple}")
    if normalized is None:
        return descriptor
    return descriptor.with_target(platform.triple, normalized)


def effective_targets(
    descriptor: ProjectDescriptor, host: PlatformTarget
) -> dict[str, ProfileSelector]:
    """Return the targets to build, defaulting to the host's default profile."""
    if not descriptor.targets:
        return {host.triple: DEFAULT_PROFILE}
    return dict(descriptor.targets)


def ensure_profile_support(descriptor: ProjectDescriptor, host: PlatformTarget) -> None:
    """Reject profile lists on the host's native platform.

    The native platform only builds its default output, so any selector other
    than ``DEFAULT_PROFILE`` there is unsupported.
    """
    selector = effective_targets(descriptor, host).get(host.triple)
    if selector is None or selector == DEFAULT_PROFILE:
        return
    raise UnsupportedProfileSelectorError(
        host.triple, field=f"projects.{descriptor.name}.targets.{host.triple}"
    )
