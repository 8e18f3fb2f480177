"""Tests for declaration documents and per-system document evaluation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from packages.crate_core.dependencies import DependencyRole, DependencyStage
from packages.crate_core.document import load_document, parse_document, validate_document_data
from packages.crate_core.errors import (
    InvalidDeclarationError,
    UnknownProjectError,
    UnsupportedProfileSelectorError,
)
from packages.crate_core.evaluation import evaluate_document, evaluate_for_systems
from packages.crate_core.manifest import ALL_PROFILES, DEFAULT_PROFILE, ProfileList
from packages.crate_core.orchestrator import LocalOrchestrator
from packages.crate_core.targets import PlatformCatalog

LINUX = "x86_64-unknown-linux-gnu"
WASM = "wasm32-unknown-unknown"
MACOS = "aarch64-apple-darwin"


def _freenet_document(**overrides: Any) -> dict[str, Any]:
    document: dict[str, Any] = {
        "dependency_sets": {
            "common": {
                "build_and_link": ["openssl.dev"],
                "build_time_only": ["pkg-config"],
            }
        },
        "projects": {
            "freenet-core": {
                "path": ".",
                "deps_config": "common",
                "build_config": "common",
                "targets": {
                    LINUX: {"default": True},
                    WASM: {"profiles": [ALL_PROFILES]},
                },
            }
        },
        "crates": {"freenet-core": {}},
    }
    document.update(overrides)
    return document


def test_validate_document_data_accepts_freenet_document() -> None:
    assert validate_document_data(_freenet_document()) == []


def test_validate_document_data_reports_unknown_dependency_set() -> None:
    data = _freenet_document()
    data["projects"]["freenet-core"]["build_config"] = "comon"

    errors = validate_document_data(data)

    assert errors == ["projects.freenet-core.build_config: unknown dependency set 'comon'"]


def test_validate_document_data_reports_schema_errors() -> None:
    """Targets must set exactly one of default or profiles."""
    data = _freenet_document()
    data["projects"]["freenet-core"]["targets"] = {
        WASM: {"default": True, "profiles": ["release"]}
    }

    errors = validate_document_data(data)

    assert errors
    assert all(error.startswith("schema error at projects.freenet-core.targets") for error in errors)


def test_validate_document_data_reports_blank_package_references() -> None:
    data = _freenet_document()
    data["dependency_sets"]["common"]["build_time_only"] = ["pkg-config", " "]

    errors = validate_document_data(data)

    assert errors == [
        "dependency_sets.common.build_time_only[1]: package reference must be a non-empty string"
    ]


def test_validate_document_data_rejects_non_mapping() -> None:
    assert validate_document_data(["projects"]) == ["document must be a mapping"]


def test_parse_document_raises_with_all_diagnostics() -> None:
    data = _freenet_document(unexpected={})

    with pytest.raises(InvalidDeclarationError, match="unexpected"):
        parse_document(data, source="crates.yaml")


def test_evaluate_document_composes_freenet_scenario(tmp_path: Path) -> None:
    catalog = PlatformCatalog()
    host = catalog.resolve(LINUX)
    orchestrator = LocalOrchestrator(host)

    result = evaluate_document(
        parse_document(_freenet_document()),
        orchestrator=orchestrator,
        host_platform=host,
        catalog=catalog,
        base_dir=tmp_path,
    )

    descriptor = result.descriptors["freenet-core"]
    assert [registration.name for registration in result.registrations] == ["freenet-core"]
    assert descriptor.path == tmp_path / "."
    assert dict(descriptor.targets) == {
        LINUX: DEFAULT_PROFILE,
        WASM: ProfileList((ALL_PROFILES,)),
    }
    assert descriptor.deps_config == descriptor.build_config
    assert descriptor.deps_config.packages_for(DependencyRole.BUILD_TIME_ONLY) == ("pkg-config",)
    assert orchestrator.installed("freenet-core", DependencyStage.BUILD) == descriptor.build_config
    assert result.to_dict()["crates"] == ["freenet-core"]


def test_evaluate_document_accepts_inline_dependency_sets(tmp_path: Path) -> None:
    data = _freenet_document()
    data["projects"]["freenet-core"]["build_config"] = {"build_and_link": ["openssl.dev", "zlib"]}
    host = PlatformCatalog().resolve(LINUX)

    result = evaluate_document(
        parse_document(data),
        orchestrator=LocalOrchestrator(host),
        host_platform=host,
        base_dir=tmp_path,
    )

    descriptor = result.descriptors["freenet-core"]
    assert descriptor.build_config.packages_for(DependencyRole.BUILD_AND_LINK) == (
        "openssl.dev",
        "zlib",
    )
    assert descriptor.deps_config != descriptor.build_config


def test_evaluate_document_checks_crates_before_registering(tmp_path: Path) -> None:
    """An unknown crate aborts the evaluation before anything is registered."""
    data = _freenet_document(crates={"freenet-core": {}, "freenet-stdlib": None})
    host = PlatformCatalog().resolve(LINUX)
    orchestrator = LocalOrchestrator(host)

    with pytest.raises(UnknownProjectError):
        evaluate_document(
            parse_document(data),
            orchestrator=orchestrator,
            host_platform=host,
            base_dir=tmp_path,
        )

    assert orchestrator.projects == {}


def test_evaluate_document_registers_nothing_when_a_later_crate_is_rejected(
    tmp_path: Path,
) -> None:
    """A host profile list on the last crate must not leave earlier crates registered."""
    project = {"path": ".", "deps_config": "common", "build_config": "common"}
    data = _freenet_document(
        projects={
            "a-crate": project,
            "b-crate": {**project, "targets": {LINUX: ["release"]}},
        },
        crates={"a-crate": {}, "b-crate": {}},
    )
    host = PlatformCatalog().resolve(LINUX)
    orchestrator = LocalOrchestrator(host)

    with pytest.raises(UnsupportedProfileSelectorError) as exc_info:
        evaluate_document(
            parse_document(data),
            orchestrator=orchestrator,
            host_platform=host,
            base_dir=tmp_path,
        )

    assert exc_info.value.field == f"projects.b-crate.targets.{LINUX}"
    assert orchestrator.projects == {}
    assert orchestrator.installed("a-crate", DependencyStage.DEPS) is None


def test_load_document_reads_yaml_and_resolves_relative_paths(tmp_path: Path) -> None:
    crate_dir = tmp_path / "crates" / "core"
    crate_dir.mkdir(parents=True)
    data = _freenet_document()
    data["projects"]["freenet-core"]["path"] = "crates/core"
    document_path = tmp_path / "crates.yaml"
    document_path.write_text(yaml.safe_dump(data), encoding="utf-8")
    host = PlatformCatalog().resolve(LINUX)

    result = evaluate_document(
        load_document(document_path),
        orchestrator=LocalOrchestrator(host),
        host_platform=host,
        base_dir=document_path.parent,
    )

    assert result.descriptors["freenet-core"].path == crate_dir


def test_load_document_reports_malformed_yaml(tmp_path: Path) -> None:
    document_path = tmp_path / "crates.yaml"
    document_path.write_text("projects: [unclosed\n", encoding="utf-8")

    with pytest.raises(InvalidDeclarationError, match="invalid YAML") as exc_info:
        load_document(document_path)

    assert exc_info.value.field == str(document_path)


def test_load_document_requires_existing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "crates.yaml")


def test_evaluate_for_systems_runs_independent_evaluations(tmp_path: Path) -> None:
    """Each host system gets its own evaluation and its own implicit target."""
    data = _freenet_document()
    data["projects"]["freenet-core"]["targets"] = {}
    orchestrators: list[LocalOrchestrator] = []

    def _factory(host):
        orchestrator = LocalOrchestrator(host)
        orchestrators.append(orchestrator)
        return orchestrator

    results = evaluate_for_systems(
        parse_document(data),
        ["linux-x86_64", "macos-aarch64"],
        orchestrator_factory=_factory,
        base_dir=tmp_path,
    )

    assert list(results) == [LINUX, MACOS]
    assert dict(results[LINUX].descriptors["freenet-core"].targets) == {LINUX: DEFAULT_PROFILE}
    assert dict(results[MACOS].descriptors["freenet-core"].targets) == {MACOS: DEFAULT_PROFILE}
    assert len(orchestrators) == 2
    assert orchestrators[0] is not orchestrators[1]


def test_evaluate_for_systems_refuses_restricted_hosts(tmp_path: Path) -> None:
    with pytest.raises(InvalidDeclarationError, match="cannot host an evaluation") as exc_info:
        evaluate_for_systems(
            parse_document(_freenet_document()),
            ["wasm-generic"],
            base_dir=tmp_path,
        )

    assert exc_info.value.field == "systems"
