"""Tests for structured logging configuration and context propagation."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from packages.crate_core.dependencies import DependencySet
from packages.crate_core.evaluation import Evaluation
from packages.crate_core.orchestrator import LocalOrchestrator
from packages.crate_core.targets import PlatformCatalog
from packages.crate_shared.config import LoggingSettings
from packages.crate_shared.logging import (
    bind_context,
    clear_context,
    configure_logging,
    evaluation_fields,
    get_context,
    get_logger,
    log_context,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    clear_context()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


def _json_lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_bind_context_stringifies_and_skips_none() -> None:
    bind_context(project="freenet-core", target_count=2, platform=None)

    assert get_context() == {"project": "freenet-core", "target_count": "2"}


def test_clear_context_removes_selected_keys() -> None:
    bind_context(project="freenet-core", system="x86_64-unknown-linux-gnu")

    clear_context("project")

    assert get_context() == {"system": "x86_64-unknown-linux-gnu"}


def test_log_context_layers_values_and_restores_previous_values() -> None:
    bind_context(system="x86_64-unknown-linux-gnu")

    with log_context({"project": "freenet-core"}, stage="deps"):
        assert get_context() == {
            "system": "x86_64-unknown-linux-gnu",
            "project": "freenet-core",
            "stage": "deps",
        }

    assert get_context() == {"system": "x86_64-unknown-linux-gnu"}


def test_evaluation_fields_report_unbound_fields_as_none() -> None:
    with log_context({"project": "freenet-core", "path": "/src"}):
        assert evaluation_fields() == {
            "system": None,
            "project": "freenet-core",
            "platform": None,
            "stage": None,
            "event": None,
        }


def test_configure_logging_emits_evaluation_fields_as_record_attributes() -> None:
    stream = io.StringIO()
    handler = configure_logging(LoggingSettings(level="DEBUG"), stream=stream)
    records: list[logging.LogRecord] = []
    handler.addFilter(lambda record: records.append(record) or True)

    with log_context({"system": "x86_64-unknown-linux-gnu", "path": "/src"}):
        get_logger("tests.logging").debug("Project declared")

    [record] = records
    assert getattr(record, "system") == "x86_64-unknown-linux-gnu"
    assert getattr(record, "project") is None
    assert getattr(record, "context") == {
        "environment": "dev",
        "path": "/src",
        "service": "crate-build",
    }


def test_configure_logging_emits_json_with_context() -> None:
    """JSON output should include core fields, evaluation fields and extras."""
    stream = io.StringIO()
    configure_logging(LoggingSettings(level="DEBUG"), stream=stream)

    with log_context({"project": "freenet-core"}):
        get_logger("tests.logging").info("Crate registered")

    [payload] = _json_lines(stream)
    assert list(payload)[:5] == ["timestamp", "level", "logger", "message", "project"]
    assert payload["message"] == "Crate registered"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tests.logging"
    assert payload["service"] == "crate-build"
    assert payload["environment"] == "dev"


def test_configure_logging_plain_output_lists_evaluation_fields_first() -> None:
    stream = io.StringIO()
    configure_logging(LoggingSettings(json_output=False), stream=stream)

    with log_context({"project": "freenet-core"}):
        get_logger("tests.logging").warning("Project declared")

    line = stream.getvalue().strip()
    assert "WARNING tests.logging Project declared" in line
    assert line.endswith("project=freenet-core environment=dev service=crate-build")


def test_configure_logging_replaces_existing_handlers() -> None:
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())

    assert len(logging.getLogger().handlers) == 1


def test_registration_logs_one_record_per_dependency_stage(tmp_path: Path) -> None:
    stream = io.StringIO()
    configure_logging(LoggingSettings(level="DEBUG"), stream=stream)
    host = PlatformCatalog().resolve("x86_64-unknown-linux-gnu")
    evaluation = Evaluation(orchestrator=LocalOrchestrator(host), host_platform=host)
    evaluation.declare_project("freenet-core", tmp_path, DependencySet(), DependencySet())

    evaluation.register("freenet-core")

    stages = [
        payload["stage"]
        for payload in _json_lines(stream)
        if payload["message"] == "Native dependencies installed"
    ]
    assert stages == ["deps", "build"]
