#!/usr/bin/env python3
"""Validate and evaluate a crate declaration document."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from packages.crate_core import (
    CrateConfigError,
    evaluate_for_systems,
    load_document,
    resolve_host_platform,
)
from packages.crate_core.targets import catalog_from_settings
from packages.crate_shared.config import SettingsError, load_settings
from packages.crate_shared.errors import ErrorDetail, exception_to_error
from packages.crate_shared.logging import configure_logging

SUCCESS_EXIT_CODE = 0
INVALID_EXIT_CODE = 1
MISSING_DOCUMENT_EXIT_CODE = 2


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate a crate declaration document.")
    parser.add_argument(
        "--document",
        type=Path,
        default=Path("crates.yaml"),
        help="Path to the declaration document.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to the settings file (default: ~/.config/crate-build/config.yaml).",
    )
    parser.add_argument(
        "--system",
        action="append",
        default=[],
        help="Host system to evaluate for (can be repeated; default: this host).",
    )
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON.")
    return parser.parse_args(argv)


def _report_error(error: ErrorDetail, *, json_output: bool) -> None:
    if json_output:
        print(json.dumps({"ok": False, "error": error.to_dict()}, indent=2))
    else:
        print(f"ERROR: [{error.code}] {error.message}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if not args.document.exists():
        print(f"Declaration document not found: {args.document}", file=sys.stderr)
        return MISSING_DOCUMENT_EXIT_CODE

    try:
        settings = load_settings(config_path=args.settings)
        configure_logging(settings.logging, stream=sys.stderr)
        catalog = catalog_from_settings(settings)
        systems = args.system or [resolve_host_platform(settings, catalog).triple]
        document = load_document(args.document)
        results = evaluate_for_systems(
            document,
            systems,
            catalog=catalog,
            base_dir=args.document.resolve().parent,
        )
    except (CrateConfigError, SettingsError) as exc:
        _report_error(exception_to_error(exc), json_output=args.json)
        return INVALID_EXIT_CODE

    if args.json:
        payload = {
            "ok": True,
            "systems": {system: result.to_dict() for system, result in results.items()},
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return SUCCESS_EXIT_CODE

    for system, result in results.items():
        for name, descriptor in sorted(result.descriptors.items()):
            targets = ", ".join(sorted(descriptor.targets))
            print(f"{system}: {name} -> {targets}")
    print("Crate declaration validation passed.")
    return SUCCESS_EXIT_CODE


if __name__ == "__main__":
    raise SystemExit(main())
