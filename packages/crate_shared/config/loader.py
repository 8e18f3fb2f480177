"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables
3) the YAML settings file (``~/.config/crate-build/config.yaml`` by default)
4) Model defaults

Environment variable format:
- Prefix: ``CRATE_BUILD_``
- Nested keys: ``__`` separator
- Example: ``CRATE_BUILD_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError
from pydantic_settings import SettingsConfigDict

from packages.crate_shared.errors import ErrorDetail, codes, validation_error

from .models import DEFAULT_CONFIG_PATH, CrateBuildSettings


class SettingsError(ValueError):
    """Raised when the settings sources do not produce valid settings."""

    def __init__(self, message: str, *, source: Path) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"

    def to_error(self) -> ErrorDetail:
        return validation_error(
            str(self),
            code=codes.INVALID_SETTINGS,
            field="settings",
            exception=self,
            metadata={"source": str(self.source)},
        )


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> CrateBuildSettings:
    """Load settings by applying the standard precedence cascade.

    Raises ``SettingsError`` for unreadable YAML or values failing validation.
    """
    settings_cls = CrateBuildSettings
    source = DEFAULT_CONFIG_PATH
    if config_path is not None:
        source = Path(config_path)

        class _FileSettings(CrateBuildSettings):
            model_config = SettingsConfigDict(yaml_file=source)

        settings_cls = _FileSettings

    try:
        return settings_cls(**dict(cli_params or {}))
    except yaml.YAMLError as exc:
        raise SettingsError(f"invalid YAML: {exc}", source=source) from exc
    except ValidationError as exc:
        raise SettingsError(_describe_validation_error(exc), source=source) from exc


def _describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'settings'}: {item['msg']}"
        for item in error.errors()
    )
