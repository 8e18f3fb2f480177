"""Typed configuration models for build-configuration evaluation."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "crate-build" / "config.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "crate-build"
    environment: str = "dev"


class PlatformSettings(BaseModel):
    """One platform added to the catalog beyond the built-in set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    triple: str
    aliases: list[str] = Field(default_factory=list)
    restricted: bool = False

    @field_validator("triple")
    @classmethod
    def _validate_triple(cls, value: str) -> str:
        """Reject blank platform triples."""
        triple = value.strip()
        if not triple:
            raise ValueError("evaluation.extra_platforms[].triple must not be empty")
        return triple


class EvaluationSettings(BaseModel):
    """Settings controlling one configuration evaluation."""

    host_platform: str | None = None
    extra_platforms: list[PlatformSettings] = Field(default_factory=list)

    @field_validator("host_platform")
    @classmethod
    def _normalize_host_platform(cls, value: str | None) -> str | None:
        """Treat a blank host platform as unset."""
        if value is None:
            return None
        value = value.strip()
        return value or None


class CrateBuildSettings(BaseSettings):
    """Root settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="CRATE_BUILD_",
        env_nested_delimiter="__",
        extra="ignore",
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
