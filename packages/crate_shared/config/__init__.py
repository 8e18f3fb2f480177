"""Public API for evaluation settings."""

from .loader import SettingsError, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    CrateBuildSettings,
    EvaluationSettings,
    LoggingSettings,
    PlatformSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CrateBuildSettings",
    "EvaluationSettings",
    "LoggingSettings",
    "PlatformSettings",
    "SettingsError",
    "load_settings",
]
