"""Configuration handling for uepack."""

from .settings import (
    CONFIG_FILE_NAME,
    BuildSettings,
    default_settings,
    load_settings_file,
    merge_settings,
    normalize_overrides,
    resolve_settings,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "BuildSettings",
    "default_settings",
    "load_settings_file",
    "merge_settings",
    "normalize_overrides",
    "resolve_settings",
]
