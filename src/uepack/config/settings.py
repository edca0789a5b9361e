"""Build settings: defaults, configuration file, and command-line overrides.

Settings come from three layers, later layers winning:

    1. Built-in defaults (host dependent)
    2. unreal-package.json in the working directory (optional)
    3. Command-line flags

The layers are merged once into a frozen BuildSettings before anything runs.

Example unreal-package.json:
    {
        "UnrealEnginePaths": ["D:/Epic Games"],
        "VersionsToInstall": ["4.26", "5"],
        "PluginPath": "./Plugins/MyPlugin",
        "OutputPath": "Packages",
        "Platforms": ["Win64", "Android"],
        "CleanIntermediateFiles": true,
        "ZipPackages": true
    }
"""

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from ..engine.platforms import HostDetector, HostOS, TargetPlatform, default_platforms
from ..errors import FileSystemError, ValidationError

CONFIG_FILE_NAME = "unreal-package.json"

DEFAULT_ENGINE_PATHS = {
    HostOS.WINDOWS: (Path("C:/Program Files/Epic Games"),),
    HostOS.MACOS: (Path("/Users/Shared/Epic Games"),),
}


@dataclass(frozen=True)
class BuildSettings:
    """Fully merged settings for one run."""

    unreal_engine_paths: Tuple[Path, ...]
    versions_to_install: Tuple[str, ...] = ("4",)
    plugin_path: Path = Path(".")
    output_path: Path = Path("Packages")
    platforms: Tuple[TargetPlatform, ...] = ()
    clean_binary_files: bool = False
    clean_intermediate_files: bool = False
    zip_packages: bool = False
    windows_toolchain: str = "VS2019"


# Configuration file key -> BuildSettings field
FILE_KEYS = {
    "UnrealEnginePaths": "unreal_engine_paths",
    "VersionsToInstall": "versions_to_install",
    "PluginPath": "plugin_path",
    "OutputPath": "output_path",
    "Platforms": "platforms",
    "CleanBinaryFiles": "clean_binary_files",
    "CleanIntermediateFiles": "clean_intermediate_files",
    "ZipPackages": "zip_packages",
    "WindowsToolchain": "windows_toolchain",
}


def _string_list(name: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError(f"'{name}' must be a list of strings, got {value!r}")
    if not all(isinstance(item, (str, Path)) for item in value):
        raise ValidationError(f"'{name}' must be a list of strings, got {value!r}")
    return tuple(str(item) for item in value)


def _path_list(name: str, value: Any) -> Tuple[Path, ...]:
    return tuple(Path(item) for item in _string_list(name, value))


def _platform_list(name: str, value: Any) -> Tuple[TargetPlatform, ...]:
    return tuple(TargetPlatform.parse(item) for item in _string_list(name, value))


def _path(name: str, value: Any) -> Path:
    if not isinstance(value, (str, Path)) or not str(value):
        raise ValidationError(f"'{name}' must be a path string, got {value!r}")
    return Path(value)


def _string(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"'{name}' must be a non-empty string, got {value!r}")
    return value


def _boolean(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"'{name}' must be true or false, got {value!r}")
    return value


CONVERTERS: Dict[str, Callable[[str, Any], Any]] = {
    "unreal_engine_paths": _path_list,
    "versions_to_install": _string_list,
    "plugin_path": _path,
    "output_path": _path,
    "platforms": _platform_list,
    "clean_binary_files": _boolean,
    "clean_intermediate_files": _boolean,
    "zip_packages": _boolean,
    "windows_toolchain": _string,
}


def normalize_overrides(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and convert a layer of overrides keyed by BuildSettings field.

    None values mean "not set" and are dropped.

    Raises:
        ValidationError: If a value has the wrong type or an unknown field is given
    """
    result = {}
    for field_name, value in values.items():
        if value is None:
            continue
        if field_name not in CONVERTERS:
            raise ValidationError(f"Unknown setting: {field_name}")
        result[field_name] = CONVERTERS[field_name](field_name, value)
    return result


def default_settings(host: Optional[HostOS] = None) -> BuildSettings:
    """Built-in defaults for the given host (default: detected)."""
    host = host or HostDetector.detect()
    return BuildSettings(
        unreal_engine_paths=DEFAULT_ENGINE_PATHS.get(host, ()),
        platforms=tuple(default_platforms(host)),
    )


def load_settings_file(path: Union[str, Path], required: bool = False) -> Dict[str, Any]:
    """Load the configuration file as a layer of overrides.

    Args:
        path: Path to the JSON configuration file
        required: Raise if the file does not exist (otherwise return no overrides)

    Returns:
        Overrides keyed by BuildSettings field

    Raises:
        ValidationError: If the file is required but missing, or is malformed
        FileSystemError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        if required:
            raise ValidationError(f"Configuration file not found: {path}")
        logging.debug(f"No configuration file at '{path}', using defaults.")
        return {}

    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise FileSystemError(f"Failed to read configuration file '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"Configuration file '{path}' is not UTF-8 encoded: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Configuration file '{path}' must contain a JSON object")

    raw = {}
    for key, value in data.items():
        if key not in FILE_KEYS:
            logging.warning(f"Ignoring unknown setting '{key}' in {path}")
            continue
        raw[FILE_KEYS[key]] = value

    logging.info(f"Loaded settings from '{path}'.")
    return normalize_overrides(raw)


def merge_settings(defaults: BuildSettings, *layers: Mapping[str, Any]) -> BuildSettings:
    """Merge override layers over defaults; later layers win.

    Args:
        defaults: Base settings
        *layers: Override mappings keyed by BuildSettings field

    Returns:
        New frozen BuildSettings
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        merged.update(normalize_overrides(layer))
    return dataclasses.replace(defaults, **merged)


def resolve_settings(
    flag_overrides: Mapping[str, Any],
    config_path: Optional[Union[str, Path]] = None,
    host: Optional[HostOS] = None,
) -> BuildSettings:
    """Build the settings for a run from defaults, config file and flags.

    Args:
        flag_overrides: Values given on the command line (None = not given)
        config_path: Explicit configuration file; must exist if given.
            Defaults to unreal-package.json in the working directory (optional).
        host: Host OS used for defaults (default: detected)

    Returns:
        Merged BuildSettings
    """
    if config_path is not None:
        file_overrides = load_settings_file(config_path, required=True)
    else:
        file_overrides = load_settings_file(Path.cwd() / CONFIG_FILE_NAME)

    return merge_settings(default_settings(host), file_overrides, flag_overrides)
