"""Plugin descriptor (.uplugin) loading."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import FileSystemError, ValidationError

DESCRIPTOR_SUFFIX = ".uplugin"


@dataclass(frozen=True)
class PluginDescriptor:
    """Subset of the .uplugin metadata used for packaging."""

    friendly_name: str
    version_name: Optional[str] = None
    engine_version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginDescriptor":
        """Create a PluginDescriptor from a parsed .uplugin document.

        Raises:
            ValidationError: If FriendlyName is missing or not a string
        """
        friendly_name = data.get("FriendlyName")
        if not isinstance(friendly_name, str) or not friendly_name.strip():
            raise ValidationError("Plugin descriptor is missing a 'FriendlyName' string")

        version_name = data.get("VersionName")
        engine_version = data.get("EngineVersion")
        return cls(
            friendly_name=friendly_name,
            version_name=str(version_name) if version_name is not None else None,
            engine_version=str(engine_version) if engine_version is not None else None,
        )

    def summary(self) -> str:
        """One-line description, e.g. ``MyPlugin 1.2 (made for engine 5.0.0)``."""
        text = self.friendly_name
        if self.version_name:
            text += f" {self.version_name}"
        if self.engine_version:
            text += f" (made for engine {self.engine_version})"
        return text


def _read_descriptor(path: Path) -> PluginDescriptor:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise FileSystemError(f"Failed to read plugin descriptor '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"Plugin descriptor '{path}' is not UTF-8 encoded: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Plugin descriptor '{path}' is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Plugin descriptor '{path}' must contain a JSON object")

    return PluginDescriptor.from_dict(data)


def find_descriptor_file(directory: Path) -> Path:
    """Locate the .uplugin file in a plugin directory.

    Args:
        directory: Plugin directory

    Returns:
        Path to the descriptor. With several candidates the last one in
        name order is used and a warning is logged.

    Raises:
        FileSystemError: If the directory cannot be listed
        ValidationError: If the directory contains no .uplugin file
    """
    try:
        candidates = sorted(
            entry for entry in directory.iterdir()
            if entry.suffix == DESCRIPTOR_SUFFIX and entry.is_file()
        )
    except OSError as e:
        raise FileSystemError(f"Cannot list plugin directory '{directory}': {e}") from e

    if not candidates:
        raise ValidationError(f"Could not find any {DESCRIPTOR_SUFFIX} files in the directory '{directory}'.")

    if len(candidates) > 1:
        names = ", ".join(c.name for c in candidates)
        logging.warning(f"Multiple plugin descriptors in '{directory}' ({names}); using '{candidates[-1].name}'.")

    logging.info(f"Found plugin '{candidates[-1].name}' in '{directory}'.")
    return candidates[-1]


def load_plugin_descriptor(plugin_path: Union[str, Path]) -> Tuple[Path, PluginDescriptor]:
    """Load plugin information from a .uplugin file or a plugin directory.

    Args:
        plugin_path: Path to a .uplugin file, or a directory containing one

    Returns:
        Tuple of (absolute descriptor path, parsed descriptor)

    Raises:
        ValidationError: If no descriptor is found or it is malformed
        FileSystemError: If the path cannot be read
    """
    path = Path(plugin_path)

    if path.suffix == DESCRIPTOR_SUFFIX and not path.is_dir():
        descriptor_path = path
    elif path.is_dir():
        descriptor_path = find_descriptor_file(path)
    else:
        raise FileSystemError(f"Plugin path does not exist: {path}")

    return descriptor_path.resolve(), _read_descriptor(descriptor_path)
