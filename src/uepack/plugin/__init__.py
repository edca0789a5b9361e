"""Plugin descriptor handling for uepack."""

from .descriptor import PluginDescriptor, find_descriptor_file, load_plugin_descriptor

__all__ = [
    "PluginDescriptor",
    "find_descriptor_file",
    "load_plugin_descriptor",
]
