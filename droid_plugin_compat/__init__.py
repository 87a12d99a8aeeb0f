"""Claude Code plugin conversion for Factory Droid.

This package converts Claude Code plugins (commands, agents and skills)
into the .factory layout used by Factory Droid.
"""

from droid_plugin_compat.parser import ClaudePlugin, PluginManifest, parse_plugin
from droid_plugin_compat.translator import (
    ConvertOptions,
    DroidBundle,
    convert_claude_to_droid,
    flatten_command_name,
    normalize_name,
)
from droid_plugin_compat.writer import ConvertResult, convert_plugin, write_droid_bundle

__version__ = "0.1.0"

__all__ = [
    "ClaudePlugin",
    "PluginManifest",
    "parse_plugin",
    "ConvertOptions",
    "DroidBundle",
    "convert_claude_to_droid",
    "flatten_command_name",
    "normalize_name",
    "ConvertResult",
    "convert_plugin",
    "write_droid_bundle",
]
