"""Pure Python plugin.yml rendering (no Pants dependencies)."""

from __future__ import annotations

import yaml

from pants_spigot._types import SpigotDescription

DESCRIPTOR_FILE_NAME = "plugin.yml"


def render_descriptor(data: SpigotDescription) -> str:
    """Render plugin.yml content, keeping the plugin.yml key order."""
    return yaml.dump(
        data.to_dict(),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def descriptor_output_path(plugin_name: str) -> str:
    """Return where the spigot-descriptor goal writes plugin.yml, under dist/.

    Example: descriptor_output_path("My Plugin") -> "My_Plugin/plugin.yml"
    """
    return f"{plugin_name.replace(' ', '_')}/{DESCRIPTOR_FILE_NAME}"
