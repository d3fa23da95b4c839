"""BuildTools side-channel metadata (no Pants dependencies).

BuildTools writes ``BuildData/info.json`` into its working directory; the
``minecraftVersion`` field names the jar it produced::

    {"name": "1.16.1", "minecraftVersion": "1.16.1", ...}
    -> spigot-1.16.1.jar
"""

from __future__ import annotations

import json
from pathlib import Path

from pants_spigot._debug_options import BUILD_INFO_RELATIVE_PATH
from pants_spigot._exceptions import BuildInfoError

VERSION_FIELD = "minecraftVersion"


def spigot_jar_name(version: str) -> str:
    """Return the file name BuildTools gives the server jar for ``version``.

    Example: spigot_jar_name("1.16.1") -> "spigot-1.16.1.jar"
    """
    return f"spigot-{version}.jar"


def resolve_built_version(build_tool_directory: Path) -> str:
    """Read the version BuildTools last built from its info.json.

    Raises:
        BuildInfoError: If the file is missing, unreadable, not a JSON
            object, or lacks a non-empty ``minecraftVersion``.
    """
    path = Path(build_tool_directory) / BUILD_INFO_RELATIVE_PATH
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise BuildInfoError(str(path), "file not found (has BuildTools run?)") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildInfoError(str(path), str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise BuildInfoError(str(path), f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise BuildInfoError(str(path), "expected a JSON object")

    version = data.get(VERSION_FIELD)
    if version is None or not str(version).strip():
        raise BuildInfoError(str(path), f"missing '{VERSION_FIELD}' field")
    return str(version).strip()
