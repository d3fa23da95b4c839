"""Debug server configuration (no Pants dependencies).

Default layout under the project directory::

    debug/
        buildtools/
            BuildTools.jar
            BuildData/info.json          (written by BuildTools)
            spigot-<version>.jar         (written by BuildTools)
        spigot/
            spigot.jar                   (staged copy)
            eula.txt
            plugins/
                <plugin>.jar
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Sequence, Union

BUILD_TOOLS_URL = (
    "https://hub.spigotmc.org/jenkins/job/BuildTools/"
    "lastSuccessfulBuild/artifact/target/BuildTools.jar"
)
BUILD_TOOLS_JAR_NAME = "BuildTools.jar"
BUILD_INFO_RELATIVE_PATH = "BuildData/info.json"
SPIGOT_MAIN_CLASS = "org.bukkit.craftbukkit.Main"
DEFAULT_BUILD_VERSION = "latest"
DEFAULT_BUILD_TOOL_DIRECTORY = "debug/buildtools"
DEFAULT_SPIGOT_DIRECTORY = "debug/spigot"
DEFAULT_SPIGOT_JAR_NAME = "spigot.jar"

PathLike = Union[str, "os.PathLike[str]"]

_PATH_FIELDS = ("build_tool_jar", "build_tool_directory", "spigot_directory", "spigot_jar")


@dataclass(frozen=True)
class DebugOptions:
    """Everything the debug pipeline stages read.

    Paths are made absolute on construction, so stages never depend on
    the working directory of the process that runs them.
    """

    eula: bool
    build_version: str
    build_tool_jar: Path
    build_tool_directory: Path
    spigot_directory: Path
    spigot_jar: Path
    build_tools_url: str = BUILD_TOOLS_URL
    java: str = "java"
    jvm_args: tuple[str, ...] = ()
    program_args: tuple[str, ...] = ()
    main_class: str = SPIGOT_MAIN_CLASS

    def __post_init__(self) -> None:
        for name in _PATH_FIELDS:
            value = Path(getattr(self, name)).expanduser()
            object.__setattr__(self, name, Path(os.path.abspath(value)))
        object.__setattr__(self, "jvm_args", tuple(self.jvm_args))
        object.__setattr__(self, "program_args", tuple(self.program_args))

    @classmethod
    def for_project(
        cls,
        project_dir: PathLike,
        *,
        eula: bool = False,
        build_version: str = DEFAULT_BUILD_VERSION,
        build_tool_directory: Optional[PathLike] = None,
        build_tool_jar: Optional[PathLike] = None,
        spigot_directory: Optional[PathLike] = None,
        spigot_jar: Optional[PathLike] = None,
        build_tools_url: str = BUILD_TOOLS_URL,
        java: str = "java",
        jvm_args: Sequence[str] = (),
        program_args: Sequence[str] = (),
        main_class: str = SPIGOT_MAIN_CLASS,
    ) -> "DebugOptions":
        """Build options for a project, filling in the default debug layout.

        Relative paths are resolved against ``project_dir``. When only a
        directory is given, the jar inside it gets its default name.
        """
        root = Path(project_dir)

        def under_root(value: Optional[PathLike], default: PathLike) -> Path:
            return root / Path(value if value else default)

        tool_dir = under_root(build_tool_directory, DEFAULT_BUILD_TOOL_DIRECTORY)
        server_dir = under_root(spigot_directory, DEFAULT_SPIGOT_DIRECTORY)
        tool_jar = root / build_tool_jar if build_tool_jar else tool_dir / BUILD_TOOLS_JAR_NAME
        server_jar = root / spigot_jar if spigot_jar else server_dir / DEFAULT_SPIGOT_JAR_NAME
        return cls(
            eula=eula,
            build_version=build_version or DEFAULT_BUILD_VERSION,
            build_tool_jar=tool_jar,
            build_tool_directory=tool_dir,
            spigot_directory=server_dir,
            spigot_jar=server_jar,
            build_tools_url=build_tools_url,
            java=java,
            jvm_args=tuple(jvm_args),
            program_args=tuple(program_args),
            main_class=main_class,
        )

    @property
    def build_info_path(self) -> Path:
        return self.build_tool_directory / BUILD_INFO_RELATIVE_PATH

    @property
    def eula_file(self) -> Path:
        return self.spigot_directory / "eula.txt"

    @property
    def plugins_directory(self) -> Path:
        return self.spigot_directory / "plugins"

    def describe(self) -> dict[str, str]:
        """Flat string view of the options, for logging and goal output."""
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}
