"""Global Spigot debug server configuration subsystem."""

from __future__ import annotations

from pants.option.option_types import BoolOption, StrListOption, StrOption
from pants.option.subsystem import Subsystem

from pants_spigot._debug_options import (
    BUILD_TOOLS_URL,
    DEFAULT_BUILD_TOOL_DIRECTORY,
    DEFAULT_BUILD_VERSION,
    DEFAULT_SPIGOT_DIRECTORY,
    SPIGOT_MAIN_CLASS,
    DebugOptions,
)


class SpigotSubsystem(Subsystem):
    """Configuration for the local Spigot debug server."""

    options_scope = "spigot"
    help = "Configuration for the Spigot plugin backend and its debug server."

    eula = BoolOption(
        default=False,
        help=(
            "Set to true if you agree to the Mojang EULA "
            "(https://account.mojang.com/documents/minecraft_eula). "
            "The debug server will not start otherwise."
        ),
    )

    build_version = StrOption(
        default=DEFAULT_BUILD_VERSION,
        help="Spigot revision passed to BuildTools as --rev (e.g., 1.16.1 or latest).",
    )

    build_tools_url = StrOption(
        default=BUILD_TOOLS_URL,
        help="Download URL of BuildTools.jar.",
    )

    build_tool_directory = StrOption(
        default=DEFAULT_BUILD_TOOL_DIRECTORY,
        help="BuildTools working and output directory, relative to the build root.",
    )

    build_tool_jar = StrOption(
        default="",
        help="Path of BuildTools.jar. Empty = <build_tool_directory>/BuildTools.jar.",
    )

    spigot_directory = StrOption(
        default=DEFAULT_SPIGOT_DIRECTORY,
        help="Debug server directory, relative to the build root.",
    )

    spigot_jar = StrOption(
        default="",
        help="Path of the staged server jar. Empty = <spigot_directory>/spigot.jar.",
    )

    java = StrOption(
        default="java",
        help="Java executable used to run BuildTools and the server.",
    )

    jvm_args = StrListOption(
        default=[],
        help="Extra JVM arguments for the server (e.g., ['-Xmx2G']).",
    )

    program_args = StrListOption(
        default=[],
        help="Arguments passed to the server (e.g., ['nogui']).",
    )

    main_class = StrOption(
        default=SPIGOT_MAIN_CLASS,
        help="Server main class on the staged jar's classpath.",
    )

    def debug_options(self, build_root: str) -> DebugOptions:
        """Resolve the options against the build root."""
        return DebugOptions.for_project(
            build_root,
            eula=self.eula,
            build_version=self.build_version,
            build_tool_directory=self.build_tool_directory or None,
            build_tool_jar=self.build_tool_jar or None,
            spigot_directory=self.spigot_directory or None,
            spigot_jar=self.spigot_jar or None,
            build_tools_url=self.build_tools_url,
            java=self.java,
            jvm_args=tuple(self.jvm_args),
            program_args=tuple(self.program_args),
            main_class=self.main_class,
        )
