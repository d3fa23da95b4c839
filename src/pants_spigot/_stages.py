"""Debug pipeline stages (no Pants dependencies).

Each stage takes the DebugOptions explicitly and writes exactly one target:

    download_build_tools  -> build_tool_jar
    build_spigot          -> build_tool_directory (BuildTools output)
    prepare_spigot        -> spigot_jar
    run_spigot            -> eula.txt, then the foreground server process
    prepare_plugins       -> plugins/<artifact>
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import httpx

from pants_spigot._build_info import resolve_built_version, spigot_jar_name
from pants_spigot._debug_options import DebugOptions
from pants_spigot._exceptions import (
    EulaNotAcceptedError,
    PluginArtifactNotFoundError,
    StagingError,
)
from pants_spigot._fetch import fetch_artifact
from pants_spigot._process import ProcessRequest, ProcessResult, ProcessRunner, run_process

logger = logging.getLogger(__name__)

EULA_CONTENT = "eula=true"

VersionResolver = Callable[[Path], str]


# =============================================================================
# Fetch / Build
# =============================================================================


def download_build_tools(
    options: DebugOptions,
    *,
    client: Optional[httpx.Client] = None,
) -> bool:
    """Download BuildTools.jar unless it is already present."""
    return fetch_artifact(options.build_tools_url, options.build_tool_jar, client=client)


def build_spigot_argv(options: DebugOptions) -> tuple[str, ...]:
    return (
        options.java,
        "-jar",
        str(options.build_tool_jar),
        "--rev",
        options.build_version,
        "--output-dir",
        str(options.build_tool_directory),
    )


def build_spigot(
    options: DebugOptions,
    *,
    runner: ProcessRunner = run_process,
) -> ProcessResult:
    """Run BuildTools for ``options.build_version``. Always runs."""
    options.build_tool_directory.mkdir(parents=True, exist_ok=True)
    logger.info("Building spigot %s with BuildTools", options.build_version)
    return runner(
        ProcessRequest(
            argv=build_spigot_argv(options),
            description=f"BuildTools --rev {options.build_version}",
            cwd=str(options.build_tool_directory),
        )
    )


# =============================================================================
# Stage
# =============================================================================


def spigot_jar_missing(options: DebugOptions) -> bool:
    """Skip predicate for staging: only existence is checked, not version."""
    return not options.spigot_jar.is_file()


def prepare_spigot(
    options: DebugOptions,
    *,
    resolve_version: VersionResolver = resolve_built_version,
) -> Optional[Path]:
    """Copy the jar BuildTools produced to the staged ``spigot_jar`` path.

    Returns the staged path, or None when a staged jar already exists
    (nothing is read or written in that case).

    Raises:
        BuildInfoError: If BuildData/info.json cannot be resolved.
        StagingError: If the versioned BuildTools output jar is absent.
    """
    if not spigot_jar_missing(options):
        logger.debug("%s already staged, skipping", options.spigot_jar)
        return None

    version = resolve_version(options.build_tool_directory)
    source = options.build_tool_directory / spigot_jar_name(version)
    if not source.is_file():
        raise StagingError(
            f"BuildTools output {source} not found for version {version}. "
            "Run the build-spigot task first."
        )

    destination = options.spigot_jar
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(f".{destination.name}.part")
    shutil.copyfile(source, partial)
    os.replace(partial, destination)
    logger.info("Staged %s as %s", source.name, destination)
    return destination


# =============================================================================
# Launch
# =============================================================================


def run_spigot_argv(options: DebugOptions) -> tuple[str, ...]:
    return (
        options.java,
        *options.jvm_args,
        "-cp",
        str(options.spigot_jar),
        options.main_class,
        *options.program_args,
    )


def run_spigot(
    options: DebugOptions,
    *,
    runner: ProcessRunner = run_process,
) -> ProcessResult:
    """Accept the EULA marker and run the server until it exits.

    Raises:
        EulaNotAcceptedError: Before any side effect when ``options.eula``
            is false.
    """
    if not options.eula:
        raise EulaNotAcceptedError()

    options.spigot_directory.mkdir(parents=True, exist_ok=True)
    options.eula_file.write_text(EULA_CONTENT, encoding="utf-8")

    logger.info("Starting spigot server in %s", options.spigot_directory)
    return runner(
        ProcessRequest(
            argv=run_spigot_argv(options),
            description="spigot server",
            cwd=str(options.spigot_directory),
            interactive=True,
        )
    )


# =============================================================================
# Inject
# =============================================================================


def find_plugin_artifact(candidates: Iterable[Union[str, Path]]) -> Path:
    """Return the first candidate that exists as a file, in the given order."""
    seen = []
    for candidate in candidates:
        path = Path(candidate)
        if path.is_file():
            return path
        seen.append(str(path))
    raise PluginArtifactNotFoundError(seen)


def prepare_plugins(
    options: DebugOptions,
    candidates: Iterable[Union[str, Path]],
) -> Path:
    """Copy the plugin jar into the server's plugins directory.

    A previous copy with the same name is overwritten.
    """
    artifact = find_plugin_artifact(candidates)
    options.plugins_directory.mkdir(parents=True, exist_ok=True)
    destination = options.plugins_directory / artifact.name
    shutil.copy2(artifact, destination)
    logger.info("Copied %s into %s", artifact.name, options.plugins_directory)
    return destination
