"""Spigot debug pipeline wiring (no Pants dependencies).

    download-build-tools -> build-spigot -> prepare-spigot -> run-spigot
    build-plugin -> prepare-plugins ----------------------------^
    debug-spigot = prepare-plugins + download-build-tools + prepare-spigot + run-spigot

Edges:
    build-spigot     depends on      download-build-tools
    prepare-spigot   must run after  download-build-tools, build-spigot
    run-spigot       must run after  prepare-spigot, prepare-plugins
    prepare-plugins  depends on      build-plugin
    debug-spigot     depends on      prepare-plugins, download-build-tools,
                                     prepare-spigot, run-spigot

prepare-spigot is skipped when the staged jar exists. That check is by
existence only: a jar staged for another build version is reused as-is.
Delete the staged jar to force a rebuild.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence, Union

import httpx

from pants_spigot._build_info import resolve_built_version
from pants_spigot._debug_options import DebugOptions
from pants_spigot._process import ProcessRunner, run_process
from pants_spigot._stages import (
    VersionResolver,
    build_spigot,
    download_build_tools,
    prepare_plugins,
    prepare_spigot,
    run_spigot,
    spigot_jar_missing,
)
from pants_spigot._task_graph import DEFAULT_MAX_WORKERS, TaskGraph, TaskGraphResult

logger = logging.getLogger(__name__)

DOWNLOAD_BUILD_TOOLS = "download-build-tools"
BUILD_SPIGOT = "build-spigot"
PREPARE_SPIGOT = "prepare-spigot"
RUN_SPIGOT = "run-spigot"
BUILD_PLUGIN = "build-plugin"
PREPARE_PLUGINS = "prepare-plugins"
DEBUG_SPIGOT = "debug-spigot"

DEBUG_TASKS = (
    DOWNLOAD_BUILD_TOOLS,
    BUILD_SPIGOT,
    PREPARE_SPIGOT,
    RUN_SPIGOT,
    BUILD_PLUGIN,
    PREPARE_PLUGINS,
    DEBUG_SPIGOT,
)


class SpigotDebugPipeline:
    """Registers the debug tasks for one set of DebugOptions and runs them.

    ``plugin_jars`` are the candidate plugin artifacts, searched in order.
    ``build_plugin`` produces them; by default the host build has already
    done so and the task does nothing.
    """

    def __init__(
        self,
        options: DebugOptions,
        plugin_jars: Sequence[Union[str, Path]],
        *,
        build_plugin: Optional[Callable[[], Any]] = None,
        runner: ProcessRunner = run_process,
        http_client: Optional[httpx.Client] = None,
        resolve_version: VersionResolver = resolve_built_version,
    ) -> None:
        self.options = options
        self.plugin_jars = tuple(plugin_jars)
        self.graph = TaskGraph()

        download = self.graph.register(
            DOWNLOAD_BUILD_TOOLS,
            lambda: download_build_tools(options, client=http_client),
            description="Download the BuildTools.",
        )
        build = self.graph.register(
            BUILD_SPIGOT,
            lambda: build_spigot(options, runner=runner),
            description="Build the spigot.jar using the BuildTools.",
        )
        stage = self.graph.register(
            PREPARE_SPIGOT,
            lambda: prepare_spigot(options, resolve_version=resolve_version),
            description="Copy the spigot.jar generated by BuildTools into the server directory.",
            only_if=lambda: spigot_jar_missing(options),
        )
        run = self.graph.register(
            RUN_SPIGOT,
            lambda: run_spigot(options, runner=runner),
            description="Start up the spigot server.",
        )
        plugin_build = self.graph.register(
            BUILD_PLUGIN,
            build_plugin or _plugin_built_by_host,
            description="Build the plugin jar.",
        )
        inject = self.graph.register(
            PREPARE_PLUGINS,
            lambda: prepare_plugins(options, self.plugin_jars),
            description="Copy the plugin jar into the server.",
        )
        debug = self.graph.register(
            DEBUG_SPIGOT,
            _aggregate,
            description="Start up the spigot server with the plugin jar.",
        )

        build.depends(download.name)
        stage.runs_after(download.name, build.name)
        run.runs_after(stage.name, inject.name)
        inject.depends(plugin_build.name)
        debug.depends(inject.name, download.name, stage.name, run.name)

    def default_tasks(self) -> tuple[str, ...]:
        """Tasks a plain debug run requests.

        BuildTools only runs when the staged jar is missing, since staging
        is the only consumer of its output.
        """
        if spigot_jar_missing(self.options):
            return (BUILD_SPIGOT, DEBUG_SPIGOT)
        return (DEBUG_SPIGOT,)

    def plan(self, tasks: Optional[Iterable[str]] = None) -> tuple[str, ...]:
        return self.graph.schedule(self.default_tasks() if tasks is None else tasks)

    def run(
        self,
        tasks: Optional[Iterable[str]] = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> TaskGraphResult:
        requested = self.default_tasks() if tasks is None else tuple(tasks)
        logger.debug("Debug options: %s", self.options.describe())
        logger.info("Running debug tasks: %s", ", ".join(requested))
        return self.graph.execute(requested, max_workers=max_workers)


def _plugin_built_by_host() -> None:
    logger.debug("Plugin jar is produced by the host build")


def _aggregate() -> None:
    pass


def plugin_jar_candidates(
    root: Path,
    plugins: Iterable[tuple[str, Optional[Sequence[str]], Sequence[str]]],
    *,
    dist_dir: str = "dist",
) -> list[Path]:
    """Candidate plugin jars in target order, relative to ``root``.

    ``plugins`` yields (plugin_name, plugin_jars, packaged_jars) triples.
    Jars packaged for this run, relative to ``dist_dir``, replace the
    plugin's other candidates so a copy left by an earlier build is never
    picked. Otherwise the explicit plugin_jars are used, or
    <dist_dir>/<plugin_name>.jar.
    """
    candidates: list[Path] = []
    for plugin_name, jars, packaged in plugins:
        if packaged:
            candidates.extend(root / dist_dir / jar for jar in packaged)
            continue
        for jar in jars or (f"{dist_dir}/{plugin_name}.jar",):
            candidates.append(root / jar)
    return candidates
