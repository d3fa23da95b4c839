"""spigot-debug goal: run a local Spigot server with the plugin jar.

The task graph downloads BuildTools, builds and stages the server jar and
injects the plugin. The server itself is launched afterwards as an
InteractiveProcess, so it owns the client's console and Pants tears it
down on Ctrl-C even when the goal runs inside pantsd.
"""

from __future__ import annotations

from pathlib import Path

from pants.base.build_root import BuildRoot
from pants.core.util_rules.distdir import DistDir
from pants.engine.console import Console
from pants.engine.env_vars import EnvironmentVars, EnvironmentVarsRequest
from pants.engine.fs import Digest, MergeDigests, Workspace
from pants.engine.goal import Goal, GoalSubsystem
from pants.engine.process import InteractiveProcess, InteractiveProcessResult
from pants.engine.rules import Effect, Get, MultiGet, collect_rules, goal_rule
from pants.engine.target import FilteredTargets
from pants.option.option_types import IntOption, StrListOption

from pants_spigot._debug_pipeline import (
    DEBUG_TASKS,
    SpigotDebugPipeline,
    plugin_jar_candidates,
)
from pants_spigot._exceptions import ProcessFailedError, SpigotError
from pants_spigot._process import DeferringRunner, in_directory_argv
from pants_spigot._task_graph import DEFAULT_MAX_WORKERS
from pants_spigot.rules.debug import (
    SpigotPluginJars,
    SpigotPluginJarsFieldSet,
    SpigotPluginJarsRequest,
)
from pants_spigot.subsystem import SpigotSubsystem
from pants_spigot.targets import PluginNameField

# Client environment the server JVM inherits.
SERVER_ENV_VARS = ("PATH", "JAVA_HOME", "HOME", "TERM", "LANG")


class SpigotDebugGoalSubsystem(GoalSubsystem):
    name = "spigot-debug"
    help = "Build and start a local Spigot server with the plugin jar installed."

    task = StrListOption(
        default=[],
        help=(
            "Debug tasks to run instead of the full debug run. "
            f"One or more of: {', '.join(DEBUG_TASKS)}."
        ),
    )

    max_workers = IntOption(
        default=DEFAULT_MAX_WORKERS,
        help="Maximum number of debug tasks run at the same time.",
    )


class SpigotDebugGoal(Goal):
    subsystem_cls = SpigotDebugGoalSubsystem
    environment_behavior = Goal.EnvironmentBehavior.LOCAL_ONLY


@goal_rule
async def run_spigot_debug(
    console: Console,
    workspace: Workspace,
    dist_dir: DistDir,
    targets: FilteredTargets,
    spigot: SpigotSubsystem,
    goal_subsystem: SpigotDebugGoalSubsystem,
    build_root: BuildRoot,
) -> SpigotDebugGoal:
    plugin_jars = await MultiGet(
        Get(SpigotPluginJars, SpigotPluginJarsRequest(SpigotPluginJarsFieldSet.create(t)))
        for t in targets
        if t.has_field(PluginNameField)
    )
    packaged = await Get(Digest, MergeDigests(jars.digest for jars in plugin_jars))
    workspace.write_digest(packaged, path_prefix=str(dist_dir.relpath))

    candidates = plugin_jar_candidates(
        Path(build_root.path),
        (jars.as_candidate_source() for jars in plugin_jars),
        dist_dir=str(dist_dir.relpath),
    )
    runner = DeferringRunner()
    pipeline = SpigotDebugPipeline(
        spigot.debug_options(build_root.path),
        candidates,
        runner=runner,
    )
    tasks = tuple(goal_subsystem.task) or None

    try:
        result = pipeline.run(tasks, max_workers=goal_subsystem.max_workers)
    except SpigotError as exc:
        console.print_stderr(str(exc))
        return SpigotDebugGoal(exit_code=1)

    for name in result.order:
        console.print_stdout(f"{result.outcomes[name].value.upper():<9} {name}")

    if not runner.deferred:
        return SpigotDebugGoal(exit_code=0)

    env = await Get(EnvironmentVars, EnvironmentVarsRequest(SERVER_ENV_VARS))
    for request in runner.deferred:
        launched = await Effect(
            InteractiveProcessResult,
            InteractiveProcess(
                argv=in_directory_argv(request),
                env=env,
                run_in_workspace=True,
            ),
        )
        if launched.exit_code != 0:
            console.print_stderr(str(ProcessFailedError(request.description, launched.exit_code)))
            return SpigotDebugGoal(exit_code=1)
    return SpigotDebugGoal(exit_code=0)


def rules():
    return collect_rules()
