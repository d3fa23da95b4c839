"""spigot-descriptor goal: generate plugin.yml files into dist/."""

from __future__ import annotations

from pathlib import Path

from pants.engine.console import Console
from pants.engine.goal import Goal, GoalSubsystem
from pants.engine.rules import Get, MultiGet, collect_rules, goal_rule
from pants.engine.target import FilteredTargets

from pants_spigot._descriptor import descriptor_output_path
from pants_spigot._validation import validate_description
from pants_spigot.rules.descriptor import (
    SpigotDescriptor,
    SpigotDescriptorFieldSet,
    SpigotDescriptorRequest,
)


class SpigotDescriptorGoalSubsystem(GoalSubsystem):
    name = "spigot-descriptor"
    help = "Generate plugin.yml descriptors for spigot_plugin targets."


class SpigotDescriptorGoal(Goal):
    subsystem_cls = SpigotDescriptorGoalSubsystem
    environment_behavior = Goal.EnvironmentBehavior.LOCAL_ONLY


@goal_rule
async def run_spigot_descriptor(
    console: Console,
    targets: FilteredTargets,
) -> SpigotDescriptorGoal:
    plugin_targets = [
        t for t in targets
        if t.has_field(SpigotDescriptorFieldSet.required_fields[0])
    ]

    if not plugin_targets:
        console.print_stderr("No spigot_plugin targets found.")
        return SpigotDescriptorGoal(exit_code=0)

    descriptors = await MultiGet(
        Get(
            SpigotDescriptor,
            SpigotDescriptorRequest(SpigotDescriptorFieldSet.create(t)),
        )
        for t in plugin_targets
    )

    dist_dir = Path("dist")
    exit_code = 0

    for descriptor in descriptors:
        errors, warnings = validate_description(descriptor.data)
        for warning in warnings:
            console.print_stderr(f"  WARN: {warning}")
        if errors:
            exit_code = 1
            console.print_stderr(f"FAIL  {descriptor.plugin_name} v{descriptor.version}")
            for error in errors:
                console.print_stderr(f"  ERROR: {error}")
            continue

        output_path = dist_dir / descriptor_output_path(descriptor.plugin_name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(descriptor.content, encoding="utf-8")
        console.print_stdout(
            f"Generated: {output_path} ({descriptor.plugin_name} v{descriptor.version})"
        )

    return SpigotDescriptorGoal(exit_code=exit_code)


def rules():
    return collect_rules()
