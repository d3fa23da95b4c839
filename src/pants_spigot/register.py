"""Pants plugin registration for Spigot plugin development.

Backend path: pants_spigot

Enable in pants.toml:

    [GLOBAL]
    backend_packages = [
        "pants_spigot",
    ]

    [spigot]
    eula = true
    build_version = "1.16.1"
"""

from __future__ import annotations

from typing import Iterable, Type

from pants.engine.rules import Rule
from pants.option.subsystem import Subsystem

from pants_spigot.goals import debug as debug_goal
from pants_spigot.goals import descriptor as descriptor_goal
from pants_spigot.rules import debug as debug_rule
from pants_spigot.rules import descriptor as descriptor_rule
from pants_spigot.subsystem import SpigotSubsystem
from pants_spigot.targets import (
    SpigotCommandTarget,
    SpigotPermissionTarget,
    SpigotPluginTarget,
)


def rules() -> Iterable[Rule]:
    return [
        *descriptor_rule.rules(),
        *debug_rule.rules(),
        *descriptor_goal.rules(),
        *debug_goal.rules(),
    ]


def target_types() -> Iterable[type]:
    return [
        SpigotPluginTarget,
        SpigotCommandTarget,
        SpigotPermissionTarget,
    ]


def subsystems() -> Iterable[Type[Subsystem]]:
    return [SpigotSubsystem]
