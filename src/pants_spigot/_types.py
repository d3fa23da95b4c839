"""Domain types for Spigot plugin descriptors (plugin.yml)."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Load(str, Enum):
    """When the server loads the plugin."""

    STARTUP = "STARTUP"
    POST_WORLD = "POSTWORLD"


class PermissionDefault(str, Enum):
    """Who holds a permission when nothing else grants it."""

    TRUE = "true"
    FALSE = "false"
    OP = "op"
    NOT_OP = "not op"


# Bukkit only accepts alphanumerics, spaces, underscores, dots and hyphens.
PLUGIN_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _.-]+$")

# Fully qualified Java class name, e.g. com.example.MyPlugin.
MAIN_CLASS_PATTERN = re.compile(
    r"^[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*)+$"
)

# api-version values accepted by Spigot, e.g. 1.13, 1.16, 1.20.5.
API_VERSION_PATTERN = re.compile(r"^1\.[0-9]+(\.[0-9]+)?$")


def is_valid_plugin_name(name: str) -> bool:
    return bool(PLUGIN_NAME_PATTERN.match(name))


def is_valid_main_class(main: str) -> bool:
    return bool(MAIN_CLASS_PATTERN.match(main))


def is_valid_api_version(api_version: str) -> bool:
    return bool(API_VERSION_PATTERN.match(api_version))


@dataclass(frozen=True)
class SpigotCommand:
    """A command entry under ``commands:``."""

    name: str
    description: Optional[str] = None
    usage: Optional[str] = None
    permission: Optional[str] = None
    permission_message: Optional[str] = None
    aliases: tuple[str, ...] = ()

    def to_descriptor_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.description is not None:
            result["description"] = self.description
        if self.usage is not None:
            result["usage"] = self.usage
        if self.permission is not None:
            result["permission"] = self.permission
        if self.permission_message is not None:
            result["permission-message"] = self.permission_message
        if self.aliases:
            result["aliases"] = list(self.aliases)
        return result


@dataclass(frozen=True)
class SpigotPermission:
    """A permission entry under ``permissions:``."""

    name: str
    description: Optional[str] = None
    default: Optional[str] = None
    children: tuple[tuple[str, bool], ...] = ()

    def to_descriptor_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.description is not None:
            result["description"] = self.description
        if self.default is not None:
            result["default"] = self.default
        if self.children:
            result["children"] = dict(self.children)
        return result


@dataclass(frozen=True)
class SpigotDescription:
    """Complete plugin.yml data ready for YAML serialization."""

    name: str
    main: str
    version: str
    description: Optional[str] = None
    website: Optional[str] = None
    authors: tuple[str, ...] = ()
    api_version: Optional[str] = None
    load: Optional[Load] = None
    prefix: Optional[str] = None
    depends: tuple[str, ...] = ()
    soft_depends: tuple[str, ...] = ()
    load_before: tuple[str, ...] = ()
    commands: tuple[SpigotCommand, ...] = ()
    permissions: tuple[SpigotPermission, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the plugin.yml structure, omitting unset keys."""
        descriptor: dict[str, Any] = {
            "main": self.main,
            "name": self.name,
            "version": self.version,
        }

        if self.description:
            descriptor["description"] = self.description
        if self.website:
            descriptor["website"] = self.website
        if len(self.authors) == 1:
            descriptor["author"] = self.authors[0]
        elif self.authors:
            descriptor["authors"] = list(self.authors)
        if self.api_version:
            descriptor["api-version"] = self.api_version
        if self.load is not None:
            descriptor["load"] = self.load.value
        if self.prefix:
            descriptor["prefix"] = self.prefix
        if self.depends:
            descriptor["depend"] = list(self.depends)
        if self.soft_depends:
            descriptor["softdepend"] = list(self.soft_depends)
        if self.load_before:
            descriptor["loadbefore"] = list(self.load_before)

        if self.commands:
            descriptor["commands"] = {
                cmd.name: cmd.to_descriptor_dict() for cmd in self.commands
            }
        if self.permissions:
            descriptor["permissions"] = {
                perm.name: perm.to_descriptor_dict() for perm in self.permissions
            }

        return descriptor
