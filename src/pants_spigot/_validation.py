"""Pure descriptor validation functions (no Pants engine dependencies).

These are extracted so they can be tested without the Pants runtime.
rules/descriptor.py calls into these.
"""

from __future__ import annotations

from typing import Mapping, Optional

from pants_spigot._exceptions import DescriptorValidationError
from pants_spigot._types import (
    Load,
    PermissionDefault,
    SpigotCommand,
    SpigotDescription,
    SpigotPermission,
    is_valid_api_version,
    is_valid_main_class,
    is_valid_plugin_name,
)


def validate_plugin_identity(name: str, main: str, version: str) -> None:
    """Validate the three keys every plugin.yml must have."""
    if not name or not is_valid_plugin_name(name):
        raise DescriptorValidationError(
            f"Invalid plugin name: {name!r}. "
            "Allowed: letters, digits, spaces, underscores, dots and hyphens.",
            field="name",
        )

    if not main or not is_valid_main_class(main):
        raise DescriptorValidationError(
            f"Invalid main class: {main!r}. Must be a fully qualified class name.",
            field="main",
        )

    if main.startswith(("org.bukkit.", "org.spigotmc.", "net.md_5.")):
        raise DescriptorValidationError(
            f"Main class {main!r} may not live in a Bukkit or Spigot package.",
            field="main",
        )

    if not version or not version.strip():
        raise DescriptorValidationError("version is required", field="version")


def parse_load(value: Optional[str]) -> Optional[Load]:
    """Parse a load order, accepting STARTUP, POSTWORLD and POST_WORLD."""
    if value is None:
        return None
    normalized = value.strip().upper().replace("_", "")
    for load in Load:
        if load.value == normalized:
            return load
    raise DescriptorValidationError(
        f"Invalid load order: {value!r}. Must be STARTUP or POSTWORLD.",
        field="load",
    )


def parse_permission_children(
    children: Optional[Mapping[str, str]],
) -> tuple[tuple[str, bool], ...]:
    """Parse {child: "true"|"false"} into ordered (child, granted) pairs."""
    if not children:
        return ()
    parsed = []
    for child, value in children.items():
        normalized = str(value).strip().lower()
        if normalized not in ("true", "false"):
            raise DescriptorValidationError(
                f"Child permission {child!r} must be 'true' or 'false', got {value!r}",
                field="permissions",
            )
        parsed.append((child, normalized == "true"))
    return tuple(parsed)


def validate_command(command: SpigotCommand) -> None:
    if not command.name or any(ch.isspace() for ch in command.name) or ":" in command.name:
        raise DescriptorValidationError(
            f"Invalid command name: {command.name!r}", field="commands"
        )
    for alias in command.aliases:
        if not alias or any(ch.isspace() for ch in alias):
            raise DescriptorValidationError(
                f"Invalid alias {alias!r} for command {command.name!r}",
                field="commands",
            )


def validate_permission(permission: SpigotPermission) -> None:
    if not permission.name or any(ch.isspace() for ch in permission.name):
        raise DescriptorValidationError(
            f"Invalid permission name: {permission.name!r}", field="permissions"
        )
    valid_defaults = {d.value for d in PermissionDefault}
    if permission.default is not None and permission.default not in valid_defaults:
        raise DescriptorValidationError(
            f"Invalid default {permission.default!r} for permission {permission.name!r}. "
            f"Must be one of {sorted(valid_defaults)}.",
            field="permissions",
        )


def validate_description(data: SpigotDescription) -> tuple[list[str], list[str]]:
    """Validate a complete SpigotDescription. Returns (errors, warnings)."""
    errors: list[str] = []
    warnings: list[str] = []

    try:
        validate_plugin_identity(data.name, data.main, data.version)
    except DescriptorValidationError as exc:
        errors.append(str(exc))

    if data.api_version and not is_valid_api_version(data.api_version):
        errors.append(f"api-version {data.api_version!r} is not a valid Spigot API version")
    if not data.api_version:
        warnings.append("api-version is not set; the server will load the plugin in legacy mode")

    seen_commands: set[str] = set()
    for command in data.commands:
        if command.name in seen_commands:
            errors.append(f"Duplicate command: {command.name}")
        seen_commands.add(command.name)
        try:
            validate_command(command)
        except DescriptorValidationError as exc:
            errors.append(str(exc))
        if command.description is None:
            warnings.append(f"Command {command.name} has no description")

    seen_permissions: set[str] = set()
    for permission in data.permissions:
        if permission.name in seen_permissions:
            errors.append(f"Duplicate permission: {permission.name}")
        seen_permissions.add(permission.name)
        try:
            validate_permission(permission)
        except DescriptorValidationError as exc:
            errors.append(str(exc))

    for dep in sorted(set(data.depends) & set(data.soft_depends)):
        warnings.append(f"{dep} is listed in both depend and softdepend")
    if data.name in data.depends or data.name in data.soft_depends:
        errors.append(f"Plugin {data.name} cannot depend on itself")

    return errors, warnings
