"""Descriptor generation rule: spigot_plugin target -> plugin.yml."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pants.engine.addresses import Addresses, UnparsedAddressInputs
from pants.engine.rules import Get, MultiGet, collect_rules, rule
from pants.engine.target import FieldSet, WrappedTarget, WrappedTargetRequest

from pants_spigot._descriptor import render_descriptor
from pants_spigot._types import SpigotCommand, SpigotDescription, SpigotPermission
from pants_spigot._validation import (
    parse_load,
    parse_permission_children,
    validate_command,
    validate_permission,
    validate_plugin_identity,
)
from pants_spigot.targets import (
    AliasesField,
    ApiVersionField,
    AuthorsField,
    CommandNameField,
    CommandPermissionField,
    CommandsField,
    DependsField,
    DescriptionField,
    LoadBeforeField,
    LoadField,
    MainField,
    PermissionChildrenField,
    PermissionDefaultField,
    PermissionMessageField,
    PermissionNameField,
    PermissionsField,
    PluginNameField,
    PluginVersionField,
    PrefixField,
    SoftDependsField,
    UsageField,
    WebsiteField,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Request / Result types
# =============================================================================


@dataclass(frozen=True)
class SpigotDescriptorFieldSet(FieldSet):
    """Fields required to generate plugin.yml from a spigot_plugin target."""

    required_fields = (PluginNameField, MainField, PluginVersionField)

    plugin_name: PluginNameField
    main: MainField
    version: PluginVersionField
    description: DescriptionField
    website: WebsiteField
    authors: AuthorsField
    api_version: ApiVersionField
    load: LoadField
    prefix: PrefixField
    depends: DependsField
    soft_depends: SoftDependsField
    load_before: LoadBeforeField
    commands: CommandsField
    permissions: PermissionsField


@dataclass(frozen=True)
class SpigotDescriptorRequest:
    field_set: SpigotDescriptorFieldSet


@dataclass(frozen=True)
class SpigotDescriptor:
    """Generated plugin.yml content."""

    content: str
    plugin_name: str
    version: str
    data: SpigotDescription


# =============================================================================
# Rules
# =============================================================================


@rule(desc="Generate Spigot plugin.yml")
async def generate_descriptor(request: SpigotDescriptorRequest) -> SpigotDescriptor:
    fs = request.field_set

    # --- Validate identity fields ---
    plugin_name = fs.plugin_name.value
    main = fs.main.value
    version = fs.version.value

    validate_plugin_identity(plugin_name, main, version)
    load = parse_load(fs.load.value)

    # --- Resolve commands ---
    commands: tuple[SpigotCommand, ...] = ()
    if fs.commands.value:
        command_addresses = await Get(
            Addresses,
            UnparsedAddressInputs,
            fs.commands.to_unparsed_address_inputs(),
        )
        command_wrapped = await MultiGet(
            Get(WrappedTarget, WrappedTargetRequest(addr, description_of_origin="spigot_plugin.commands"))
            for addr in command_addresses
        )
        resolved = []
        for wrapped in command_wrapped:
            command = _resolve_command(wrapped.target)
            validate_command(command)
            resolved.append(command)
        commands = tuple(resolved)

    # --- Resolve permissions ---
    permissions: tuple[SpigotPermission, ...] = ()
    if fs.permissions.value:
        permission_addresses = await Get(
            Addresses,
            UnparsedAddressInputs,
            fs.permissions.to_unparsed_address_inputs(),
        )
        permission_wrapped = await MultiGet(
            Get(WrappedTarget, WrappedTargetRequest(addr, description_of_origin="spigot_plugin.permissions"))
            for addr in permission_addresses
        )
        resolved_permissions = []
        for wrapped in permission_wrapped:
            permission = _resolve_permission(wrapped.target)
            validate_permission(permission)
            resolved_permissions.append(permission)
        permissions = tuple(resolved_permissions)

    # --- Assemble descriptor ---
    data = SpigotDescription(
        name=plugin_name,
        main=main,
        version=version,
        description=fs.description.value,
        website=fs.website.value,
        authors=tuple(fs.authors.value or ()),
        api_version=fs.api_version.value,
        load=load,
        prefix=fs.prefix.value,
        depends=tuple(fs.depends.value or ()),
        soft_depends=tuple(fs.soft_depends.value or ()),
        load_before=tuple(fs.load_before.value or ()),
        commands=commands,
        permissions=permissions,
    )

    content = render_descriptor(data)

    logger.info("Generated plugin.yml for %s version %s", plugin_name, version)

    return SpigotDescriptor(
        content=content,
        plugin_name=plugin_name,
        version=version,
        data=data,
    )


# =============================================================================
# Helpers
# =============================================================================


def _resolve_command(target) -> SpigotCommand:
    """Extract SpigotCommand from a spigot_command target."""
    return SpigotCommand(
        name=target[CommandNameField].value,
        description=target[DescriptionField].value,
        usage=target[UsageField].value,
        permission=target[CommandPermissionField].value,
        permission_message=target[PermissionMessageField].value,
        aliases=tuple(target[AliasesField].value or ()),
    )


def _resolve_permission(target) -> SpigotPermission:
    """Extract SpigotPermission from a spigot_permission target."""
    return SpigotPermission(
        name=target[PermissionNameField].value,
        description=target[DescriptionField].value,
        default=target[PermissionDefaultField].value,
        children=parse_permission_children(target[PermissionChildrenField].value),
    )


def rules():
    return collect_rules()
