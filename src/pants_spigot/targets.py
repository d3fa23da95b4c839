"""Spigot target types for Pants BUILD files.

Provides:
  - spigot_plugin: Spigot/Bukkit plugin described by plugin.yml
  - spigot_command: Command declared in plugin.yml
  - spigot_permission: Permission declared in plugin.yml
"""

from __future__ import annotations

from pants.engine.target import (
    COMMON_TARGET_FIELDS,
    DictStringToStringField,
    SpecialCasedDependencies,
    StringField,
    StringSequenceField,
    Target,
)
from pants.util.strutil import softwrap


# =============================================================================
# Plugin identity fields
# =============================================================================


class PluginNameField(StringField):
    alias = "plugin_name"
    required = True
    help = softwrap(
        """
        Plugin name as the server reports it (e.g., 'MyPlugin').
        Allowed: letters, digits, spaces, underscores, dots and hyphens.
        """
    )


class MainField(StringField):
    alias = "main"
    required = True
    help = softwrap(
        """
        Fully qualified name of the class extending
        org.bukkit.plugin.java.JavaPlugin (e.g., 'com.example.MyPlugin').
        """
    )


class PluginVersionField(StringField):
    alias = "version"
    required = True
    help = "Plugin version string written to plugin.yml."


class DescriptionField(StringField):
    alias = "description"
    default = None
    help = "Human-readable description."


class WebsiteField(StringField):
    alias = "website"
    default = None
    help = "Plugin website URL."


class AuthorsField(StringSequenceField):
    alias = "authors"
    default = ()
    help = "Plugin authors. A single author is written as 'author'."


class ApiVersionField(StringField):
    alias = "api_version"
    default = None
    help = "Spigot API version the plugin targets (e.g., '1.16')."


class LoadField(StringField):
    alias = "load"
    default = None
    help = "When the plugin loads: STARTUP or POSTWORLD (the server default)."


class PrefixField(StringField):
    alias = "prefix"
    default = None
    help = "Logger prefix used instead of the plugin name."


# =============================================================================
# Plugin relationship fields
# =============================================================================


class DependsField(StringSequenceField):
    alias = "depends"
    default = ()
    help = "Plugins that must be loaded before this one (plugin.yml 'depend')."


class SoftDependsField(StringSequenceField):
    alias = "soft_depends"
    default = ()
    help = "Plugins that load first when present (plugin.yml 'softdepend')."


class LoadBeforeField(StringSequenceField):
    alias = "load_before"
    default = ()
    help = "Plugins that should load after this one (plugin.yml 'loadbefore')."


class CommandsField(SpecialCasedDependencies):
    alias = "commands"
    help = "References to spigot_command targets."


class PermissionsField(SpecialCasedDependencies):
    alias = "permissions"
    help = "References to spigot_permission targets."


# =============================================================================
# Debug fields
# =============================================================================


class PluginPackagesField(SpecialCasedDependencies):
    alias = "packages"
    help = softwrap(
        """
        Packageable targets that produce the plugin jar (e.g., a
        deploy_jar). The spigot-debug goal packages them into dist/ on
        every run and injects the jars they produce, ignoring plugin_jars.
        """
    )


class PluginJarsField(StringSequenceField):
    alias = "plugin_jars"
    default = None
    help = softwrap(
        """
        Candidate plugin jar paths, relative to the build root, that the
        spigot-debug goal copies into the server's plugins directory.
        The first one that exists is used. Defaults to
        dist/<plugin_name>.jar. Ignored when packages is set.
        """
    )


# =============================================================================
# Command fields
# =============================================================================


class CommandNameField(StringField):
    alias = "command_name"
    required = True
    help = "Command name without the leading slash (e.g., 'spawn')."


class UsageField(StringField):
    alias = "usage"
    default = None
    help = "Usage message shown when the executor returns false. <command> is substituted."


class CommandPermissionField(StringField):
    alias = "permission"
    default = None
    help = "Permission node required to run the command."


class PermissionMessageField(StringField):
    alias = "permission_message"
    default = None
    help = "Message shown when the sender lacks the permission."


class AliasesField(StringSequenceField):
    alias = "aliases"
    default = ()
    help = "Alternative command names."


# =============================================================================
# Permission fields
# =============================================================================


class PermissionNameField(StringField):
    alias = "permission_name"
    required = True
    help = "Permission node (e.g., 'myplugin.spawn')."


class PermissionDefaultField(StringField):
    alias = "permission_default"
    default = None
    help = "Default holder of the permission: true, false, op or 'not op'."


class PermissionChildrenField(DictStringToStringField):
    alias = "children"
    help = softwrap(
        """
        Child permissions and whether they are granted ('true') or
        negated ('false') along with this one.
        """
    )


# =============================================================================
# Target definitions
# =============================================================================


class SpigotPluginTarget(Target):
    alias = "spigot_plugin"
    help = softwrap(
        """
        A Spigot/Bukkit plugin.

        The spigot-descriptor goal generates its plugin.yml; the
        spigot-debug goal copies its jar into a local debug server.

        Example:

            spigot_plugin(
                name="plugin",
                plugin_name="MyPlugin",
                main="com.example.MyPlugin",
                version="1.0.0",
                api_version="1.16",
                commands=[":spawn"],
                permissions=[":spawn-perm"],
                packages=[":plugin-jar"],
            )
        """
    )
    core_fields = (
        *COMMON_TARGET_FIELDS,
        # Identity
        PluginNameField,
        MainField,
        PluginVersionField,
        DescriptionField,
        WebsiteField,
        AuthorsField,
        ApiVersionField,
        LoadField,
        PrefixField,
        # Relationships
        DependsField,
        SoftDependsField,
        LoadBeforeField,
        CommandsField,
        PermissionsField,
        # Debug
        PluginPackagesField,
        PluginJarsField,
    )


class SpigotCommandTarget(Target):
    alias = "spigot_command"
    help = softwrap(
        """
        Declares a command in plugin.yml.

        Referenced by spigot_plugin targets via the commands field.

        Example:

            spigot_command(
                name="spawn",
                command_name="spawn",
                description="Teleport to spawn.",
                usage="/<command>",
                aliases=["s"],
            )
        """
    )
    core_fields = (
        *COMMON_TARGET_FIELDS,
        CommandNameField,
        DescriptionField,
        UsageField,
        CommandPermissionField,
        PermissionMessageField,
        AliasesField,
    )


class SpigotPermissionTarget(Target):
    alias = "spigot_permission"
    help = softwrap(
        """
        Declares a permission in plugin.yml.

        Example:

            spigot_permission(
                name="spawn-perm",
                permission_name="myplugin.spawn",
                permission_default="op",
            )
        """
    )
    core_fields = (
        *COMMON_TARGET_FIELDS,
        PermissionNameField,
        DescriptionField,
        PermissionDefaultField,
        PermissionChildrenField,
    )
