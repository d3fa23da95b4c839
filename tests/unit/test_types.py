"""Tests for plugin descriptor domain types."""

from __future__ import annotations

import pytest

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


class TestPatterns:
    @pytest.mark.parametrize("name", ["MyPlugin", "My Plugin", "my_plugin-2.0"])
    def test_valid_plugin_names(self, name):
        assert is_valid_plugin_name(name)

    @pytest.mark.parametrize("name", ["", "My/Plugin", "Plügin", "a:b"])
    def test_invalid_plugin_names(self, name):
        assert not is_valid_plugin_name(name)

    def test_main_class(self):
        assert is_valid_main_class("com.example.MyPlugin")
        assert is_valid_main_class("kr.entree.Main$Inner")
        assert not is_valid_main_class("MyPlugin")
        assert not is_valid_main_class("com.example.")
        assert not is_valid_main_class("1com.example.Main")

    def test_api_version(self):
        assert is_valid_api_version("1.13")
        assert is_valid_api_version("1.20.5")
        assert not is_valid_api_version("2.0")
        assert not is_valid_api_version("1.16.x")


class TestEnums:
    def test_load_values(self):
        assert Load.STARTUP.value == "STARTUP"
        assert Load.POST_WORLD.value == "POSTWORLD"

    def test_permission_defaults(self):
        assert {d.value for d in PermissionDefault} == {"true", "false", "op", "not op"}


class TestSpigotCommand:
    def test_minimal(self):
        assert SpigotCommand(name="spawn").to_descriptor_dict() == {}

    def test_full(self):
        command = SpigotCommand(
            name="spawn",
            description="Teleport to spawn.",
            usage="/<command>",
            permission="myplugin.spawn",
            permission_message="You may not.",
            aliases=("s",),
        )
        assert command.to_descriptor_dict() == {
            "description": "Teleport to spawn.",
            "usage": "/<command>",
            "permission": "myplugin.spawn",
            "permission-message": "You may not.",
            "aliases": ["s"],
        }


class TestSpigotPermission:
    def test_children(self):
        permission = SpigotPermission(
            name="myplugin.*",
            default="op",
            children=(("myplugin.spawn", True), ("myplugin.admin", False)),
        )
        assert permission.to_descriptor_dict() == {
            "default": "op",
            "children": {"myplugin.spawn": True, "myplugin.admin": False},
        }


class TestSpigotDescription:
    def test_required_keys_first(self):
        data = SpigotDescription(name="MyPlugin", main="com.example.MyPlugin", version="1.0")
        assert list(data.to_dict()) == ["main", "name", "version"]

    def test_single_author(self):
        data = SpigotDescription(name="P", main="a.B", version="1", authors=("Alex",))
        result = data.to_dict()
        assert result["author"] == "Alex"
        assert "authors" not in result

    def test_multiple_authors(self):
        data = SpigotDescription(name="P", main="a.B", version="1", authors=("Alex", "Sam"))
        assert data.to_dict()["authors"] == ["Alex", "Sam"]

    def test_full(self):
        data = SpigotDescription(
            name="MyPlugin",
            main="com.example.MyPlugin",
            version="1.0",
            description="Does things.",
            website="https://example.com",
            api_version="1.16",
            load=Load.POST_WORLD,
            prefix="MP",
            depends=("Vault",),
            soft_depends=("WorldEdit",),
            load_before=("Essentials",),
            commands=(SpigotCommand(name="spawn", description="Spawn."),),
            permissions=(SpigotPermission(name="myplugin.spawn", default="true"),),
        )
        assert data.to_dict() == {
            "main": "com.example.MyPlugin",
            "name": "MyPlugin",
            "version": "1.0",
            "description": "Does things.",
            "website": "https://example.com",
            "api-version": "1.16",
            "load": "POSTWORLD",
            "prefix": "MP",
            "depend": ["Vault"],
            "softdepend": ["WorldEdit"],
            "loadbefore": ["Essentials"],
            "commands": {"spawn": {"description": "Spawn."}},
            "permissions": {"myplugin.spawn": {"default": "true"}},
        }

    def test_frozen(self):
        data = SpigotDescription(name="P", main="a.B", version="1")
        with pytest.raises(AttributeError):
            data.name = "Q"  # type: ignore[misc]
