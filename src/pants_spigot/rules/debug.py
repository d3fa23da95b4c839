"""Plugin packaging rule for the spigot-debug goal.

Packages the targets in a spigot_plugin's ``packages`` field through the
regular package machinery, so the debug server always receives the jar
this run produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pants.core.goals.package import (
    BuiltPackage,
    EnvironmentAwarePackageRequest,
    PackageFieldSet,
)
from pants.engine.addresses import Addresses, UnparsedAddressInputs
from pants.engine.fs import EMPTY_DIGEST, Digest, MergeDigests
from pants.engine.rules import Get, MultiGet, collect_rules, rule
from pants.engine.target import (
    FieldSet,
    FieldSetsPerTarget,
    FieldSetsPerTargetRequest,
    Targets,
)

from pants_spigot._exceptions import PluginArtifactNotFoundError
from pants_spigot.targets import PluginJarsField, PluginNameField, PluginPackagesField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpigotPluginJarsFieldSet(FieldSet):
    """Fields locating the jar(s) a spigot_plugin injects into the debug server."""

    required_fields = (PluginNameField,)

    plugin_name: PluginNameField
    plugin_jars: PluginJarsField
    packages: PluginPackagesField


@dataclass(frozen=True)
class SpigotPluginJarsRequest:
    field_set: SpigotPluginJarsFieldSet


@dataclass(frozen=True)
class SpigotPluginJars:
    """Packaged plugin jars, relative to dist/, plus the digest to write there."""

    plugin_name: str
    plugin_jars: Optional[tuple[str, ...]]
    packaged: tuple[str, ...]
    digest: Digest

    def as_candidate_source(self) -> tuple[str, Optional[tuple[str, ...]], tuple[str, ...]]:
        return (self.plugin_name, self.plugin_jars, self.packaged)


@rule(desc="Package Spigot plugin jars")
async def package_plugin_jars(request: SpigotPluginJarsRequest) -> SpigotPluginJars:
    fs = request.field_set
    plugin_name = fs.plugin_name.value
    plugin_jars = tuple(fs.plugin_jars.value) if fs.plugin_jars.value is not None else None

    if not fs.packages.value:
        return SpigotPluginJars(plugin_name, plugin_jars, (), EMPTY_DIGEST)

    addresses = await Get(
        Addresses,
        UnparsedAddressInputs,
        fs.packages.to_unparsed_address_inputs(),
    )
    targets = await Get(Targets, Addresses, addresses)
    field_sets_per_target = await Get(
        FieldSetsPerTarget,
        FieldSetsPerTargetRequest(PackageFieldSet, targets),
    )
    packages = await MultiGet(
        Get(BuiltPackage, EnvironmentAwarePackageRequest(field_set))
        for field_set in field_sets_per_target.field_sets
    )
    digest = await Get(Digest, MergeDigests(package.digest for package in packages))

    packaged = tuple(
        artifact.relpath
        for package in packages
        for artifact in package.artifacts
        if artifact.relpath and artifact.relpath.endswith(".jar")
    )
    if not packaged:
        raise PluginArtifactNotFoundError([address.spec for address in addresses])
    logger.info("Packaged %s for %s", ", ".join(packaged), plugin_name)

    return SpigotPluginJars(plugin_name, plugin_jars, packaged, digest)


def rules():
    return collect_rules()
