"""Typed view over ``scarb metadata --format-version 1`` documents.

The document shape is owned by Scarb. Unknown fields are ignored so that newer
Scarb releases keep decoding, and raw ``cfg`` entries are kept as builtins:
converting them is a settings concern, not a decoding one.
"""

from __future__ import annotations

from pathlib import Path

import msgspec

from serde_msgspec import StructBaseCompat

METADATA_FORMAT_VERSION = 1

PackageId = str
RawCfg = tuple[object, ...]


class TargetMetadata(StructBaseCompat, frozen=True):
    """Target of a compilation unit (``lib``, ``test``, ``cairo-plugin``...)."""

    kind: str
    name: str
    source_path: Path
    params: dict[str, object] = msgspec.field(default_factory=dict)


class CompilationUnitComponentMetadata(StructBaseCompat, frozen=True):
    """One named source entry point of a compilation unit."""

    package: PackageId
    name: str
    source_path: Path
    cfg: RawCfg | None = None


class CompilationUnitMetadata(StructBaseCompat, frozen=True):
    """Group of components compiled together as one artifact."""

    id: str
    package: PackageId
    target: TargetMetadata
    components: tuple[CompilationUnitComponentMetadata, ...] = ()
    cfg: RawCfg = ()


class PackageMetadata(StructBaseCompat, frozen=True):
    """Package entry of the metadata document."""

    id: PackageId
    name: str
    version: str
    manifest_path: Path
    root: Path
    edition: str | None = None
    source: str | None = None
    experimental_features: tuple[str, ...] = ()


class WorkspaceMetadata(StructBaseCompat, frozen=True):
    """Workspace root and its member packages."""

    manifest_path: Path
    root: Path
    members: tuple[PackageId, ...] = ()


class Metadata(StructBaseCompat, frozen=True):
    """Top-level metadata document."""

    version: int
    workspace: WorkspaceMetadata
    packages: tuple[PackageMetadata, ...] = ()
    compilation_units: tuple[CompilationUnitMetadata, ...] = ()

    def get_package(self, package_id: PackageId) -> PackageMetadata | None:
        """Return the package with the given id, if present.

        Returns
        -------
        PackageMetadata | None
            First package whose id matches.
        """
        for package in self.packages:
            if package.id == package_id:
                return package
        return None

    def member_packages(self) -> tuple[PackageMetadata, ...]:
        """Return workspace members that resolve to a package entry.

        Returns
        -------
        tuple[PackageMetadata, ...]
            Member packages in ``workspace.members`` order.
        """
        resolved = (self.get_package(member) for member in self.workspace.members)
        return tuple(package for package in resolved if package is not None)


__all__ = [
    "METADATA_FORMAT_VERSION",
    "CompilationUnitComponentMetadata",
    "CompilationUnitMetadata",
    "Metadata",
    "PackageId",
    "PackageMetadata",
    "RawCfg",
    "TargetMetadata",
    "WorkspaceMetadata",
]
