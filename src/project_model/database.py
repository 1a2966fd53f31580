"""Database serving project-model queries."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from project_model.fetch import scarb_metadata as fetch_scarb_metadata
from project_model.query import Durability, QueryCache, active_frame
from project_model.resolver import project_crates as resolve_project_crates
from project_model.toolchain import ScarbToolchain

if TYPE_CHECKING:
    from project_model.config import ProjectModelConfig
    from project_model.crate import Crate
    from project_model.manifest import ProjectManifestPath
    from project_model.metadata import Metadata

SCARB_METADATA_QUERY = "scarb_metadata"
PROJECT_CRATES_QUERY = "project_crates"


class MetadataToolchain(Protocol):
    """Anything that can describe a Scarb workspace."""

    def metadata(self, manifest_path: Path) -> Metadata:
        """Return metadata for a manifest or raise ``ScarbToolchainError``."""
        ...


class ProjectModelDatabase:
    """Memoized project-model queries over one toolchain.

    Query results are shared by reference between callers and must be
    treated as read-only.
    """

    def __init__(
        self,
        toolchain: MetadataToolchain | None = None,
        *,
        cache: QueryCache | None = None,
    ) -> None:
        self.toolchain: MetadataToolchain = toolchain or ScarbToolchain()
        self.cache = cache or QueryCache()

    @classmethod
    def from_config(cls, config: ProjectModelConfig) -> ProjectModelDatabase:
        """Build a database running the configured Scarb.

        Returns
        -------
        ProjectModelDatabase
            Database with an empty cache.
        """
        return cls(ScarbToolchain(scarb_path=config.scarb_path))

    def scarb_metadata(self, project: ProjectManifestPath) -> Metadata | None:
        """Return cached ``scarb metadata`` for a project.

        Returns
        -------
        Metadata | None
            Metadata, or ``None`` when unavailable.
        """
        return self.cache.get_or_compute(
            SCARB_METADATA_QUERY,
            project,
            lambda: fetch_scarb_metadata(self, project),
        )

    def project_crates(self, project: ProjectManifestPath) -> tuple[Crate, ...]:
        """Return cached crates of a project.

        Returns
        -------
        tuple[Crate, ...]
            Crates in discovery order; empty without metadata.
        """
        return self.cache.get_or_compute(
            PROJECT_CRATES_QUERY,
            project,
            lambda: resolve_project_crates(self, project),
        )

    def report_digest_dependency(self, file_path: Path) -> None:
        """Track ``file_path`` for the running query; no-op outside queries."""
        frame = active_frame()
        if frame is not None:
            frame.declare_dependency(file_path)

    def report_synthetic_read(self, durability: Durability) -> None:
        """Lower the durability of the running query's result."""
        frame = active_frame()
        if frame is not None:
            frame.report_synthetic_read(durability)

    def report_untracked_read(self) -> None:
        """Force the running query to recompute on its next request."""
        frame = active_frame()
        if frame is not None:
            frame.report_untracked_read()

    def invalidate(self, durability: Durability = Durability.LOW) -> int:
        """Drop cached results of at most the given durability.

        Returns
        -------
        int
            Number of dropped results.
        """
        return self.cache.invalidate(durability)


__all__ = [
    "PROJECT_CRATES_QUERY",
    "SCARB_METADATA_QUERY",
    "MetadataToolchain",
    "ProjectModelDatabase",
]
