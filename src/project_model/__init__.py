"""Crate derivation for Scarb workspaces, memoized per project."""

from project_model.config import ProjectModelConfig
from project_model.crate import CORE_CRATE_NAME, Crate, crates_by_name
from project_model.database import ProjectModelDatabase
from project_model.manifest import (
    CairoProjectManifestPath,
    ProjectManifestPath,
    ScarbManifestPath,
    discover_project_manifest,
    project_manifest_from_path,
)
from project_model.metadata import Metadata
from project_model.query import Durability
from project_model.settings import Cfg, CfgSet, CrateSettings, Edition, ExperimentalFeaturesConfig
from project_model.toolchain import ScarbToolchain, ScarbToolchainError

__all__ = [
    "CORE_CRATE_NAME",
    "CairoProjectManifestPath",
    "Cfg",
    "CfgSet",
    "Crate",
    "CrateSettings",
    "Durability",
    "Edition",
    "ExperimentalFeaturesConfig",
    "Metadata",
    "ProjectManifestPath",
    "ProjectModelConfig",
    "ProjectModelDatabase",
    "ScarbManifestPath",
    "ScarbToolchain",
    "ScarbToolchainError",
    "crates_by_name",
    "discover_project_manifest",
    "project_manifest_from_path",
]
