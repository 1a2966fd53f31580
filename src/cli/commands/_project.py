"""Shared project resolution for workspace commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from project_model.manifest import ScarbManifestPath, project_manifest_from_path

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def scarb_project(manifest_path: Path) -> ScarbManifestPath | None:
    """Return the Scarb project for a manifest, or ``None`` for other kinds.

    Returns
    -------
    ScarbManifestPath | None
        Scarb project identifier when the manifest is a ``Scarb.toml``.
    """
    project = project_manifest_from_path(manifest_path)
    if isinstance(project, ScarbManifestPath):
        return project
    logger.error("not a Scarb manifest: %s", project)
    return None


__all__ = ["scarb_project"]
