"""Query fetching Scarb metadata for a project."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from project_model.manifest import ScarbManifestPath
from project_model.query import Durability
from project_model.toolchain import ScarbToolchainError

if TYPE_CHECKING:
    from project_model.database import ProjectModelDatabase
    from project_model.manifest import ProjectManifestPath
    from project_model.metadata import Metadata

logger = logging.getLogger(__name__)


def scarb_metadata(db: ProjectModelDatabase, project: ProjectManifestPath) -> Metadata | None:
    """Get ``scarb metadata`` for the given project.

    The manifest and lock file are tracked before Scarb runs, so a failed
    fetch is retried once they change. A failure is also reported as an
    untracked read: its cause is rarely visible in any file digest.

    Parameters
    ----------
    db
        Database providing the toolchain and dependency reporting.
    project
        Project identifier.

    Returns
    -------
    Metadata | None
        Metadata shared by every crate derived from it, or ``None`` when the
        project is not managed by Scarb or Scarb failed.
    """
    if not isinstance(project, ScarbManifestPath):
        logger.warning("attempted to get scarb metadata for non-scarb project: %s", project)
        return None

    db.report_digest_dependency(project.path)
    db.report_digest_dependency(project.lock_path)

    db.report_synthetic_read(Durability.LOW)
    try:
        metadata = db.toolchain.metadata(project.path)
    except ScarbToolchainError as exc:
        db.report_untracked_read()
        # TODO: notify the language client once a notification channel is wired in.
        logger.error("failed to reload scarb workspace: %s: %s", project.path, exc)
        return None

    for package in metadata.member_packages():
        db.report_digest_dependency(package.manifest_path)

    return metadata


__all__ = ["scarb_metadata"]
