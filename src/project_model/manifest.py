"""Project identifiers and manifest discovery."""

from __future__ import annotations

from pathlib import Path

from serde_msgspec import StructBaseStrict

SCARB_TOML = "Scarb.toml"
SCARB_LOCK = "Scarb.lock"
CAIRO_PROJECT_TOML = "cairo_project.toml"


class ScarbManifestPath(StructBaseStrict, frozen=True, tag="scarb"):
    """Workspace managed by Scarb, identified by its ``Scarb.toml``."""

    path: Path

    @property
    def lock_path(self) -> Path:
        """Return the companion ``Scarb.lock`` path."""
        return self.path.with_name(SCARB_LOCK)

    def __str__(self) -> str:
        return str(self.path)


class CairoProjectManifestPath(StructBaseStrict, frozen=True, tag="cairo_project"):
    """Unmanaged project described by a ``cairo_project.toml``."""

    path: Path

    def __str__(self) -> str:
        return str(self.path)


type ProjectManifestPath = ScarbManifestPath | CairoProjectManifestPath


def project_manifest_from_path(manifest_path: Path) -> ProjectManifestPath:
    """Return the project identifier for an explicit manifest file.

    Returns
    -------
    ProjectManifestPath
        ``CairoProjectManifestPath`` for ``cairo_project.toml`` files,
        ``ScarbManifestPath`` otherwise.
    """
    resolved = manifest_path.expanduser().absolute()
    if resolved.name == CAIRO_PROJECT_TOML:
        return CairoProjectManifestPath(path=resolved)
    return ScarbManifestPath(path=resolved)


def discover_project_manifest(file_path: Path) -> ProjectManifestPath | None:
    """Find the project that owns a source file.

    Parent directories are walked upwards starting at the file's directory.
    Within a directory ``cairo_project.toml`` takes precedence over
    ``Scarb.toml``.

    Parameters
    ----------
    file_path
        Source file (or directory) to start from.

    Returns
    -------
    ProjectManifestPath | None
        Identifier of the nearest project, or ``None`` when none is found.
    """
    start = file_path.expanduser().absolute()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        cairo_project = candidate_dir / CAIRO_PROJECT_TOML
        if cairo_project.is_file():
            return CairoProjectManifestPath(path=cairo_project)
        scarb_manifest = candidate_dir / SCARB_TOML
        if scarb_manifest.is_file():
            return ScarbManifestPath(path=scarb_manifest)
    return None


__all__ = [
    "CAIRO_PROJECT_TOML",
    "SCARB_LOCK",
    "SCARB_TOML",
    "CairoProjectManifestPath",
    "ProjectManifestPath",
    "ScarbManifestPath",
    "discover_project_manifest",
    "project_manifest_from_path",
]
