"""Find the project that owns a source file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from cli.commands._output import write_json
from cli.exit_codes import ExitCode
from project_model.manifest import ScarbManifestPath, discover_project_manifest


def discover_command(
    path: Annotated[Path, Parameter(help="Source file or directory to start from.")],
) -> int:
    """Print the nearest project manifest as JSON.

    Returns
    -------
    int
        ``GENERAL_ERROR`` when no manifest is found, else success.
    """
    project = discover_project_manifest(path)
    if project is None:
        return ExitCode.GENERAL_ERROR
    kind = "scarb" if isinstance(project, ScarbManifestPath) else "cairo_project"
    write_json({"kind": kind, "manifest_path": project.path})
    return ExitCode.SUCCESS


__all__ = ["discover_command"]
