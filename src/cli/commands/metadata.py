"""Summarize ``scarb metadata`` for a workspace."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import Parameter

from cli.commands._output import write_json
from cli.commands._project import scarb_project
from cli.context import RunContext
from cli.exit_codes import ExitCode

if TYPE_CHECKING:
    from project_model.metadata import Metadata


def metadata_summary(metadata: Metadata) -> dict[str, object]:
    """Return the parts of the metadata crate derivation reads.

    Returns
    -------
    dict[str, object]
        Workspace, package and compilation-unit summary.
    """
    return {
        "version": metadata.version,
        "workspace": {
            "root": metadata.workspace.root,
            "manifest_path": metadata.workspace.manifest_path,
            "members": list(metadata.workspace.members),
        },
        "packages": [
            {
                "id": package.id,
                "name": package.name,
                "edition": package.edition,
                "experimental_features": list(package.experimental_features),
            }
            for package in metadata.packages
        ],
        "compilation_units": [
            {
                "id": unit.id,
                "target_kind": unit.target.kind,
                "components": [component.name for component in unit.components],
            }
            for unit in metadata.compilation_units
        ],
    }


def metadata_command(
    manifest_path: Annotated[
        Path,
        Parameter(help="Path to the workspace Scarb.toml."),
    ],
    *,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> int:
    """Fetch Scarb metadata and print a summary as JSON.

    Returns
    -------
    int
        ``CONFIG_ERROR`` for a non-Scarb manifest, ``BACKEND_ERROR`` when no
        metadata is available, else success.
    """
    project = scarb_project(manifest_path)
    if project is None:
        return ExitCode.CONFIG_ERROR
    context = run_context or RunContext()
    metadata = context.resolved_database().scarb_metadata(project)
    if metadata is None:
        return ExitCode.BACKEND_ERROR
    write_json(metadata_summary(metadata))
    return ExitCode.SUCCESS


__all__ = ["metadata_command", "metadata_summary"]
