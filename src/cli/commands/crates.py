"""List the crates derived from a Scarb workspace."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from cli.commands._output import write_json
from cli.commands._project import scarb_project
from cli.context import RunContext
from cli.exit_codes import ExitCode


def crates_command(
    manifest_path: Annotated[
        Path,
        Parameter(help="Path to the workspace Scarb.toml."),
    ],
    *,
    compact: Annotated[
        bool,
        Parameter(name="--compact", help="Print JSON on a single line."),
    ] = False,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> int:
    """Derive crates and print them as JSON.

    The command succeeds with an empty list when Scarb is unavailable;
    failures are reported in the log.

    Returns
    -------
    int
        ``CONFIG_ERROR`` for a non-Scarb manifest, else success.
    """
    project = scarb_project(manifest_path)
    if project is None:
        return ExitCode.CONFIG_ERROR
    context = run_context or RunContext()
    crates = context.resolved_database().project_crates(project)
    write_json(list(crates), pretty=not compact)
    return ExitCode.SUCCESS


__all__ = ["crates_command"]
