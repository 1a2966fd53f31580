"""Main application setup for the project-model CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Literal

from cyclopts import App, Group, Parameter

from cli.commands.version import get_version
from cli.context import RunContext
from project_model.config import ENV_LOG_LEVEL, ENV_SCARB_PATH, LOG_LEVELS, ProjectModelConfig

session_group = Group("Session", sort_key=0)

_HELP_EPILOGUE = """
Examples:
  cairo-project-model crates ./Scarb.toml      List crates derived from a workspace
  cairo-project-model metadata ./Scarb.toml    Summarize scarb metadata
  cairo-project-model discover src/lib.cairo   Find the project owning a file

Environment Variables:
  CAIRO_PROJECT_MODEL_LOG_LEVEL  Default log level (DEBUG, INFO, WARNING, ERROR)
  CAIRO_PROJECT_MODEL_SCARB      Scarb executable to run
  SCARB                          Fallback Scarb executable
"""

app = App(
    name="cairo-project-model",
    help="Derive compiler crates from Scarb workspaces.",
    help_epilogue=_HELP_EPILOGUE,
    version=get_version(),
    version_flags=["--version", "-V"],
    default_parameter=Parameter(show_default=True, show_env_var=True),
)

app.meta.group_parameters = session_group


@dataclass(frozen=True)
class SessionOptions:
    """Session-level configuration parameters."""

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Parameter(
            name="--log-level",
            help="Logging verbosity level.",
            env_var=ENV_LOG_LEVEL,
            group=session_group,
        ),
    ] = "WARNING"
    scarb: Annotated[
        str | None,
        Parameter(
            name="--scarb",
            help="Scarb executable (defaults to $SCARB, then PATH).",
            env_var=ENV_SCARB_PATH,
            group=session_group,
        ),
    ] = None


_DEFAULT_SESSION_OPTIONS = SessionOptions()


@app.meta.default
def meta_launcher(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    session: Annotated[SessionOptions, Parameter(name="*")] = _DEFAULT_SESSION_OPTIONS,
) -> int:
    """Meta launcher for logging setup and context injection.

    Returns
    -------
    int
        Exit status code from command execution.

    Raises
    ------
    ValueError
        Raised when the log level is invalid.
    """
    if session.log_level not in LOG_LEVELS:
        msg = f"Unsupported log level {session.log_level!r}."
        raise ValueError(msg)
    logging.basicConfig(level=session.log_level)

    config = ProjectModelConfig(scarb_path=session.scarb, log_level=session.log_level)
    run_context = RunContext(config=config)

    command, bound, ignored = app.parse_args(list(tokens))
    for name, hint in ignored.items():
        if hint is RunContext or name == "run_context":
            bound.arguments[name] = run_context
    result = command(*bound.args, **bound.kwargs)
    return int(result) if result is not None else 0


app.command("cli.commands.crates:crates_command", name="crates")
app.command("cli.commands.metadata:metadata_command", name="metadata")
app.command("cli.commands.discover:discover_command", name="discover")
app.command("cli.commands.version:version_command", name="version", alias="v")


def main() -> None:
    """Run the project-model CLI."""
    app.meta()


__all__ = ["app", "main"]
