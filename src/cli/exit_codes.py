"""Exit code taxonomy for the project-model CLI."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Standard exit codes for CLI commands.

    Exit codes follow Unix conventions with domain-specific extensions:
    - 0: Success
    - 1-9: General errors (lookup, config)
    - 20-29: Backend/integration errors
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 4

    # Backend errors (20-29)
    BACKEND_ERROR = 20


__all__ = ["ExitCode"]
