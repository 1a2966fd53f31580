"""Run context for CLI command injection."""

from __future__ import annotations

from dataclasses import dataclass, field

from project_model.config import ProjectModelConfig
from project_model.database import ProjectModelDatabase


@dataclass(frozen=True)
class RunContext:
    """Injected run context for CLI commands.

    Parameters
    ----------
    config
        Effective configuration of the invocation.
    database
        Database shared by the command's queries.
    """

    config: ProjectModelConfig = field(default_factory=ProjectModelConfig.from_env)
    database: ProjectModelDatabase | None = None

    def resolved_database(self) -> ProjectModelDatabase:
        """Return the injected database or one built from the config.

        Returns
        -------
        ProjectModelDatabase
            Database for the command.
        """
        if self.database is not None:
            return self.database
        return ProjectModelDatabase.from_config(self.config)


__all__ = ["RunContext"]
