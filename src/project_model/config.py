"""Runtime configuration for the project model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from core.config_base import FingerprintableConfig
from utils.env_utils import env_choice, env_value

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

ENV_SCARB_PATH = "CAIRO_PROJECT_MODEL_SCARB"
ENV_LOG_LEVEL = "CAIRO_PROJECT_MODEL_LOG_LEVEL"


@dataclass(frozen=True)
class ProjectModelConfig(FingerprintableConfig):
    """Settings shared by the database and the CLI.

    Attributes
    ----------
    scarb_path
        Explicit ``scarb`` executable, or ``None`` to resolve it from the
        environment.
    log_level
        Root logging level used by the CLI.
    """

    scarb_path: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> ProjectModelConfig:
        """Build a config from ``CAIRO_PROJECT_MODEL_*`` variables.

        Returns
        -------
        ProjectModelConfig
            Config with unset or invalid values defaulted.
        """
        return cls(
            scarb_path=env_value(ENV_SCARB_PATH),
            log_level=env_choice(ENV_LOG_LEVEL, LOG_LEVELS, default="WARNING"),
        )

    def fingerprint_payload(self) -> Mapping[str, object]:
        """Return canonical payload for config fingerprinting.

        Returns
        -------
        Mapping[str, object]
            Payload used for fingerprinting.
        """
        return {
            "version": 1,
            "scarb_path": self.scarb_path,
            "log_level": self.log_level,
        }


__all__ = ["ENV_LOG_LEVEL", "ENV_SCARB_PATH", "LOG_LEVELS", "ProjectModelConfig"]
