"""Invocation of ``scarb metadata``."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import msgspec

from project_model.metadata import METADATA_FORMAT_VERSION, Metadata
from serde_msgspec import convert, loads_json, validation_error_payload
from utils.env_utils import env_value

logger = logging.getLogger(__name__)

SCARB_ENV_VAR = "SCARB"


class ScarbToolchainError(RuntimeError):
    """Base exception for ``scarb metadata`` failures."""


class ScarbNotFoundError(ScarbToolchainError):
    """Raised when no Scarb executable can be located."""

    def __init__(self) -> None:
        super().__init__(
            f"scarb executable not found: set {SCARB_ENV_VAR} or add scarb to PATH"
        )


class ScarbCommandError(ScarbToolchainError):
    """Raised when ``scarb metadata`` exits non-zero."""

    def __init__(self, rc: int, stderr: str, messages: tuple[str, ...] = ()) -> None:
        self.rc = rc
        self.stderr = stderr
        self.messages = messages
        details = "\n".join((*messages, stderr.strip()))
        super().__init__(f"scarb metadata failed rc={rc}\n{details}".rstrip())


class ScarbMetadataError(ScarbToolchainError):
    """Raised when the command output holds no usable metadata document."""


@dataclass(frozen=True)
class ScarbToolchain:
    """Runs Scarb to describe a workspace.

    The executable is taken from ``scarb_path``, then the ``SCARB``
    environment variable, then ``PATH``.
    """

    scarb_path: str | None = None

    def resolve_executable(self) -> str:
        """Return the Scarb executable to run.

        Returns
        -------
        str
            Executable path or name.

        Raises
        ------
        ScarbNotFoundError
            Raised when no executable is configured or found on ``PATH``.
        """
        configured = self.scarb_path or env_value(SCARB_ENV_VAR)
        if configured:
            return configured
        found = shutil.which("scarb")
        if found is None:
            raise ScarbNotFoundError
        return found

    def metadata(self, manifest_path: Path) -> Metadata:
        """Run ``scarb metadata`` for a manifest and decode its output.

        Parameters
        ----------
        manifest_path
            Path to the workspace ``Scarb.toml``.

        Returns
        -------
        Metadata
            Decoded metadata document.

        Raises
        ------
        ScarbCommandError
            Raised when Scarb cannot be started or exits non-zero.
        ScarbMetadataError
            Raised when the output holds no valid metadata document.
        ScarbNotFoundError
            Raised when no Scarb executable is available.
        """
        cmd = [
            self.resolve_executable(),
            "--json",
            "--manifest-path",
            str(manifest_path),
            "metadata",
            "--format-version",
            str(METADATA_FORMAT_VERSION),
        ]
        logger.debug("running %s", cmd)
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(manifest_path.parent) if manifest_path.parent.is_dir() else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ScarbCommandError(-1, str(exc)) from exc
        metadata_payload, messages = _scan_output(proc.stdout)
        if proc.returncode != 0:
            raise ScarbCommandError(proc.returncode, proc.stderr, messages)
        return decode_metadata(metadata_payload, messages)


def _scan_output(stdout: str) -> tuple[dict[str, object] | None, tuple[str, ...]]:
    """Find the metadata document and error messages in Scarb's JSON lines.

    Returns
    -------
    tuple[dict[str, object] | None, tuple[str, ...]]
        Last metadata-shaped object, and collected error messages.
    """
    payload: dict[str, object] | None = None
    messages: list[str] = []
    for line in stdout.splitlines():
        stripped = line.strip()
        if not stripped.startswith("{"):
            continue
        try:
            item = loads_json(stripped, target_type=object)
        except msgspec.DecodeError:
            continue
        if not isinstance(item, dict):
            continue
        if item.get("type") == "error":
            messages.append(str(item.get("message", "")))
        elif "version" in item and "workspace" in item:
            payload = item
    return payload, tuple(messages)


def decode_metadata(
    payload: dict[str, object] | None,
    messages: tuple[str, ...] = (),
) -> Metadata:
    """Validate a raw metadata document.

    Parameters
    ----------
    payload
        Raw document, or ``None`` when the output carried none.
    messages
        Scarb error messages to include in failures.

    Returns
    -------
    Metadata
        Typed metadata document.

    Raises
    ------
    ScarbMetadataError
        Raised when the document is missing, malformed or of another version.
    """
    if payload is None:
        details = "; ".join(messages) or "no metadata document in scarb output"
        msg = f"scarb metadata produced no document: {details}"
        raise ScarbMetadataError(msg)
    version = payload.get("version")
    if version != METADATA_FORMAT_VERSION:
        msg = (
            f"unsupported scarb metadata version {version!r}, "
            f"expected {METADATA_FORMAT_VERSION}"
        )
        raise ScarbMetadataError(msg)
    try:
        return convert(payload, target_type=Metadata)
    except msgspec.ValidationError as exc:
        error = validation_error_payload(exc)
        location = error.get("path", "$")
        msg = f"malformed scarb metadata at {location}: {error.get('summary', str(exc))}"
        raise ScarbMetadataError(msg) from exc


__all__ = [
    "SCARB_ENV_VAR",
    "ScarbCommandError",
    "ScarbMetadataError",
    "ScarbNotFoundError",
    "ScarbToolchain",
    "ScarbToolchainError",
    "decode_metadata",
]
