"""File-content digests used to validate memoized query results."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from core.config_base import config_fingerprint
from utils.hashing import hash_file_sha256

logger = logging.getLogger(__name__)

type DigestSnapshot = Mapping[Path, str | None]


def file_digest(path: Path) -> str | None:
    """Return the SHA-256 digest of a file's content.

    Returns
    -------
    str | None
        Hex digest, or ``None`` when the file is missing or unreadable.
        Absence is a trackable state of its own.
    """
    try:
        return hash_file_sha256(path)
    except OSError as exc:
        logger.debug("untrackable file content for digest: %s: %s", path, exc)
        return None


def current_digests(paths: Iterable[Path]) -> dict[Path, str | None]:
    """Return fresh digests for the given files.

    Returns
    -------
    dict[Path, str | None]
        Digest per path, in input order.
    """
    return {path: file_digest(path) for path in paths}


def inputs_digest(digests: DigestSnapshot) -> str:
    """Return one fingerprint for a set of tracked files.

    Returns
    -------
    str
        Fingerprint independent of declaration order.
    """
    payload = {str(path): digest for path, digest in digests.items()}
    return config_fingerprint({"version": 1, "files": payload})


@dataclass
class DigestTracker:
    """Files the current computation depends on, with their digests.

    Digests are taken when a file is first declared, so a change that
    happens while the computation runs still invalidates its result.
    """

    _digests: dict[Path, str | None] = field(default_factory=dict)

    def declare_dependency(self, file_path: Path) -> None:
        """Record that the result is invalid once ``file_path`` changes."""
        if file_path not in self._digests:
            self._digests[file_path] = file_digest(file_path)

    def merge(self, digests: DigestSnapshot) -> None:
        """Adopt dependencies of a nested computation."""
        for path, digest in digests.items():
            self._digests.setdefault(path, digest)

    @property
    def tracked_files(self) -> tuple[Path, ...]:
        """Return declared files in declaration order."""
        return tuple(self._digests)

    def snapshot(self) -> dict[Path, str | None]:
        """Return a copy of the declared digests.

        Returns
        -------
        dict[Path, str | None]
            Declared file digests.
        """
        return dict(self._digests)


__all__ = [
    "DigestSnapshot",
    "DigestTracker",
    "current_digests",
    "file_digest",
    "inputs_digest",
]
