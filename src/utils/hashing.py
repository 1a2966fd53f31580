"""Explicit hash utilities with stable serialization semantics."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from serde_msgspec import JSON_ENCODER_SORTED, to_builtins

if TYPE_CHECKING:
    from pathlib import Path


def hash_sha256_hex(payload: bytes, *, length: int | None = None) -> str:
    """Return SHA-256 hex digest, optionally truncated.

    Parameters
    ----------
    payload
        Raw bytes to hash.
    length
        Optional length of hex digest to return.

    Returns:
    -------
    str
        Hex digest string (possibly truncated).
    """
    digest = hashlib.sha256(payload).hexdigest()
    return digest if length is None else digest[:length]


# -----------------------------------------------------------------------------
# Payload hashing (JSON via msgspec encoders)
# -----------------------------------------------------------------------------


def hash_json_canonical(payload: object, *, str_keys: bool = False) -> str:
    """Return SHA-256 hexdigest using JSON_ENCODER_SORTED.

    Parameters
    ----------
    payload
        Payload to encode.
    str_keys
        Whether to coerce mapping keys to strings.

    Returns:
    -------
    str
        SHA-256 hexdigest.
    """
    buffer = bytearray()
    JSON_ENCODER_SORTED.encode_into(to_builtins(payload, str_keys=str_keys), buffer)
    return hash_sha256_hex(bytes(buffer))


# -----------------------------------------------------------------------------
# File content hashing
# -----------------------------------------------------------------------------


def hash_file_sha256(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Return SHA-256 hexdigest of file contents (chunked reading).

    Parameters
    ----------
    path
        File path to hash.
    chunk_size
        Read chunk size in bytes.

    Returns:
    -------
    str
        SHA-256 hexdigest.
    """
    h = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


__all__ = [
    "hash_file_sha256",
    "hash_json_canonical",
    "hash_sha256_hex",
]
