"""Sanity checks on component source paths."""

from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class RejectionKind(StrEnum):
    """Why a component source path was rejected."""

    IO_ERROR = "io_error"
    IS_DIRECTORY = "is_directory"
    NO_PARENT = "no_parent"
    RELATIVE_ROOT = "relative_root"
    NO_FILE_STEM = "no_file_stem"
    NON_UTF8_STEM = "non_utf8_stem"


@dataclass(frozen=True)
class SourceRoot:
    """Accepted source path split into crate root and file stem."""

    root: Path
    file_stem: str


@dataclass(frozen=True)
class ComponentRejected:
    """Rejected source path with a human-readable reason."""

    crate_name: str
    kind: RejectionKind
    reason: str


type SourcePathCheck = SourceRoot | ComponentRejected


def validate_and_chop_source_path(source_path: Path, crate_name: str) -> SourcePathCheck:
    """Validate a component source path and chop it into root and file stem.

    Checks run in order and the first violation wins: the path must be
    stat-able, must not be a directory, must have an absolute parent and a
    UTF-8 file stem.

    Parameters
    ----------
    source_path
        Declared entry source file of the component.
    crate_name
        Component name used in the rejection reason.

    Returns
    -------
    SourceRoot | ComponentRejected
        Root directory and stem, or the reason the component is skipped.
    """
    try:
        stat_result = source_path.stat()
    except OSError as exc:
        return ComponentRejected(
            crate_name,
            RejectionKind.IO_ERROR,
            f"io error when accessing source path of: {crate_name}: {exc}",
        )

    if stat.S_ISDIR(stat_result.st_mode):
        return ComponentRejected(
            crate_name,
            RejectionKind.IS_DIRECTORY,
            f"source path of component `{crate_name}` must not be a directory: {source_path}",
        )

    root = source_path.parent
    if root == source_path or not source_path.name:
        return ComponentRejected(
            crate_name,
            RejectionKind.NO_PARENT,
            f"unexpected fs root as a source path of component `{crate_name}`: {source_path}",
        )

    if not root.is_absolute():
        return ComponentRejected(
            crate_name,
            RejectionKind.RELATIVE_ROOT,
            f"source path must be absolute: {source_path}",
        )

    file_stem = source_path.stem
    if not file_stem:
        return ComponentRejected(
            crate_name,
            RejectionKind.NO_FILE_STEM,
            f"failed to get file stem for component `{crate_name}`: {source_path}",
        )

    try:
        file_stem.encode("utf-8")
    except UnicodeEncodeError:
        return ComponentRejected(
            crate_name,
            RejectionKind.NON_UTF8_STEM,
            f"file stem is not utf-8: {source_path!r}",
        )

    return SourceRoot(root=root, file_stem=file_stem)


__all__ = [
    "ComponentRejected",
    "RejectionKind",
    "SourcePathCheck",
    "SourceRoot",
    "validate_and_chop_source_path",
]
