"""Crate descriptors handed to the compiler database."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import msgspec

from project_model.settings import CrateSettings
from serde_msgspec import StructBaseStrict

CORE_CRATE_NAME = "core"
LIB_FILE_STEM = "lib"


class Crate(StructBaseStrict, frozen=True):
    """A logical compilation target: name, source root and settings."""

    name: str
    root: Path
    custom_main_file_stem: str | None = None
    settings: CrateSettings = msgspec.field(default_factory=CrateSettings)

    def is_core(self) -> bool:
        """Return True for the standard-library crate."""
        return self.name == CORE_CRATE_NAME

    @property
    def main_file(self) -> Path:
        """Return the crate's entry source file."""
        stem = self.custom_main_file_stem or LIB_FILE_STEM
        return self.root / f"{stem}.cairo"


def crates_by_name(crates: Iterable[Crate]) -> dict[str, Crate]:
    """Index crates by name.

    Same-named crates are not deduplicated: a later crate replaces an
    earlier one, so input order decides the winner.

    Returns
    -------
    dict[str, Crate]
        Mapping of crate name to the last crate with that name.
    """
    return {crate.name: crate for crate in crates}


__all__ = ["CORE_CRATE_NAME", "LIB_FILE_STEM", "Crate", "crates_by_name"]
