"""Crate settings and their derivation from Scarb metadata.

Every mapping here is total: malformed input degrades to a default and a
warning, it never fails crate derivation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

import msgspec

from serde_msgspec import StructBaseStrict, convert

if TYPE_CHECKING:
    from project_model.metadata import (
        CompilationUnitComponentMetadata,
        CompilationUnitMetadata,
        PackageMetadata,
    )

logger = logging.getLogger(__name__)


class Edition(StrEnum):
    """Cairo language edition."""

    V2023_01 = "2023_01"
    V2023_10 = "2023_10"
    V2023_11 = "2023_11"
    V2024_07 = "2024_07"

    @classmethod
    def default(cls) -> Edition:
        """Return the edition assumed when a package declares none."""
        return cls.V2023_01


class Cfg(StructBaseStrict, frozen=True, order=True):
    """Single configuration flag, either ``name`` or ``key: value``."""

    key: str
    value: str | None = None

    def __str__(self) -> str:
        if self.value is None:
            return self.key
        return f'{self.key}: "{self.value}"'


class CfgSet(StructBaseStrict, frozen=True):
    """Ordered, de-duplicated set of configuration flags."""

    items: tuple[Cfg, ...] = ()

    @classmethod
    def from_items(cls, items: Iterable[Cfg]) -> CfgSet:
        """Build a set keeping the first occurrence of every flag.

        Returns
        -------
        CfgSet
            Set in first-seen order.
        """
        return cls(items=tuple(dict.fromkeys(items)))

    def __contains__(self, cfg: object) -> bool:
        return cfg in self.items

    def __iter__(self) -> Iterator[Cfg]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class ExperimentalFeaturesConfig(StructBaseStrict, frozen=True):
    """Experimental language features enabled for a crate."""

    negative_impls: bool = False
    coupons: bool = False


EXPERIMENTAL_FEATURE_NAMES: tuple[str, ...] = tuple(
    ExperimentalFeaturesConfig.__struct_fields__
)


class CrateSettings(StructBaseStrict, frozen=True):
    """Compiler-facing settings of a crate.

    ``cfg_set`` is ``None`` when the flags are unknown, which means no
    cfg-based conditional compilation restrictions apply. This is not the
    same as an empty set.
    """

    edition: Edition = Edition.V2023_01
    cfg_set: CfgSet | None = None
    experimental_features: ExperimentalFeaturesConfig = msgspec.field(
        default_factory=ExperimentalFeaturesConfig
    )


# Scarb serializes ``name`` flags as strings and ``key: value`` flags as pairs.
_ScarbCfgWire = tuple[str | tuple[str, str], ...]


def package_edition(package: PackageMetadata | None, crate_name: str) -> Edition:
    """Return the package's edition, or the default edition.

    A missing edition falls back silently. A present but unknown one is
    reported as a warning.

    Parameters
    ----------
    package
        Owning package, or ``None`` when it could not be resolved.
    crate_name
        Crate name used in diagnostics.

    Returns
    -------
    Edition
        Declared edition or the default.
    """
    if package is None or package.edition is None:
        return Edition.default()
    try:
        return Edition(package.edition)
    except ValueError:
        logger.warning(
            "failed to parse edition of package: %s: unknown edition %r",
            crate_name,
            package.edition,
        )
        return Edition.default()


def cfg_set_from_scarb(raw_cfg: Sequence[object], crate_name: str) -> CfgSet | None:
    """Convert Scarb cfg entries into a ``CfgSet``.

    Parameters
    ----------
    raw_cfg
        Raw cfg entries as found in the metadata document.
    crate_name
        Crate name used in diagnostics.

    Returns
    -------
    CfgSet | None
        Converted set, or ``None`` when any entry has an unexpected shape.
    """
    try:
        entries = convert(list(raw_cfg), target_type=_ScarbCfgWire)
    except msgspec.ValidationError as exc:
        logger.warning(
            "scarb metadata cfg did not convert identically to cairo one for crate: %s: %s",
            crate_name,
            exc,
        )
        return None
    return CfgSet.from_items(
        Cfg(key=entry) if isinstance(entry, str) else Cfg(key=entry[0], value=entry[1])
        for entry in entries
    )


def package_experimental_features(
    package: PackageMetadata | None,
) -> ExperimentalFeaturesConfig:
    """Return feature toggles listed by the package.

    Returns
    -------
    ExperimentalFeaturesConfig
        Toggles set for exact name matches; all off without a package.
    """
    declared = set(package.experimental_features) if package is not None else set()
    return ExperimentalFeaturesConfig(
        **{name: name in declared for name in EXPERIMENTAL_FEATURE_NAMES}
    )


def crate_settings(
    package: PackageMetadata | None,
    compilation_unit: CompilationUnitMetadata,
    component: CompilationUnitComponentMetadata,
) -> CrateSettings:
    """Derive settings for one component of a compilation unit.

    Component cfg entries replace the unit's when present.

    Returns
    -------
    CrateSettings
        Settings with field-level defaults substituted where needed.
    """
    raw_cfg = component.cfg if component.cfg is not None else compilation_unit.cfg
    return CrateSettings(
        edition=package_edition(package, component.name),
        cfg_set=cfg_set_from_scarb(raw_cfg, component.name),
        experimental_features=package_experimental_features(package),
    )


__all__ = [
    "EXPERIMENTAL_FEATURE_NAMES",
    "Cfg",
    "CfgSet",
    "CrateSettings",
    "Edition",
    "ExperimentalFeaturesConfig",
    "cfg_set_from_scarb",
    "crate_settings",
    "package_edition",
    "package_experimental_features",
]
