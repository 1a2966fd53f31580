"""Crate derivation for Scarb-based projects."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from project_model.crate import LIB_FILE_STEM, Crate
from project_model.settings import crate_settings
from project_model.validate import ComponentRejected, validate_and_chop_source_path

if TYPE_CHECKING:
    from project_model.database import ProjectModelDatabase
    from project_model.manifest import ProjectManifestPath
    from project_model.metadata import (
        CompilationUnitComponentMetadata,
        CompilationUnitMetadata,
        Metadata,
    )

logger = logging.getLogger(__name__)

CAIRO_PLUGIN_TARGET_KIND = "cairo-plugin"


def project_crates(db: ProjectModelDatabase, project: ProjectManifestPath) -> tuple[Crate, ...]:
    """Get the list of crates from a Scarb-based project.

    Derivation is graceful: problems with a single component are logged as
    warnings and only that component is skipped.

    Every real workspace should yield a ``core`` crate. Scarb may omit it for
    ``no-core`` packages, which only make sense for ``core`` itself, so its
    absence is logged as a warning.

    Crates are not deduplicated by name. Packages usually declare several
    targets (lib, starknet-contract, test), and a crate from a later
    compilation unit overrides an earlier one wherever crates are keyed by
    name.

    Parameters
    ----------
    db
        Database providing the metadata query.
    project
        Project identifier.

    Returns
    -------
    tuple[Crate, ...]
        Crates in compilation-unit order, then component order.
    """
    metadata = db.scarb_metadata(project)
    if metadata is None:
        return ()

    crates: list[Crate] = []
    for compilation_unit in metadata.compilation_units:
        if compilation_unit.target.kind == CAIRO_PLUGIN_TARGET_KIND:
            logger.debug("skipping cairo plugin compilation unit: %s", compilation_unit.id)
            continue

        for component in compilation_unit.components:
            crate = _component_crate(metadata, compilation_unit, component)
            if crate is not None:
                crates.append(crate)

    if not any(crate.is_core() for crate in crates):
        logger.warning(
            "the `core` crate is missing in scarb metadata, will try to use unmanaged `core`"
        )

    return tuple(crates)


def _component_crate(
    metadata: Metadata,
    compilation_unit: CompilationUnitMetadata,
    component: CompilationUnitComponentMetadata,
) -> Crate | None:
    crate_name = component.name

    package = metadata.get_package(component.package)
    if package is None:
        logger.warning("package for component is missing in scarb metadata: %s", crate_name)

    checked = validate_and_chop_source_path(component.source_path, crate_name)
    if isinstance(checked, ComponentRejected):
        logger.warning("%s", checked.reason)
        return None

    custom_main_file_stem = checked.file_stem if checked.file_stem != LIB_FILE_STEM else None
    return Crate(
        name=crate_name,
        root=checked.root,
        custom_main_file_stem=custom_main_file_stem,
        settings=crate_settings(package, compilation_unit, component),
    )


__all__ = ["CAIRO_PLUGIN_TARGET_KIND", "project_crates"]
