"""Crate derivation tests for Scarb-based projects."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pytest

from project_model.crate import Crate, crates_by_name
from project_model.database import ProjectModelDatabase
from project_model.manifest import CairoProjectManifestPath
from project_model.settings import Cfg, CfgSet, Edition, ExperimentalFeaturesConfig
from project_model.toolchain import ScarbCommandError
from serde_msgspec import dumps_json
from tests.workspace_helpers import (
    FakeToolchain,
    ScarbWorkspace,
    build_metadata,
    component_payload,
    metadata_payload,
    package_payload,
    unit_payload,
)


def _database(payload: dict[str, object]) -> ProjectModelDatabase:
    return ProjectModelDatabase(FakeToolchain(build_metadata(payload)))


def _core_and_mypkg(
    workspace: ScarbWorkspace,
    *,
    mypkg_edition: str = "2023_11",
    extra_components: Sequence[tuple[str, Path]] = (),
    leading_units: Sequence[dict[str, object]] = (),
    extra_packages: Sequence[dict[str, object]] = (),
) -> dict[str, object]:
    core_source = workspace.write_source("core/src/lib.cairo")
    pkg_source = workspace.write_source("pkg/src/mypkg_main.cairo")
    core = package_payload("core", workspace.root / "core", edition="2024_07")
    mypkg = package_payload(
        "mypkg",
        workspace.root / "pkg",
        edition=mypkg_edition,
        experimental_features=["negative_impls"],
    )
    unit = unit_payload(
        "mypkg-lib",
        str(mypkg["id"]),
        [
            component_payload("core", core_source, package=str(core["id"])),
            component_payload("mypkg", pkg_source, package=str(mypkg["id"])),
            *(
                component_payload(name, source, package=str(mypkg["id"]))
                for name, source in extra_components
            ),
        ],
        cfg=[["target", "lib"]],
    )
    return metadata_payload(
        workspace.root,
        packages=[core, mypkg, *extra_packages],
        units=[*leading_units, unit],
    )


def test_core_and_custom_main_stem(scarb_workspace: ScarbWorkspace) -> None:
    """Ensure the standard two-component workspace yields two crates."""
    database = _database(_core_and_mypkg(scarb_workspace))

    crates = database.project_crates(scarb_workspace.project)

    root = scarb_workspace.root
    assert [crate.name for crate in crates] == ["core", "mypkg"]
    core, mypkg = crates
    assert core.root == root / "core" / "src"
    assert core.custom_main_file_stem is None
    assert core.is_core()
    assert core.main_file == root / "core" / "src" / "lib.cairo"
    assert mypkg.root == root / "pkg" / "src"
    assert mypkg.custom_main_file_stem == "mypkg_main"
    assert mypkg.main_file == root / "pkg" / "src" / "mypkg_main.cairo"
    assert mypkg.settings.edition is Edition.V2023_11
    assert mypkg.settings.cfg_set == CfgSet(items=(Cfg(key="target", value="lib"),))
    assert mypkg.settings.experimental_features == ExperimentalFeaturesConfig(
        negative_impls=True
    )


def test_directory_component_is_dropped(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure a directory source path skips only that component."""
    payload = _core_and_mypkg(
        scarb_workspace, extra_components=[("broken", scarb_workspace.root / "pkg")]
    )
    database = _database(payload)

    with caplog.at_level(logging.WARNING):
        crates = database.project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["core", "mypkg"]
    assert any(
        "`broken`" in record.getMessage() and "must not be a directory" in record.getMessage()
        for record in caplog.records
    )


def test_missing_source_file_is_dropped(scarb_workspace: ScarbWorkspace) -> None:
    """Ensure unreadable source paths skip the component and keep siblings."""
    payload = _core_and_mypkg(scarb_workspace)
    (scarb_workspace.root / "pkg" / "src" / "mypkg_main.cairo").unlink()

    crates = _database(payload).project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["core"]


def test_cairo_plugin_units_are_skipped(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure build-time plugin units never contribute crates."""
    plugin_source = scarb_workspace.write_source("plugin/src/lib.cairo")
    plugin = package_payload("myplugin", scarb_workspace.root / "plugin")
    plugin_unit = unit_payload(
        "myplugin-plugin",
        str(plugin["id"]),
        [component_payload("myplugin", plugin_source, package=str(plugin["id"]))],
        kind="cairo-plugin",
    )
    payload = _core_and_mypkg(
        scarb_workspace, leading_units=[plugin_unit], extra_packages=[plugin]
    )

    with caplog.at_level(logging.DEBUG, logger="project_model.resolver"):
        crates = _database(payload).project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["core", "mypkg"]
    assert "skipping cairo plugin compilation unit: myplugin-plugin" in caplog.text


def test_crates_follow_document_order_across_units(scarb_workspace: ScarbWorkspace) -> None:
    """Ensure M components across units yield M crates in document order."""
    core_source = scarb_workspace.write_source("core/src/lib.cairo")
    lib_source = scarb_workspace.write_source("src/lib.cairo")
    test_source = scarb_workspace.write_source("tests/lib.cairo")
    core = package_payload("core", scarb_workspace.root / "core")
    mypkg = package_payload("mypkg", scarb_workspace.root)
    core_id, mypkg_id = str(core["id"]), str(mypkg["id"])
    payload = metadata_payload(
        scarb_workspace.root,
        packages=[core, mypkg],
        units=[
            unit_payload(
                "mypkg-lib",
                mypkg_id,
                [
                    component_payload("mypkg", lib_source, package=mypkg_id),
                    component_payload("core", core_source, package=core_id),
                ],
            ),
            unit_payload(
                "mypkg-test",
                mypkg_id,
                [
                    component_payload("mypkg", test_source, package=mypkg_id, cfg=["test"]),
                    component_payload("core", core_source, package=core_id),
                ],
                kind="test",
            ),
        ],
    )

    crates = _database(payload).project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["mypkg", "core", "mypkg", "core"]
    by_name = crates_by_name(crates)
    assert by_name["mypkg"].root == scarb_workspace.root / "tests"
    assert by_name["mypkg"].settings.cfg_set == CfgSet(items=(Cfg(key="test"),))


def test_missing_package_uses_defaults(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure components with an unknown package still yield a crate."""
    core_source = scarb_workspace.write_source("core/src/lib.cairo")
    payload = metadata_payload(
        scarb_workspace.root,
        units=[
            unit_payload(
                "unit",
                "ghost 0.1.0",
                [component_payload("core", core_source, package="ghost 0.1.0")],
            )
        ],
    )

    with caplog.at_level(logging.WARNING):
        crates = _database(payload).project_crates(scarb_workspace.project)

    assert len(crates) == 1
    assert crates[0].settings.edition is Edition.default()
    assert crates[0].settings.experimental_features == ExperimentalFeaturesConfig()
    assert "package for component is missing in scarb metadata: core" in caplog.text


def test_missing_core_is_reported(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure derivation succeeds without core but warns about it."""
    source = scarb_workspace.write_source("src/lib.cairo")
    mypkg = package_payload("mypkg", scarb_workspace.root)
    payload = metadata_payload(
        scarb_workspace.root,
        packages=[mypkg],
        units=[
            unit_payload(
                "mypkg-lib",
                str(mypkg["id"]),
                [component_payload("mypkg", source, package=str(mypkg["id"]))],
            )
        ],
    )

    with caplog.at_level(logging.WARNING):
        crates = _database(payload).project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["mypkg"]
    assert "the `core` crate is missing in scarb metadata" in caplog.text


def test_unparsable_edition_keeps_crate(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure a bad edition degrades to the default instead of failing."""
    payload = _core_and_mypkg(scarb_workspace, mypkg_edition="not-an-edition")

    with caplog.at_level(logging.WARNING):
        crates = _database(payload).project_crates(scarb_workspace.project)

    assert crates[1].settings.edition is Edition.default()
    assert "failed to parse edition of package: mypkg" in caplog.text


def test_malformed_component_cfg_keeps_crate(
    scarb_workspace: ScarbWorkspace,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure an unconvertible cfg yields an unknown cfg set, not a dropped crate."""
    core_source = scarb_workspace.write_source("core/src/lib.cairo")
    pkg_source = scarb_workspace.write_source("pkg/src/lib.cairo")
    core = package_payload("core", scarb_workspace.root / "core")
    mypkg = package_payload("mypkg", scarb_workspace.root / "pkg")
    unit = unit_payload(
        "mypkg-lib",
        str(mypkg["id"]),
        [
            component_payload("core", core_source, package=str(core["id"])),
            component_payload(
                "mypkg",
                pkg_source,
                package=str(mypkg["id"]),
                cfg=[["target"], 42],
            ),
        ],
        cfg=[["target", "lib"]],
    )
    payload = metadata_payload(scarb_workspace.root, packages=[core, mypkg], units=[unit])

    with caplog.at_level(logging.WARNING):
        crates = _database(payload).project_crates(scarb_workspace.project)

    assert [crate.name for crate in crates] == ["core", "mypkg"]
    core_crate, mypkg_crate = crates
    assert core_crate.settings.cfg_set == CfgSet(items=(Cfg(key="target", value="lib"),))
    assert mypkg_crate.settings.cfg_set is None
    assert mypkg_crate.custom_main_file_stem is None
    assert (
        "scarb metadata cfg did not convert identically to cairo one for crate: mypkg"
        in caplog.text
    )


def test_tool_failure_yields_no_crates(scarb_workspace: ScarbWorkspace) -> None:
    """Ensure a failing Scarb invocation degrades to an empty result."""
    database = ProjectModelDatabase(FakeToolchain(ScarbCommandError(1, "boom")))

    assert database.project_crates(scarb_workspace.project) == ()


def test_non_scarb_project_yields_no_crates(tmp_path: Path) -> None:
    """Ensure unmanaged projects short-circuit without invoking Scarb."""
    toolchain = FakeToolchain(ScarbCommandError(1, "unused"))
    database = ProjectModelDatabase(toolchain)
    project = CairoProjectManifestPath(path=tmp_path / "cairo_project.toml")

    assert database.project_crates(project) == ()
    assert toolchain.calls == []


def test_derivation_is_idempotent(scarb_workspace: ScarbWorkspace) -> None:
    """Ensure identical metadata yields byte-identical crate sequences."""
    payload = _core_and_mypkg(scarb_workspace)

    first = _database(payload).project_crates(scarb_workspace.project)
    second = _database(payload).project_crates(scarb_workspace.project)

    assert first == second
    assert dumps_json(first) == dumps_json(second)
    assert all(isinstance(crate, Crate) for crate in first)
