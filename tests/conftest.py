"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.workspace_helpers import ScarbWorkspace


@pytest.fixture
def scarb_workspace(tmp_path: Path) -> ScarbWorkspace:
    """Create an empty Scarb workspace with a manifest.

    Returns
    -------
    ScarbWorkspace
        Workspace rooted in a temporary directory.
    """
    root = tmp_path / "workspace"
    root.mkdir()
    workspace = ScarbWorkspace(root=root)
    workspace.manifest.write_text('[package]\nname = "mypkg"\nversion = "0.1.0"\n')
    return workspace
