from __future__ import annotations

import shutil
from pathlib import Path

import pytest


def test_workspace_removed_after_success(workspace_root: Path):
    from goreflect.probe.workspace import WORKSPACE_PREFIX, probe_workspace

    with probe_workspace(workspace_root) as ws:
        assert ws.is_dir()
        assert ws.parent == workspace_root
        assert ws.name.startswith(WORKSPACE_PREFIX)
        (ws / "prog.go").write_text("package main\n", encoding="utf-8")
    assert not ws.exists()
    assert list(workspace_root.iterdir()) == []


def test_workspace_removed_when_body_raises(workspace_root: Path):
    from goreflect.probe.workspace import probe_workspace

    seen: list[Path] = []
    with pytest.raises(RuntimeError, match="boom"):
        with probe_workspace(workspace_root) as ws:
            seen.append(ws)
            raise RuntimeError("boom")
    assert not seen[0].exists()


def test_workspaces_are_unique(workspace_root: Path):
    from goreflect.probe.workspace import probe_workspace

    with probe_workspace(workspace_root) as a, probe_workspace(workspace_root) as b:
        assert a != b


def test_workspace_create_failure_is_workspace_error(tmp_path: Path):
    from goreflect.errors import WorkspaceError
    from goreflect.probe.workspace import probe_workspace

    with pytest.raises(WorkspaceError):
        with probe_workspace(tmp_path / "missing"):
            pass


def test_workspace_remove_failure_is_workspace_error(monkeypatch, workspace_root: Path):
    from goreflect.errors import WorkspaceError
    from goreflect.probe import workspace as wmod

    def fake_rmtree(path, *args, **kwargs):  # noqa: ANN001
        raise PermissionError(f"cannot remove {path}")

    monkeypatch.setattr(wmod.shutil, "rmtree", fake_rmtree)
    with pytest.raises(WorkspaceError, match="failed to remove"):
        with wmod.probe_workspace(workspace_root):
            pass
    monkeypatch.undo()
    for p in workspace_root.iterdir():
        shutil.rmtree(p)


def test_workspace_remove_failure_does_not_mask_body_error(monkeypatch, workspace_root: Path):
    from goreflect.probe import workspace as wmod

    def fake_rmtree(path, *args, **kwargs):  # noqa: ANN001
        raise PermissionError(f"cannot remove {path}")

    monkeypatch.setattr(wmod.shutil, "rmtree", fake_rmtree)
    with pytest.raises(RuntimeError, match="build exploded"):
        with wmod.probe_workspace(workspace_root):
            raise RuntimeError("build exploded")
