from __future__ import annotations

from pathlib import Path

import pytest

from trivia_challenge.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert dict(layout.items()).keys() == {"config", "logs"}
    for name, path in layout.items():
        assert path.is_dir()
        assert layout.created[name] is True
    assert layout.created["home"] is True


def test_ensure_workspace_is_idempotent(tmp_path, monkeypatch):
    root = tmp_path / "existing"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    first = workspace.ensure_workspace()
    second = workspace.ensure_workspace()

    assert first.home == second.home
    assert all(not created for created in second.created.values())


def test_explicit_path_beats_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "env"))
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(path=custom)

    assert layout.home == custom.resolve()
    assert not (tmp_path / "env").exists()


def test_env_mapping_is_honoured(tmp_path):
    root = tmp_path / "mapped"

    layout = workspace.ensure_workspace(
        env={workspace.WORKSPACE_ENV: f"  {root}  "}
    )

    assert layout.home == root.resolve()


def test_default_location_is_used_without_env(tmp_path, monkeypatch):
    default = tmp_path / "home" / ".trivia-challenge"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", default)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == default.resolve()


def test_default_location_falls_back_to_tempdir(tmp_path, monkeypatch):
    default = tmp_path / "locked"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", default)
    monkeypatch.setattr(
        workspace.tempfile, "gettempdir", lambda: str(tmp_path / "tmp")
    )
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == default.resolve():
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == tmp_path / "tmp" / "trivia-challenge"


def test_ensure_workspace_without_create(tmp_path, monkeypatch):
    root = tmp_path / "deferred"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace(create=False)

    assert layout.home == root.resolve()
    assert not root.exists()
    assert all(not created for created in layout.created.values())


def test_ensure_workspace_errors_when_path_is_file(tmp_path, monkeypatch):
    root = tmp_path / "file"
    root.write_text("not a dir", encoding="utf-8")
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace()


def test_path_for_unknown_key_errors(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "ws", create=False)

    with pytest.raises(workspace.WorkspaceError):
        layout.path_for("unknown")
