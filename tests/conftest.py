"""Shared pytest fixtures for workspace-sync tests."""

import json
from pathlib import Path

import pytest
from dotenv import load_dotenv

from workspace_sync.sync.workspace import WorkspaceFile

load_dotenv()


def write_json(path: Path, data, indent=4) -> Path:
    """Write *data* as JSON to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=indent) + "\n", encoding="utf-8")
    return path


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's shell or .env from leaking into tests."""
    for name in (
        "WORKSPACE_SYNC_FILE",
        "WORKSPACE_SYNC_ARTIFACT",
        "WORKSPACE_SYNC_DEBOUNCE_MS",
        "WORKSPACE_SYNC_MAX_PARALLEL",
        "WORKSPACE_SYNC_CONFIG",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace_dir(tmp_path):
    """Workspace directory with two sub-folders: ``api`` and ``web``."""
    (tmp_path / "api").mkdir()
    (tmp_path / "web").mkdir()
    return tmp_path


@pytest.fixture
def make_workspace(workspace_dir):
    """Factory: write a workspace document and return its ``WorkspaceFile``."""

    def _make(data: dict, name: str = "project.code-workspace") -> WorkspaceFile:
        path = write_json(workspace_dir / name, data, indent="\t")
        return WorkspaceFile(path)

    return _make


@pytest.fixture
def basic_document():
    """Root folder plus ``api`` and ``web`` with a typical setting mix."""
    return {
        "folders": [
            {"path": "."},
            {"path": "api", "name": "API", "settings": {"editor.tabSize": 4}},
            {"path": "web"},
        ],
        "settings": {
            "editor.fontSize": 14,
            "files.exclude": {"**/.git": True},
            "workspaceManager.autoSync.enabled": True,
        },
    }
