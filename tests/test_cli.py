"""Tests for cli.py: argument parsing, commands and exit codes.

setup_logging is patched out so the tests do not install root handlers;
the workspace lives in tmp_path, which is also CWD and HOME.
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import read_json, write_json
from workspace_sync import __version__, cli
from workspace_sync.sync import settings_keys as keys


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("workspace_sync.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def project(make_workspace, basic_document, workspace_dir, monkeypatch):
    """Workspace in CWD, discovered without --workspace."""
    monkeypatch.chdir(workspace_dir)
    monkeypatch.setenv("HOME", str(workspace_dir / "home"))
    return make_workspace(basic_document)


def _artifact(directory, folder):
    return directory / folder / ".vscode" / "settings.json"


class TestParser:
    """Tests for build_parser()."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_reverse_folders(self):
        args = cli.build_parser().parse_args(["reverse", "api", "web"])

        assert args.folders == ["api", "web"]

    def test_auto_sync_choices(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["auto-sync", "maybe"])


class TestForwardCommand:
    """Tests for ``workspace-sync forward``."""

    def test_writes_artifacts(self, project, workspace_dir, capsys):
        assert cli.main(["forward"]) == 0

        assert "Synced settings to 2 folder(s)" in capsys.readouterr().out
        assert read_json(_artifact(workspace_dir, "web"))["editor.fontSize"] == 14

    def test_explicit_workspace(self, make_workspace, basic_document, workspace_dir, tmp_path_factory, monkeypatch):
        workspace = make_workspace(basic_document, name="other.code-workspace")
        elsewhere = tmp_path_factory.mktemp("elsewhere")
        monkeypatch.chdir(elsewhere)
        monkeypatch.setenv("HOME", str(elsewhere))

        assert cli.main(["--workspace", str(workspace.path), "forward"]) == 0
        assert _artifact(workspace_dir, "api").exists()

    def test_missing_workspace(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert cli.main(["forward"]) == 1
        assert "No .code-workspace file found" in capsys.readouterr().err

    def test_invalid_env_value(self, project, monkeypatch, capsys):
        monkeypatch.setenv("WORKSPACE_SYNC_MAX_PARALLEL", "lots")

        assert cli.main(["forward"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_yaml_config_used(self, make_workspace, basic_document, workspace_dir, monkeypatch):
        make_workspace(basic_document, name="a.code-workspace")
        make_workspace(basic_document, name="b.code-workspace")
        monkeypatch.chdir(workspace_dir)
        monkeypatch.setenv("HOME", str(workspace_dir / "home"))
        config = workspace_dir / ".workspace_sync" / "config.yml"
        config.parent.mkdir()
        config.write_text(
            "workspace:\n  file: b.code-workspace\n  artifact: conf/settings.json\n"
        )

        assert cli.main(["forward"]) == 0
        assert (workspace_dir / "api" / "conf" / "settings.json").exists()

    def test_bad_yaml(self, project, workspace_dir, capsys):
        config = workspace_dir / ".workspace_sync" / "config.yml"
        config.parent.mkdir()
        config.write_text("workspace: [oops\n")

        assert cli.main(["forward"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_logging_options_forwarded(self, project, _no_logging_setup):
        cli.main(["--debug", "--log-format", "json", "forward"])

        kwargs = _no_logging_setup.call_args[1]
        assert kwargs["mode"] == "cli"
        assert kwargs["debug"] is True
        assert kwargs["debug_format"] == "json"


class TestReverseCommand:
    """Tests for ``workspace-sync reverse``."""

    def test_named_folder(self, project, workspace_dir, capsys):
        cli.main(["forward"])
        artifact = read_json(_artifact(workspace_dir, "web"))
        artifact["new.key"] = True
        write_json(_artifact(workspace_dir, "web"), artifact)

        assert cli.main(["reverse", "web"]) == 0

        assert "Synced changes from 1 folder(s)" in capsys.readouterr().out
        assert read_json(project.path)["folders"][2]["settings"] == {"new.key": True}

    def test_all_folders(self, project, workspace_dir, capsys):
        cli.main(["forward"])
        capsys.readouterr()

        assert cli.main(["reverse"]) == 0
        assert "Synced changes from 0 folder(s)" in capsys.readouterr().out

    def test_unknown_folder(self, project, capsys):
        assert cli.main(["reverse", "nope"]) == 1
        assert "Folder not found: nope" in capsys.readouterr().err


class TestAutoSyncCommand:
    """Tests for ``workspace-sync auto-sync``."""

    @pytest.mark.parametrize("state,expected", [("on", True), ("off", False)])
    def test_toggle(self, project, state, expected, capsys):
        assert cli.main(["auto-sync", state]) == 0

        assert read_json(project.path)["settings"][keys.AUTO_SYNC_ENABLED] is expected
        assert "Auto-sync" in capsys.readouterr().out


class TestWatchCommand:
    """Tests for ``workspace-sync watch``."""

    def test_initial_forward_and_clean_shutdown(self, project, workspace_dir):
        with patch("workspace_sync.cli.WorkspaceWatcher") as watcher_cls, patch(
            "workspace_sync.cli.wait_until_interrupted", new=AsyncMock()
        ):
            assert cli.main(["watch"]) == 0

        watcher_cls.return_value.start.assert_called_once()
        watcher_cls.return_value.stop.assert_called_once()
        assert _artifact(workspace_dir, "api").exists()

    def test_no_initial_forward_when_auto_sync_off(self, make_workspace, basic_document, workspace_dir, monkeypatch):
        basic_document["settings"][keys.AUTO_SYNC_ENABLED] = False
        make_workspace(basic_document)
        monkeypatch.chdir(workspace_dir)
        monkeypatch.setenv("HOME", str(workspace_dir / "home"))

        with patch("workspace_sync.cli.WorkspaceWatcher"), patch(
            "workspace_sync.cli.wait_until_interrupted", new=AsyncMock()
        ):
            assert cli.main(["watch"]) == 0

        assert not _artifact(workspace_dir, "api").exists()

    def test_daemon_mode(self, project, _no_logging_setup):
        with patch("workspace_sync.cli.WorkspaceWatcher"), patch(
            "workspace_sync.cli.wait_until_interrupted", new=AsyncMock()
        ):
            cli.main(["watch", "--daemon"])

        assert _no_logging_setup.call_args[1]["mode"] == "daemon"

    def test_interrupt_exit_code(self, project, capsys):
        def _interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("workspace_sync.cli.asyncio.run", side_effect=_interrupt):
            assert cli.main(["watch"]) == 130

        assert "Interrupted." in capsys.readouterr().err


class TestWarnOnConfig:
    """Tests for warn_on_config()."""

    def test_healthy_workspace(self, project):
        assert cli.warn_on_config(project) == []

    def test_all_warnings(self, make_workspace, caplog):
        workspace = make_workspace(
            {
                "folders": [{"path": "."}, {"path": "api"}],
                "settings": {
                    keys.SYNC_ENABLED: False,
                    keys.REVERSE_SYNC_ENABLED: False,
                },
            }
        )

        warnings = cli.warn_on_config(workspace)

        assert len(warnings) == 3
        assert "Reverse sync is disabled for every folder" in caplog.text

    def test_root_only_workspace_has_no_reverse_warning(self, make_workspace):
        workspace = make_workspace(
            {
                "folders": [{"path": "."}],
                "settings": {
                    keys.AUTO_SYNC_ENABLED: True,
                    keys.REVERSE_SYNC_ENABLED: False,
                },
            }
        )

        assert cli.warn_on_config(workspace) == []
