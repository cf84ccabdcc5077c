"""Command-line entry point for workspace-sync.

Subcommands:

- ``forward``: write resolved settings to every folder once.
- ``reverse [FOLDER ...]``: fold folder settings edits back into the
  workspace file.
- ``watch``: watch the workspace and sync automatically while
  ``workspaceManager.autoSync.enabled`` is true.
- ``auto-sync {on,off}``: toggle ``workspaceManager.autoSync.enabled``.

Command results go to stdout; all log output goes to stderr (or a file).
"""

import argparse
import asyncio
import logging
import sys
from typing import Any

import yaml
from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .core.async_utils import run_sync
from .errors import WorkspaceSyncError
from .logger import setup_logging
from .sync import settings_keys as keys
from .sync.coordinator import SyncCoordinator
from .sync.forward import ForwardSyncEngine
from .sync.reverse import ReverseSyncEngine, is_reverse_sync_enabled
from .sync.watcher import WorkspaceWatcher
from .sync.workspace import WorkspaceFile

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _load_unified() -> UnifiedConfig:
    """Load YAML config files (if any) into a ``UnifiedConfig``."""
    if not discover_config_files():
        return UnifiedConfig()
    return build_config(load_hierarchical_config())


def _build_engines(
    config: Config,
) -> tuple[WorkspaceFile, ForwardSyncEngine, ReverseSyncEngine]:
    workspace = WorkspaceFile(config.workspace_file, artifact=config.artifact)
    forward = ForwardSyncEngine(
        workspace, max_parallel=config.max_parallel_folders
    )
    reverse = ReverseSyncEngine(workspace, resolver=forward.resolver)
    return workspace, forward, reverse


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_forward(config: Config, args: argparse.Namespace) -> int:
    _, forward, _ = _build_engines(config)
    count = await forward.sync()
    print(f"Synced settings to {count} folder(s)")
    return EXIT_OK


async def cmd_reverse(config: Config, args: argparse.Namespace) -> int:
    _, _, reverse = _build_engines(config)
    if args.folders:
        count = 0
        for folder_path in args.folders:
            if await reverse.sync_folder_to_workspace(folder_path):
                count += 1
    else:
        count = await reverse.sync_all()
    print(f"Synced changes from {count} folder(s) to workspace file")
    return EXIT_OK


async def cmd_auto_sync(config: Config, args: argparse.Namespace) -> int:
    workspace = WorkspaceFile(config.workspace_file, artifact=config.artifact)
    enabled = args.state == "on"
    document = await workspace.load_async()
    document.settings[keys.AUTO_SYNC_ENABLED] = enabled
    await workspace.save_async(document)
    print(f"Auto-sync {'enabled' if enabled else 'disabled'}")
    return EXIT_OK


def warn_on_config(workspace: WorkspaceFile) -> list[str]:
    """Log (and return) warnings about a workspace that will not sync.

    Raises:
        ConfigNotFoundError: If the workspace file is unavailable.
        InvalidDocumentError: If it cannot be parsed.
    """
    document = workspace.load()
    warnings: list[str] = []

    if document.settings.get(keys.AUTO_SYNC_ENABLED) is not True:
        warnings.append(
            "Auto-sync is disabled; changes are ignored until "
            "'workspace-sync auto-sync on'"
        )
    if document.settings.get(keys.SYNC_ENABLED) is False:
        warnings.append("Forward sync is disabled (sync.enabled is false)")

    folders = [
        f for f in document.folders if not workspace.is_workspace_root(f.path)
    ]
    if folders and not any(
        is_reverse_sync_enabled(document, f) for f in folders
    ):
        warnings.append("Reverse sync is disabled for every folder")

    for message in warnings:
        logger.warning(message)
    return warnings


async def cmd_watch(config: Config, args: argparse.Namespace) -> int:
    workspace, forward, reverse = _build_engines(config)
    await run_sync(warn_on_config, workspace)

    coordinator = SyncCoordinator(
        workspace, forward, reverse, debounce_ms=config.debounce_ms
    )

    document = await workspace.load_async()
    if document.settings.get(keys.AUTO_SYNC_ENABLED) is True:
        logger.info("Running initial forward sync")
        await forward.sync()

    watcher = WorkspaceWatcher(
        workspace, coordinator, asyncio.get_running_loop()
    )
    watcher.start()
    print(f"Watching {workspace.path} (Ctrl-C to stop)", file=sys.stderr)
    try:
        await wait_until_interrupted()
    finally:
        watcher.stop()
        coordinator.close()
        await coordinator.drain()
        logger.info("Coordinator stats: %s", coordinator.stats.model_dump())
    return EXIT_OK


async def wait_until_interrupted() -> None:
    """Block until the task is cancelled or Ctrl-C is pressed."""
    await asyncio.Event().wait()


COMMANDS = {
    "forward": cmd_forward,
    "reverse": cmd_reverse,
    "watch": cmd_watch,
    "auto-sync": cmd_auto_sync,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace-sync",
        description="Keep a .code-workspace file and per-folder settings in sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write resolved settings to every folder
  workspace-sync forward

  # Pull edits made in api/.vscode/settings.json back into the workspace
  workspace-sync reverse api

  # Turn on automatic sync and watch for changes
  workspace-sync auto-sync on
  workspace-sync watch

  # Use an explicit workspace file
  workspace-sync --workspace ~/src/project.code-workspace forward
        """,
    )

    parser.add_argument(
        "--workspace",
        help="Workspace file (takes precedence over WORKSPACE_SYNC_FILE env var and config files)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write log output to this file",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"workspace-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("forward", help="Sync workspace settings to all folders")

    reverse = sub.add_parser(
        "reverse", help="Sync folder settings back to the workspace file"
    )
    reverse.add_argument(
        "folders",
        nargs="*",
        metavar="FOLDER",
        help="Folder paths as written in the workspace file (default: all)",
    )

    watch = sub.add_parser("watch", help="Watch for changes and sync automatically")
    watch.add_argument(
        "--daemon",
        action="store_true",
        help="Log to a file only (LOG_FILE or /tmp/workspace-sync.log)",
    )

    auto = sub.add_parser("auto-sync", help="Enable or disable automatic sync")
    auto.add_argument("state", choices=["on", "off"])

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the command and return the exit code."""
    args = build_parser().parse_args(argv)

    # .env first so ${VAR} interpolation in YAML can use its values
    load_dotenv()

    try:
        unified = _load_unified()
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    log_kwargs: dict[str, Any] = {
        "debug": args.debug,
        "log_file": args.log_file or unified.logging.file,
        "debug_format": args.log_format,
    }
    if "level" in unified.logging.model_fields_set:
        log_kwargs["level"] = unified.logging.level
    mode = "daemon" if getattr(args, "daemon", False) else "cli"
    setup_logging(mode=mode, **log_kwargs)

    try:
        config = load_config(
            workspace=args.workspace,
            debug=args.debug,
            yaml_fallbacks={
                k: v
                for k, v in unified.workspace.model_dump().items()
                if v is not None
            },
        )
        logger.debug("Using workspace file %s", config.workspace_file)
        return asyncio.run(COMMANDS[args.command](config, args))
    except WorkspaceSyncError as e:
        logger.error("%s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
