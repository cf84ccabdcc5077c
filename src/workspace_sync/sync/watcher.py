"""File system watcher feeding change events to the sync coordinator.

Watches the workspace directory recursively with watchdog and routes:

- changes to the workspace file       -> ``coordinator.document_changed()``
- changes to ``<folder>/<artifact>``  -> ``coordinator.artifact_changed(folder)``

Watchdog delivers events on its observer thread; they are handed to the
coordinator on the asyncio loop via ``call_soon_threadsafe``.  Debouncing
is the coordinator's job, not the watcher's.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from workspace_sync.sync.coordinator import SyncCoordinator
from workspace_sync.sync.workspace import WorkspaceFile

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


def _as_path(raw: str | bytes) -> Path:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return Path(raw)


class WorkspaceEventHandler(FileSystemEventHandler):
    """Translate watchdog events into coordinator notifications.

    Args:
        workspace: Workspace file (for the document path and artifact layout).
        coordinator: Receives the notifications.
        loop: Event loop the coordinator runs on.
    """

    def __init__(
        self,
        workspace: WorkspaceFile,
        coordinator: SyncCoordinator,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        super().__init__()
        self._workspace = workspace
        self._coordinator = coordinator
        self._loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        if isinstance(event, FileMovedEvent):
            # Editors often save via write-to-temp then rename
            path = _as_path(event.dest_path)
        elif isinstance(event, (FileCreatedEvent, FileModifiedEvent)):
            path = _as_path(event.src_path)
        else:
            return

        self.route(path)

    def route(self, path: Path) -> None:
        """Notify the coordinator about a change to *path*, if relevant."""
        if path == self._workspace.path:
            self._loop.call_soon_threadsafe(
                self._coordinator.document_changed
            )
            return

        folder_path = self._workspace.folder_path_for(path)
        if folder_path is None:
            return
        self._loop.call_soon_threadsafe(
            self._coordinator.artifact_changed, folder_path
        )


class WorkspaceWatcher:
    """Own the watchdog observer for one workspace.

    Args:
        workspace: Workspace file whose directory is watched.
        coordinator: Coordinator receiving change notifications.
        loop: Event loop the coordinator runs on.
    """

    def __init__(
        self,
        workspace: WorkspaceFile,
        coordinator: SyncCoordinator,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._workspace = workspace
        self._handler = WorkspaceEventHandler(workspace, coordinator, loop)
        self._observer: BaseObserver | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Start watching.  No-op if already running."""
        if self._observer is not None:
            return

        logger.info("Starting file watcher on %s", self._workspace.directory)
        observer = Observer()
        observer.schedule(
            self._handler, str(self._workspace.directory), recursive=True
        )
        observer.daemon = True
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        """Stop watching and wait for the observer thread to exit."""
        if self._observer is None:
            return

        logger.info("Stopping file watcher")
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
