"""Sync coordinator: debounced event intake and loop prevention.

The coordinator turns change notifications into sync passes:

- ``document_changed()``        -> debounced forward pass
- ``artifact_changed(folder)``  -> debounced reverse pass for that folder

Each pass writes to the *other* side, which in turn produces a change
notification.  To keep a pass from re-triggering itself the coordinator is
an explicit state machine with at most one pass in flight:

    | Event / timer          | IDLE              | FORWARDING | REVERSING |
    |------------------------|-------------------|------------|-----------|
    | document changed       | (re)arm timer     | arm timer  | drop      |
    | artifact changed       | (re)arm timer     | drop       | arm timer |
    | forward timer expires  | -> FORWARDING     | drop       | drop      |
    | reverse timer expires  | -> REVERSING      | drop       | drop      |
    | pass finishes          |                   | -> IDLE    | -> IDLE   |

Dropped events are not queued: a change made while a pass is running is
picked up only if another event arrives after the coordinator is idle.
Debounce timers are kept per event source (the document, and each folder).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from workspace_sync.sync import settings_keys as keys
from workspace_sync.sync.forward import ForwardSyncEngine
from workspace_sync.sync.models import (
    CoordinatorState,
    CoordinatorStats,
    SyncDirection,
)
from workspace_sync.sync.reverse import ReverseSyncEngine
from workspace_sync.sync.workspace import WorkspaceFile

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300

_DOCUMENT_SOURCE = "document"

# Event intake: which in-flight state causes an incoming event to be dropped.
_BLOCKING_STATE = {
    SyncDirection.FORWARD: CoordinatorState.REVERSING,
    SyncDirection.REVERSE: CoordinatorState.FORWARDING,
}

# Pass start: allowed transitions out of IDLE.
_TRANSITIONS = {
    (CoordinatorState.IDLE, SyncDirection.FORWARD): CoordinatorState.FORWARDING,
    (CoordinatorState.IDLE, SyncDirection.REVERSE): CoordinatorState.REVERSING,
}


def accepts_event(state: CoordinatorState, direction: SyncDirection) -> bool:
    """Return ``True`` if an event for *direction* may be debounced now."""
    return state is not _BLOCKING_STATE[direction]


def next_state(
    state: CoordinatorState, direction: SyncDirection
) -> CoordinatorState | None:
    """Return the state a pass in *direction* moves to, or ``None`` to drop."""
    return _TRANSITIONS.get((state, direction))


class SyncCoordinator:
    """Debounce change events and run sync passes one at a time.

    Must be used from within a running asyncio event loop.

    Args:
        workspace: Workspace file, read to check ``autoSync.enabled``.
        forward: Forward sync engine.
        reverse: Reverse sync engine.
        debounce_ms: Quiet window before a pass starts.
    """

    def __init__(
        self,
        workspace: WorkspaceFile,
        forward: ForwardSyncEngine,
        reverse: ReverseSyncEngine,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self.workspace = workspace
        self.forward = forward
        self.reverse = reverse
        self.debounce_s = debounce_ms / 1000.0

        self.state = CoordinatorState.IDLE
        self.stats = CoordinatorStats()

        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------

    def document_changed(self) -> None:
        """Handle a change notification for the workspace document."""
        if not accepts_event(self.state, SyncDirection.FORWARD):
            self._drop("Workspace file change ignored (reverse sync in progress)")
            return
        logger.debug("Workspace file change detected")
        self._debounce(_DOCUMENT_SOURCE, self._run_forward)

    def artifact_changed(self, folder_path: str) -> None:
        """Handle a change notification for a folder's artifact."""
        if not accepts_event(self.state, SyncDirection.REVERSE):
            self._drop(
                f"Folder settings change ignored for {folder_path} "
                "(forward sync in progress)"
            )
            return
        logger.debug("Folder settings change detected: %s", folder_path)
        self._debounce(
            f"artifact:{folder_path}",
            lambda: self._run_reverse(folder_path),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        """Number of armed debounce timers."""
        return len(self._timers)

    async def drain(self) -> None:
        """Wait for all in-flight passes to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel all armed debounce timers."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    # ------------------------------------------------------------------
    # Debouncing
    # ------------------------------------------------------------------

    def _debounce(
        self, source: str, factory: Callable[[], Awaitable[None]]
    ) -> None:
        """(Re)arm the quiet-window timer for *source*."""
        existing = self._timers.pop(source, None)
        if existing is not None:
            existing.cancel()
        loop = asyncio.get_running_loop()
        self._timers[source] = loop.call_later(
            self.debounce_s, self._fire, source, factory
        )

    def _fire(
        self, source: str, factory: Callable[[], Awaitable[None]]
    ) -> None:
        self._timers.pop(source, None)
        task = asyncio.ensure_future(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _drop(self, reason: str) -> None:
        self.stats.dropped_events += 1
        logger.debug(reason)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def _auto_sync_enabled(self) -> bool:
        """Return ``True`` only if the document explicitly enables auto-sync."""
        try:
            document = await self.workspace.load_async()
        except Exception as exc:
            logger.warning("Cannot read auto-sync setting: %s", exc)
            return False
        return document.settings.get(keys.AUTO_SYNC_ENABLED) is True

    async def _run_forward(self) -> None:
        await self._run_pass(SyncDirection.FORWARD, self._forward_pass)

    async def _run_reverse(self, folder_path: str) -> None:
        await self._run_pass(
            SyncDirection.REVERSE, lambda: self._reverse_pass(folder_path)
        )

    async def _forward_pass(self) -> None:
        count = await self.forward.sync()
        self.stats.forward_passes += 1
        if count > 0:
            logger.info("Synced settings to %d folder(s)", count)

    async def _reverse_pass(self, folder_path: str) -> None:
        changed = await self.reverse.sync_folder_to_workspace(folder_path)
        self.stats.reverse_passes += 1
        if changed:
            logger.info("Synced folder changes from %s to workspace file", folder_path)

    async def _run_pass(
        self,
        direction: SyncDirection,
        body: Callable[[], Awaitable[None]],
    ) -> None:
        """Run one pass in *direction* if the state machine allows it."""
        if not await self._auto_sync_enabled():
            self.stats.skipped_passes += 1
            logger.debug("%s sync skipped: autoSync is disabled", direction.value)
            return

        target = next_state(self.state, direction)
        if target is None:
            self._drop(
                f"{direction.value} sync dropped: {self.state.value} in progress"
            )
            return

        self.state = target
        try:
            await body()
        except Exception as exc:
            self.stats.failed_passes += 1
            logger.error("%s sync error: %s", direction.value.capitalize(), exc)
        finally:
            self.state = CoordinatorState.IDLE
