"""Bidirectional workspace settings sync engine.

Public API for keeping a ``.code-workspace`` file and the per-folder
``.vscode/settings.json`` artifacts consistent.

Architecture
------------
Forward sync resolves each folder's settings from the workspace document
(root settings, sub-folder defaults, do-not-inherit patterns, folder
override) and writes them to the folder's artifact when they differ.
Reverse sync recomputes the same resolution, diffs it against the artifact
and folds only the difference back into the folder's override.  The
coordinator debounces change events and lets one pass run at a time so
neither direction re-triggers itself.

Modules:

- ``settings_keys`` -- reserved ``workspaceManager.*`` keys and helpers.
- ``patterns``      -- ``PatternMatcher``: glob exclusion with ``!`` negation.
- ``merger``        -- ``merge`` / ``diff`` / ``deep_equal`` over settings trees.
- ``resolver``      -- ``ConfigurationResolver``: per-folder settings.
- ``models``        -- ``WorkspaceDocument``, ``FolderOverride`` and enums.
- ``jsonc``         -- JSON-with-comments reader.
- ``workspace``     -- ``WorkspaceFile``: document and artifact I/O.
- ``forward``       -- ``ForwardSyncEngine``.
- ``reverse``       -- ``ReverseSyncEngine``.
- ``coordinator``   -- ``SyncCoordinator``: debounce + loop prevention.
- ``watcher``       -- ``WorkspaceWatcher``: watchdog event source.

Usage example
-------------
::

    from pathlib import Path
    from workspace_sync.sync import (
        ForwardSyncEngine, ReverseSyncEngine, WorkspaceFile,
    )

    workspace = WorkspaceFile(Path("project.code-workspace"))
    written = await ForwardSyncEngine(workspace).sync()
    changed = await ReverseSyncEngine(workspace).sync_folder_to_workspace("api")
"""

from .coordinator import SyncCoordinator
from .forward import ForwardSyncEngine
from .merger import deep_equal, diff, merge
from .models import (
    CoordinatorState,
    CoordinatorStats,
    FolderOverride,
    SyncDirection,
    WorkspaceDocument,
)
from .patterns import PatternMatcher
from .resolver import ConfigurationResolver, resolve_folder_settings
from .reverse import ReverseSyncEngine
from .watcher import WorkspaceWatcher
from .workspace import WorkspaceFile

__all__ = [
    "ConfigurationResolver",
    "CoordinatorState",
    "CoordinatorStats",
    "FolderOverride",
    "ForwardSyncEngine",
    "PatternMatcher",
    "ReverseSyncEngine",
    "SyncCoordinator",
    "SyncDirection",
    "WorkspaceDocument",
    "WorkspaceFile",
    "WorkspaceWatcher",
    "deep_equal",
    "diff",
    "merge",
    "resolve_folder_settings",
]
