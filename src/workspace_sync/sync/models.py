"""Pydantic models for the workspace sync engines.

Defines the data contracts shared by all sync modules:

- ``FolderOverride``: One entry of the workspace ``folders`` array.
- ``WorkspaceDocument``: The parsed workspace file (root settings + folders).
- ``SyncDirection``: Forward (document -> folders) or reverse.
- ``CoordinatorState``: Idle / forwarding / reversing state machine.
- ``CoordinatorStats``: Counters kept by the coordinator.

Document models are mutable because reverse sync edits them in memory
before writing them back.  Unknown fields are kept as model extras so they
survive a load/save cycle.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FolderOverride(BaseModel):
    """A folder entry of the workspace file.

    Attributes:
        path: Folder path, relative to the workspace file or absolute.
            Unique within the document and used as the folder identity.
        name: Optional display name.
        settings: Folder-specific settings override, applied last.
    """

    path: str
    name: str | None = None
    settings: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")

    @property
    def label(self) -> str:
        """Human-readable folder label for log messages."""
        return self.name or self.path

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the workspace file shape.

        ``name`` and ``settings`` are omitted when unset; ``None`` values
        *inside* ``settings`` are kept because they carry delete semantics.
        """
        data = self.model_dump()
        if data.get("name") is None:
            data.pop("name", None)
        if data.get("settings") is None:
            data.pop("settings", None)
        return data


class WorkspaceDocument(BaseModel):
    """The hierarchical configuration document.

    Attributes:
        folders: Ordered folder overrides.
        settings: Root settings shared by every folder.
    """

    folders: list[FolderOverride] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    def find_folder(self, folder_path: str) -> FolderOverride | None:
        """Return the folder whose ``path`` equals *folder_path*, if any."""
        for folder in self.folders:
            if folder.path == folder_path:
                return folder
        return None


class SyncDirection(str, Enum):
    """Direction of a sync pass."""

    FORWARD = "forward"
    REVERSE = "reverse"


class CoordinatorState(str, Enum):
    """States of the sync coordinator.

    At most one pass is in flight at any time; the state names which one.
    """

    IDLE = "idle"
    FORWARDING = "forwarding"
    REVERSING = "reversing"


class CoordinatorStats(BaseModel):
    """Running counters for the sync coordinator.

    Attributes:
        forward_passes: Forward passes that ran to completion or failure.
        reverse_passes: Reverse passes that ran to completion or failure.
        dropped_events: Events discarded because a pass was in flight.
        skipped_passes: Passes not started because auto-sync was off.
        failed_passes: Passes that raised an exception.
    """

    forward_passes: int = 0
    reverse_passes: int = 0
    dropped_events: int = 0
    skipped_passes: int = 0
    failed_passes: int = 0
