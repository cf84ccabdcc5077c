"""Exception hierarchy for workspace sync operations.

- ``WorkspaceSyncError``: Base class for everything raised by this package
- ``ConfigNotFoundError``: No workspace document is available
- ``InvalidDocumentError``: The workspace document cannot be parsed
- ``FolderNotFoundError``: A folder path is not listed in ``folders``
- ``ArtifactUnreadableError``: A folder's settings file is missing or invalid
- ``PersistError``: Writing the document or an artifact failed
"""

from __future__ import annotations


class WorkspaceSyncError(Exception):
    """Base exception for workspace sync errors."""


class ConfigNotFoundError(WorkspaceSyncError):
    """No workspace document could be located or read."""


class InvalidDocumentError(WorkspaceSyncError):
    """The workspace document exists but is not a valid workspace."""


class FolderNotFoundError(WorkspaceSyncError):
    """The requested folder path is not present in the workspace.

    Attributes:
        folder_path: The path that was looked up.
    """

    def __init__(self, folder_path: str) -> None:
        self.folder_path = folder_path
        super().__init__(f"Folder not found: {folder_path}")


class ArtifactUnreadableError(WorkspaceSyncError):
    """A folder's settings artifact is missing or not a JSON object."""


class PersistError(WorkspaceSyncError):
    """Writing the workspace document or a folder artifact failed."""
