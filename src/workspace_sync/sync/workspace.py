"""Workspace file and folder settings artifact I/O.

``WorkspaceFile`` is the only place that touches the disk for sync:

* The workspace document (``*.code-workspace``) is parsed as JSONC and
  validated into a ``WorkspaceDocument``.  ``save()`` re-reads the file and
  replaces only ``folders`` and ``settings`` so any other top-level field
  survives unchanged.
* Each folder's artifact (``<folder>/.vscode/settings.json`` by default) is
  written with 4-space indentation and a trailing newline, and only when the
  bytes would change.

Sync methods do the work; ``*_async`` wrappers run them via ``run_sync()``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import ValidationError

from workspace_sync.core.async_utils import run_sync
from workspace_sync.errors import (
    ArtifactUnreadableError,
    ConfigNotFoundError,
    InvalidDocumentError,
    PersistError,
)
from workspace_sync.file_handler import (
    read_bytes_if_exists,
    read_file_with_encoding,
    write_file,
)
from workspace_sync.sync import jsonc
from workspace_sync.sync.models import WorkspaceDocument

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT = ".vscode/settings.json"
WORKSPACE_SUFFIX = ".code-workspace"


def serialize_artifact(settings: dict[str, Any]) -> str:
    """Deterministic artifact text: 4-space indent plus trailing newline."""
    return json.dumps(settings, indent=4, ensure_ascii=False) + "\n"


def serialize_document(data: dict[str, Any]) -> str:
    """Workspace file text: tab indent plus trailing newline."""
    return json.dumps(data, indent="\t", ensure_ascii=False) + "\n"


def find_workspace_file(directory: Path) -> Path:
    """Return the single ``*.code-workspace`` file in *directory*.

    Raises:
        ConfigNotFoundError: If there is no such file, or more than one.
    """
    candidates = sorted(directory.glob(f"*{WORKSPACE_SUFFIX}"))
    if not candidates:
        raise ConfigNotFoundError(
            f"No {WORKSPACE_SUFFIX} file found in {directory}. "
            "Pass --workspace or set WORKSPACE_SYNC_FILE."
        )
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise ConfigNotFoundError(
            f"Multiple workspace files in {directory} ({names}). "
            "Pass --workspace or set WORKSPACE_SYNC_FILE."
        )
    return candidates[0]


class WorkspaceFile:
    """Read and write a workspace document and its folder artifacts.

    Args:
        path: Path to the ``.code-workspace`` file.
        artifact: Artifact path relative to each folder.
    """

    def __init__(self, path: Path, artifact: str = DEFAULT_ARTIFACT) -> None:
        self.path = Path(path).expanduser().absolute()
        self.artifact = artifact

    @property
    def directory(self) -> Path:
        """Directory containing the workspace file."""
        return self.path.parent

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def _read_raw(self) -> dict[str, Any]:
        """Read and parse the workspace file into a plain dict."""
        try:
            content, _ = read_file_with_encoding(self.path)
        except OSError as exc:
            raise ConfigNotFoundError(
                f"Cannot read workspace file {self.path}: {exc}"
            ) from exc

        try:
            data = jsonc.loads(content)
        except ValueError as exc:
            raise InvalidDocumentError(
                f"Cannot parse workspace file {self.path}: {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise InvalidDocumentError(
                f"Workspace file {self.path} must contain a JSON object"
            )
        return data

    def load(self) -> WorkspaceDocument:
        """Load and validate the workspace document.

        Raises:
            ConfigNotFoundError: If the file cannot be read.
            InvalidDocumentError: If it is not a valid workspace.
        """
        data = self._read_raw()
        data["folders"] = data.get("folders") or []
        data["settings"] = data.get("settings") or {}
        try:
            return WorkspaceDocument.model_validate(data)
        except ValidationError as exc:
            raise InvalidDocumentError(
                f"Invalid workspace file {self.path}: {exc}"
            ) from exc

    def save(self, document: WorkspaceDocument) -> None:
        """Write *document* back, replacing only ``folders`` and ``settings``.

        The file is re-read first so top-level fields this process never
        modelled are preserved verbatim.

        Raises:
            PersistError: If the write fails.
        """
        original = self._read_raw()
        updated = {
            **original,
            "folders": [f.to_dict() for f in document.folders],
            "settings": document.settings,
        }
        try:
            write_file(self.path, serialize_document(updated))
        except OSError as exc:
            raise PersistError(
                f"Failed to write workspace file {self.path}: {exc}"
            ) from exc
        logger.debug("Saved workspace file %s", self.path)

    # ------------------------------------------------------------------
    # Folder paths
    # ------------------------------------------------------------------

    def resolve_folder_path(self, folder_path: str) -> Path:
        """Resolve *folder_path* to a canonical absolute path.

        Relative paths are taken from the workspace directory; symlinks are
        resolved.

        Raises:
            OSError: If the folder does not exist.
        """
        candidate = Path(folder_path).expanduser()
        if not candidate.is_absolute():
            candidate = self.directory / candidate
        return candidate.resolve(strict=True)

    def is_workspace_root(self, folder_path: str) -> bool:
        """Return ``True`` if *folder_path* is the workspace directory itself."""
        try:
            resolved = self.resolve_folder_path(folder_path)
            return resolved == self.directory.resolve(strict=True)
        except OSError:
            # A folder that does not exist cannot be the root
            return False

    def artifact_path(self, folder_path: str) -> Path:
        """Return the artifact file path for *folder_path*."""
        return self.resolve_folder_path(folder_path) / self.artifact

    def folder_path_for(self, artifact_file: Path) -> str | None:
        """Map an artifact file back to a folder path string.

        Returns the folder directory relative to the workspace directory in
        POSIX form (``"."`` for the workspace directory itself), or ``None``
        when *artifact_file* is not an artifact inside the workspace.
        """
        parts = PurePosixPath(self.artifact).parts
        file_parts = artifact_file.parts
        if len(file_parts) <= len(parts) or file_parts[-len(parts) :] != parts:
            return None

        folder_dir = Path(*file_parts[: -len(parts)])
        try:
            relative = folder_dir.relative_to(self.directory)
        except ValueError:
            return None
        return relative.as_posix() if relative.parts else "."

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def load_artifact(self, folder_path: str) -> dict[str, Any]:
        """Read and parse a folder's artifact.

        Raises:
            ArtifactUnreadableError: If the artifact is missing, unreadable,
                not valid JSONC, or not a JSON object.
        """
        try:
            target = self.artifact_path(folder_path)
            content, _ = read_file_with_encoding(target)
            data = jsonc.loads(content)
        except (OSError, ValueError) as exc:
            raise ArtifactUnreadableError(
                f"Cannot read settings for {folder_path}: {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise ArtifactUnreadableError(
                f"Settings for {folder_path} are not a JSON object"
            )
        return data

    def write_artifact(
        self, folder_path: str, settings: dict[str, Any]
    ) -> bool:
        """Write *settings* to the folder's artifact if the bytes differ.

        Returns:
            ``True`` if the file was written, ``False`` if unchanged.

        Raises:
            PersistError: If the folder is missing or the write fails.
        """
        content = serialize_artifact(settings)
        try:
            target = self.artifact_path(folder_path)
            if read_bytes_if_exists(target) == content.encode("utf-8"):
                return False
            write_file(target, content)
        except OSError as exc:
            raise PersistError(
                f"Failed to write settings for {folder_path}: {exc}"
            ) from exc
        return True

    # ------------------------------------------------------------------
    # Async wrappers
    # ------------------------------------------------------------------

    async def load_async(self) -> WorkspaceDocument:
        return await run_sync(self.load)

    async def save_async(self, document: WorkspaceDocument) -> None:
        await run_sync(self.save, document)

    async def load_artifact_async(self, folder_path: str) -> dict[str, Any]:
        return await run_sync(self.load_artifact, folder_path)

    async def is_workspace_root_async(self, folder_path: str) -> bool:
        return await run_sync(self.is_workspace_root, folder_path)
