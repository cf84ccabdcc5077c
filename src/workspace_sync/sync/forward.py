"""Forward sync: write each folder's resolved settings to its artifact.

For every folder of the workspace (except the one that is the workspace
directory itself) the engine:

1. Resolves the folder's settings from the document.
2. Serialises them deterministically.
3. Writes the artifact only if its bytes would change.

Folders are independent, so they are processed concurrently with bounded
parallelism.  Error handling is per-folder: a single failure is logged and
does not abort the pass.
"""

from __future__ import annotations

import asyncio
import logging

from workspace_sync.core.async_utils import gather_limited, run_sync_limited
from workspace_sync.sync import settings_keys as keys
from workspace_sync.sync.models import FolderOverride, WorkspaceDocument
from workspace_sync.sync.resolver import ConfigurationResolver
from workspace_sync.sync.workspace import WorkspaceFile

logger = logging.getLogger(__name__)


class ForwardSyncEngine:
    """Propagate workspace settings into every folder's artifact.

    Args:
        workspace: Workspace file collaborator.
        resolver: Settings resolver (a default one is created if omitted).
        max_parallel: Maximum number of folders processed at once.
    """

    def __init__(
        self,
        workspace: WorkspaceFile,
        resolver: ConfigurationResolver | None = None,
        max_parallel: int = 5,
    ) -> None:
        self.workspace = workspace
        self.resolver = resolver or ConfigurationResolver()
        self.max_parallel = max_parallel

    async def sync(self) -> int:
        """Run one forward pass over all folders.

        Returns:
            Number of artifacts actually written.

        Raises:
            ConfigNotFoundError: If the workspace file is unavailable.
            InvalidDocumentError: If it cannot be parsed.
        """
        document = await self.workspace.load_async()

        if document.settings.get(keys.SYNC_ENABLED) is False:
            logger.info("Forward sync skipped: sync.enabled is false")
            return 0

        semaphore = asyncio.Semaphore(self.max_parallel)
        written = await gather_limited(
            [
                self._sync_folder(document, folder, semaphore)
                for folder in document.folders
            ]
        )
        count = sum(written)
        logger.info(
            "Forward sync complete: %d of %d folder(s) updated",
            count,
            len(document.folders),
        )
        return count

    async def _sync_folder(
        self,
        document: WorkspaceDocument,
        folder: FolderOverride,
        semaphore: asyncio.Semaphore,
    ) -> bool:
        """Sync one folder; returns ``True`` if its artifact was written."""
        try:
            if await run_sync_limited(
                semaphore, self.workspace.is_workspace_root, folder.path
            ):
                logger.debug("Skipping root folder %s", folder.label)
                return False

            settings = self.resolver.resolve(document, folder)
            changed = await run_sync_limited(
                semaphore,
                self.workspace.write_artifact,
                folder.path,
                settings,
            )
        except Exception as exc:
            logger.error("Error syncing %s: %s", folder.label, exc)
            return False

        if changed:
            logger.info(
                "Synced settings to %s/%s",
                folder.label,
                self.workspace.artifact,
            )
        else:
            logger.debug("Settings for %s already up to date", folder.label)
        return changed
