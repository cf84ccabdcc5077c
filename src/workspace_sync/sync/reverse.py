"""Reverse sync: fold artifact edits back into a folder's override.

A folder's artifact may be edited outside of forward sync (e.g. through an
editor's settings UI).  Reverse sync captures only the *net new* changes:

1. Recompute what forward sync would have written for the folder.
2. Diff the artifact against it; removed keys become ``None``.
3. Drop internal keys and keys matching the reverse-exclude patterns (root
   and folder lists concatenated, ``!`` negations win).
4. Apply the remaining patch to ``folders[].settings`` and save.

A forward pass immediately followed by a reverse pass therefore yields an
empty patch and no write.
"""

from __future__ import annotations

import logging
from typing import Any

from workspace_sync.errors import ArtifactUnreadableError, FolderNotFoundError
from workspace_sync.sync import settings_keys as keys
from workspace_sync.sync.merger import deep_equal, diff
from workspace_sync.sync.models import FolderOverride, WorkspaceDocument
from workspace_sync.sync.patterns import PatternMatcher
from workspace_sync.sync.resolver import ConfigurationResolver
from workspace_sync.sync.workspace import WorkspaceFile

logger = logging.getLogger(__name__)


def is_reverse_sync_enabled(
    document: WorkspaceDocument, folder: FolderOverride
) -> bool:
    """Folder setting, else root setting, else ``True``.

    An explicit ``null`` falls through to the next level.
    """
    enabled = (folder.settings or {}).get(keys.REVERSE_SYNC_ENABLED)
    if enabled is None:
        enabled = document.settings.get(keys.REVERSE_SYNC_ENABLED)
    if enabled is None:
        return True
    return bool(enabled)


def reverse_exclude_matcher(
    document: WorkspaceDocument, folder: FolderOverride
) -> PatternMatcher:
    """Matcher over the root patterns followed by the folder patterns."""
    return PatternMatcher(
        keys.get_pattern_list(document.settings, keys.REVERSE_SYNC_EXCLUDE)
        + keys.get_pattern_list(folder.settings, keys.REVERSE_SYNC_EXCLUDE)
    )


def filter_patch(
    patch: dict[str, Any],
    matcher: PatternMatcher,
    expected: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Remove internal and excluded keys from a reverse-sync patch.

    Internal keys nested inside values are stripped too.  When *expected*
    is given, an entry that equals its expected value once stripped is not
    a change and is dropped.
    """
    expected = expected or {}
    filtered: dict[str, Any] = {}
    for key, value in patch.items():
        if keys.is_internal_key(key) or matcher.is_excluded(key):
            continue
        value = keys.strip_internal_keys(value)
        if key in expected and deep_equal(value, expected[key]):
            continue
        filtered[key] = value
    return filtered


def apply_patch(
    settings: dict[str, Any] | None, patch: dict[str, Any]
) -> dict[str, Any]:
    """Return *settings* with *patch* applied; ``None`` values delete keys."""
    updated = dict(settings or {})
    for key, value in patch.items():
        if value is None:
            updated.pop(key, None)
        else:
            updated[key] = value
    return updated


class ReverseSyncEngine:
    """Capture out-of-band artifact edits into the workspace document.

    Args:
        workspace: Workspace file collaborator.
        resolver: Settings resolver shared with forward sync.
    """

    def __init__(
        self,
        workspace: WorkspaceFile,
        resolver: ConfigurationResolver | None = None,
    ) -> None:
        self.workspace = workspace
        self.resolver = resolver or ConfigurationResolver()

    async def sync_folder_to_workspace(self, folder_path: str) -> bool:
        """Reconcile one folder's artifact into its override.

        Args:
            folder_path: The folder's ``path`` exactly as in the document.

        Returns:
            ``True`` if the workspace document was written.

        Raises:
            ConfigNotFoundError: If the workspace file is unavailable.
            FolderNotFoundError: If *folder_path* is not in ``folders``.
            PersistError: If saving the document fails.
        """
        document = await self.workspace.load_async()
        folder = document.find_folder(folder_path)
        if folder is None:
            raise FolderNotFoundError(folder_path)

        if await self.workspace.is_workspace_root_async(folder_path):
            logger.debug("Reverse sync skipped: root folder")
            return False

        if not is_reverse_sync_enabled(document, folder):
            logger.info(
                "Reverse sync skipped for %s: reverseSync.enabled is false",
                folder.label,
            )
            return False

        matcher = reverse_exclude_matcher(document, folder)

        try:
            current = await self.workspace.load_artifact_async(folder_path)
        except ArtifactUnreadableError as exc:
            logger.info(
                "Reverse sync skipped for %s: %s", folder.label, exc
            )
            return False

        expected = self.resolver.resolve(document, folder)
        patch = filter_patch(diff(expected, current), matcher, expected)

        if not patch:
            logger.debug(
                "Reverse sync skipped for %s: no changes detected",
                folder.label,
            )
            return False

        folder.settings = apply_patch(folder.settings, patch)
        await self.workspace.save_async(document)

        logger.info(
            "Reverse synced %d setting(s) from %s: %s",
            len(patch),
            folder.label,
            ", ".join(sorted(patch)),
        )
        return True

    async def sync_all(self) -> int:
        """Reverse-sync every folder of the workspace, one at a time.

        Returns:
            Number of folders whose changes were written.
        """
        document = await self.workspace.load_async()
        count = 0
        for folder in document.folders:
            if await self.sync_folder_to_workspace(folder.path):
                count += 1
        return count
