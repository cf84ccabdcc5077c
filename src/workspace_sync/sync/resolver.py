"""Resolution of the settings each folder's artifact should contain.

Both sync directions need the same answer to "what would forward sync write
for this folder?", so the pipeline lives here:

1. Root settings with ``workspaceManager.*`` keys removed.
2. Merged with ``workspaceManager.sync.subFolderSettings.defaults``.
3. Top-level keys matching ``workspaceManager.sync.rootSettings.exclude``
   dropped (not inherited -- a folder may still set them itself).
4. Merged with the folder's own settings (internal keys removed).
5. Any internal key that slipped through is stripped again.

The result depends only on the document and folder, never on artifact state.
"""

from __future__ import annotations

import logging
from typing import Any

from workspace_sync.sync import settings_keys as keys
from workspace_sync.sync.merger import merge
from workspace_sync.sync.models import FolderOverride, WorkspaceDocument
from workspace_sync.sync.patterns import PatternMatcher

logger = logging.getLogger(__name__)


def resolve_folder_settings(
    document: WorkspaceDocument, folder: FolderOverride
) -> dict[str, Any]:
    """Compute the resolved settings for *folder*.

    Args:
        document: The parsed workspace document.
        folder: One of ``document.folders``.

    Returns:
        A new settings dict, free of internal-namespace keys.
    """
    root = document.settings

    base = keys.strip_internal_keys(root)
    defaults = keys.get_mapping(root, keys.SYNC_SUBFOLDER_DEFAULTS)
    with_defaults = merge(base, defaults)

    matcher = PatternMatcher(
        keys.get_pattern_list(root, keys.SYNC_ROOT_SETTINGS_EXCLUDE)
    )
    inherited = matcher.filter_settings(with_defaults)

    override = keys.strip_internal_keys(folder.settings or {})
    merged = merge(inherited, override)

    return keys.strip_internal_keys(merged)


class ConfigurationResolver:
    """Shared resolver used by the forward and reverse engines.

    Stateless; exists so engines can be handed an alternative resolver in
    tests.
    """

    def resolve(
        self, document: WorkspaceDocument, folder: FolderOverride
    ) -> dict[str, Any]:
        """Return the resolved settings for *folder*."""
        resolved = resolve_folder_settings(document, folder)
        logger.debug(
            "Resolved %d setting(s) for %s", len(resolved), folder.label
        )
        return resolved
