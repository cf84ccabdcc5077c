"""Reserved ``workspaceManager.*`` keys and the internal-namespace predicate.

Every key that begins with :data:`INTERNAL_PREFIX` is private sync
configuration.  Such keys are read from the workspace document but never
written into a folder's settings artifact.  All stages that need to drop
them go through :func:`is_internal_key` / :func:`strip_internal_keys`.
"""

from __future__ import annotations

from typing import Any

INTERNAL_PREFIX = "workspaceManager"

AUTO_SYNC_ENABLED = f"{INTERNAL_PREFIX}.autoSync.enabled"
SYNC_ENABLED = f"{INTERNAL_PREFIX}.sync.enabled"
SYNC_ROOT_SETTINGS_EXCLUDE = f"{INTERNAL_PREFIX}.sync.rootSettings.exclude"
SYNC_SUBFOLDER_DEFAULTS = f"{INTERNAL_PREFIX}.sync.subFolderSettings.defaults"
REVERSE_SYNC_ENABLED = f"{INTERNAL_PREFIX}.reverseSync.enabled"
REVERSE_SYNC_EXCLUDE = f"{INTERNAL_PREFIX}.reverseSync.folderSettings.exclude"

# Only honoured in the root ``settings`` map; ignored under a folder.
ROOT_ONLY_KEYS = (
    AUTO_SYNC_ENABLED,
    SYNC_ENABLED,
    SYNC_ROOT_SETTINGS_EXCLUDE,
    SYNC_SUBFOLDER_DEFAULTS,
)


def is_internal_key(key: str) -> bool:
    """Return ``True`` if *key* lives in the reserved internal namespace."""
    return key.startswith(INTERNAL_PREFIX)


def strip_internal_keys(value: Any) -> Any:
    """Return a copy of *value* with internal keys removed at every depth.

    Mappings nested inside arrays are cleaned as well.  Scalars are returned
    unchanged and the input is never mutated.
    """
    if isinstance(value, dict):
        return {
            k: strip_internal_keys(v)
            for k, v in value.items()
            if not is_internal_key(k)
        }
    if isinstance(value, list):
        return [strip_internal_keys(item) for item in value]
    return value


def get_pattern_list(settings: dict[str, Any] | None, key: str) -> list[str]:
    """Read a glob pattern list from *settings*, ignoring non-string entries."""
    if not settings:
        return []
    raw = settings.get(key)
    if not isinstance(raw, list):
        return []
    return [p for p in raw if isinstance(p, str)]


def get_mapping(settings: dict[str, Any] | None, key: str) -> dict[str, Any]:
    """Read a mapping value from *settings*; anything else yields ``{}``."""
    if not settings:
        return {}
    raw = settings.get(key)
    return raw if isinstance(raw, dict) else {}
