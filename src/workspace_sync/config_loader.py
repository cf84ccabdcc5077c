"""
YAML config file discovery and loading for workspace_sync.

Each discovered file is read on its own: ``${VAR}`` references are expanded,
then path-valued settings written relative to the file are anchored so they
mean the same thing whatever the current directory is.  The per-file results
are merged section by section, the project file winning over the global one.

Usage:
    from workspace_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROJECT_CONFIG_DIR = ".workspace_sync"
CONFIG_ENV_VAR = "WORKSPACE_SYNC_CONFIG"

KNOWN_SECTIONS = ("workspace", "logging")

# (section, key) pairs holding filesystem paths.  ``workspace.artifact`` is
# relative to each folder, not to the config file, so it is not listed.
PATH_SETTINGS = (("workspace", "file"), ("logging", "file"))

# ${VAR} or ${VAR:-default}
_ENV_REF = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


# ---------------------------------------------------------------------------
# Env var expansion
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` references in *value*.

    An unset or empty variable expands to its default, or to ``""`` when
    there is none.  A ``${`` without a closing brace is kept as written.
    """

    def _expand(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        return os.environ.get(name) or (default or "")

    return _ENV_REF.sub(_expand, value)


def _interpolate_recursive(obj: Any) -> Any:
    """Expand env references in every string of a nested dict/list."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Single file
# ---------------------------------------------------------------------------


def config_base_dir(path: Path) -> Path:
    """Directory that relative paths in the config file *path* refer to.

    A project file (``<project>/.workspace_sync/config.yml``) is anchored at
    the project directory so ``file: app.code-workspace`` names the workspace
    next to ``.workspace_sync/``.  Any other file is anchored at its own
    directory.
    """
    parent = path.parent
    if parent.name == PROJECT_CONFIG_DIR:
        return parent.parent
    return parent


def _anchor_paths(data: dict[str, Any], base_dir: Path) -> None:
    for section, key in PATH_SETTINGS:
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        raw = values.get(key)
        if not isinstance(raw, str) or not raw.strip():
            continue
        path = Path(raw.strip()).expanduser()
        if not path.is_absolute():
            path = base_dir / path
            logger.debug("Anchored %s.%s to %s", section, key, path)
        values[key] = str(path)


def load_config_file(path: Path) -> dict[str, Any]:
    """Read one YAML config file into a dict of sections.

    Env references are expanded before relative ``workspace.file`` and
    ``logging.file`` values are anchored with :func:`config_base_dir`.
    A file whose root is not a mapping is skipped with a warning.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Config file %s has non-dict root (%s), skipping",
            path,
            type(data).__name__,
        )
        return {}

    for section in data:
        if section not in KNOWN_SECTIONS:
            logger.warning(
                "Config file %s: unknown section '%s' ignored", path, section
            )

    data = _interpolate_recursive(data)
    _anchor_paths(data, config_base_dir(path.resolve()))
    return data


# ---------------------------------------------------------------------------
# Discovery and merge
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config files, highest precedence first.

    Search order:
        1. ``WORKSPACE_SYNC_CONFIG`` env var (explicit single path)
        2. ``.workspace_sync/config.yml`` in CWD (project-level)
        3. ``.workspace_sync/config.yaml`` in CWD (alternate extension)
        4. ``~/.config/workspace_sync/config.yml`` (XDG global)
    """
    candidates: list[Path] = []

    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidates.append(Path(explicit).expanduser().resolve())

    project_dir = Path.cwd() / PROJECT_CONFIG_DIR
    candidates += [project_dir / "config.yml", project_dir / "config.yaml"]
    candidates.append(Path.home() / ".config" / "workspace_sync" / "config.yml")

    return [p for p in candidates if p.exists()]


def load_hierarchical_config() -> dict[str, Any]:
    """Load every discovered config file and merge them.

    Files are applied from lowest precedence to highest; a section present
    in a higher file replaces the whole section from lower ones.

    Returns an empty dict when no config files exist (zero-config).
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found, using built-in defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            merged.update(load_config_file(path))
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to load config file %s", path)
            raise
    return merged
