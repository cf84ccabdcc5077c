"""Runtime configuration for workspace-sync.

Reads the workspace file location and sync tuning from CLI args,
environment variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    WORKSPACE_SYNC_FILE: Path to the .code-workspace file (optional; a single
        *.code-workspace in the current directory is used otherwise)
    WORKSPACE_SYNC_ARTIFACT: Settings file relative to each folder
        (optional, default: .vscode/settings.json)
    WORKSPACE_SYNC_DEBOUNCE_MS: Auto-sync quiet window (optional, default: 300)
    WORKSPACE_SYNC_MAX_PARALLEL: Max folders written at once (optional, default: 5)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

from workspace_sync.sync.workspace import DEFAULT_ARTIFACT, find_workspace_file

logger = logging.getLogger(__name__)


@dataclass
class Config:
    workspace_file: Path
    artifact: str = DEFAULT_ARTIFACT
    debounce_ms: int = 300
    max_parallel_folders: int = 5
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the artifact path is not relative or a number is
            out of range.
    """
    config.artifact = config.artifact.strip()

    if not config.artifact:
        raise ValueError("Artifact path cannot be empty.")

    if (
        PurePosixPath(config.artifact).is_absolute()
        or PureWindowsPath(config.artifact).is_absolute()
    ):
        raise ValueError(
            f"Invalid artifact path '{config.artifact}': must be relative to the folder"
        )

    if not (0 <= config.debounce_ms <= 60000):
        raise ValueError(
            f"Invalid debounce '{config.debounce_ms}': must be between 0 and 60000 ms"
        )

    if not (1 <= config.max_parallel_folders <= 64):
        raise ValueError(
            f"Invalid max parallel folders '{config.max_parallel_folders}': "
            "must be between 1 and 64"
        )

    if config.debounce_ms == 0:
        logger.warning(
            "Debounce disabled (0 ms): every file event starts a sync pass."
        )


def _int_setting(
    env_key: str, fallback: object, default: int, low: int, high: int
) -> int:
    """Resolve a numeric setting: env > YAML fallback > default."""
    raw = os.getenv(env_key)
    if raw is not None:
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(
                f"Invalid {env_key} '{raw}': must be a number between {low} and {high}"
            ) from None
        if not (low <= value <= high):
            raise ValueError(
                f"Invalid {env_key} '{raw}': must be a number between {low} and {high}"
            )
        return value
    if fallback is not None:
        return int(fallback)
    return default


def load_config(
    workspace: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        workspace: Override workspace file path (``--workspace``).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``workspace`` section.

    Returns:
        Validated Config instance.

    Raises:
        ConfigNotFoundError: If no workspace file is configured and none
            (or several) are found in the current directory.
        ValueError: If a value is invalid.
    """
    fb = yaml_fallbacks or {}

    workspace_path = workspace or os.getenv("WORKSPACE_SYNC_FILE") or fb.get("file")
    if workspace_path:
        workspace_file = Path(workspace_path.strip()).expanduser()
    else:
        workspace_file = find_workspace_file(Path.cwd())
        logger.debug("Using discovered workspace file %s", workspace_file)

    artifact = (
        os.getenv("WORKSPACE_SYNC_ARTIFACT")
        or fb.get("artifact")
        or DEFAULT_ARTIFACT
    )

    config = Config(
        workspace_file=workspace_file,
        artifact=artifact,
        debounce_ms=_int_setting(
            "WORKSPACE_SYNC_DEBOUNCE_MS", fb.get("debounce_ms"), 300, 0, 60000
        ),
        max_parallel_folders=_int_setting(
            "WORKSPACE_SYNC_MAX_PARALLEL",
            fb.get("max_parallel_folders"),
            5,
            1,
            64,
        ),
        debug=debug,
    )

    validate_config(config)

    return config
