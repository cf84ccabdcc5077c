"""Unified configuration schema for workspace_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the workspace and logging.

Usage:
    from workspace_sync.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class WorkspaceSection(BaseModel):
    """Workspace file and sync tuning.

    All fields are optional to support zero-config: env vars, CLI args and
    workspace file discovery can supply them at runtime instead.
    """

    file: str | None = Field(
        default=None, description="Path to the .code-workspace file"
    )
    artifact: str = Field(
        default=".vscode/settings.json",
        description="Settings file path relative to each folder",
    )
    debounce_ms: int = Field(
        default=300,
        ge=0,
        le=60000,
        description="Quiet window before an automatic pass (0-60000 ms)",
    )
    max_parallel_folders: int = Field(
        default=5,
        ge=1,
        le=64,
        description="Maximum folders written concurrently (1-64)",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` (zero-config)
    is always valid.
    """

    workspace: WorkspaceSection = Field(default_factory=WorkspaceSection)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a section holds out-of-range values.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
