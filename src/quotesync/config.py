"""
Configuration for quotesync, read from ``<home>/config.yaml``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger("quotesync.config")

CONFIG_FILE = "config.yaml"
DEFAULT_API_BASE = "https://jsonplaceholder.typicode.com"


class QuotesyncConfig(BaseModel):
    """Remote endpoint and sync cadence."""

    api_base: str = DEFAULT_API_BASE
    fetch_limit: int = Field(default=10, ge=1)
    sync_interval: int = Field(default=15, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)


def load_config(home: Path) -> QuotesyncConfig:
    """Load configuration from disk, falling back to defaults.

    Args:
        home: quotesync home directory.

    Returns:
        QuotesyncConfig: parsed config, or defaults if the file is
        missing or unreadable.
    """
    config_file = Path(home).expanduser() / CONFIG_FILE
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return QuotesyncConfig(**data)
        except (yaml.YAMLError, ValueError, TypeError) as exc:
            logger.warning("Failed to load config: %s", exc)
    return QuotesyncConfig()


def save_config(home: Path, config: QuotesyncConfig) -> Path:
    """Write configuration back to ``config.yaml``."""
    home = Path(home).expanduser()
    home.mkdir(parents=True, exist_ok=True)
    config_file = home / CONFIG_FILE
    config_file.write_text(
        yaml.dump(config.model_dump(mode="json"), default_flow_style=False),
        encoding="utf-8",
    )
    return config_file
