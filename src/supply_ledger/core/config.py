"""Configuration management for the local ledger host.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.

The contract itself reads no configuration; these settings only choose
how the CLI host stores world state and logs.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class StoreBackend(str, Enum):
    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class StoreConfig(BaseModel):
    backend: StoreBackend = StoreBackend.FILE
    state_file: str = "data/world_state.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "ledger:"


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level host settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "SUPPLY_LEDGER_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.  Nested sections are
            merged key by key.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    for section, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(data.get(section), dict):
            data[section] = {**data[section], **value}
        else:
            data[section] = value

    return Settings(**data)
