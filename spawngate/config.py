"""Configuration loaded from environment variables or YAML.

All settings have sensible defaults. Override via SPAWNGATE_* env vars,
or point SPAWNGATE_CONFIG_FILE at a YAML file (see yaml_config.py).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODEL = "claude-opus-4-6"


@dataclass
class ProviderConfig:
    """Configuration for a single model provider.

    Listing a provider makes allowlist entries for it valid even when the
    catalog does not know the model.
    """
    # Raw model entries: {"id": ..., "name": ..., "context_window": ...}
    models: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class GateConfig:
    """Spawn gate configuration snapshot."""

    default_provider: str = DEFAULT_PROVIDER
    default_model: str = DEFAULT_MODEL

    # Model refs ("provider/model" or bare model names) sub-agents may
    # select. Empty means any model is allowed.
    allowed_models: list[str] = field(default_factory=list)

    # Explicitly configured providers. Allowlist entries for these
    # providers are accepted even when the catalog does not list them.
    providers: dict[str, ProviderConfig] = field(default_factory=dict)

    # Optional extra catalog YAML merged over the built-in catalog.
    catalog_file: str | None = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> GateConfig:
        """Load configuration from SPAWNGATE_* environment variables."""
        gate_vars = {
            k: v for k, v in os.environ.items() if k.startswith("SPAWNGATE_")
        }
        if gate_vars:
            logger.debug(
                "GateConfig.from_env: SPAWNGATE_* env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(gate_vars.items())),
            )

        allowed_raw = os.getenv("SPAWNGATE_ALLOWED_MODELS", "")
        return cls(
            default_provider=os.getenv(
                "SPAWNGATE_DEFAULT_PROVIDER", cls.default_provider
            ),
            default_model=os.getenv(
                "SPAWNGATE_DEFAULT_MODEL", cls.default_model
            ),
            allowed_models=[
                ref.strip() for ref in allowed_raw.split(",") if ref.strip()
            ],
            catalog_file=os.getenv("SPAWNGATE_CATALOG_FILE") or None,
            log_level=os.getenv("SPAWNGATE_LOG_LEVEL", cls.log_level),
        )


def load_config() -> GateConfig:
    """Return the current process-wide configuration snapshot.

    Reads the YAML file named by SPAWNGATE_CONFIG_FILE when set,
    otherwise SPAWNGATE_* environment variables. Not cached: every call
    reflects the current files and environment.
    """
    config_file = os.getenv("SPAWNGATE_CONFIG_FILE")
    if config_file:
        from .yaml_config import load_yaml_config
        return load_yaml_config(config_file)
    return GateConfig.from_env()
