"""YAML configuration loader.

Example YAML:
    defaults:
      provider: anthropic
      model: claude-opus-4-6
      allowed_models:
        - anthropic/claude-opus-4-6
        - anthropic/claude-sonnet-4-5-20250929
        - openai/gpt-5.2-codex

    providers:
      mistral: {}
      local:
        models:
          - id: qwen3-coder
            name: Qwen3 Coder
            context_window: 128000

    catalog_file: ~/.spawngate/catalog.yaml
    log_level: INFO

``allowed_models`` may also be a mapping whose keys are the model refs
(values are ignored), so per-model settings can live alongside it.

Listing a provider under ``providers`` lets ``allowed_models`` name any of
its models, catalogued or not.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .config import GateConfig, ProviderConfig

logger = logging.getLogger(__name__)


def _parse_allowed_models(raw: Any) -> list[str]:
    if isinstance(raw, dict):
        return [str(ref) for ref in raw.keys()]
    if isinstance(raw, list):
        return [str(ref) for ref in raw if ref is not None]
    if isinstance(raw, str) and raw.strip():
        return [raw]
    return []


def _parse_providers(raw: Any) -> dict[str, ProviderConfig]:
    providers: dict[str, ProviderConfig] = {}
    if not isinstance(raw, dict):
        return providers
    for name, cfg in raw.items():
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            logger.warning("Skipping invalid provider entry: %s", name)
            continue
        models = cfg.get("models")
        if not isinstance(models, list):
            models = []
        providers[str(name)] = ProviderConfig(
            models=[m for m in models if isinstance(m, dict)],
        )
    return providers


def load_yaml_config(path: str | Path) -> GateConfig:
    """Load and parse a YAML config file into a GateConfig.

    Missing sections fall back to GateConfig defaults. Read and parse
    errors propagate to the caller.
    """
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(
            "load_yaml_config: config file not found at %s", path.absolute()
        )
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    if not isinstance(raw, dict):
        logger.error(
            "load_yaml_config: %s must contain a mapping, got %s",
            path, type(raw).__name__,
        )
        raise ValueError(f"Config file {path} must contain a mapping")

    defaults_raw = raw.get("defaults") or {}
    if not isinstance(defaults_raw, dict):
        logger.error(
            "load_yaml_config: 'defaults' in %s must be a mapping, got %s",
            path, type(defaults_raw).__name__,
        )
        raise ValueError(f"'defaults' in {path} must be a mapping")

    catalog_file = raw.get("catalog_file")

    config = GateConfig(
        default_provider=str(
            defaults_raw.get("provider", GateConfig.default_provider)
        ),
        default_model=str(
            defaults_raw.get("model", GateConfig.default_model)
        ),
        allowed_models=_parse_allowed_models(
            defaults_raw.get("allowed_models")
        ),
        providers=_parse_providers(raw.get("providers")),
        catalog_file=str(catalog_file) if catalog_file else None,
        log_level=str(raw.get("log_level", GateConfig.log_level)),
    )
    logger.debug(
        "Config loaded from %s: providers=[%s] allowed_models=%d default=%s/%s",
        path.name,
        ", ".join(sorted(config.providers)) or "none",
        len(config.allowed_models),
        config.default_provider,
        config.default_model,
    )
    return config
