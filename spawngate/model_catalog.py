"""Model catalog: the set of models and providers spawngate knows about.

The catalog is assembled from three layers, later layers overriding
earlier ones on the same ``provider/model`` key:

1. Built-in entries (``build_default_catalog()``)
2. Models declared under ``providers.<name>.models`` in config
3. An optional catalog YAML file (``catalog_file``)

Example catalog file:
    models:
      - id: gpt-5.2-codex
        provider: openai
        name: GPT-5.2 Codex
        context_window: 200000
        reasoning: true
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .model_selection import model_key, normalize_provider_id
from .models import ModelCatalogEntry

if TYPE_CHECKING:
    from .config import GateConfig

logger = logging.getLogger(__name__)


def build_default_catalog() -> list[ModelCatalogEntry]:
    """Built-in catalog entries for well-known models."""
    return [
        # Anthropic
        ModelCatalogEntry(
            id="claude-opus-4-6",
            provider="anthropic",
            name="Claude Opus 4.6",
            reasoning=True,
        ),
        ModelCatalogEntry(
            id="claude-sonnet-4-5-20250929",
            provider="anthropic",
            name="Claude Sonnet 4.5",
            reasoning=True,
        ),
        ModelCatalogEntry(
            id="claude-3-5-haiku-20241022",
            provider="anthropic",
            name="Claude Haiku 3.5",
        ),
        # OpenAI
        ModelCatalogEntry(
            id="gpt-5.2-codex",
            provider="openai",
            name="GPT-5.2 Codex",
            reasoning=True,
        ),
        ModelCatalogEntry(
            id="gpt-5.3-spark",
            provider="openai",
            name="GPT-5.3 Spark",
        ),
        # Google
        ModelCatalogEntry(
            id="gemini-3-pro-preview",
            provider="google",
            name="Gemini 3 Pro (preview)",
            context_window=1_000_000,
            reasoning=True,
        ),
        ModelCatalogEntry(
            id="gemini-3-flash-preview",
            provider="google",
            name="Gemini 3 Flash (preview)",
            context_window=1_000_000,
        ),
        ModelCatalogEntry(
            id="gemini-2.5-flash",
            provider="google",
            name="Gemini 2.5 Flash",
            context_window=1_000_000,
        ),
    ]


def _entry_from_raw(
    raw: dict[str, Any], provider: str | None = None,
) -> ModelCatalogEntry | None:
    model_id = str(raw.get("id") or "").strip()
    provider_name = normalize_provider_id(str(provider or raw.get("provider") or ""))
    if not model_id or not provider_name:
        logger.warning("Skipping invalid catalog entry: %r", raw)
        return None
    try:
        context_window = int(raw.get("context_window", 200_000))
    except (TypeError, ValueError, OverflowError):
        logger.warning(
            "Skipping catalog entry %s/%s: bad context_window %r",
            provider_name, model_id, raw.get("context_window"),
        )
        return None
    return ModelCatalogEntry(
        id=model_id,
        provider=provider_name,
        name=str(raw.get("name") or model_id),
        context_window=context_window,
        reasoning=bool(raw.get("reasoning", False)),
    )


def _read_catalog_file(path: Path) -> list[dict[str, Any]]:
    """Read raw model entries from a catalog YAML file.

    Returns an empty list if the file is missing or malformed so the
    built-in catalog still loads.
    """
    if not path.is_file():
        logger.warning("Catalog file not found: %s", path)
        return []
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Cannot read catalog file %s: %s", path, exc)
        return []
    models = data.get("models") if isinstance(data, dict) else None
    if not isinstance(models, list):
        logger.warning("Catalog file %s has no 'models' list", path)
        return []
    return [m for m in models if isinstance(m, dict)]


async def load_model_catalog(config: GateConfig) -> list[ModelCatalogEntry]:
    """Load the model catalog for *config*.

    The catalog file, if any, is read in a worker thread so the event
    loop is not blocked on disk I/O.
    """
    merged: dict[str, ModelCatalogEntry] = {
        model_key(entry.provider, entry.id): entry
        for entry in build_default_catalog()
    }

    for provider_name, provider_cfg in config.providers.items():
        for raw in provider_cfg.models:
            entry = _entry_from_raw(raw, provider=provider_name)
            if entry is not None:
                merged[model_key(entry.provider, entry.id)] = entry

    if config.catalog_file:
        path = Path(config.catalog_file).expanduser()
        for raw in await asyncio.to_thread(_read_catalog_file, path):
            entry = _entry_from_raw(raw)
            if entry is not None:
                merged[model_key(entry.provider, entry.id)] = entry

    logger.debug("Model catalog loaded: %d entries", len(merged))
    return list(merged.values())
