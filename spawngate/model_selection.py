"""Model reference parsing and allowlist construction.

A model reference is either ``provider/model`` or a bare model name
that inherits the default provider. References are normalized before
keying so that ``Claude/opus`` and ``anthropic/claude-opus-4-6`` land on
the same allowlist key.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import AllowedModelSet, ModelCatalogEntry, ModelRef

if TYPE_CHECKING:
    from .config import GateConfig

logger = logging.getLogger(__name__)

# Provider spellings that name the same provider.
PROVIDER_ALIASES: dict[str, str] = {
    "z.ai": "zai",
    "z-ai": "zai",
    "claude": "anthropic",
    "codex": "openai",
    "gemini": "google",
    "opencode-zen": "opencode",
    "qwen": "qwen-portal",
    "kimi-code": "kimi-coding",
}

# Anthropic family shorthands → versioned model IDs.
# Keep in sync with the anthropic entries in model_catalog.py.
ANTHROPIC_MODEL_ALIASES: dict[str, str] = {
    "claude-opus": "claude-opus-4-6",
    "claude-sonnet": "claude-sonnet-4-5-20250929",
    "claude-haiku": "claude-3-5-haiku-20241022",
    "opus": "claude-opus-4-6",
    "sonnet": "claude-sonnet-4-5-20250929",
    "haiku": "claude-3-5-haiku-20241022",
    "opus-4.6": "claude-opus-4-6",
    "opus-4.5": "claude-opus-4-5",
    "sonnet-4.5": "claude-sonnet-4-5",
}


def normalize_provider_id(provider: str) -> str:
    """Lowercase a provider name and collapse known aliases."""
    normalized = provider.strip().lower()
    return PROVIDER_ALIASES.get(normalized, normalized)


def normalize_model_id(provider: str, model: str) -> str:
    """Resolve provider-specific model shorthands.

    Only anthropic has shorthands; other models pass through unchanged.
    """
    if provider != "anthropic":
        return model
    return ANTHROPIC_MODEL_ALIASES.get(model.lower(), model)


def parse_model_ref(raw: str, default_provider: str) -> ModelRef | None:
    """Parse a free-form model override into a ModelRef.

    Returns None when *raw* is blank, or when a ``provider/model`` form
    has an empty side (``"openai/"``, ``"/gpt-5"``).
    """
    trimmed = raw.strip()
    if not trimmed:
        return None

    provider_raw, slash, model = trimmed.partition("/")
    if not slash:
        provider = normalize_provider_id(default_provider)
        return ModelRef(provider, normalize_model_id(provider, trimmed))

    provider = normalize_provider_id(provider_raw)
    model = model.strip()
    if not provider or not model:
        return None
    return ModelRef(provider, normalize_model_id(provider, model))


def model_key(provider: str, model: str) -> str:
    """Canonical allowlist key for a provider/model pair."""
    return f"{provider}/{model}"


def build_allowed_model_set(
    config: GateConfig,
    catalog: list[ModelCatalogEntry],
    default_provider: str,
) -> AllowedModelSet:
    """Derive the allowed-model policy from config and the catalog.

    An empty ``config.allowed_models`` allows any model. Otherwise an
    entry is kept when the catalog knows it or its provider is
    explicitly configured. If no entry survives, the policy falls back
    to allowing any model rather than blocking every spawn.
    """
    catalog_keys = {model_key(entry.provider, entry.id) for entry in catalog}
    if not config.allowed_models:
        return AllowedModelSet(
            allow_any=True,
            allowed_keys=catalog_keys,
            allowed_catalog=list(catalog),
        )

    configured_providers = {
        normalize_provider_id(name) for name in config.providers
    }
    allowed_keys: set[str] = set()
    for raw in config.allowed_models:
        parsed = parse_model_ref(str(raw), default_provider)
        if parsed is None:
            logger.warning("Ignoring unparseable allowlist entry: %r", raw)
            continue
        key = model_key(parsed.provider, parsed.model)
        if key in catalog_keys or parsed.provider in configured_providers:
            allowed_keys.add(key)
        else:
            logger.debug(
                "Allowlist entry %s dropped: not in catalog and provider "
                "%s not configured",
                key, parsed.provider,
            )

    if not allowed_keys:
        logger.warning(
            "No allowlist entry matched the catalog or a configured "
            "provider; allowing any model"
        )
        return AllowedModelSet(
            allow_any=True,
            allowed_keys=catalog_keys,
            allowed_catalog=list(catalog),
        )

    return AllowedModelSet(
        allow_any=False,
        allowed_keys=allowed_keys,
        allowed_catalog=[
            entry for entry in catalog
            if model_key(entry.provider, entry.id) in allowed_keys
        ],
    )
