"""Tests for model reference parsing and allowlist construction."""
from spawngate.config import GateConfig, ProviderConfig
from spawngate.model_catalog import build_default_catalog
from spawngate.model_selection import (
    build_allowed_model_set,
    model_key,
    normalize_model_id,
    normalize_provider_id,
    parse_model_ref,
)
from spawngate.models import ModelCatalogEntry, ModelRef


# ── Parsing ─────────────────────────────────────────────────────


class TestParseModelRef:
    """Free-form override strings → ModelRef."""

    def test_bare_name_uses_default_provider(self):
        assert parse_model_ref("gpt-5.2-codex", "openai") == ModelRef(
            "openai", "gpt-5.2-codex"
        )

    def test_qualified_name(self):
        assert parse_model_ref("google/gemini-2.5-flash", "anthropic") == ModelRef(
            "google", "gemini-2.5-flash"
        )

    def test_whitespace_trimmed(self):
        assert parse_model_ref("  openai / gpt-5.3-spark  ", "anthropic") == ModelRef(
            "openai", "gpt-5.3-spark"
        )

    def test_only_first_slash_splits(self):
        """Model IDs may themselves contain slashes (e.g. router paths)."""
        ref = parse_model_ref("openrouter/meta-llama/llama-4", "anthropic")
        assert ref == ModelRef("openrouter", "meta-llama/llama-4")

    def test_blank_is_none(self):
        assert parse_model_ref("", "anthropic") is None
        assert parse_model_ref("   ", "anthropic") is None

    def test_empty_side_is_none(self):
        assert parse_model_ref("openai/", "anthropic") is None
        assert parse_model_ref("/gpt-5.2-codex", "anthropic") is None
        assert parse_model_ref(" / ", "anthropic") is None

    def test_provider_aliases_normalized(self):
        assert parse_model_ref("Claude/claude-opus-4-6", "openai") == ModelRef(
            "anthropic", "claude-opus-4-6"
        )
        assert parse_model_ref("z.ai/glm-4.7", "anthropic") == ModelRef(
            "zai", "glm-4.7"
        )

    def test_default_provider_normalized(self):
        assert parse_model_ref("gemini-2.5-flash", "Gemini") == ModelRef(
            "google", "gemini-2.5-flash"
        )

    def test_anthropic_shorthands(self):
        assert parse_model_ref("opus", "anthropic") == ModelRef(
            "anthropic", "claude-opus-4-6"
        )
        assert parse_model_ref("anthropic/sonnet", "openai") == ModelRef(
            "anthropic", "claude-sonnet-4-5-20250929"
        )
        assert parse_model_ref("claude/Haiku", "openai") == ModelRef(
            "anthropic", "claude-3-5-haiku-20241022"
        )
        assert parse_model_ref("opus-4.5", "anthropic") == ModelRef(
            "anthropic", "claude-opus-4-5"
        )

    def test_shorthands_only_apply_to_anthropic(self):
        assert parse_model_ref("openai/opus", "anthropic") == ModelRef(
            "openai", "opus"
        )


class TestNormalization:
    def test_provider_lowercased(self):
        assert normalize_provider_id("  OpenAI ") == "openai"

    def test_unknown_provider_passthrough(self):
        assert normalize_provider_id("mistral") == "mistral"

    def test_model_unknown_passthrough(self):
        assert normalize_model_id("anthropic", "claude-opus-4-1") == "claude-opus-4-1"


def test_model_key():
    assert model_key("openai", "gpt-5.2-codex") == "openai/gpt-5.2-codex"


# ── Allowlist ───────────────────────────────────────────────────


class TestBuildAllowedModelSet:
    """Config allowlist + catalog → AllowedModelSet."""

    def test_empty_allowlist_allows_any(self):
        catalog = build_default_catalog()
        allowed = build_allowed_model_set(GateConfig(), catalog, "anthropic")

        assert allowed.allow_any is True
        assert "anthropic/claude-opus-4-6" in allowed.allowed_keys
        assert len(allowed.allowed_keys) == len(catalog)
        assert allowed.allowed_catalog == catalog

    def test_restrictive_allowlist(self):
        config = GateConfig(allowed_models=[
            "anthropic/claude-opus-4-6",
            "sonnet",
            "codex/gpt-5.2-codex",
        ])
        allowed = build_allowed_model_set(
            config, build_default_catalog(), "anthropic",
        )

        assert allowed.allow_any is False
        assert allowed.allowed_keys == {
            "anthropic/claude-opus-4-6",
            "anthropic/claude-sonnet-4-5-20250929",
            "openai/gpt-5.2-codex",
        }
        assert sorted(e.id for e in allowed.allowed_catalog) == [
            "claude-opus-4-6",
            "claude-sonnet-4-5-20250929",
            "gpt-5.2-codex",
        ]

    def test_unknown_entries_dropped(self):
        config = GateConfig(allowed_models=[
            "anthropic/claude-opus-4-6",
            "mystery/model-x",
            "openai/",
        ])
        allowed = build_allowed_model_set(
            config, build_default_catalog(), "anthropic",
        )

        assert allowed.allow_any is False
        assert allowed.allowed_keys == {"anthropic/claude-opus-4-6"}

    def test_configured_provider_kept_outside_catalog(self):
        config = GateConfig(
            allowed_models=["local/qwen3-coder", "anthropic/claude-opus-4-6"],
            providers={"Local": ProviderConfig()},
        )
        allowed = build_allowed_model_set(
            config, build_default_catalog(), "anthropic",
        )

        assert allowed.allow_any is False
        assert allowed.allowed_keys == {
            "local/qwen3-coder",
            "anthropic/claude-opus-4-6",
        }
        # Not in the catalog, so not in the allowed catalog either
        assert [e.id for e in allowed.allowed_catalog] == ["claude-opus-4-6"]

    def test_nothing_matches_falls_back_to_allow_any(self):
        catalog = [ModelCatalogEntry(id="m1", provider="p1")]
        config = GateConfig(allowed_models=["mystery/model-x"])

        allowed = build_allowed_model_set(config, catalog, "anthropic")

        assert allowed.allow_any is True
        assert allowed.allowed_keys == {"p1/m1"}

    def test_bare_entries_use_default_provider(self):
        catalog = [ModelCatalogEntry(id="gpt-5.2-codex", provider="openai")]
        config = GateConfig(allowed_models=["gpt-5.2-codex"])

        allowed = build_allowed_model_set(config, catalog, "openai")

        assert allowed.allow_any is False
        assert allowed.allowed_keys == {"openai/gpt-5.2-codex"}
