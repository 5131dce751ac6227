"""Tests for GateConfig env loading, YAML loading and load_config()."""
import pytest
import yaml

from spawngate.config import (
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    GateConfig,
    load_config,
)
from spawngate.yaml_config import load_yaml_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SPAWNGATE_CONFIG_FILE",
        "SPAWNGATE_DEFAULT_PROVIDER",
        "SPAWNGATE_DEFAULT_MODEL",
        "SPAWNGATE_ALLOWED_MODELS",
        "SPAWNGATE_CATALOG_FILE",
        "SPAWNGATE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def _write_yaml(path, data) -> str:
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestFromEnv:
    def test_defaults(self):
        config = GateConfig.from_env()
        assert config.default_provider == DEFAULT_PROVIDER
        assert config.default_model == DEFAULT_MODEL
        assert config.allowed_models == []
        assert config.providers == {}
        assert config.catalog_file is None
        assert config.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("SPAWNGATE_DEFAULT_PROVIDER", "openai")
        monkeypatch.setenv("SPAWNGATE_DEFAULT_MODEL", "gpt-5.2-codex")
        monkeypatch.setenv(
            "SPAWNGATE_ALLOWED_MODELS",
            " openai/gpt-5.2-codex, ,anthropic/claude-opus-4-6 ",
        )
        monkeypatch.setenv("SPAWNGATE_CATALOG_FILE", "/etc/spawngate/catalog.yaml")
        monkeypatch.setenv("SPAWNGATE_LOG_LEVEL", "DEBUG")

        config = GateConfig.from_env()

        assert config.default_provider == "openai"
        assert config.default_model == "gpt-5.2-codex"
        assert config.allowed_models == [
            "openai/gpt-5.2-codex",
            "anthropic/claude-opus-4-6",
        ]
        assert config.catalog_file == "/etc/spawngate/catalog.yaml"
        assert config.log_level == "DEBUG"


class TestYamlConfig:
    def test_full_file(self, tmp_path):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "defaults": {
                "provider": "openai",
                "model": "gpt-5.2-codex",
                "allowed_models": ["openai/gpt-5.2-codex", "opus"],
            },
            "providers": {
                "mistral": {},
                "local": {
                    "models": [{"id": "qwen3-coder"}, "not-a-dict"],
                },
            },
            "catalog_file": "~/catalog.yaml",
            "log_level": "WARNING",
        })

        config = load_yaml_config(path)

        assert config.default_provider == "openai"
        assert config.default_model == "gpt-5.2-codex"
        assert config.allowed_models == ["openai/gpt-5.2-codex", "opus"]
        assert config.providers["mistral"].models == []
        assert config.providers["local"].models == [{"id": "qwen3-coder"}]
        assert config.catalog_file == "~/catalog.yaml"
        assert config.log_level == "WARNING"

    def test_allowed_models_mapping(self, tmp_path):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "defaults": {
                "allowed_models": {
                    "anthropic/claude-opus-4-6": {"alias": "opus"},
                    "openai/gpt-5.2-codex": None,
                },
            },
        })

        config = load_yaml_config(path)

        assert config.allowed_models == [
            "anthropic/claude-opus-4-6",
            "openai/gpt-5.2-codex",
        ]

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_yaml_config(path)

        assert config == GateConfig()

    def test_invalid_provider_entry_skipped(self, tmp_path):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "providers": {"broken": ["x"], "ok": None},
        })

        config = load_yaml_config(path)

        assert list(config.providers) == ["ok"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "nope.yaml")

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("defaults: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml_config(path)

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just a string\n", "42\n"])
    def test_non_mapping_top_level_raises(self, tmp_path, content):
        path = tmp_path / "list.yaml"
        path.write_text(content)
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_yaml_config(path)

    def test_non_mapping_defaults_raises(self, tmp_path):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "defaults": ["anthropic/claude-opus-4-6"],
        })
        with pytest.raises(ValueError, match="'defaults'"):
            load_yaml_config(path)

    def test_non_list_provider_models_ignored(self, tmp_path):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "providers": {"local": {"models": 3}},
        })

        config = load_yaml_config(path)

        assert config.providers["local"].models == []


class TestLoadConfig:
    def test_env_when_no_file(self, monkeypatch):
        monkeypatch.setenv("SPAWNGATE_ALLOWED_MODELS", "openai/gpt-5.3-spark")
        assert load_config().allowed_models == ["openai/gpt-5.3-spark"]

    def test_yaml_when_file_set(self, tmp_path, monkeypatch):
        path = _write_yaml(tmp_path / "spawngate.yaml", {
            "defaults": {"allowed_models": ["anthropic/claude-opus-4-6"]},
        })
        monkeypatch.setenv("SPAWNGATE_CONFIG_FILE", path)

        assert load_config().allowed_models == ["anthropic/claude-opus-4-6"]

    def test_reflects_current_file(self, tmp_path, monkeypatch):
        """Each call re-reads the file; nothing is cached."""
        target = tmp_path / "spawngate.yaml"
        monkeypatch.setenv("SPAWNGATE_CONFIG_FILE", str(target))

        _write_yaml(target, {"defaults": {"allowed_models": ["opus"]}})
        first = load_config()
        _write_yaml(target, {"defaults": {"allowed_models": ["sonnet"]}})
        second = load_config()

        assert first.allowed_models == ["opus"]
        assert second.allowed_models == ["sonnet"]
        assert first is not second
