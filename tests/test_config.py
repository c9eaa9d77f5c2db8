"""Tests for settings loading and credential chains"""

import json

import pytest

from lyricpane.core.config import GENIUS_TOKEN_ENV, OPENAI_KEY_ENV, Settings
from lyricpane.core.credentials import (
    CredentialChain,
    EnvCredentialProvider,
    JsonStoreCredentialProvider,
    StaticCredentialProvider,
)
from lyricpane.core.exceptions import ConfigurationError


class TestSettings:
    """Test YAML loading"""

    def test_defaults(self, settings, app_dir):
        assert settings.genius.timeout == 10
        assert settings.genius.max_candidates == 10
        assert settings.completion.model == "gpt-4o-mini"
        assert settings.completion.timeout == 30
        assert settings.completion.max_tokens == 500
        assert settings.get_cache_path() == app_dir / "content-cache.json"
        assert settings.loaded_from is None

    def test_app_dir_config_loaded(self, clean_env, app_dir):
        (app_dir / "config.yaml").write_text(
            "completion:\n  model: gpt-4o\n  max_tokens: 800\nlogging:\n  level: DEBUG\n",
            encoding="utf-8"
        )

        settings = Settings(app_dir=app_dir)

        assert settings.completion.model == "gpt-4o"
        assert settings.completion.max_tokens == 800
        assert settings.logging.level == "DEBUG"
        assert settings.loaded_from == app_dir / "config.yaml"

    def test_unknown_keys_ignored(self, clean_env, app_dir):
        (app_dir / "config.yaml").write_text(
            "genius:\n  timeout: 5\n  retries: 3\nplayer:\n  volume: 11\n",
            encoding="utf-8"
        )

        settings = Settings(app_dir=app_dir)

        assert settings.genius.timeout == 5
        assert not hasattr(settings.genius, "retries")

    def test_explicit_path(self, clean_env, temp_dir, app_dir):
        path = temp_dir / "custom.yaml"
        path.write_text("cache:\n  path: ~/elsewhere/cache.json\n", encoding="utf-8")

        settings = Settings(config_path=path, app_dir=app_dir)

        assert settings.get_cache_path().name == "cache.json"
        assert "elsewhere" in str(settings.get_cache_path())

    def test_explicit_path_missing(self, clean_env, temp_dir, app_dir):
        with pytest.raises(ConfigurationError):
            Settings(config_path=temp_dir / "missing.yaml", app_dir=app_dir)

    def test_invalid_yaml(self, clean_env, app_dir):
        (app_dir / "config.yaml").write_text("genius: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(app_dir=app_dir)
        assert "Invalid YAML" in exc_info.value.message

    def test_non_mapping_yaml(self, clean_env, app_dir):
        (app_dir / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            Settings(app_dir=app_dir)

    def test_to_dict_hides_secrets(self, clean_env, app_dir):
        (app_dir / "config.yaml").write_text(
            "genius:\n  access_token: secret-token\ncompletion:\n  api_key: secret-key\n",
            encoding="utf-8"
        )

        data = Settings(app_dir=app_dir).to_dict()

        assert data["genius"]["access_token"] == ""
        assert data["completion"]["api_key"] == ""
        assert "secret" not in json.dumps(data)


class TestCredentialChains:
    """Test env > config.json > config.yaml precedence"""

    def write_store(self, app_dir, **fields):
        (app_dir / "config.json").write_text(json.dumps(fields), encoding="utf-8")

    def test_env_wins(self, settings, app_dir, monkeypatch):
        monkeypatch.setenv(GENIUS_TOKEN_ENV, "from-env")
        self.write_store(app_dir, genius_access_token="from-store")
        assert settings.genius_credentials().require() == "from-env"

    def test_store_used_without_env(self, settings, app_dir):
        self.write_store(app_dir, genius_access_token="from-store", openai_api_key="key-from-store")
        assert settings.genius_credentials().require() == "from-store"
        assert settings.completion_credentials().require() == "key-from-store"

    def test_yaml_value_last(self, settings):
        settings.completion.api_key = "from-yaml"
        assert settings.completion_credentials().require() == "from-yaml"

    def test_blank_values_skipped(self, settings, app_dir, monkeypatch):
        monkeypatch.setenv(OPENAI_KEY_ENV, "   ")
        self.write_store(app_dir, openai_api_key="")
        settings.completion.api_key = "from-yaml"
        assert settings.completion_credentials().require() == "from-yaml"

    def test_missing_names_where_to_configure(self, settings):
        chain = settings.genius_credentials()

        assert not chain.is_configured()
        with pytest.raises(ConfigurationError) as exc_info:
            chain.require()

        assert GENIUS_TOKEN_ENV in exc_info.value.message
        assert "genius_access_token" in exc_info.value.message

    def test_corrupt_store_ignored(self, settings, app_dir):
        (app_dir / "config.json").write_text("{oops", encoding="utf-8")
        settings.genius.access_token = "from-yaml"
        assert settings.genius_credentials().require() == "from-yaml"


class TestProviders:
    """Test individual credential providers"""

    def test_env_provider(self, monkeypatch):
        monkeypatch.setenv("LYRICPANE_TEST_TOKEN", " abc ")
        assert EnvCredentialProvider("LYRICPANE_TEST_TOKEN").get() == "abc"

    def test_json_store_non_string_field(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"token": 42}), encoding="utf-8")
        assert JsonStoreCredentialProvider(path, "token").get() is None

    def test_json_store_missing_file(self, temp_dir):
        assert JsonStoreCredentialProvider(temp_dir / "nope.json", "token").get() is None

    def test_chain_order(self):
        chain = CredentialChain("Token", [StaticCredentialProvider(None), StaticCredentialProvider("b")])
        assert chain.resolve() == "b"
