"""
Configuration management for lyricpane.

This module handles loading application settings from YAML files and
environment variables. Settings are grouped into dataclass sections:
    - Genius search/scrape settings (token, endpoint, user agent, timeout)
    - Completion service settings (API key, endpoint, model, token budget)
    - Content cache location
    - Logging output

Sensitive values (API tokens) are never read directly from these sections
by the network code; they go through the credential chains built by
Settings.genius_credentials() and Settings.completion_credentials(), which
prefer environment variables over the app's config.json store.

Example config.yaml:
    genius:
      timeout: 10
    completion:
      model: "gpt-4o-mini"
      max_tokens: 500
    cache:
      path: "~/.lyricpane/content-cache.json"
    logging:
      level: "DEBUG"
      file: "~/.lyricpane/logs/lyricpane.log"
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from lyricpane import __version__
from lyricpane.core.credentials import (
    CredentialChain,
    EnvCredentialProvider,
    JsonStoreCredentialProvider,
    StaticCredentialProvider,
)
from lyricpane.core.exceptions import ConfigurationError

# Load environment variables from .env file if present
load_dotenv()


DEFAULT_APP_DIR = Path.home() / ".lyricpane"
CONFIG_FILENAME = "config.yaml"
STORE_FILENAME = "config.json"
CACHE_FILENAME = "content-cache.json"

GENIUS_TOKEN_ENV = "GENIUS_ACCESS_TOKEN"
OPENAI_KEY_ENV = "OPENAI_API_KEY"


@dataclass
class GeniusConfig:
    """
    Genius search and song page settings

    The access token may be left empty here; it is normally provided via
    GENIUS_ACCESS_TOKEN or the app's config.json.
    """
    access_token: str = ""
    api_base: str = "https://api.genius.com"
    user_agent: str = f"lyricpane/{__version__} (+https://github.com/lyricpane/lyricpane)"
    timeout: int = 10
    max_candidates: int = 10


@dataclass
class CompletionConfig:
    """
    Text-completion service settings (OpenAI-compatible chat endpoint)

    Used both for cleaning scraped lyrics and for artist/song commentary.
    """
    api_key: str = ""
    api_base: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout: int = 30
    max_tokens: int = 500


@dataclass
class CacheConfig:
    """Location of the persistent content cache (empty = app data directory)"""
    path: str = ""


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    An empty file disables file logging and the lyrics failure report.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads the first config.yaml found, applies it over the dataclass
    defaults and exposes the credential chains for both external services.

    Attributes:
        app_dir: Application data directory (config.json, cache, logs).
        genius: GeniusConfig section.
        completion: CompletionConfig section.
        cache: CacheConfig section.
        logging: LoggingConfig section.
    """

    def __init__(self, config_path: str | Path | None = None, app_dir: str | Path | None = None):
        """
        Initialize settings from config file

        Args:
            config_path: Explicit config file; must exist when given.
            app_dir: Override for the application data directory.

        Raises:
            ConfigurationError: If an explicit config file is missing, or
                                any config file contains invalid YAML.
        """
        self.config_path = Path(config_path).expanduser() if config_path else None
        self.app_dir = Path(app_dir).expanduser() if app_dir else DEFAULT_APP_DIR

        self.genius = GeniusConfig()
        self.completion = CompletionConfig()
        self.cache = CacheConfig()
        self.logging = LoggingConfig()
        self.loaded_from: Path | None = None

        self._load_config()

    def _candidate_paths(self) -> list[Path]:
        if self.config_path is not None:
            return [self.config_path]
        return [
            self.app_dir / CONFIG_FILENAME,
            Path.cwd() / CONFIG_FILENAME,
        ]

    def _load_config(self) -> None:
        """
        Load configuration from the first YAML file found

        Searches the explicit path first, then the app data directory,
        then the current working directory.
        """
        if self.config_path is not None and not self.config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}",
                details={"file_path": str(self.config_path)}
            )

        for path in self._candidate_paths():
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML syntax in configuration file: {e}",
                    details={"file_path": str(path), "original_error": str(e)}
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to read configuration file: {e}",
                    details={"file_path": str(path), "original_error": str(e)}
                ) from e

            if not isinstance(config_data, dict):
                raise ConfigurationError(
                    "Configuration file must contain a YAML dictionary",
                    details={"file_path": str(path)}
                )

            self._apply_config(config_data)
            self.loaded_from = path
            return

    def _apply_config(self, config_data: dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied;
        unknown sections and keys are ignored.
        """
        config_mapping = {
            'genius': self.genius,
            'completion': self.completion,
            'cache': self.cache,
            'logging': self.logging,
        }

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def get_store_path(self) -> Path:
        """Path of the shell's config.json key/value store"""
        return self.app_dir / STORE_FILENAME

    def get_cache_path(self) -> Path:
        """Expanded path of the content cache document"""
        if self.cache.path:
            return Path(self.cache.path).expanduser()
        return self.app_dir / CACHE_FILENAME

    def genius_credentials(self) -> CredentialChain:
        """Credential chain for the Genius bearer token"""
        store_path = self.get_store_path()
        return CredentialChain(
            "Genius API token",
            [
                EnvCredentialProvider(GENIUS_TOKEN_ENV),
                JsonStoreCredentialProvider(store_path, "genius_access_token"),
                StaticCredentialProvider(self.genius.access_token),
            ],
            hint=f"Set {GENIUS_TOKEN_ENV} or add 'genius_access_token' to {store_path}.",
        )

    def completion_credentials(self) -> CredentialChain:
        """Credential chain for the completion service API key"""
        store_path = self.get_store_path()
        return CredentialChain(
            "OpenAI API key",
            [
                EnvCredentialProvider(OPENAI_KEY_ENV),
                JsonStoreCredentialProvider(store_path, "openai_api_key"),
                StaticCredentialProvider(self.completion.api_key),
            ],
            hint=f"Set {OPENAI_KEY_ENV} or add 'openai_api_key' to {store_path}.",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize settings without secrets, for `lyricpane config show`"""
        data = {
            'genius': asdict(self.genius),
            'completion': asdict(self.completion),
            'cache': asdict(self.cache),
            'logging': asdict(self.logging),
        }
        data['genius']['access_token'] = ""
        data['completion']['api_key'] = ""
        return data

    def __str__(self) -> str:
        sections = [
            f"Cache: {self.get_cache_path()}",
            f"Model: {self.completion.model}",
            f"Log level: {self.logging.level}",
        ]
        return f"Settings({', '.join(sections)})"


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    Created on first access from the default config locations.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: str | Path | None = None, app_dir: str | Path | None = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file
        app_dir: Optional application data directory override

    Returns:
        New Settings instance, also stored as the global instance
    """
    global _settings
    _settings = Settings(config_path, app_dir)
    return _settings
