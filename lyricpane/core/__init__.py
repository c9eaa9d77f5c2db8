"""
Core module for lyricpane.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Settings loading and credential chains
    - credentials: Ordered credential providers (env, config.json, config.yaml)
    - cache: Persistent JSON content cache with serialized writes
    - logger: Logging system with console, rotating file and failure report

Usage:
    from lyricpane.core import (
        Settings, get_settings,
        ContentCache,
        setup_logging, get_logger,
        LyricPaneError, ConfigurationError, UpstreamError
    )
"""

from lyricpane.core.cache import CachedData, ContentCache, looks_like_prose
from lyricpane.core.config import (
    CacheConfig,
    CompletionConfig,
    GeniusConfig,
    LoggingConfig,
    Settings,
    get_settings,
    reload_settings,
)
from lyricpane.core.credentials import (
    CredentialChain,
    CredentialProvider,
    EnvCredentialProvider,
    JsonStoreCredentialProvider,
    StaticCredentialProvider,
)
from lyricpane.core.exceptions import (
    CacheError,
    ConfigurationError,
    ExtractionError,
    LyricPaneError,
    NotFoundError,
    UpstreamError,
)
from lyricpane.core.logger import (
    configure_from_settings,
    get_logger,
    log_lyrics_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Cache
    "CachedData",
    "ContentCache",
    "looks_like_prose",
    # Config
    "Settings",
    "GeniusConfig",
    "CompletionConfig",
    "CacheConfig",
    "LoggingConfig",
    "get_settings",
    "reload_settings",
    # Credentials
    "CredentialChain",
    "CredentialProvider",
    "EnvCredentialProvider",
    "JsonStoreCredentialProvider",
    "StaticCredentialProvider",
    # Exceptions
    "LyricPaneError",
    "ConfigurationError",
    "UpstreamError",
    "NotFoundError",
    "ExtractionError",
    "CacheError",
    # Logger
    "setup_logging",
    "configure_from_settings",
    "get_logger",
    "log_lyrics_failure",
    "shutdown_logging",
]
