"""
Credential lookup for the external services.

Each API credential is resolved through an ordered chain of providers; the
first provider returning a non-empty value wins. The default chains built by
Settings are:

    1. Environment variable (development, CI, .env files)
    2. The shell's config.json key/value store in the app data directory
    3. The value from config.yaml

Usage:
    chain = CredentialChain(
        "Genius API token",
        [EnvCredentialProvider("GENIUS_ACCESS_TOKEN"),
         JsonStoreCredentialProvider(store_path, "genius_access_token")],
        hint="Set GENIUS_ACCESS_TOKEN or add 'genius_access_token' to config.json",
    )
    token = chain.require()  # raises ConfigurationError when nothing is set
"""

import json
import os
from pathlib import Path

from lyricpane.core.exceptions import ConfigurationError
from lyricpane.core.logger import get_logger

logger = get_logger(__name__)


class CredentialProvider:
    """Base class for a single credential source."""

    source = "unknown"

    def get(self) -> str | None:
        """Return the credential, or None when this source has no value."""
        raise NotImplementedError


class EnvCredentialProvider(CredentialProvider):
    """Reads a credential from an environment variable."""

    def __init__(self, env_var: str) -> None:
        self.env_var = env_var
        self.source = f"env:{env_var}"

    def get(self) -> str | None:
        value = os.getenv(self.env_var)
        return value.strip() if value and value.strip() else None


class JsonStoreCredentialProvider(CredentialProvider):
    """
    Reads a credential field from a JSON key/value document.

    A missing or unparsable file is treated as "no value" rather than an
    error, so a broken store never hides the next provider in the chain.
    """

    def __init__(self, store_path: Path, field: str) -> None:
        self.store_path = Path(store_path).expanduser()
        self.field = field
        self.source = f"{self.store_path.name}:{field}"

    def get(self) -> str | None:
        try:
            with open(self.store_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(f"Could not read credential store {self.store_path}: {e}")
            return None

        if not isinstance(data, dict):
            return None

        value = data.get(self.field)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


class StaticCredentialProvider(CredentialProvider):
    """Returns a fixed value, typically loaded from config.yaml."""

    def __init__(self, value: str | None, source: str = "config.yaml") -> None:
        self.value = value
        self.source = source

    def get(self) -> str | None:
        if self.value and self.value.strip():
            return self.value.strip()
        return None


class CredentialChain:
    """
    Ordered list of providers for one credential.

    Attributes:
        name: Display name used in error messages ("Genius API token").
        providers: Providers in order of precedence.
        hint: Instruction appended to the ConfigurationError message.
    """

    def __init__(self, name: str, providers: list[CredentialProvider], hint: str = "") -> None:
        self.name = name
        self.providers = list(providers)
        self.hint = hint

    def resolve(self) -> str | None:
        """Return the first non-empty value, or None."""
        for provider in self.providers:
            value = provider.get()
            if value:
                logger.debug(f"{self.name} resolved from {provider.source}")
                return value
        return None

    def require(self) -> str:
        """
        Return the credential or raise.

        Raises:
            ConfigurationError: If no provider has a value. The message names
                                the credential and where to configure it.
        """
        value = self.resolve()
        if value is None:
            message = f"{self.name} not configured."
            if self.hint:
                message = f"{message} {self.hint}"
            raise ConfigurationError(
                message,
                details={"credential": self.name, "sources": [p.source for p in self.providers]}
            )
        return value

    def is_configured(self) -> bool:
        return self.resolve() is not None
