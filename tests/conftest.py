"""Test configuration and fixtures"""

import tempfile
from pathlib import Path

import pytest

from lyricpane.core.cache import ContentCache
from lyricpane.core.config import GENIUS_TOKEN_ENV, OPENAI_KEY_ENV, Settings
from tests.fakes import FakeSession


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def clean_env(monkeypatch, temp_dir):
    """No credentials from the environment and no ./config.yaml pickup"""
    monkeypatch.delenv(GENIUS_TOKEN_ENV, raising=False)
    monkeypatch.delenv(OPENAI_KEY_ENV, raising=False)
    monkeypatch.delenv("LYRICPANE_APP_DIR", raising=False)
    monkeypatch.chdir(temp_dir)


@pytest.fixture
def app_dir(temp_dir):
    path = temp_dir / "app"
    path.mkdir()
    return path


@pytest.fixture
def settings(clean_env, app_dir):
    """Settings rooted in a temporary app directory"""
    return Settings(app_dir=app_dir)


@pytest.fixture
def genius_token(clean_env, monkeypatch):
    monkeypatch.setenv(GENIUS_TOKEN_ENV, "test-genius-token")
    return "test-genius-token"


@pytest.fixture
def openai_key(clean_env, monkeypatch):
    monkeypatch.setenv(OPENAI_KEY_ENV, "test-openai-key")
    return "test-openai-key"


@pytest.fixture
def cache(settings):
    return ContentCache(settings.get_cache_path())


@pytest.fixture
def fake_session():
    return FakeSession()
