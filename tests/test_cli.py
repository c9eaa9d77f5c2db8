"""Tests for the command-line interface"""

import json

import click
import pytest
from click.testing import CliRunner

from lyricpane import __version__
from lyricpane.cli import cli, parse_queue_line
from lyricpane.core.cache import ContentCache
from lyricpane.core.config import GENIUS_TOKEN_ENV
from lyricpane.lyrics.models import SongQuery
from lyricpane.lyrics.normalize import make_cache_key


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, clean_env, app_dir):
    """Run the CLI against the temporary app directory"""
    def _invoke(*args, env=None):
        full_env = {"LYRICPANE_APP_DIR": str(app_dir)}
        full_env.update(env or {})
        return runner.invoke(cli, list(args), env=full_env)
    return _invoke


@pytest.fixture
def app_cache(app_dir):
    return ContentCache(app_dir / "content-cache.json")


class TestParseQueueLine:
    """Test prefetch file parsing"""

    def test_artist_and_title(self):
        assert parse_queue_line("The Beatles - Yesterday\n") == SongQuery(title="Yesterday", artist="The Beatles")

    def test_title_may_contain_separator(self):
        query = parse_queue_line("The Beatles - Yesterday - Remastered 2009")
        assert query.artist == "The Beatles"
        assert query.title == "Yesterday - Remastered 2009"

    def test_blank_and_comment_lines(self):
        assert parse_queue_line("   ") is None
        assert parse_queue_line("# queue exported from the player") is None

    def test_invalid_line(self):
        with pytest.raises(click.BadParameter):
            parse_queue_line("just a title")


class TestCli:
    """Test commands that need no network access"""

    def test_version(self, invoke):
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_lyrics_from_cache(self, invoke, app_cache):
        app_cache.put_lyrics(make_cache_key("The Beatles", "Yesterday"), "Yesterday\nAll my troubles")

        result = invoke("lyrics", "Yesterday", "The Beatles")

        assert result.exit_code == 0
        assert "All my troubles" in result.output

    def test_lyrics_without_token(self, invoke):
        """Test pipeline errors become a message and exit code 1"""
        result = invoke("lyrics", "Yesterday", "The Beatles")

        assert result.exit_code == 1
        assert "Genius API token not configured" in result.output

    def test_search_without_token(self, invoke):
        result = invoke("search", "Yesterday", "The Beatles", "--json")
        assert result.exit_code == 1

    def test_artist_info_from_cache(self, invoke, app_cache):
        app_cache.put_artist_info("the beatles", "An English rock band.")

        result = invoke("artist-info", "The Beatles")

        assert result.exit_code == 0
        assert "An English rock band." in result.output

    def test_song_context_without_key(self, invoke):
        result = invoke("song-context", "Yesterday", "The Beatles")

        assert result.exit_code == 1
        assert "OpenAI API key not configured" in result.output

    def test_prefetch_from_cache(self, invoke, app_cache, temp_dir):
        app_cache.put_lyrics(make_cache_key("The Beatles", "Yesterday"), "Yesterday")
        app_cache.put_lyrics(make_cache_key("Queen", "Bohemian Rhapsody"), "Is this the real life?")
        queue = temp_dir / "queue.txt"
        queue.write_text(
            "# tonight\nThe Beatles - Yesterday\n\nQueen - Bohemian Rhapsody\n",
            encoding="utf-8"
        )

        result = invoke("prefetch", str(queue))

        assert result.exit_code == 0
        assert "Resolved: 2" in result.output
        assert "Failed: 0" in result.output

    def test_prefetch_reports_failures(self, invoke, temp_dir):
        queue = temp_dir / "queue.txt"
        queue.write_text("The Beatles - Yesterday\n", encoding="utf-8")

        result = invoke("prefetch", str(queue))

        assert result.exit_code == 0
        assert "Failed: 1" in result.output
        assert "The Beatles - Yesterday" in result.output

    def test_prefetch_invalid_line(self, invoke, temp_dir):
        queue = temp_dir / "queue.txt"
        queue.write_text("no separator here\n", encoding="utf-8")

        result = invoke("prefetch", str(queue))

        assert result.exit_code == 2

    def test_cache_stats_and_clear(self, invoke, app_cache):
        app_cache.put_lyrics("a|b", "la la")
        app_cache.put_artist_info("a", "info")

        stats = invoke("cache", "stats")
        assert stats.exit_code == 0
        assert "Lyrics: 1" in stats.output
        assert "Artist info: 1" in stats.output

        cleared = invoke("cache", "clear", "--section", "lyrics")
        assert cleared.exit_code == 0
        assert "Removed 1 entries" in cleared.output
        assert app_cache.load().artist_info == {"a": "info"}

    def test_config_show_hides_secrets(self, invoke, app_dir):
        (app_dir / "config.yaml").write_text("genius:\n  access_token: top-secret\n", encoding="utf-8")

        result = invoke("config", "show")

        assert result.exit_code == 0
        assert "top-secret" not in result.output
        assert "gpt-4o-mini" in result.output

    def test_invalid_config(self, invoke, app_dir):
        (app_dir / "config.yaml").write_text("genius: [broken\n", encoding="utf-8")

        result = invoke("cache", "stats")

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_doctor(self, invoke, app_dir):
        missing = invoke("doctor")
        assert missing.exit_code == 1
        assert "Genius token: missing" in missing.output

        (app_dir / "config.json").write_text(json.dumps({"genius_access_token": "abc"}), encoding="utf-8")
        ok = invoke("doctor")
        assert ok.exit_code == 0
        assert "Genius token: OK" in ok.output

    def test_doctor_env_token(self, invoke):
        result = invoke("doctor", env={GENIUS_TOKEN_ENV: "abc"})
        assert result.exit_code == 0
