"""Tests for the heuristic and AI lyrics cleaners"""

from unittest.mock import AsyncMock, Mock

import pytest

from lyricpane.core.exceptions import ConfigurationError, UpstreamError
from lyricpane.lyrics.cleaner import (
    AI_CLEAN_PROMPT,
    AICleaner,
    HeuristicCleaner,
    clean_with_fallback,
    is_leading_chrome,
    is_refusal,
    is_trailing_chrome,
)


RAW_PAGE_TEXT = "\n".join([
    "245 Contributors",
    "Yesterday Lyrics",
    "“Yesterday” is a song about a lost love. Read More",
    "",
    "[Verse 1]",
    "Yesterday",
    "All my troubles seemed so far away",
    "",
    "[Chorus]",
    "Why she had to go, I don't know",
    "",
    "See The Beatles Live",
    "245Embed",
])


def fake_ai_cleaner(result=None, error=None):
    completion = Mock()
    completion.complete = AsyncMock(return_value=result, side_effect=error)
    return AICleaner(completion)


class TestRefusal:
    """Test refusal detection"""

    def test_markers(self):
        assert is_refusal("I'm sorry, but I can't help with that.")
        assert is_refusal("I can't provide the full lyrics of this song.")
        assert is_refusal("I CANNOT PROVIDE copyrighted text")

    def test_lyrics_are_not_refusals(self):
        assert not is_refusal("Yesterday\nAll my troubles seemed so far away")
        assert not is_refusal("Sorry seems to be the hardest word")


class TestLinePredicates:
    """Test leading and trailing chrome detection"""

    def test_leading_chrome(self):
        assert is_leading_chrome("")
        assert is_leading_chrome("   ")
        assert is_leading_chrome("245 Contributors")
        assert is_leading_chrome("Yesterday Lyrics")
        assert is_leading_chrome('"Yesterday" is a ballad')
        assert is_leading_chrome("“Yesterday” is a ballad")
        assert is_leading_chrome("This is a song about loss")
        assert is_leading_chrome("Read More")
        assert is_leading_chrome("TRANSLATIONS")

    def test_leading_lyric_lines_kept(self):
        assert not is_leading_chrome("[Verse 1]")
        assert not is_leading_chrome("Yesterday")
        assert not is_leading_chrome("'Cause I'm leaving on a jet plane")
        assert not is_leading_chrome("OK")

    def test_uppercase_boundary(self):
        """Test more than half uppercase letters marks a short line as chrome"""
        assert is_leading_chrome("HELLO worl")
        assert not is_leading_chrome("HELL worl")
        assert not is_leading_chrome("ABC " + "x" * 37)
        assert is_leading_chrome("ABC")
        assert not is_leading_chrome("AB")

    def test_trailing_chrome(self):
        assert is_trailing_chrome("")
        assert is_trailing_chrome("245Embed")
        assert is_trailing_chrome("See The Beatles Live")
        assert is_trailing_chrome("More Lyrics")

    def test_trailing_lyric_lines_kept(self):
        assert not is_trailing_chrome("Oh, I believe in yesterday")


class TestHeuristicCleaner:
    """Test line trimming"""

    def test_strips_header_and_footer(self):
        """Test only the ends are trimmed, up to the first lyric line"""
        cleaned = HeuristicCleaner().clean(RAW_PAGE_TEXT)

        assert cleaned.startswith("[Verse 1]")
        assert "Contributors" not in cleaned
        assert cleaned.endswith("Why she had to go, I don't know")

    def test_interior_untouched(self):
        """Test blank lines and chrome-like lines in the middle stay"""
        raw = "Line one\n\nSee you later\nLine two"
        assert HeuristicCleaner().clean(raw) == raw

    def test_clean_input_unchanged(self):
        raw = "[Verse]\nHello\nGoodbye"
        assert HeuristicCleaner().clean(raw) == raw

    def test_all_chrome(self):
        assert HeuristicCleaner().clean("12 Contributors\nSong Lyrics\n\nEmbed") == ""


class TestCleanWithFallback:
    """Test AI cleaning with the heuristic fallback"""

    @pytest.mark.asyncio
    async def test_ai_result_used(self):
        ai = fake_ai_cleaner(result="Yesterday\nAll my troubles")

        result = await clean_with_fallback(RAW_PAGE_TEXT, ai, HeuristicCleaner())

        assert result == "Yesterday\nAll my troubles"
        prompt = ai.completion.complete.call_args.args[0]
        assert prompt == AI_CLEAN_PROMPT + RAW_PAGE_TEXT

    @pytest.mark.asyncio
    async def test_refusal_falls_back(self):
        ai = fake_ai_cleaner(result="I'm sorry, I can't provide song lyrics.")

        result = await clean_with_fallback(RAW_PAGE_TEXT, ai, HeuristicCleaner())

        assert result == HeuristicCleaner().clean(RAW_PAGE_TEXT)

    @pytest.mark.asyncio
    async def test_blank_result_falls_back(self):
        ai = fake_ai_cleaner(result="  \n ")

        result = await clean_with_fallback(RAW_PAGE_TEXT, ai, HeuristicCleaner())

        assert result == HeuristicCleaner().clean(RAW_PAGE_TEXT)

    @pytest.mark.asyncio
    async def test_upstream_error_falls_back(self):
        ai = fake_ai_cleaner(error=UpstreamError("OpenAI API error 500: boom", status=500))

        result = await clean_with_fallback(RAW_PAGE_TEXT, ai, HeuristicCleaner())

        assert result.startswith("[Verse 1]")

    @pytest.mark.asyncio
    async def test_missing_key_falls_back(self):
        ai = fake_ai_cleaner(error=ConfigurationError("OpenAI API key not configured."))

        result = await clean_with_fallback(RAW_PAGE_TEXT, ai, HeuristicCleaner())

        assert result.startswith("[Verse 1]")

    @pytest.mark.asyncio
    async def test_no_ai_cleaner(self):
        result = await clean_with_fallback(RAW_PAGE_TEXT, None, HeuristicCleaner())
        assert result.startswith("[Verse 1]")
