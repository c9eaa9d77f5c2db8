"""Tests for lyrics extraction from song pages"""

import pytest

from lyricpane.core.exceptions import ExtractionError
from lyricpane.lyrics.extractor import extract_lyrics
from tests.fakes import lyrics_page


class TestExtractLyrics:
    """Test container text extraction"""

    def test_line_breaks_preserved(self):
        """Test <br> elements become newlines"""
        html = lyrics_page(["Yesterday", "All my troubles seemed so far away"])
        assert extract_lyrics(html) == "Yesterday\nAll my troubles seemed so far away"

    def test_multiple_containers_separated_by_blank_line(self):
        html = lyrics_page(["[Verse 1]", "Line one"], ["[Chorus]", "Line two"])
        assert extract_lyrics(html) == "[Verse 1]\nLine one\n\n[Chorus]\nLine two"

    def test_nested_markup_text_kept(self):
        """Test text inside links and spans is kept verbatim"""
        html = (
            '<div data-lyrics-container="true">'
            '<a href="/annotation"><span>Why she had to go</span></a><br>'
            "I don't know, she wouldn't say"
            "</div>"
        )
        assert extract_lyrics(html) == "Why she had to go\nI don't know, she wouldn't say"

    def test_entities_decoded(self):
        html = '<div data-lyrics-container="true">Rock &amp; roll<br/>Don&#x27;t stop</div>'
        assert extract_lyrics(html) == "Rock & roll\nDon't stop"

    def test_text_outside_containers_ignored(self):
        html = lyrics_page(["Only this"])
        result = extract_lyrics(html)
        assert "Embed" not in result
        assert "Song" not in result

    def test_comments_ignored(self):
        html = '<div data-lyrics-container="true"><!-- ad slot -->Line<br>Next</div>'
        assert extract_lyrics(html) == "Line\nNext"

    def test_chrome_inside_container_left_for_cleaner(self):
        """Test contributor headers are not the extractor's job"""
        html = lyrics_page(["12 ContributorsYesterday Lyrics", "Yesterday"])
        assert extract_lyrics(html).startswith("12 ContributorsYesterday Lyrics")

    def test_no_container(self):
        with pytest.raises(ExtractionError) as exc_info:
            extract_lyrics("<html><body><p>Not a song</p></body></html>")
        assert exc_info.value.message == "Could not extract lyrics from page"

    def test_empty_containers(self):
        """Test whitespace-only containers count as no lyrics"""
        with pytest.raises(ExtractionError):
            extract_lyrics('<div data-lyrics-container="true">  <br/> </div>')

    def test_other_container_values_ignored(self):
        with pytest.raises(ExtractionError):
            extract_lyrics('<div data-lyrics-container="false">Nope</div>')
