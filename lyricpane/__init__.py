"""
lyricpane: lyrics and song context for a desktop music player sidebar.

Given the title and artist of the song that is playing, lyricpane finds the
song on Genius, scrapes the lyrics, strips page furniture from them (with
an AI cleaner and a heuristic fallback) and caches the result. It also
produces short AI-written artist and song notes, cached the same way.

Modules:
    core/       - Configuration, credentials, content cache, logging, exceptions
    lyrics/     - Normalization, Genius search, extraction, cleaning, orchestration
    ai/         - Completion client and artist/song commentary
    cli.py      - Command-line interface

Usage:
    Command Line:
        lyricpane lyrics "Yesterday - Remastered 2009" "The Beatles"
        lyricpane search "Yesterday" "The Beatles" --json
        lyricpane prefetch queue.txt

    Python API:
        from lyricpane import ContentCache, LyricsProcessor, get_settings

        settings = get_settings()
        cache = ContentCache(settings.get_cache_path())
        async with LyricsProcessor.from_settings(settings, cache) as processor:
            lyrics = await processor.resolve_lyrics(title, artist)
"""

__version__ = "0.1.0"

from lyricpane.ai.commentary import CommentaryService
from lyricpane.ai.completion import CompletionClient
from lyricpane.core import (
    ConfigurationError,
    ContentCache,
    ExtractionError,
    LyricPaneError,
    NotFoundError,
    Settings,
    UpstreamError,
    get_settings,
    setup_logging,
)
from lyricpane.lyrics.models import SearchCandidate, SongQuery
from lyricpane.lyrics.processor import LyricsProcessor, LyricsResult

__all__ = [
    "__version__",
    "CommentaryService",
    "CompletionClient",
    "ContentCache",
    "LyricsProcessor",
    "LyricsResult",
    "SearchCandidate",
    "SongQuery",
    "Settings",
    "get_settings",
    "setup_logging",
    "LyricPaneError",
    "ConfigurationError",
    "UpstreamError",
    "NotFoundError",
    "ExtractionError",
]
