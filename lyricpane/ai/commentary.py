"""
Artist and song commentary for the sidebar's info panels.

Both lookups are cache-first: a non-blank cached entry is returned without
calling the completion service, otherwise the generated text is stored
before being returned. Unlike lyrics cleaning there is no fallback; a
completion failure propagates to the caller.
"""

from lyricpane.ai.completion import CompletionClient
from lyricpane.core.cache import ContentCache
from lyricpane.core.logger import get_logger
from lyricpane.lyrics.normalize import make_cache_key, normalize_string


ARTIST_INFO_PROMPT = (
    "Provide a brief, 2-3 paragraph summary about the music artist/band '{artist}'. "
    "Include their genre, notable achievements, and impact on music. "
    "Keep it concise and informative."
)

SONG_CONTEXT_PROMPT = (
    "Provide a brief analysis of the song '{title}' by {artist}. "
    "Focus on its themes, meaning, and musical significance. "
    "Keep it to 2-3 paragraphs."
)

COMMENTARY_MAX_TOKENS = 500


class CommentaryService:
    """
    Cached artist biographies and song analyses

    Attributes:
        cache: Shared content cache
        completion: Completion client used for generation
    """

    def __init__(self, cache: ContentCache, completion: CompletionClient):
        self.cache = cache
        self.completion = completion
        self.logger = get_logger(__name__)

    async def artist_info(self, artist: str) -> str:
        """
        Short summary of an artist

        Args:
            artist: Artist name as shown by the player

        Returns:
            Generated or cached summary

        Raises:
            ConfigurationError: If no completion API key is configured
            UpstreamError: If the completion request fails
        """
        key = normalize_string(artist)

        cached = self.cache.get_artist_info(key)
        if cached is not None:
            self.logger.debug(f"Artist info cache hit: {key}")
            return cached

        self.logger.info(f"Generating artist info for: {artist}")
        info = await self.completion.complete(
            ARTIST_INFO_PROMPT.format(artist=artist),
            COMMENTARY_MAX_TOKENS
        )

        self.cache.put_artist_info(key, info)
        return info

    async def song_context(self, title: str, artist: str) -> str:
        """
        Short analysis of a song, keyed like lyrics (artist|title)

        Raises:
            ConfigurationError, UpstreamError
        """
        key = make_cache_key(artist, title)

        cached = self.cache.get_song_context(key)
        if cached is not None:
            self.logger.debug(f"Song context cache hit: {key}")
            return cached

        self.logger.info(f"Generating song context for: {artist} - {title}")
        context = await self.completion.complete(
            SONG_CONTEXT_PROMPT.format(title=title, artist=artist),
            COMMENTARY_MAX_TOKENS
        )

        self.cache.put_song_context(key, context)
        return context

    async def close(self) -> None:
        await self.completion.close()
