"""
Lyrics resolution pipeline

LyricsProcessor composes the pipeline components into the single operation
the sidebar needs: given the title and artist shown by the player, return
displayable lyrics.

Processing Flow:
1. Cache lookup by make_cache_key(artist, raw title); a valid hit returns
   immediately without any network activity
2. Genius search and candidate selection
3. Song page fetch
4. Lyrics extraction from the page markup
5. Cleaning: AI first, heuristic fallback on error or refusal
6. Best-effort cache write
7. Return

Every failure in steps 2-4 is surfaced unchanged to the caller
(ConfigurationError, UpstreamError, NotFoundError, ExtractionError). Step 5
never fails and step 6 only logs.

Concurrency:
Each resolve_lyrics() call is an independent coroutine. resolve_many() runs
a batch concurrently (queue prefetch). Two resolutions of the same key are
not coalesced; both run the full pipeline and the last cache write wins.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable

import aiohttp

from lyricpane.ai.completion import CompletionClient
from lyricpane.core.cache import ContentCache
from lyricpane.core.config import Settings
from lyricpane.core.exceptions import LyricPaneError
from lyricpane.core.logger import get_logger, log_lyrics_failure
from lyricpane.lyrics.cleaner import AICleaner, HeuristicCleaner, clean_with_fallback
from lyricpane.lyrics.extractor import extract_lyrics
from lyricpane.lyrics.genius import GeniusClient
from lyricpane.lyrics.models import SearchCandidate, SongQuery


@dataclass
class LyricsResult:
    """
    Outcome of one resolution inside a batch

    Attributes:
        query: The song that was resolved
        lyrics: Cleaned lyrics on success
        error: The pipeline error on failure
    """
    query: SongQuery
    lyrics: str | None = None
    error: LyricPaneError | None = None

    @property
    def success(self) -> bool:
        return self.lyrics is not None


class LyricsProcessor:
    """
    Orchestrates cache, search, scrape, extraction and cleaning

    All collaborators are injected; one ContentCache instance should be
    shared by everything in the process so its write lock is effective.

    Attributes:
        cache: Shared content cache
        genius: Search/page client
        ai_cleaner: AI cleaner, None to always use the heuristic
        heuristic: Fallback cleaner
        stats: Counters for the current process
    """

    def __init__(
        self,
        cache: ContentCache,
        genius: GeniusClient,
        ai_cleaner: AICleaner | None = None,
        heuristic: HeuristicCleaner | None = None
    ):
        self.cache = cache
        self.genius = genius
        self.ai_cleaner = ai_cleaner
        self.heuristic = heuristic or HeuristicCleaner()
        self.logger = get_logger(__name__)

        self.stats = {
            'total_requests': 0,
            'cache_hits': 0,
            'resolved': 0,
            'failed': 0,
        }

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: ContentCache,
        session: aiohttp.ClientSession | None = None,
        completion: CompletionClient | None = None
    ) -> "LyricsProcessor":
        """
        Build a processor with the default clients

        Args:
            settings: Loaded settings
            cache: Shared content cache
            session: Optional aiohttp session shared by both clients
            completion: Optional completion client to share with other services
        """
        completion = completion or CompletionClient(settings, session=session)
        return cls(
            cache=cache,
            genius=GeniusClient(settings, session=session),
            ai_cleaner=AICleaner(completion, max_tokens=settings.completion.max_tokens),
        )

    async def close(self) -> None:
        """Close the network clients owned by this processor"""
        await self.genius.close()
        if self.ai_cleaner is not None:
            await self.ai_cleaner.completion.close()

    async def __aenter__(self) -> "LyricsProcessor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def resolve_lyrics(self, title: str, artist: str) -> str:
        """
        Resolve displayable lyrics for a song

        Args:
            title: Raw title as shown by the player
            artist: Artist name as shown by the player

        Returns:
            Cleaned lyrics text

        Raises:
            ConfigurationError: Genius token missing
            UpstreamError: Search or page fetch failed
            NotFoundError: No suitable search candidate
            ExtractionError: Page had no lyrics container text
        """
        query = SongQuery(title=title, artist=artist)
        key = query.cache_key
        self.stats['total_requests'] += 1

        cached = self.cache.get_lyrics(key)
        if cached is not None:
            self.stats['cache_hits'] += 1
            self.logger.debug(f"Lyrics cache hit: {key}")
            return cached

        self.logger.info(f"Resolving lyrics for: {query}")

        try:
            candidate = await self.genius.match(query)
            html = await self.genius.fetch_page(candidate.url)
            raw_lyrics = extract_lyrics(html)
        except LyricPaneError:
            self.stats['failed'] += 1
            raise

        result = await clean_with_fallback(raw_lyrics, self.ai_cleaner, self.heuristic)

        self.cache.put_lyrics(key, result)
        self.stats['resolved'] += 1
        return result

    async def search_candidates(self, title: str, artist: str) -> list[SearchCandidate]:
        """
        Ranked, unfiltered search hits for manual selection in the UI

        Returns:
            Up to 10 SearchCandidate objects
        """
        return await self.genius.search_candidates(title, artist)

    async def _resolve_tracked(
        self,
        query: SongQuery,
        on_done: Callable[[SongQuery], None] | None
    ) -> str:
        try:
            return await self.resolve_lyrics(query.title, query.artist)
        finally:
            if on_done is not None:
                on_done(query)

    async def resolve_many(
        self,
        queries: list[SongQuery],
        on_done: Callable[[SongQuery], None] | None = None
    ) -> list[LyricsResult]:
        """
        Resolve a batch of songs concurrently

        Pipeline errors are captured per song rather than raised; duplicate
        queries are resolved independently. Anything that is not a
        LyricPaneError is a bug and is re-raised after the batch settles.

        Args:
            queries: Songs to resolve
            on_done: Optional callback invoked as each song finishes,
                     successful or not (progress bars)

        Returns:
            One LyricsResult per query, in input order
        """
        outcomes = await asyncio.gather(
            *(self._resolve_tracked(q, on_done) for q in queries),
            return_exceptions=True
        )

        results = []
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, LyricPaneError):
                log_lyrics_failure(self.logger, query.title, query.artist, f"{type(outcome).__name__}: {outcome.message}")
                results.append(LyricsResult(query=query, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(LyricsResult(query=query, lyrics=outcome))

        return results

    def get_processing_stats(self) -> dict:
        """Counters plus the derived cache hit rate"""
        total = self.stats['total_requests']
        return {
            **self.stats,
            'cache_hit_rate': (self.stats['cache_hits'] / total) if total else 0.0,
        }
