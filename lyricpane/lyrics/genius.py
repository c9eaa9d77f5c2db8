"""
Genius API integration: song search, candidate matching and page fetch

This module talks to the Genius search endpoint directly over aiohttp and
selects the song page to scrape. Matching is intentionally simple and
predictable rather than score-based:

Candidate Selection:
1. Keep admissible hits only: declared type "song", or no declared type and
   a URL that does not point at literature/books content. The search
   endpoint indexes books and discussion pages under the same API.
2. Return the first admissible hit whose artist AND title match the query,
   where "match" means one lowercased string contains the other.
3. Otherwise return the first hit explicitly typed "song". Untyped hits are
   never accepted here since no text match vouched for them.
4. Otherwise fail with NotFoundError.

Search text is "artist + decluttered title"; the decluttered title is also
what candidate titles are compared against. Interactive disambiguation in
the host UI uses search_candidates(), which returns the raw ranked hits
without filtering.

Network Behavior:
- Bearer token from the Genius credential chain (env before config.json)
- Distinct User-Agent on every request
- 10 second timeout for both search and page fetch
- No retries and no rate limiting; every failure surfaces as UpstreamError
"""

import asyncio

import aiohttp

from lyricpane.core.config import Settings
from lyricpane.core.exceptions import NotFoundError, UpstreamError
from lyricpane.core.logger import get_logger
from lyricpane.lyrics.models import SearchCandidate, SongQuery
from lyricpane.lyrics.normalize import build_search_text


def _contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def select_candidate(candidates: list[SearchCandidate], artist: str, title: str) -> SearchCandidate:
    """
    Pick the song page to scrape from ranked search hits

    Args:
        candidates: Hits in the order returned by the search service
        artist: Artist name from the player
        title: Decluttered song title

    Returns:
        The selected SearchCandidate

    Raises:
        NotFoundError: If no admissible hit matches and no hit is a declared song
    """
    search_artist = artist.lower()
    search_title = title.lower()

    for candidate in candidates:
        if not candidate.is_admissible:
            continue

        artist_match = _contains_either(candidate.artist_name.lower(), search_artist)
        title_match = _contains_either(candidate.title.lower(), search_title)

        if artist_match and title_match:
            return candidate

    # Fallback: first explicitly typed song, regardless of text match
    for candidate in candidates:
        if candidate.is_song:
            return candidate

    raise NotFoundError(
        "No results found",
        details={"artist": artist, "title": title, "candidates": len(candidates)}
    )


class GeniusClient:
    """
    Async client for the Genius search API and song pages

    The aiohttp session is created lazily on first request and closed by
    close(). A session may be injected instead (tests, or a host application
    sharing one session); an injected session is never closed by this client.

    Attributes:
        config: GeniusConfig section of the settings
        credentials: Credential chain for the bearer token
    """

    def __init__(self, settings: Settings, session: aiohttp.ClientSession | None = None):
        self.config = settings.genius
        self.credentials = settings.genius_credentials()
        self.logger = get_logger(__name__)

        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    @property
    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.config.timeout)

    async def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def search(self, title: str, artist: str) -> list[SearchCandidate]:
        """
        Query the search endpoint and return all hits in ranked order

        Args:
            title: Raw song title (decluttered before searching)
            artist: Artist name

        Returns:
            List of SearchCandidate, possibly empty

        Raises:
            ConfigurationError: If no Genius token is configured
            UpstreamError: On non-2xx status, transport failure or bad JSON
        """
        token = self.credentials.require()
        query = build_search_text(artist, title)
        url = f"{self.config.api_base.rstrip('/')}/search"
        headers = {
            "User-Agent": self.config.user_agent,
            "Authorization": f"Bearer {token}",
        }

        self.logger.debug(f"Genius search query: '{query}'")
        session = await self._get_session()

        try:
            async with session.get(url, params={"q": query}, headers=headers, timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    raise UpstreamError(
                        f"Genius API returned status: {response.status}",
                        details={"query": query},
                        status=response.status,
                        service="genius"
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(
                f"Search request failed: {str(e) or type(e).__name__}",
                details={"query": query},
                service="genius"
            ) from e
        except ValueError as e:
            raise UpstreamError(
                f"Failed to parse search results: {e}",
                details={"query": query},
                service="genius"
            ) from e

        return self._parse_hits(payload, query)

    def _parse_hits(self, payload, query: str) -> list[SearchCandidate]:
        try:
            hits = payload["response"]["hits"]
        except (KeyError, TypeError) as e:
            raise UpstreamError(
                "Failed to parse search results: missing response.hits",
                details={"query": query},
                service="genius"
            ) from e

        candidates = []
        for hit in hits or []:
            try:
                candidates.append(SearchCandidate.from_hit(hit))
            except (KeyError, TypeError) as e:
                self.logger.debug(f"Skipping malformed Genius hit: {e}")

        self.logger.debug(f"Genius returned {len(candidates)} candidates for '{query}'")
        return candidates

    async def match(self, query: SongQuery) -> SearchCandidate:
        """
        Search and select the best candidate for a song

        Raises:
            ConfigurationError, UpstreamError, NotFoundError
        """
        candidates = await self.search(query.title, query.artist)
        candidate = select_candidate(candidates, query.artist, query.clean_title)

        self.logger.info(f"Genius match for {query}: {candidate.artist_name} - {candidate.title}")
        return candidate

    async def search_candidates(self, title: str, artist: str) -> list[SearchCandidate]:
        """
        Raw ranked hits for interactive disambiguation

        No admissibility filtering is applied; the user decides.

        Returns:
            Up to config.max_candidates (default 10) candidates
        """
        candidates = await self.search(title, artist)
        return candidates[:self.config.max_candidates]

    async def fetch_page(self, url: str) -> str:
        """
        Download a song page

        Args:
            url: Song page URL from the selected candidate

        Returns:
            The HTML document

        Raises:
            UpstreamError: On non-2xx status or transport failure
        """
        headers = {"User-Agent": self.config.user_agent}
        session = await self._get_session()

        try:
            async with session.get(url, headers=headers, timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    raise UpstreamError(
                        f"Lyrics page returned status: {response.status}",
                        details={"url": url},
                        status=response.status,
                        service="page"
                    )
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(
                f"Failed to fetch lyrics page: {str(e) or type(e).__name__}",
                details={"url": url},
                service="page"
            ) from e
        except UnicodeDecodeError as e:
            raise UpstreamError(
                f"Failed to read HTML: {e}",
                details={"url": url},
                service="page"
            ) from e
