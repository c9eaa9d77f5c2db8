"""
Data models for the lyrics pipeline.

SongQuery is the immutable input of one resolution. SearchCandidate is one
hit returned by the Genius search endpoint; candidates only live for the
duration of a request and are never persisted.
"""

from dataclasses import dataclass
from typing import Any

from lyricpane.lyrics.normalize import declutter_title, make_cache_key


# URL fragments marking non-song content indexed by the search endpoint
NON_SONG_URL_MARKERS = ("/literature/", "/books/")


@dataclass(frozen=True)
class SongQuery:
    """
    Song as displayed by the player.

    Attributes:
        title: Raw title, possibly with qualifiers like "(Remastered 2009)".
        artist: Artist name.
    """

    title: str
    artist: str

    @property
    def cache_key(self) -> str:
        """Cache key derived from the raw (not decluttered) title."""
        return make_cache_key(self.artist, self.title)

    @property
    def clean_title(self) -> str:
        """Title used for searching and matching."""
        return declutter_title(self.title)

    def __str__(self) -> str:
        return f"{self.artist} - {self.title}"


@dataclass(frozen=True)
class SearchCandidate:
    """
    One ranked hit from the lyrics search service.

    Attributes:
        url: Song page URL.
        title: Song title as stored on Genius.
        artist_name: Primary artist name.
        result_type: Declared result type ("song", ...), None when absent.
    """

    url: str
    title: str
    artist_name: str
    result_type: str | None = None

    @classmethod
    def from_hit(cls, hit: dict[str, Any]) -> "SearchCandidate":
        """
        Build a candidate from one entry of response.hits.

        Args:
            hit: {"result": {"url", "title", "primary_artist": {"name"}, "type"?}}

        Raises:
            KeyError / TypeError: If the hit lacks url, title or artist name,
                or any of them is not a string.
        """
        result = hit["result"]
        url = result["url"]
        title = result["title"]
        artist_name = result["primary_artist"]["name"]
        if not all(isinstance(value, str) for value in (url, title, artist_name)):
            raise TypeError(f"Non-string url, title or artist in hit: {result!r}")

        result_type = result.get("type")
        return cls(
            url=url,
            title=title,
            artist_name=artist_name,
            result_type=result_type if isinstance(result_type, str) else None,
        )

    @property
    def is_song(self) -> bool:
        """True only when the service explicitly declared this hit a song."""
        return self.result_type == "song"

    @property
    def is_admissible(self) -> bool:
        """
        True if this hit may be scraped as lyrics.

        Declared songs are admissible. Hits without a declared type are
        admissible unless their URL points at literature or books.
        """
        if self.result_type is not None:
            return self.is_song

        url = self.url.lower()
        return not any(marker in url for marker in NON_SONG_URL_MARKERS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "artist": self.artist_name,
            "type": self.result_type,
        }
