"""
Persistent content cache for lyricpane.

All generated or scraped sidebar content is kept in one JSON document with
three top-level mappings, each keyed by normalized strings:

    {
      "artist_info":  {"the beatles": "..."},
      "song_context": {"the beatles|yesterday": "..."},
      "lyrics":       {"the beatles|yesterday (remastered 2009)": "..."}
    }

Reads always load the whole document from disk and never raise: a missing
or corrupted file behaves like an empty cache. Writes take a process-wide
lock around "re-read, insert, write back" so that two concurrent writers
updating different keys do not lose each other's entries.

Every lyrics read is re-validated with looks_like_prose(): older versions
cached disambiguation and literature pages as lyrics, and those entries must
be treated as absent so they get re-resolved and overwritten.

Usage:
    cache = ContentCache(settings.get_cache_path())

    lyrics = cache.get_lyrics(key)
    if lyrics is None:
        lyrics = ...  # resolve
        cache.put_lyrics(key, lyrics)
"""

import json
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path

from lyricpane.core.exceptions import CacheError
from lyricpane.core.logger import get_logger

logger = get_logger(__name__)


SECTIONS = ("artist_info", "song_context", "lyrics")

PROSE_MARKERS = ("he said", "she said", "he sat", "she sat")
SECTION_MARKERS = ("[Chorus]", "[Verse]")
PROSE_MIN_LENGTH = 500


def looks_like_prose(text: str) -> bool:
    """
    Check whether a cached lyrics entry is actually narrative prose.

    Args:
        text: Cached lyrics value.

    Returns:
        True if the text contains a narrative marker ("he said", "she sat", ...),
        or if it is longer than 500 characters, contains " the " and has
        neither a "[Chorus]" nor a "[Verse]" section marker.
    """
    if any(marker in text for marker in PROSE_MARKERS):
        return True

    return (
        len(text) > PROSE_MIN_LENGTH
        and " the " in text
        and not any(marker in text for marker in SECTION_MARKERS)
    )


@dataclass
class CachedData:
    """
    In-memory form of the cache document.

    Attributes:
        artist_info: normalized artist -> artist summary
        song_context: cache key -> song analysis
        lyrics: cache key -> cleaned lyrics
    """
    artist_info: dict[str, str] = field(default_factory=dict)
    song_context: dict[str, str] = field(default_factory=dict)
    lyrics: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "CachedData":
        """Build from parsed JSON; missing or malformed sections become empty."""
        sections = {}
        for name in SECTIONS:
            section = data.get(name)
            if isinstance(section, dict):
                sections[name] = {
                    str(k): v for k, v in section.items() if isinstance(v, str)
                }
            else:
                sections[name] = {}
        return cls(**sections)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return asdict(self)


class ContentCache:
    """
    JSON-file content cache with serialized writes.

    Construct one instance per process and pass it to every component that
    reads or writes cached content. The write lock belongs to the instance,
    so sharing the instance is what makes writes exclusive.

    Attributes:
        path: Location of the cache document.

    Thread Safety:
        put_* and clear() hold the instance lock for the whole
        read-modify-write. get_* take no lock; they may observe the document
        from just before a concurrent write, never a partial one, because
        writes go through a temporary file and os.replace().
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self) -> CachedData:
        """
        Load the full cache document.

        Returns:
            CachedData; empty when the file is missing or cannot be parsed.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return CachedData()
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable content cache {self.path}: {e}")
            return CachedData()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring content cache with unexpected structure: {self.path}")
            return CachedData()

        return CachedData.from_dict(data)

    def _save(self, cache: CachedData) -> None:
        """
        Write the full document atomically.

        Raises:
            CacheError: If the directory cannot be created or the file written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(cache.to_dict(), ensure_ascii=False, indent=2)

            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise CacheError(
                f"Failed to save content cache: {e}",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e

    def _update(self, section: str, key: str, value: str) -> bool:
        """
        Insert or overwrite one entry under the write lock.

        Returns:
            True if the document was persisted, False if the write failed
            (the failure is logged, never raised).
        """
        with self._lock:
            cache = self.load()
            getattr(cache, section)[key] = value
            try:
                self._save(cache)
            except CacheError as e:
                logger.error(f"{e.message} (section={section}, key={key})")
                return False

        logger.debug(f"Cached {section} entry: {key}")
        return True

    def get_lyrics(self, key: str) -> str | None:
        """
        Return cached lyrics if present and not mis-cached prose.

        Args:
            key: Cache key from make_cache_key().

        Returns:
            The lyrics, or None when absent or invalid.
        """
        lyrics = self.load().lyrics.get(key)
        if lyrics is None:
            return None

        if looks_like_prose(lyrics):
            logger.info(f"Cached lyrics for '{key}' look like prose, forcing re-fetch")
            return None

        return lyrics

    def get_artist_info(self, key: str) -> str | None:
        """Return cached artist info; blank entries count as absent."""
        info = self.load().artist_info.get(key)
        if info is None or not info.strip():
            return None
        return info

    def get_song_context(self, key: str) -> str | None:
        """Return cached song context; blank entries count as absent."""
        context = self.load().song_context.get(key)
        if context is None or not context.strip():
            return None
        return context

    def put_lyrics(self, key: str, value: str) -> bool:
        return self._update("lyrics", key, value)

    def put_artist_info(self, key: str, value: str) -> bool:
        return self._update("artist_info", key, value)

    def put_song_context(self, key: str, value: str) -> bool:
        return self._update("song_context", key, value)

    def clear(self, section: str | None = None) -> int:
        """
        Remove all entries from one section, or from every section.

        Args:
            section: One of SECTIONS, or None for all of them.

        Returns:
            Number of entries removed (0 if the write failed).

        Raises:
            ValueError: If section is not a known section name.
        """
        if section is not None and section not in SECTIONS:
            raise ValueError(f"Unknown cache section: {section}")

        targets = [section] if section else list(SECTIONS)

        with self._lock:
            cache = self.load()
            removed = 0
            for name in targets:
                entries = getattr(cache, name)
                removed += len(entries)
                entries.clear()
            try:
                self._save(cache)
            except CacheError as e:
                logger.error(e.message)
                return 0

        logger.info(f"Cleared {removed} cache entries from {', '.join(targets)}")
        return removed

    def stats(self) -> dict:
        """
        Summarize the cache contents.

        Returns:
            Dictionary with per-section entry counts, the number of lyrics
            entries that currently fail validation, and the file path.
        """
        cache = self.load()
        return {
            "cache_file": str(self.path),
            "artist_info": len(cache.artist_info),
            "song_context": len(cache.song_context),
            "lyrics": len(cache.lyrics),
            "invalid_lyrics": sum(1 for text in cache.lyrics.values() if looks_like_prose(text)),
        }
