"""
Lyrics pipeline for lyricpane.

    normalize   - cache keys and title decluttering
    models      - SongQuery, SearchCandidate
    genius      - Genius search client and candidate matcher
    extractor   - lyrics text extraction from song pages
    cleaner     - AI and heuristic cleaners with fallback
    processor   - LyricsProcessor, the cache-first orchestrator
"""

from lyricpane.lyrics.cleaner import AICleaner, HeuristicCleaner, clean_with_fallback, is_refusal
from lyricpane.lyrics.extractor import extract_lyrics
from lyricpane.lyrics.genius import GeniusClient, select_candidate
from lyricpane.lyrics.models import SearchCandidate, SongQuery
from lyricpane.lyrics.normalize import build_search_text, declutter_title, make_cache_key, normalize_string
from lyricpane.lyrics.processor import LyricsProcessor, LyricsResult

__all__ = [
    "AICleaner",
    "HeuristicCleaner",
    "clean_with_fallback",
    "is_refusal",
    "extract_lyrics",
    "GeniusClient",
    "select_candidate",
    "SearchCandidate",
    "SongQuery",
    "build_search_text",
    "declutter_title",
    "make_cache_key",
    "normalize_string",
    "LyricsProcessor",
    "LyricsResult",
]
