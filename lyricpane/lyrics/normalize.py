"""
String normalization for cache keys and search terms.

normalize_string() folds case, whitespace and common Latin diacritics so that
"Queensrÿche" and "queensryche " share one cache entry. declutter_title()
removes version qualifiers that make the lyrics search rank worse.

The two are deliberately separate: cache keys are built from the raw title,
search terms from the decluttered one.
"""

import re


# Fixed diacritic table; every other character passes through unchanged
_DIACRITIC_MAP = str.maketrans({
    **dict.fromkeys("áàâãåä", "a"),
    **dict.fromkeys("éèêë", "e"),
    **dict.fromkeys("íìîï", "i"),
    **dict.fromkeys("óòôõö", "o"),
    **dict.fromkeys("úùûü", "u"),
    **dict.fromkeys("ýÿ", "y"),
    "ñ": "n",
    "ç": "c",
})

CACHE_KEY_SEPARATOR = "|"

# Applied in order, each one as a global strip
_DECLUTTER_PATTERNS = [
    re.compile(r"\([^)]*[Rr]emast[^)]*\)"),        # (Remastered 2003), (2003 Remaster)
    re.compile(r"\[[^\]]*[Rr]emast[^\]]*\]"),      # [Remastered 2003]
    re.compile(r"\([^)]*[Aa]coustic[^)]*\)"),      # (Acoustic)
    re.compile(r"\([^)]*[Ll]ive[^)]*\)"),          # (Live at Wembley)
    re.compile(r"\([^)]*[Vv]ersion[^)]*\)"),       # (Album Version)
    re.compile(r"\([^)]*[Ee]dit[^)]*\)"),          # (Radio Edit)
    re.compile(r"\([^)]*\d{4}[^)]*\)"),            # (2003)
    re.compile(r"\[[^\]]*\d{4}[^\]]*\]"),          # [2003]
    re.compile(r"-\s*\d{4}\s*[Rr]emast[^-]*"),     # - 2003 Remastered
    re.compile(r"-\s*[Rr]emast[^-]*"),             # - Remastered
]


def normalize_string(s: str) -> str:
    """
    Normalize a string for use in cache keys

    Args:
        s: Artist name or song title

    Returns:
        Trimmed, lowercased string with diacritics mapped to ASCII letters
    """
    return s.strip().lower().translate(_DIACRITIC_MAP)


def make_cache_key(artist: str, title: str) -> str:
    """
    Build the cache key for a song

    Args:
        artist: Artist name as displayed by the player
        title: Raw song title as displayed by the player (not decluttered)

    Returns:
        "normalized artist|normalized title"
    """
    return f"{normalize_string(artist)}{CACHE_KEY_SEPARATOR}{normalize_string(title)}"


def declutter_title(title: str) -> str:
    """
    Strip remaster/live/version/edit/year qualifiers from a song title

    Args:
        title: Raw song title

    Returns:
        Title without qualifiers, trimmed

    Example:
        >>> declutter_title("Song (Remastered 2003)")
        'Song'
        >>> declutter_title("Song - 2003 Remastered")
        'Song'
    """
    result = title
    for pattern in _DECLUTTER_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def build_search_text(artist: str, title: str) -> str:
    """Search text sent to the lyrics search service"""
    return f"{artist} {declutter_title(title)}"
