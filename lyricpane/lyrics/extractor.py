"""
Lyrics extraction from Genius song pages.

Genius marks every block of lyrics with data-lyrics-container="true". A page
usually has several such blocks (one per section or ad break). Text nodes
are kept verbatim and <br> elements become newlines; each container is
followed by a blank line. Page furniture inside or around the containers
(contributor counts, "Embed", headers) is left for the cleaner.
"""

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag

from lyricpane.core.exceptions import ExtractionError


LYRICS_CONTAINER_SELECTOR = '[data-lyrics-container="true"]'


def _container_text(container: Tag) -> str:
    parts = []
    for node in container.descendants:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            parts.append(str(node))
        elif isinstance(node, Tag) and node.name == "br":
            parts.append("\n")
    return "".join(parts)


def extract_lyrics(html: str) -> str:
    """
    Extract raw line-oriented lyrics text from a song page

    Args:
        html: The fetched HTML document

    Returns:
        Raw lyrics with line breaks preserved, trimmed

    Raises:
        ExtractionError: If no container text was found. This means the page
                         structure changed, not that the song has no lyrics.
    """
    soup = BeautifulSoup(html, "html.parser")

    blocks = []
    for container in soup.select(LYRICS_CONTAINER_SELECTOR):
        blocks.append(_container_text(container))
        blocks.append("\n\n")

    lyrics = "".join(blocks).strip()
    if not lyrics:
        raise ExtractionError(
            "Could not extract lyrics from page",
            details={"containers": len(blocks) // 2}
        )

    return lyrics
