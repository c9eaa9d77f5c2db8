"""
Cleaning of scraped lyrics text.

Two strategies share the same contract, raw text in, displayable text out:

- AICleaner asks the completion service to strip page furniture while
  keeping the lyric structure. It can fail (network, missing key) or refuse
  (copyright policy) for some songs.
- HeuristicCleaner trims chrome lines from the top and bottom with fixed
  line patterns. No network, never fails.

clean_with_fallback() runs the AI strategy first and falls back to the
heuristic on any pipeline error or refusal, so the user always gets
something to read.
"""

from lyricpane.ai.completion import CompletionClient
from lyricpane.core.exceptions import ConfigurationError, LyricPaneError
from lyricpane.core.logger import get_logger

logger = get_logger(__name__)


AI_CLEAN_PROMPT = (
    "Clean and format this text. Remove any web page elements like headers, footers, "
    "contributor names, 'Embed' text, navigation elements, advertisements, or metadata. "
    "Keep only the main content with proper structure and formatting. Preserve line breaks "
    "and spacing that are part of the content structure. Return ONLY the cleaned text.\n\n"
)

REFUSAL_MARKERS = ("i can't provide", "i cannot provide", "i'm sorry")

# Leading chrome patterns
LEADING_SUFFIXES = ("Contributors", "Lyrics")
LEADING_MARKERS = ("is a song about", "Read More")
QUOTE_PREFIXES = ('"', "“")
SHOUT_MAX_LENGTH = 40
SHOUT_MIN_LETTERS = 3
SHOUT_UPPER_RATIO = 0.5

# Trailing footer patterns
TRAILING_MARKERS = ("Embed", "Lyrics")
TRAILING_PREFIXES = ("See ",)


def is_refusal(text: str) -> bool:
    """
    Check whether a completion is an apology/refusal instead of lyrics

    Case-insensitive substring match against REFUSAL_MARKERS.
    """
    lowered = text.lower()
    return any(marker in lowered for marker in REFUSAL_MARKERS)


def _is_shouting(line: str) -> bool:
    if len(line) > SHOUT_MAX_LENGTH:
        return False
    letters = [c for c in line if c.isalpha()]
    if len(letters) < SHOUT_MIN_LETTERS:
        return False
    upper = sum(1 for c in letters if c.isupper())
    return upper / len(letters) > SHOUT_UPPER_RATIO


def is_leading_chrome(line: str) -> bool:
    """True if a line at the top of the page text is page furniture"""
    stripped = line.strip()
    if not stripped:
        return True
    if stripped.endswith(LEADING_SUFFIXES):
        return True
    if stripped.startswith(QUOTE_PREFIXES):
        return True
    if any(marker in stripped for marker in LEADING_MARKERS):
        return True
    return _is_shouting(stripped)


def is_trailing_chrome(line: str) -> bool:
    """True if a line at the bottom of the page text is a footer"""
    stripped = line.strip()
    if not stripped:
        return True
    if stripped.startswith(TRAILING_PREFIXES):
        return True
    return any(marker in stripped for marker in TRAILING_MARKERS)


class HeuristicCleaner:
    """Deterministic line-pattern cleaner used when the AI cleaner is unavailable"""

    name = "heuristic"

    def clean(self, raw: str) -> str:
        """
        Trim chrome lines from both ends

        Interior lines are never touched. Text without any detected chrome
        comes back unchanged apart from surrounding whitespace.
        """
        lines = raw.splitlines()

        start = 0
        while start < len(lines) and is_leading_chrome(lines[start]):
            start += 1

        end = len(lines)
        while end > start and is_trailing_chrome(lines[end - 1]):
            end -= 1

        return "\n".join(lines[start:end]).strip()


class AICleaner:
    """Completion-service cleaner"""

    name = "ai"

    def __init__(self, completion: CompletionClient, max_tokens: int = 500) -> None:
        self.completion = completion
        self.max_tokens = max_tokens

    async def clean(self, raw: str) -> str:
        """
        Ask the completion service to clean the text

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamError: On any service failure
        """
        return await self.completion.complete(AI_CLEAN_PROMPT + raw, self.max_tokens)


async def clean_with_fallback(
    raw: str,
    ai: AICleaner | None,
    heuristic: HeuristicCleaner
) -> str:
    """
    Clean lyrics with the AI strategy, falling back to the heuristic

    Args:
        raw: Extracted lyrics text
        ai: AI cleaner, or None to use the heuristic directly
        heuristic: Fallback cleaner

    Returns:
        Cleaned lyrics. AI output is discarded if it is blank or looks
        like a refusal.
    """
    if ai is None:
        return heuristic.clean(raw)

    try:
        cleaned = await ai.clean(raw)
    except ConfigurationError as e:
        logger.info(f"AI cleaning unavailable, using heuristic cleaner: {e.message}")
        return heuristic.clean(raw)
    except LyricPaneError as e:
        logger.warning(f"AI cleaning failed, using heuristic cleaner: {e.message}")
        return heuristic.clean(raw)

    if not cleaned.strip():
        logger.warning("AI cleaner returned empty text, using heuristic cleaner")
        return heuristic.clean(raw)

    if is_refusal(cleaned):
        logger.info("AI cleaner refused the request, using heuristic cleaner")
        return heuristic.clean(raw)

    return cleaned
