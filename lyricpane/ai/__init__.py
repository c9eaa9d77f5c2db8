"""AI-backed services: completion client and artist/song commentary."""

from lyricpane.ai.commentary import CommentaryService
from lyricpane.ai.completion import CompletionClient

__all__ = ["CommentaryService", "CompletionClient"]
