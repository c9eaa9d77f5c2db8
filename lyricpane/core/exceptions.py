"""
Exception classes for lyricpane.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message that can be shown directly
in the sidebar pane, plus an optional details dictionary for the log file.

Exception Hierarchy:
    LyricPaneError (base)
        ConfigurationError - Missing credential or unreadable config file
        UpstreamError - Search, page fetch or completion service failure
        NotFoundError - Search returned no admissible/matching candidate
        ExtractionError - Song page fetched but no lyrics container text
        CacheError - Content cache could not be persisted (never escapes)
"""


class LyricPaneError(Exception):
    """
    Base exception for all lyricpane errors.

    All custom exceptions in this project inherit from this class,
    allowing the host application to catch every pipeline failure with a
    single except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (query, URL, status).

    Example:
        try:
            lyrics = await processor.resolve_lyrics(title, artist)
        except LyricPaneError as e:
            pane.show_message(e.message)
            logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'title' / 'artist': The song query involved
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigurationError(LyricPaneError):
    """
    Raised when a required credential or configuration value is missing.

    The message always tells the user where the value can be configured,
    e.g. which environment variable or which config.json field.

    Example:
        raise ConfigurationError(
            "Genius API token not configured. Set GENIUS_ACCESS_TOKEN or add "
            "'genius_access_token' to ~/.lyricpane/config.json",
            details={'credential': 'genius_access_token'}
        )
    """
    pass


class UpstreamError(LyricPaneError):
    """
    Raised when one of the external services fails.

    Covers the lyrics search API, the song page fetch and the completion
    service. A non-2xx response carries its HTTP status; transport failures
    (timeouts, connection resets, undecodable bodies) carry status None.

    Attributes:
        status: HTTP status code if the service answered, otherwise None.
        service: Short name of the failing service ("genius", "page", "completion").

    Example:
        raise UpstreamError(
            "Genius API returned status: 401",
            status=401,
            service="genius"
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status: int | None = None,
        service: str | None = None
    ) -> None:
        """
        Initialize upstream error with the failing service and status.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            status: HTTP status code, None for transport failures.
            service: Name of the external service that failed.
        """
        super().__init__(message, details)
        self.status = status
        self.service = service


class NotFoundError(LyricPaneError):
    """
    Raised when the search yields no admissible or matching candidate.

    This is a terminal result for the current attempt; the user can pick
    a candidate manually from search_candidates().
    """
    pass


class ExtractionError(LyricPaneError):
    """
    Raised when a song page was fetched but no lyrics container text was found.

    This signals that the page markup no longer matches what the extractor
    expects, not that the song is instrumental.
    """
    pass


class CacheError(LyricPaneError):
    """
    Raised internally when the content cache cannot be written.

    Persistence is best-effort: ContentCache catches and logs this error,
    it never reaches the caller of a resolution.
    """
    pass
