"""
Logging configuration for lyricpane.

This module sets up the logging system with up to three outputs:
    - Console: colored, compact messages written through tqdm so that the
      prefetch progress bar is never broken
    - Rotating log file: complete log of all events (DEBUG and above)
    - lyrics_failures.log: songs whose lyrics could not be resolved

Usage:
    from lyricpane.core.logger import setup_logging, get_logger

    setup_logging(level="INFO", log_file="~/.lyricpane/logs/lyricpane.log")
    logger = get_logger(__name__)

    logger.info("Resolving lyrics")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TextIO

import colorama
from colorama import Back, Fore, Style
from tqdm import tqdm


# Initialize colorama for Windows compatibility
colorama.init()

ROOT_LOGGER_NAME = "lyricpane"
LYRICS_FAILURES_FILENAME = "lyrics_failures.log"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log format for console output (compact)
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"

# Third-party loggers that are too chatty at DEBUG
EXTERNAL_LIBS = ["aiohttp", "aiohttp.access", "aiohttp.client", "asyncio", "urllib3", "charset_normalizer"]


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colored level names for console output"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, fmt: str | None = None, use_colors: bool = True):
        """
        Initialize colored formatter

        Args:
            fmt: Log format string
            use_colors: Whether to use colored output
        """
        super().__init__(fmt or CONSOLE_LOG_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors"""
        if not self.use_colors or record.levelname not in self.COLORS:
            return super().format(record)

        # Work on a copy so file handlers see the plain level name
        record_copy = logging.makeLogRecord(record.__dict__)
        record_copy.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{Style.RESET_ALL}"
        return super().format(record_copy)


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    tqdm.write() prints the message above any active progress bar, which
    keeps the `lyricpane prefetch` display intact while lyrics resolve.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class LyricsFailedSongHandler(logging.Handler):
    """
    Handler that captures lyrics resolution failures for the report file.

    Only records carrying the 'lyrics_failed_title' extra field are written,
    in a simple human-readable format:

        Artist Name - Song Title
        NotFoundError: No results found

    Attributes:
        report_path: Path to the lyrics_failures.log file.
        report_file: Open file handle (None until open() is called).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file in append mode."""
        self.report_path.parent.mkdir(parents=True, exist_ok=True)
        self.report_file = open(self.report_path, "a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "lyrics_failed_title"):
            return

        if self.report_file is None:
            return

        try:
            title = getattr(record, "lyrics_failed_title", "Unknown")
            artist = getattr(record, "lyrics_failed_artist", "Unknown")
            reason = getattr(record, "lyrics_failed_reason", "")

            self.report_file.write(f"{artist} - {title}\n")
            self.report_file.write(f"{reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


def parse_size(size_str: str) -> int:
    """
    Parse size string (e.g. '10MB', '512KB') to bytes

    Args:
        size_str: Size with optional B/KB/MB/GB suffix

    Returns:
        Size in bytes, 10MB if the string cannot be parsed
    """
    size_str = size_str.upper().strip()
    multipliers = {
        'GB': 1024 ** 3,
        'MB': 1024 ** 2,
        'KB': 1024,
        'B': 1,
    }

    for suffix, multiplier in multipliers.items():
        if size_str.endswith(suffix):
            number = size_str[:-len(suffix)].strip()
            try:
                return int(float(number) * multiplier)
            except ValueError:
                return 10 * 1024 ** 2

    try:
        return int(size_str)
    except ValueError:
        return 10 * 1024 ** 2


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3
) -> None:
    """
    Configure the logging system for the application.

    Should be called once at startup, after the settings are loaded.

    Args:
        level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None or "" disables file logging)
        console_output: Enable console logging
        colored_output: Enable colored console output
        max_size: Maximum log file size before rotation
        backup_count: Number of rotated log files to keep

    Behavior:
        1. Set the package logger to DEBUG and clear existing handlers
        2. Console handler at the requested level, colored via colorama
        3. Rotating file handler at DEBUG with the detailed format
        4. lyrics_failures.log next to the log file
        5. Silence noisy third-party loggers
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)

    if console_output:
        console_handler = TqdmLoggingHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_LOG_FORMAT, use_colors=colored_output))
        package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=parse_size(max_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        package_logger.addHandler(file_handler)

        failures_handler = LyricsFailedSongHandler(log_path.parent / LYRICS_FAILURES_FILENAME)
        failures_handler.open()
        package_logger.addHandler(failures_handler)

    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())

    for lib in EXTERNAL_LIBS:
        logging.getLogger(lib).setLevel(logging.WARNING)

    package_logger.debug(f"Logging initialized - Level: {level}, Console: {console_output}, File: {log_file}")


def configure_from_settings(settings) -> None:
    """Configure logging from a Settings instance"""
    log_settings = settings.logging
    setup_logging(
        level=log_settings.level,
        log_file=log_settings.file or None,
        console_output=log_settings.console_output,
        colored_output=log_settings.colored_output,
        max_size=log_settings.max_size,
        backup_count=log_settings.backup_count
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Names outside the package hierarchy are nested under 'lyricpane' so
    that setup_logging() handlers apply to them too.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def log_lyrics_failure(
    logger: logging.Logger,
    title: str,
    artist: str,
    reason: str
) -> None:
    """
    Log a song whose lyrics could not be resolved.

    Attaches the extra fields LyricsFailedSongHandler uses to write
    lyrics_failures.log.

    Args:
        logger: The logger to use for the message.
        title: Song title as displayed by the player.
        artist: Artist name as displayed by the player.
        reason: Short failure description, usually "ErrorClass: message".

    Example:
        log_lyrics_failure(logger, "Yesterday", "The Beatles", "NotFoundError: No results found")
    """
    logger.warning(
        f"No lyrics resolved for: {artist} - {title} ({reason})",
        extra={
            "lyrics_failed_title": title,
            "lyrics_failed_artist": artist,
            "lyrics_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close all package log handlers.

    Typically called in a finally block at CLI exit.
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in package_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        package_logger.removeHandler(handler)
