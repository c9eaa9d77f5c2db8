"""
Command-line interface for lyricpane

The desktop shell invokes these commands (or the equivalent Python API) to
fill its lyrics sidebar. Every network operation runs on a fresh event loop
via asyncio.run(); one ContentCache instance is created per invocation and
shared by all services.

Commands:
    lyricpane lyrics TITLE ARTIST           Resolve and print lyrics
    lyricpane search TITLE ARTIST [--json]  List search candidates
    lyricpane artist-info ARTIST            Artist summary
    lyricpane song-context TITLE ARTIST     Song analysis
    lyricpane prefetch FILE                 Warm the cache for a queue
    lyricpane cache stats|clear             Inspect or reset the cache
    lyricpane config show                   Show effective configuration
    lyricpane doctor                        Check credentials and paths

Global Options:
    --config PATH    Explicit config.yaml
    --app-dir PATH   Application data directory (env LYRICPANE_APP_DIR)
    --verbose / -v   Debug output on the console
"""

import asyncio
import functools
import json
import sys

import click
from tqdm import tqdm

from lyricpane import __version__
from lyricpane.ai.commentary import CommentaryService
from lyricpane.ai.completion import CompletionClient
from lyricpane.core.cache import SECTIONS, ContentCache
from lyricpane.core.config import Settings
from lyricpane.core.exceptions import LyricPaneError
from lyricpane.core.logger import configure_from_settings, get_logger, shutdown_logging
from lyricpane.lyrics.models import SongQuery
from lyricpane.lyrics.processor import LyricsProcessor


logger = get_logger(__name__)

QUEUE_LINE_SEPARATOR = " - "


def handle_error(func):
    """
    Decorator mapping pipeline errors to a red message and exit code 1

    KeyboardInterrupt exits with 130. Other exceptions are bugs and are
    left to propagate with their traceback.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except LyricPaneError as e:
            logger.debug(f"Command failed: {e} {e.details}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def parse_queue_line(line: str) -> SongQuery | None:
    """
    Parse one "artist - title" line of a prefetch file

    Blank lines and lines starting with '#' are skipped. The first " - "
    splits artist from title, so titles may contain the separator.

    Returns:
        SongQuery, or None for lines that carry no song
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    artist, sep, title = stripped.partition(QUEUE_LINE_SEPARATOR)
    if not sep or not artist.strip() or not title.strip():
        raise click.BadParameter(f"Expected 'artist - title', got: {stripped}")

    return SongQuery(title=title.strip(), artist=artist.strip())


async def _resolve_lyrics(settings: Settings, cache: ContentCache, title: str, artist: str) -> str:
    async with LyricsProcessor.from_settings(settings, cache) as processor:
        return await processor.resolve_lyrics(title, artist)


async def _search(settings: Settings, cache: ContentCache, title: str, artist: str):
    async with LyricsProcessor.from_settings(settings, cache) as processor:
        return await processor.search_candidates(title, artist)


async def _prefetch(settings: Settings, cache: ContentCache, queries: list[SongQuery]):
    async with LyricsProcessor.from_settings(settings, cache) as processor:
        with tqdm(total=len(queries), desc="Prefetching lyrics", unit="song") as bar:
            results = await processor.resolve_many(queries, on_done=lambda _: bar.update(1))
        return results, processor.get_processing_stats()


async def _artist_info(settings: Settings, cache: ContentCache, artist: str) -> str:
    service = CommentaryService(cache, CompletionClient(settings))
    try:
        return await service.artist_info(artist)
    finally:
        await service.close()


async def _song_context(settings: Settings, cache: ContentCache, title: str, artist: str) -> str:
    service = CommentaryService(cache, CompletionClient(settings))
    try:
        return await service.song_context(title, artist)
    finally:
        await service.close()


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.option('--app-dir', type=click.Path(file_okay=False), envvar='LYRICPANE_APP_DIR',
              help='Application data directory')
@click.pass_context
def cli(ctx, version, verbose, config, app_dir):
    """
    lyricpane - lyrics and song context for the player sidebar

    Finds lyrics on Genius, cleans them up and caches them next to
    AI-written artist and song notes.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"lyricpane v{__version__}")
        return

    try:
        settings = Settings(config, app_dir)
    except LyricPaneError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)

    if verbose:
        settings.logging.level = "DEBUG"

    configure_from_settings(settings)
    ctx.call_on_close(shutdown_logging)

    ctx.obj['settings'] = settings
    ctx.obj['cache'] = ContentCache(settings.get_cache_path())

    if settings.loaded_from:
        logger.debug(f"Loaded config: {settings.loaded_from}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('title')
@click.argument('artist')
@click.pass_context
@handle_error
def lyrics(ctx, title, artist):
    """Resolve and print lyrics for TITLE by ARTIST"""
    text = asyncio.run(_resolve_lyrics(ctx.obj['settings'], ctx.obj['cache'], title, artist))
    click.echo(text)


@cli.command()
@click.argument('title')
@click.argument('artist')
@click.option('--json', 'as_json', is_flag=True, help='Print candidates as JSON')
@click.pass_context
@handle_error
def search(ctx, title, artist, as_json):
    """
    List Genius candidates for TITLE by ARTIST

    Shows the ranked hits without filtering, for manual selection when the
    automatic match picked the wrong page.
    """
    candidates = asyncio.run(_search(ctx.obj['settings'], ctx.obj['cache'], title, artist))

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in candidates], ensure_ascii=False, indent=2))
        return

    if not candidates:
        click.echo("No candidates found")
        return

    for i, candidate in enumerate(candidates, 1):
        kind = candidate.result_type or "?"
        click.echo(f"{i:2}. {candidate.artist_name} - {candidate.title} [{kind}]")
        click.echo(f"    {candidate.url}")


@cli.command('artist-info')
@click.argument('artist')
@click.pass_context
@handle_error
def artist_info(ctx, artist):
    """Print a short summary of ARTIST"""
    click.echo(asyncio.run(_artist_info(ctx.obj['settings'], ctx.obj['cache'], artist)))


@cli.command('song-context')
@click.argument('title')
@click.argument('artist')
@click.pass_context
@handle_error
def song_context(ctx, title, artist):
    """Print a short analysis of TITLE by ARTIST"""
    click.echo(asyncio.run(_song_context(ctx.obj['settings'], ctx.obj['cache'], title, artist)))


@cli.command()
@click.argument('queue_file', type=click.File('r', encoding='utf-8'))
@click.pass_context
@handle_error
def prefetch(ctx, queue_file):
    """
    Resolve lyrics for every song in QUEUE_FILE

    One "artist - title" per line; blank lines and '#' comments are
    ignored. Songs are resolved concurrently and failures are listed at
    the end (and in lyrics_failures.log when file logging is enabled).
    """
    queries = [q for q in (parse_queue_line(line) for line in queue_file) if q is not None]

    if not queries:
        click.echo("Nothing to prefetch")
        return

    results, stats = asyncio.run(_prefetch(ctx.obj['settings'], ctx.obj['cache'], queries))
    failed = [r for r in results if not r.success]

    click.echo("\nPrefetch Results:")
    click.echo(f"   Songs: {len(results)}")
    click.echo(f"   Resolved: {len(results) - len(failed)}")
    click.echo(f"   From cache: {stats['cache_hits']}")
    click.echo(f"   Failed: {len(failed)}")

    for result in failed:
        click.echo(click.style(f"   • {result.query}: {result.error}", fg='yellow'))


@cli.group()
def cache():
    """Content cache management"""
    pass


@cache.command()
@click.pass_context
def stats(ctx):
    """Show cache location and entry counts"""
    summary = ctx.obj['cache'].stats()

    click.echo(f"Cache file: {summary['cache_file']}")
    click.echo(f"   Lyrics: {summary['lyrics']}")
    click.echo(f"   Artist info: {summary['artist_info']}")
    click.echo(f"   Song context: {summary['song_context']}")
    if summary['invalid_lyrics']:
        click.echo(click.style(
            f"   Invalid lyrics entries (re-fetched on next play): {summary['invalid_lyrics']}",
            fg='yellow'
        ))


@cache.command()
@click.option('--section', type=click.Choice(list(SECTIONS)), help='Only clear this section')
@click.pass_context
def clear(ctx, section):
    """Remove cached entries"""
    removed = ctx.obj['cache'].clear(section)
    click.echo(f"Removed {removed} entries")


@cli.group()
def config():
    """Configuration inspection"""
    pass


@config.command()
@click.pass_context
def show(ctx):
    """Show the effective configuration (secrets hidden)"""
    settings = ctx.obj['settings']

    click.echo(f"Config file: {settings.loaded_from or 'defaults'}")
    click.echo(f"App directory: {settings.app_dir}")
    for section, values in settings.to_dict().items():
        click.echo(f"\n{section.capitalize()}:")
        for key, value in values.items():
            click.echo(f"   {key}: {value}")


@cli.command()
@click.pass_context
def doctor(ctx):
    """
    Check credentials and paths

    Exits with code 1 if the Genius token is missing, since lyrics cannot
    be resolved without it. A missing completion key only disables AI
    cleaning and commentary.
    """
    settings = ctx.obj['settings']
    issues = []

    genius = settings.genius_credentials()
    if genius.is_configured():
        click.echo("Genius token: OK")
    else:
        click.echo(click.style("Genius token: missing", fg='red'))
        issues.append(genius.hint)

    completion = settings.completion_credentials()
    if completion.is_configured():
        click.echo("Completion API key: OK")
    else:
        click.echo(click.style("Completion API key: missing (heuristic cleaning only)", fg='yellow'))

    click.echo(f"Cache file: {settings.get_cache_path()}")

    if issues:
        click.echo("\nIssues:")
        for issue in issues:
            click.echo(f"   • {issue}")
        sys.exit(1)

    click.echo("\nAll checks passed")


if __name__ == '__main__':
    cli()
