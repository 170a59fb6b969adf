"""Command-line entry point for lyricsync."""

from __future__ import annotations

from pathlib import Path

import click

from lyricsync.audio.loader import AudioLibraryLoader
from lyricsync.audio.manager import PlayerManager
from lyricsync.audio.player import LocalPlayer
from lyricsync.config import load_settings, save_settings
from lyricsync.exceptions import ConfigError
from lyricsync.lyrics.store import TranscriptStore
from lyricsync.search.lrclib import LrcLibProvider
from lyricsync.search.remote import RemoteSearch
from lyricsync.sync.controller import SyncController
from lyricsync.ui.app import LyricsApp
from lyricsync.utils.logging import setup_logging


def apply_offset_when_ready(controller: SyncController, offset: float) -> None:
    """Set ``offset`` on the current lyrics, or on the next ones committed."""
    if controller.transcript is not None:
        controller.offset = offset
        return

    def on_transcript_changed(transcript) -> None:
        if transcript is None:
            return
        controller.transcriptChanged.disconnect(on_transcript_changed)
        controller.offset = offset

    controller.transcriptChanged.connect(on_transcript_changed)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "source",
    type=click.Path(path_type=Path, readable=True, exists=True),
)
@click.option(
    "--recursive/--no-recursive",
    default=False,
    help="Recursively discover audio files in subfolders.",
)
@click.option(
    "--headless/--gui",
    default=False,
    help="Print lyric lines to the terminal instead of opening a window.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Settings file to use.",
)
@click.option(
    "--lyrics-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory caching resolved lyrics.",
)
@click.option(
    "--import",
    "import_path",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    default=None,
    help="LRC file with lyrics for the first track. A better-ranked search result can still replace it.",
)
@click.option(
    "--offset",
    type=float,
    default=None,
    help="Lyrics offset in seconds, applied once the first track's lyrics are found.",
)
@click.option(
    "--exclude",
    is_flag=True,
    default=False,
    help="Never search lyrics for these tracks, then exit.",
)
@click.option("--no-search", is_flag=True, default=False, help="Disable remote lyrics search.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
def main(
    source: Path,
    recursive: bool,
    headless: bool,
    config_path: Path | None,
    lyrics_dir: Path | None,
    import_path: Path | None,
    offset: float | None,
    exclude: bool,
    no_search: bool,
    verbose: bool,
) -> None:
    """Play SOURCE (a file or folder) and follow along with its lyrics."""
    setup_logging("DEBUG" if verbose else "INFO", verbose=verbose)

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    tracks = AudioLibraryLoader(source, recursive=recursive).load_tracks()
    if not tracks:
        raise click.ClickException(f"No audio files found in {source}")

    if exclude:
        for track in tracks:
            settings = settings.exclude_track(track.identifier)
            click.echo(f"Excluded {track.title} [{track.identifier}]")
        try:
            save_settings(settings, config_path)
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
        return

    store = TranscriptStore(lyrics_dir or settings.lyrics_directory)
    providers = [] if no_search else [LrcLibProvider(settings.lrclib_url)]
    searcher = RemoteSearch(providers)
    player = LocalPlayer()
    players = PlayerManager([player], preferred_index=settings.preferred_player_index)
    controller = SyncController(players, searcher, store, settings)

    def on_ready() -> None:
        if import_path is not None:
            text = import_path.read_text(encoding="utf-8")
            if not controller.import_transcript(text):
                click.echo(f"Could not import lyrics from {import_path}", err=True)
        if offset is not None:
            apply_offset_when_ready(controller, offset)

    app = LyricsApp(
        tracks=tracks,
        player=player,
        controller=controller,
        headless=headless,
        echo=click.echo,
        on_ready=on_ready,
    )
    raise SystemExit(app.run())


if __name__ == "__main__":
    main()
