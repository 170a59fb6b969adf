"""The single owner of the current transcript and line index."""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from lyricsync.audio.manager import PlayerManager
from lyricsync.audio.player import PlaybackState
from lyricsync.config import Settings
from lyricsync.exceptions import (
    LyricsExportError,
    TranscriptParseError,
    TranscriptStoreError,
)
from lyricsync.lyrics.arbitration import should_replace
from lyricsync.lyrics.lrc import export_plain_text, parse_lrc
from lyricsync.lyrics.store import TranscriptStore
from lyricsync.models import SOURCE_IMPORT, SOURCE_LOCAL, Track, Transcript
from lyricsync.search.remote import RemoteSearch
from lyricsync.sync.resolver import ResolutionState, TrackResolver
from lyricsync.sync.synchronizer import PositionSynchronizer
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)


class SyncController(QObject):
    """Wire player events, lyrics resolution and position sync together.

    Every input (player signals, search results, timer ticks, offset edits)
    reaches this object on the thread it lives in, so its state is never
    mutated concurrently. Observers subscribe to its signals.
    """

    transcriptChanged = Signal(object)     # Transcript | None
    lineChanged = Signal(object)           # int | None
    offsetChanged = Signal(float)
    playbackStateChanged = Signal(object)  # PlaybackState
    quitRequested = Signal()

    def __init__(
        self,
        players: PlayerManager,
        searcher: RemoteSearch,
        store: TranscriptStore,
        settings: Settings,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._players = players
        self._searcher = searcher
        self._store = store
        self._settings = settings
        self._track: Track | None = None
        self._transcript: Transcript | None = None

        self._resolver = TrackResolver(store, searcher, settings)
        self._synchronizer = PositionSynchronizer(
            players.player_position, interval_ms=settings.poll_interval_ms, parent=self
        )
        self._synchronizer.lineChanged.connect(self.lineChanged)

        players.runningStateChanged.connect(self.on_running_state_changed)
        players.currentPlayerChanged.connect(self.on_current_player_changed)
        players.playbackStateChanged.connect(self.on_playback_state_changed)
        players.currentTrackChanged.connect(self.on_track_changed)
        searcher.candidateReceived.connect(self.on_candidate_received)
        searcher.searchCompleted.connect(self.on_search_batch_completed)

    # Lifecycle

    def start(self) -> None:
        """Pick up whatever the active player is doing right now."""
        self.on_track_changed(self._players.current_track())
        self.on_playback_state_changed(self._players.playback_state())

    def shutdown(self) -> None:
        self._synchronizer.stop()
        self._searcher.shutdown()

    # State

    @property
    def track(self) -> Track | None:
        return self._track

    @property
    def transcript(self) -> Transcript | None:
        return self._transcript

    @property
    def line_index(self) -> int | None:
        return self._synchronizer.line_index

    @property
    def resolution_state(self) -> ResolutionState:
        return self._resolver.state

    @property
    def synchronizer(self) -> PositionSynchronizer:
        return self._synchronizer

    @property
    def offset(self) -> float:
        return self._transcript.offset if self._transcript else 0.0

    @offset.setter
    def offset(self, value: float) -> None:
        self.on_offset_changed(value)

    def current_line(self):
        """Return the line at the current index, or None."""
        index = self.line_index
        if self._transcript is None or index is None or index < 0:
            return None
        return self._transcript.lines[index]

    # Player events

    def on_running_state_changed(self, running: bool) -> None:
        if not running and self._settings.launch_quit_with_player:
            logger.info("Player quit; quitting too")
            self.quitRequested.emit()

    def on_current_player_changed(self, player) -> None:
        self.on_track_changed(player.current_track() if player else None)

    def on_playback_state_changed(self, state: PlaybackState) -> None:
        self.playbackStateChanged.emit(state)
        self._synchronizer.set_playing(state is PlaybackState.PLAYING)

    def on_track_changed(self, track: Track | None) -> None:
        self._track = track
        self._transcript = None
        self._synchronizer.reset()
        self.transcriptChanged.emit(None)
        self.lineChanged.emit(None)

        transcript = self._resolver.resolve(track)
        if transcript is not None:
            self._commit(transcript, persist=False)

    # Lyrics events

    def on_candidate_received(self, transcript: Transcript) -> None:
        track = self._track
        if track is None or not self._resolver.accepts_candidates:
            return
        if not track.matches(transcript.metadata.title, transcript.metadata.artist):
            logger.debug(
                "Discarding stale candidate for %r by %r",
                transcript.metadata.title,
                transcript.metadata.artist,
            )
            return
        if not should_replace(self._transcript, transcript, self._settings.preferred_source):
            return

        self._resolver.mark_resolved()
        self._commit(transcript, persist=transcript.source != SOURCE_LOCAL)

    def on_search_batch_completed(self, results) -> None:
        logger.debug("Lyrics search finished with %d candidate(s)", len(results))
        if self._settings.auto_export and self._transcript is not None:
            # Automatic export never replaces lyrics already in the player.
            self.export_to_player(overwrite=False)

    def on_offset_changed(self, offset: float) -> None:
        transcript = self._transcript
        if transcript is None or transcript.offset == offset:
            return
        transcript.offset = offset
        self._persist(transcript)
        self.offsetChanged.emit(offset)
        self._synchronizer.refresh()

    def import_transcript(self, raw_text: str) -> bool:
        """Make ``raw_text`` the current transcript; return False if it cannot be used."""
        track = self._track
        if track is None:
            return False
        try:
            transcript = parse_lrc(raw_text)
        except TranscriptParseError as exc:
            logger.warning("Cannot import lyrics: %s", exc)
            return False

        transcript.stamp(SOURCE_IMPORT, track.title, track.artist)
        self._resolver.mark_resolved()
        self._commit(transcript, persist=True)
        return True

    def export_to_player(self, *, overwrite: bool) -> bool:
        """Write the current transcript into the active player's lyrics field."""
        player = self._players.player
        if player is None or not getattr(player, "supports_lyrics_display", False):
            return False
        if self._transcript is None:
            logger.warning("Export requested without current lyrics; skipped")
            return False
        if not overwrite and player.get_displayed_lyrics() is not None:
            return False

        text = export_plain_text(
            self._transcript, with_translation=self._settings.write_translation
        )
        try:
            player.set_displayed_lyrics(text)
        except LyricsExportError as exc:
            logger.warning("%s", exc)
            return False
        return True

    # Internals

    def _commit(self, transcript: Transcript, *, persist: bool) -> None:
        if transcript is self._transcript:
            return
        removed = transcript.filtrate(self._settings.filter_patterns)
        if removed:
            logger.debug("Filtered %d line(s)", removed)
        self._transcript = transcript
        logger.info(
            "Lyrics for %r by %r from %s",
            transcript.metadata.title,
            transcript.metadata.artist,
            transcript.source or "unknown source",
        )
        self.transcriptChanged.emit(transcript)
        self.offsetChanged.emit(transcript.offset)
        if persist:
            self._persist(transcript)
        self._synchronizer.set_transcript(transcript)

    def _persist(self, transcript: Transcript) -> None:
        try:
            self._store.save(transcript)
        except TranscriptStoreError as exc:
            logger.warning("Could not cache lyrics: %s", exc)
