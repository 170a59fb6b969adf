"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication, QObject, Signal

from lyricsync.audio.manager import PlayerManager
from lyricsync.audio.player import PlaybackState
from lyricsync.config import Settings
from lyricsync.lyrics.store import TranscriptStore
from lyricsync.models import LyricsLine, LyricsMetadata, Track, Transcript


@pytest.fixture(scope="session", autouse=True)
def qapp() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def make_transcript(
    source: str = "LRCLIB",
    *,
    title: str = "Song",
    artist: str = "Artist",
    rank: float = 0.0,
    offset: float = 0.0,
    lines: list[tuple[float, str]] | None = None,
) -> Transcript:
    if lines is None:
        lines = [(0.0, "A"), (10.0, "B"), (20.0, "C")]
    return Transcript(
        lines=[LyricsLine(timestamp=t, content=text) for t, text in lines],
        metadata=LyricsMetadata(source=source, title=title, artist=artist),
        offset=offset,
        rank=rank,
    )


class FakePlayer(QObject):
    runningStateChanged = Signal(bool)
    playbackStateChanged = Signal(object)
    currentTrackChanged = Signal(object)

    supports_lyrics_display = True

    def __init__(self) -> None:
        super().__init__()
        self.running = True
        self.track: Track | None = None
        self.state = PlaybackState.STOPPED
        self.position: float | None = None
        self.displayed: str | None = None
        self.displayed_writes: list[str] = []

    def is_running(self) -> bool:
        return self.running

    def current_track(self) -> Track | None:
        return self.track

    def playback_state(self) -> PlaybackState:
        return self.state

    def player_position(self) -> float | None:
        return self.position

    def get_displayed_lyrics(self) -> str | None:
        return self.displayed

    def set_displayed_lyrics(self, text: str) -> None:
        self.displayed = text
        self.displayed_writes.append(text)

    # Test helpers

    def change_track(self, track: Track | None) -> None:
        self.track = track
        self.position = 0.0 if track else None
        self.currentTrackChanged.emit(track)

    def set_state(self, state: PlaybackState) -> None:
        self.state = state
        self.playbackStateChanged.emit(state)

    def quit(self) -> None:
        self.running = False
        self.runningStateChanged.emit(False)


class FakeSearcher(QObject):
    candidateReceived = Signal(object)
    searchCompleted = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        self.queries: list[tuple[str, str, float]] = []

    def search(self, title: str, artist: str, duration: float) -> None:
        self.queries.append((title, artist, duration))

    def shutdown(self) -> None:
        pass

    def deliver(self, *candidates: Transcript) -> None:
        for candidate in candidates:
            self.candidateReceived.emit(candidate)
        self.searchCompleted.emit(list(candidates))


class RecordingStore(TranscriptStore):
    def __init__(self, directory: Path) -> None:
        super().__init__(directory)
        self.saved: list[Transcript] = []

    def save(self, transcript: Transcript) -> Path:
        self.saved.append(transcript)
        return super().save(transcript)


@pytest.fixture
def song_track(tmp_path: Path) -> Track:
    audio = tmp_path / "music" / "song.mp3"
    audio.parent.mkdir()
    audio.write_bytes(b"ID3")
    return Track(identifier="track-1", title="Song", artist="Artist", duration=200.0, audio_path=audio)


@pytest.fixture
def fake_player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def fake_searcher() -> FakeSearcher:
    return FakeSearcher()


@pytest.fixture
def store(tmp_path: Path) -> RecordingStore:
    return RecordingStore(tmp_path / "cache")


@pytest.fixture
def make_controller(fake_player, fake_searcher, store):
    from lyricsync.sync.controller import SyncController

    created = []

    def factory(**overrides) -> SyncController:
        settings = Settings(lyrics_directory=store.directory, **overrides)
        players = PlayerManager([fake_player])
        controller = SyncController(players, fake_searcher, store, settings)
        created.append((players, controller))
        return controller

    yield factory
    for _players, controller in created:
        controller.synchronizer.stop()
