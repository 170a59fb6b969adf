"""Local playback built around pygame, reporting track, state and position."""

from __future__ import annotations

from enum import Enum, auto
from pathlib import Path
from typing import Callable, Iterable

import time

import pygame
from PySide6.QtCore import QObject, QTimer, Signal

from lyricsync.audio.embed import read_embedded_lyrics, write_embedded_lyrics
from lyricsync.models import Track


class PlaybackState(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


class LocalPlayer(QObject):
    """Wrapper around pygame.mixer exposing the player interface lyricsync consumes.

    Position is derived from an injectable monotonic clock so it keeps counting
    between pygame callbacks and freezes while paused.
    """

    runningStateChanged = Signal(bool)
    playbackStateChanged = Signal(object)   # PlaybackState
    currentTrackChanged = Signal(object)    # Track | None
    finished = Signal()

    name = "Local"
    supports_lyrics_display = True

    def __init__(
        self,
        *,
        mixer: pygame.mixer = pygame.mixer,
        num_channels: int = 4,
        time_provider: Callable[[], float] | None = None,
        watch_interval_ms: int = 250,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._mixer = mixer
        if not self._mixer.get_init():
            self._mixer.init()

        self._mixer.set_num_channels(max(self._mixer.get_num_channels(), num_channels))

        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._lengths: dict[str, float] = {}
        self._track: Track | None = None
        self._state = PlaybackState.STOPPED
        self._running = True
        self._current_channel: pygame.mixer.Channel | None = None
        self._start_timestamp: float | None = None
        self._current_offset: float = 0.0
        self._clock: Callable[[], float] = time_provider or time.monotonic

        # Detects the end of a track; only needed while something plays.
        self._watch_timer = QTimer(self)
        self._watch_timer.setInterval(watch_interval_ms)
        self._watch_timer.timeout.connect(self.check_finished)

    # Player interface

    def is_running(self) -> bool:
        return self._running

    def current_track(self) -> Track | None:
        return self._track

    def playback_state(self) -> PlaybackState:
        return self._state

    def player_position(self) -> float | None:
        """Return the playback position in seconds, or None without a track."""
        if self._track is None:
            return None

        position = self._current_offset
        if self._start_timestamp is not None:
            position += max(0.0, self._clock() - self._start_timestamp)

        length = self.get_track_length(self._track.identifier)
        if length:
            position = min(position, length)
        return position

    def get_displayed_lyrics(self) -> str | None:
        if self._track is None or self._track.audio_path is None:
            return None
        return read_embedded_lyrics(self._track.audio_path)

    def set_displayed_lyrics(self, text: str) -> None:
        if self._track is None or self._track.audio_path is None:
            return
        write_embedded_lyrics(self._track.audio_path, text)

    # Playback control

    def preload(self, tracks: Iterable[Track]) -> None:
        """Load sounds into memory for instant playback."""
        for track in tracks:
            if track.identifier in self._sounds or track.audio_path is None:
                continue
            sound = self._load_sound(track.audio_path)
            self._sounds[track.identifier] = sound
            try:
                self._lengths[track.identifier] = float(sound.get_length())
            except (AttributeError, TypeError):
                self._lengths[track.identifier] = 0.0

    def _load_sound(self, audio_path: Path) -> pygame.mixer.Sound:
        return self._mixer.Sound(audio_path.as_posix())

    def play(self, track: Track) -> None:
        """Play ``track`` from the start, replacing whatever was playing."""
        if track.identifier not in self._sounds:
            self.preload([track])

        self._halt_channel()
        previous = self._track
        self._track = track
        if previous != track:
            self.currentTrackChanged.emit(track)

        channel = self._mixer.find_channel()
        if channel is None:
            channel = self._mixer.Channel(0)

        channel.play(self._sounds[track.identifier])
        self._current_channel = channel
        self._current_offset = 0.0
        self._start_timestamp = self._clock()
        self._set_state(PlaybackState.PLAYING)

    def pause(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self._current_offset = self.player_position() or 0.0
        self._start_timestamp = None
        if self._current_channel:
            self._current_channel.pause()
        self._set_state(PlaybackState.PAUSED)

    def resume(self) -> None:
        if self._state is not PlaybackState.PAUSED:
            return
        self._start_timestamp = self._clock()
        if self._current_channel:
            self._current_channel.unpause()
        self._set_state(PlaybackState.PLAYING)

    def stop(self) -> None:
        """Stop playback and forget the current track."""
        self._halt_channel()
        self._current_offset = 0.0
        self._start_timestamp = None
        self._set_state(PlaybackState.STOPPED)
        if self._track is not None:
            self._track = None
            self.currentTrackChanged.emit(None)

    def get_track_length(self, track_id: str) -> float | None:
        """Return the known length of a preloaded track, in seconds."""
        return self._lengths.get(track_id)

    def check_finished(self) -> None:
        """Report the end of the track once its channel falls silent."""
        if self._state is not PlaybackState.PLAYING:
            return
        if self._current_channel and self._current_channel.get_busy():
            return
        self._current_offset = self.player_position() or 0.0
        self._start_timestamp = None
        self._current_channel = None
        self._set_state(PlaybackState.STOPPED)
        self.finished.emit()

    def close(self) -> None:
        """Tear down pygame mixer resources."""
        if not self._running:
            return
        self.stop()
        self._mixer.quit()
        self._running = False
        self.runningStateChanged.emit(False)

    # Internals

    def _halt_channel(self) -> None:
        if self._current_channel and self._current_channel.get_busy():
            self._current_channel.stop()
        self._current_channel = None

    def _set_state(self, state: PlaybackState) -> None:
        if state is PlaybackState.PLAYING:
            self._watch_timer.start()
        else:
            self._watch_timer.stop()
        if state is not self._state:
            self._state = state
            self.playbackStateChanged.emit(state)
