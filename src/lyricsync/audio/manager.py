"""Selecting the active player among several and relaying its events."""

from __future__ import annotations

from typing import Sequence

from PySide6.QtCore import QObject, Signal

from lyricsync.audio.player import PlaybackState
from lyricsync.models import Track


class PlayerManager(QObject):
    """Expose one active player out of ``players``.

    The player at ``preferred_index`` wins while it is running; otherwise the
    first running player is used. Events of inactive players are not relayed.
    """

    currentPlayerChanged = Signal(object)   # player | None
    runningStateChanged = Signal(bool)
    playbackStateChanged = Signal(object)   # PlaybackState
    currentTrackChanged = Signal(object)    # Track | None

    def __init__(
        self, players: Sequence[QObject], *, preferred_index: int = 0, parent: QObject | None = None
    ) -> None:
        super().__init__(parent)
        self.players = list(players)
        self.preferred_index = preferred_index
        for player in self.players:
            player.runningStateChanged.connect(
                lambda running, p=player: self._on_running_state_changed(p, running)
            )
            player.playbackStateChanged.connect(
                lambda state, p=player: self._relay(p, self.playbackStateChanged, state)
            )
            player.currentTrackChanged.connect(
                lambda track, p=player: self._relay(p, self.currentTrackChanged, track)
            )
        self._player = self._select()

    @property
    def player(self):
        return self._player

    def current_track(self) -> Track | None:
        return self._player.current_track() if self._player else None

    def playback_state(self) -> PlaybackState:
        return self._player.playback_state() if self._player else PlaybackState.STOPPED

    def player_position(self) -> float | None:
        return self._player.player_position() if self._player else None

    def _select(self):
        if 0 <= self.preferred_index < len(self.players):
            preferred = self.players[self.preferred_index]
            if preferred.is_running():
                return preferred
        for player in self.players:
            if player.is_running():
                return player
        return None

    def _on_running_state_changed(self, player, running: bool) -> None:
        if player is self._player:
            self.runningStateChanged.emit(running)
        selected = self._select()
        if selected is not self._player:
            self._player = selected
            self.currentPlayerChanged.emit(selected)

    def _relay(self, player, signal, value) -> None:
        if player is self._player:
            signal.emit(value)
