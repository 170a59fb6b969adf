"""Mapping playback position to the current lyric line."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal

from lyricsync.config import POLL_INTERVAL_MS
from lyricsync.models import Transcript


class PositionSynchronizer(QObject):
    """Poll the player position and report line index transitions.

    The timer only runs while audio is playing. ``lineChanged`` fires when the
    index implied by ``position + transcript.offset`` differs from the last one
    reported, never on a tick that leaves it unchanged.
    """

    lineChanged = Signal(object)   # int | None

    def __init__(
        self,
        position_provider: Callable[[], float | None],
        *,
        interval_ms: int = POLL_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._position_provider = position_provider
        self._transcript: Transcript | None = None
        self._line_index: int | None = None
        self._position: float | None = None

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.poll)

    @property
    def transcript(self) -> Transcript | None:
        return self._transcript

    @property
    def line_index(self) -> int | None:
        return self._line_index

    @property
    def position(self) -> float | None:
        return self._position

    def is_running(self) -> bool:
        return self._timer.isActive()

    def reset(self) -> None:
        """Forget the transcript, index and last position without notifying."""
        self._transcript = None
        self._line_index = None
        self._position = None

    def set_transcript(self, transcript: Transcript | None) -> None:
        self._transcript = transcript
        self._line_index = None
        self.poll()

    def poll(self) -> None:
        position = self._position_provider()
        if position is None:
            return
        self.update(position)

    def update(self, position: float) -> bool:
        """Recompute the line index at ``position``; return True when it changed."""
        self._position = position
        if self._transcript is None:
            return False
        index = self._transcript.line_index_at(position + self._transcript.offset)
        if index == self._line_index:
            return False
        self._line_index = index
        self.lineChanged.emit(index)
        return True

    def refresh(self) -> bool:
        """Recompute against the last known position, e.g. after an offset change."""
        if self._position is None:
            return False
        return self.update(self._position)

    def set_playing(self, playing: bool) -> None:
        if playing:
            self._timer.start()
            self.poll()
        else:
            self._timer.stop()

    def stop(self) -> None:
        self._timer.stop()
