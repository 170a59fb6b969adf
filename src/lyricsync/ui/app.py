"""PySide6 application wiring for lyricsync."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, Sequence

from PySide6.QtCore import QCoreApplication, QObject, Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QVBoxLayout, QWidget

from lyricsync.audio.player import LocalPlayer, PlaybackState
from lyricsync.models import BEFORE_START, Track
from lyricsync.sync.controller import SyncController


def describe_line(controller: SyncController) -> str:
    """Text shown for the controller's current line, translation included."""
    line = controller.current_line()
    if line is None:
        return ""
    if line.translation:
        return f"{line.content}\n{line.translation}"
    return line.content


class ConsoleLyricsPrinter(QObject):
    """Headless observer that echoes each new line."""

    def __init__(
        self, controller: SyncController, echo: Callable[[str], None], parent: QObject | None = None
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._echo = echo
        controller.transcriptChanged.connect(self._on_transcript_changed)
        controller.lineChanged.connect(self._on_line_changed)

    def _on_transcript_changed(self, transcript) -> None:
        track = self._controller.track
        if transcript is not None and track is not None:
            self._echo(f"♪ {track.title} - {track.artist} [{transcript.source}]")

    def _on_line_changed(self, index) -> None:
        if index is None or index == BEFORE_START:
            return
        text = describe_line(self._controller)
        if text:
            self._echo(text)


class LyricsWindow(QMainWindow):
    """Minimal window showing the track and its current line; Space pauses."""

    def __init__(self, controller: SyncController, player: LocalPlayer) -> None:
        super().__init__()
        self._controller = controller
        self._player = player
        self.setWindowTitle("lyricsync")
        self.resize(520, 160)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(24, 18, 24, 18)
        layout.setSpacing(10)

        self.track_label = QLabel("", central)
        self.track_label.setObjectName("trackLabel")
        self.track_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.track_label)

        self.line_label = QLabel("", central)
        self.line_label.setObjectName("lineLabel")
        self.line_label.setAlignment(Qt.AlignCenter)
        self.line_label.setWordWrap(True)
        self.line_label.setStyleSheet("font-size: 20px; font-weight: 600;")
        layout.addWidget(self.line_label, 1)

        self.setCentralWidget(central)

        controller.transcriptChanged.connect(self._refresh_track)
        controller.lineChanged.connect(self._refresh_line)
        controller.playbackStateChanged.connect(self._on_playback_state_changed)

        self.pause_shortcut = QShortcut(QKeySequence(Qt.Key_Space), self)
        self.pause_shortcut.activated.connect(self.toggle_pause)

    def toggle_pause(self) -> None:
        if self._player.playback_state() is PlaybackState.PLAYING:
            self._player.pause()
        else:
            self._player.resume()

    def _refresh_track(self, transcript) -> None:
        track = self._controller.track
        if track is None:
            self.track_label.setText("")
        elif transcript is None:
            self.track_label.setText(f"{track.title} - {track.artist}")
        else:
            self.track_label.setText(f"{track.title} - {track.artist} [{transcript.source}]")

    def _refresh_line(self, _index) -> None:
        self.line_label.setText(describe_line(self._controller))

    def _on_playback_state_changed(self, state) -> None:
        self.line_label.setEnabled(state is PlaybackState.PLAYING)


@dataclass
class LyricsApp:
    """Bootstrap the Qt event loop, play ``tracks`` in order and show lyrics."""

    tracks: Sequence[Track]
    player: LocalPlayer
    controller: SyncController
    headless: bool = False
    echo: Callable[[str], None] = print
    on_ready: Callable[[], None] | None = None
    _queue: list[Track] = field(default_factory=list, init=False)
    _observer: QObject | None = field(default=None, init=False)

    def run(self) -> int:
        app = QCoreApplication.instance()
        created_app = False
        if app is None:
            app = QCoreApplication(sys.argv) if self.headless else QApplication(sys.argv)
            created_app = True

        app.aboutToQuit.connect(self.controller.shutdown)
        app.aboutToQuit.connect(self.player.close)
        self.controller.quitRequested.connect(app.quit)

        if self.headless:
            self._observer = ConsoleLyricsPrinter(self.controller, self.echo)
        else:
            window = LyricsWindow(self.controller, self.player)
            window.show()
            self._observer = window

        self._queue = list(self.tracks)
        self.player.finished.connect(self._play_next)
        self.controller.start()
        self._play_next()
        if self.on_ready is not None:
            self.on_ready()

        try:
            return app.exec()
        finally:
            if created_app:
                # Ensure the mixer is closed if the loop ends without aboutToQuit.
                self.player.close()

    def _play_next(self) -> None:
        if not self._queue:
            QCoreApplication.quit()
            return
        self.player.play(self._queue.pop(0))
