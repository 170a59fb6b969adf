"""Data structures representing the currently playing track."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class Track:
    """Immutable snapshot of a track as reported by a player.

    Players lacking metadata report empty strings for ``title`` and ``artist``
    and ``0.0`` for ``duration``; those values are still valid lookup keys.
    """

    identifier: str
    title: str = ""
    artist: str = ""
    duration: float = 0.0
    audio_path: Path | None = None

    def has_source_file(self) -> bool:
        """Return True when the track is backed by a local file."""
        return self.audio_path is not None

    def matches(self, title: str, artist: str) -> bool:
        """Return True when ``title``/``artist`` identify this track."""
        return self.title == title and self.artist == artist
