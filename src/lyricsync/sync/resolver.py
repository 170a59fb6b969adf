"""Deciding where the lyrics for a newly detected track come from."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, Protocol

from lyricsync.config import Settings
from lyricsync.lyrics.store import TranscriptStore
from lyricsync.models import SOURCE_LOCAL, Track, Transcript
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)


class ResolutionState(Enum):
    IDLE = auto()
    RESOLVING = auto()
    RESOLVED = auto()


class Searcher(Protocol):
    def search(self, title: str, artist: str, duration: float) -> None:
        ...


class TrackResolver:
    """Walk sidecar, cache and remote search for a track, in that order.

    ``resolve`` returns a transcript when one of the local strategies succeeds;
    otherwise it starts a remote search and leaves the machine ``RESOLVING``
    until the owner reports an accepted candidate through ``mark_resolved``.
    No timeout applies to the remote search.
    """

    def __init__(self, store: TranscriptStore, searcher: Searcher, settings: Settings) -> None:
        self._store = store
        self._searcher = searcher
        self._settings = settings
        self.state = ResolutionState.IDLE
        self._strategies: tuple[Callable[[Track], Transcript | None], ...] = (
            self._from_sidecar,
            self._from_cache,
        )

    @property
    def accepts_candidates(self) -> bool:
        return self.state is not ResolutionState.IDLE

    def resolve(self, track: Track | None) -> Transcript | None:
        self.state = ResolutionState.IDLE
        if track is None:
            return None

        if track.identifier in self._settings.excluded_track_ids:
            logger.debug("Track %s is excluded from lyrics search", track.identifier)
            return None

        for strategy in self._strategies:
            transcript = strategy(track)
            if transcript is not None:
                self.state = ResolutionState.RESOLVED
                return transcript

        self.state = ResolutionState.RESOLVING
        self._searcher.search(track.title, track.artist, track.duration)
        return None

    def mark_resolved(self) -> None:
        if self.state is ResolutionState.RESOLVING:
            self.state = ResolutionState.RESOLVED

    def _from_sidecar(self, track: Track) -> Transcript | None:
        if not self._settings.load_sidecar or not track.has_source_file():
            return None
        transcript = self._store.load_sidecar(track.audio_path)
        if transcript is None:
            return None
        transcript.stamp(SOURCE_LOCAL, track.title, track.artist)
        logger.debug("Using sidecar lyrics for %s", track.audio_path)
        return transcript

    def _from_cache(self, track: Track) -> Transcript | None:
        transcript = self._store.load(track.title, track.artist)
        if transcript is not None:
            logger.debug("Using cached lyrics for %r by %r", track.title, track.artist)
        return transcript
