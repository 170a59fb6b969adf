"""Line-timed lyric transcripts."""

from __future__ import annotations

import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Iterable

SOURCE_LOCAL = "Local"
SOURCE_IMPORT = "Import"

# Line index reported while the position precedes the first line.
BEFORE_START = -1

_timestamp = attrgetter("timestamp")


@dataclass(slots=True, frozen=True)
class LyricsLine:
    """A single lyric line; ``timestamp`` is in seconds from transcript start."""

    timestamp: float
    content: str
    translation: str | None = None


@dataclass(slots=True)
class LyricsMetadata:
    source: str = ""
    title: str = ""
    artist: str = ""


@dataclass(slots=True, eq=False)
class Transcript:
    """Resolved lyric document for one track.

    ``offset`` is added to the playback position before looking up lines, so a
    negative offset delays the lyrics. ``rank`` orders candidates that share the
    same preference standing.
    """

    lines: list[LyricsLine]
    metadata: LyricsMetadata = field(default_factory=LyricsMetadata)
    offset: float = 0.0
    rank: float = 0.0

    def __post_init__(self) -> None:
        # Stable sort keeps duplicates in their original order.
        self.lines = sorted(self.lines, key=_timestamp)

    @property
    def source(self) -> str:
        return self.metadata.source

    def stamp(self, source: str, title: str, artist: str) -> None:
        """Overwrite the transcript's source and track identity."""
        self.metadata.source = source
        self.metadata.title = title
        self.metadata.artist = artist

    def line_index_at(self, position: float) -> int:
        """Return the index of the line playing at ``position`` seconds.

        Among lines sharing a timestamp the first one wins. Positions before the
        first line yield ``BEFORE_START``.
        """
        index = bisect_right(self.lines, position, key=_timestamp) - 1
        if index < 0:
            return BEFORE_START
        return bisect_left(self.lines, self.lines[index].timestamp, key=_timestamp)

    def filtrate(self, patterns: Iterable[str]) -> int:
        """Drop lines whose content matches any of ``patterns``; return the count removed."""
        compiled = [re.compile(pattern) for pattern in patterns]
        if not compiled:
            return 0
        kept = [
            line
            for line in self.lines
            if not any(regex.search(line.content) for regex in compiled)
        ]
        removed = len(self.lines) - len(kept)
        self.lines = kept
        return removed
