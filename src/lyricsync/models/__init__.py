"""Domain models for lyricsync."""

from .lyrics import (
    BEFORE_START,
    SOURCE_IMPORT,
    SOURCE_LOCAL,
    LyricsLine,
    LyricsMetadata,
    Transcript,
)
from .track import Track

__all__ = [
    "BEFORE_START",
    "SOURCE_IMPORT",
    "SOURCE_LOCAL",
    "LyricsLine",
    "LyricsMetadata",
    "Track",
    "Transcript",
]
