"""Custom exceptions for lyricsync."""


class LyricsyncError(Exception):
    """Base exception for lyricsync."""
    pass


class TranscriptParseError(LyricsyncError):
    """Text could not be read as a line-timed transcript."""
    pass


class TranscriptStoreError(LyricsyncError):
    """Error reading or writing the transcript cache."""
    pass


class ProviderError(LyricsyncError):
    """A remote lyrics provider failed to answer."""
    pass


class ConfigError(LyricsyncError):
    """Invalid or unreadable settings."""
    pass


class LyricsExportError(LyricsyncError):
    """Error writing lyrics into a player or its media file."""
    pass
