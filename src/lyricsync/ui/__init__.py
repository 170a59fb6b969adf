"""User interface for lyricsync."""
