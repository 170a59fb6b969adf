"""Audio helpers for lyricsync."""

from .loader import AudioLibraryLoader
from .manager import PlayerManager
from .player import LocalPlayer, PlaybackState

__all__ = ["AudioLibraryLoader", "LocalPlayer", "PlaybackState", "PlayerManager"]
