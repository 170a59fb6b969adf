"""User settings for lyricsync.

Settings live in a JSON file merged over ``DEFAULT_SETTINGS``. The file location
defaults to ``~/.config/lyricsync/settings.json`` and can be overridden with the
``LYRICSYNC_CONFIG`` environment variable; ``LYRICSYNC_LYRICS_DIR`` overrides
the transcript cache directory.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "lyricsync" / "settings.json"
DEFAULT_LYRICS_DIR = Path.home() / ".local" / "share" / "lyricsync" / "lyrics"
DEFAULT_LRCLIB_URL = "https://lrclib.net"
POLL_INTERVAL_MS = 100

DEFAULT_SETTINGS: dict[str, Any] = {
    "preferred_source": "",
    "excluded_track_ids": [],
    "load_sidecar": True,
    "write_translation": True,
    "auto_export": False,
    "launch_quit_with_player": False,
    "preferred_player_index": 0,
    "lyrics_directory": None,
    "filter_patterns": [],
    "lrclib_url": DEFAULT_LRCLIB_URL,
    "poll_interval_ms": POLL_INTERVAL_MS,
}


@dataclass(frozen=True)
class Settings:
    """Read-only view of the user's preferences."""

    preferred_source: str = ""
    excluded_track_ids: frozenset[str] = frozenset()
    load_sidecar: bool = True
    write_translation: bool = True
    auto_export: bool = False
    launch_quit_with_player: bool = False
    preferred_player_index: int = 0
    lyrics_directory: Path = field(default_factory=lambda: DEFAULT_LYRICS_DIR)
    filter_patterns: tuple[str, ...] = ()
    lrclib_url: str = DEFAULT_LRCLIB_URL
    poll_interval_ms: int = POLL_INTERVAL_MS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        merged = {**DEFAULT_SETTINGS, **data}
        try:
            lyrics_directory = merged["lyrics_directory"]
            return cls(
                preferred_source=str(merged["preferred_source"] or ""),
                excluded_track_ids=frozenset(str(i) for i in merged["excluded_track_ids"]),
                load_sidecar=bool(merged["load_sidecar"]),
                write_translation=bool(merged["write_translation"]),
                auto_export=bool(merged["auto_export"]),
                launch_quit_with_player=bool(merged["launch_quit_with_player"]),
                preferred_player_index=int(merged["preferred_player_index"]),
                lyrics_directory=Path(lyrics_directory).expanduser()
                if lyrics_directory
                else DEFAULT_LYRICS_DIR,
                filter_patterns=tuple(str(p) for p in merged["filter_patterns"]),
                lrclib_url=str(merged["lrclib_url"]).rstrip("/"),
                poll_interval_ms=int(merged["poll_interval_ms"]),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid settings value: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferred_source": self.preferred_source,
            "excluded_track_ids": sorted(self.excluded_track_ids),
            "load_sidecar": self.load_sidecar,
            "write_translation": self.write_translation,
            "auto_export": self.auto_export,
            "launch_quit_with_player": self.launch_quit_with_player,
            "preferred_player_index": self.preferred_player_index,
            "lyrics_directory": str(self.lyrics_directory),
            "filter_patterns": list(self.filter_patterns),
            "lrclib_url": self.lrclib_url,
            "poll_interval_ms": self.poll_interval_ms,
        }

    def exclude_track(self, track_id: str) -> "Settings":
        """Return a copy with ``track_id`` added to the never-search set."""
        return dataclasses.replace(
            self, excluded_track_ids=self.excluded_track_ids | {track_id}
        )


def get_config_path() -> Path:
    """Get settings file path from environment or default."""
    config_path = os.getenv("LYRICSYNC_CONFIG")
    if config_path:
        return Path(config_path)
    return DEFAULT_CONFIG_PATH


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from disk, falling back to defaults when no file exists."""
    path = path or get_config_path()
    data: dict[str, Any] = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a JSON object")

    lyrics_dir = os.getenv("LYRICSYNC_LYRICS_DIR")
    if lyrics_dir:
        data["lyrics_directory"] = lyrics_dir
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write ``settings`` to disk."""
    path = path or get_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(settings.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
    except OSError as exc:
        raise ConfigError(f"Cannot write settings file {path}: {exc}") from exc
