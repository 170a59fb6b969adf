"""Track discovery and metadata loading."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, Iterable

from mutagen import File as MutagenFile
from mutagen import MutagenError

from lyricsync.models import Track
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)

TagReader = Callable[[Path], dict]


def read_tags(audio_path: Path) -> dict[str, object]:
    """Return ``title``, ``artist`` and ``duration`` read with mutagen; missing keys are omitted."""
    try:
        audio = MutagenFile(audio_path, easy=True)
    except (MutagenError, OSError) as exc:
        logger.debug("Cannot read tags from %s: %s", audio_path, exc)
        return {}
    if audio is None:
        return {}

    tags: dict[str, object] = {}
    for key in ("title", "artist"):
        values = audio.get(key) if audio.tags is not None else None
        if values:
            tags[key] = str(values[0])
    if audio.info is not None:
        tags["duration"] = float(getattr(audio.info, "length", 0.0) or 0.0)
    return tags


def track_id_for(audio_path: Path) -> str:
    """Stable opaque identifier for a file, independent of the working directory."""
    digest = hashlib.sha1(audio_path.resolve().as_posix().encode("utf-8")).hexdigest()
    return digest[:16]


class AudioLibraryLoader:
    """Discover audio files under a folder and describe them as tracks."""

    SUPPORTED_EXTENSIONS = (".wav", ".mp3", ".ogg", ".flac", ".opus", ".m4a")

    def __init__(
        self,
        root: Path | str,
        *,
        recursive: bool = False,
        tag_reader: TagReader = read_tags,
    ) -> None:
        self.root = Path(root)
        self.recursive = recursive
        self._tag_reader = tag_reader

    def _iter_audio_files(self) -> Iterable[Path]:
        if not self.root.exists():
            raise FileNotFoundError(f"Audio library folder not found: {self.root}")

        if self.root.is_file():
            if self.root.suffix.lower() in self.SUPPORTED_EXTENSIONS:
                yield self.root
            return

        pattern = "**/*" if self.recursive else "*"
        for candidate in self.root.glob(pattern):
            if candidate.is_file() and candidate.suffix.lower() in self.SUPPORTED_EXTENSIONS:
                yield candidate

    def load_tracks(self) -> list[Track]:
        """Return a sorted list of discovered audio tracks."""
        audio_files = sorted(self._iter_audio_files(), key=lambda path: path.name.lower())
        return [self.describe(audio_path) for audio_path in audio_files]

    def describe(self, audio_path: Path) -> Track:
        tags = self._tag_reader(audio_path)
        title = str(tags.get("title") or audio_path.stem.replace("_", " ").title())
        return Track(
            identifier=track_id_for(audio_path),
            title=title,
            artist=str(tags.get("artist") or ""),
            duration=float(tags.get("duration") or 0.0),
            audio_path=audio_path,
        )
