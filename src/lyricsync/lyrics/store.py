"""On-disk transcript cache and sidecar lookup."""

from __future__ import annotations

import hashlib
from pathlib import Path

from lyricsync.exceptions import TranscriptParseError, TranscriptStoreError
from lyricsync.lyrics.lrc import format_lrc, parse_lrc
from lyricsync.models import Transcript
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)

LRC_SUFFIX = ".lrc"
# Keeps "<name>~<hash>.lrc" under the common 255-byte file name limit.
MAX_NAME_BYTES = 200


class TranscriptStore:
    """Save and load resolved transcripts keyed by (title, artist).

    Each transcript is one ``"<title> - <artist>.lrc"`` file under ``directory``.
    Callers only ever receive freshly parsed objects.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, title: str, artist: str) -> Path:
        """Cache file for the key; overlong names are cut and suffixed with a hash."""
        name = f"{title} - {artist}".replace("/", "&")
        encoded = name.encode("utf-8")
        if len(encoded) > MAX_NAME_BYTES:
            digest = hashlib.sha1(encoded).hexdigest()[:8]
            name = encoded[:MAX_NAME_BYTES].decode("utf-8", "ignore") + f"~{digest}"
        return self.directory / f"{name}{LRC_SUFFIX}"

    def load(self, title: str, artist: str) -> Transcript | None:
        """Return the cached transcript for ``title``/``artist``, or None on a miss."""
        path = self.path_for(title, artist)
        transcript = _read_transcript(path)
        if transcript is None:
            return None
        # The file name is the key; tags inside may be stale.
        transcript.metadata.title = title
        transcript.metadata.artist = artist
        return transcript

    def save(self, transcript: Transcript) -> Path:
        """Write ``transcript`` to the cache, replacing any previous version."""
        path = self.path_for(transcript.metadata.title, transcript.metadata.artist)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(format_lrc(transcript), encoding="utf-8")
        except OSError as exc:
            raise TranscriptStoreError(f"Cannot write {path}: {exc}") from exc
        logger.debug("Saved transcript to %s", path)
        return path

    def load_sidecar(self, audio_path: Path | str | None) -> Transcript | None:
        """Return the transcript stored beside ``audio_path``, if it parses."""
        if audio_path is None:
            return None
        return _read_transcript(Path(audio_path).with_suffix(LRC_SUFFIX))


def _read_transcript(path: Path) -> Transcript | None:
    try:
        if not path.is_file():
            return None
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", path, exc)
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return None
    try:
        return parse_lrc(text)
    except TranscriptParseError as exc:
        logger.debug("Ignoring malformed transcript %s: %s", path, exc)
        return None
