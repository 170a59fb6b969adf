# audio/embed.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import FLAC
from mutagen.id3 import ID3, USLT, ID3NoHeaderError
from mutagen.mp4 import MP4
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from lyricsync.exceptions import LyricsExportError

# Plain (untimed) lyrics field per container; this is what players display.
VORBIS_PLAIN_KEY = "UNSYNCEDLYRICS"
MP4_PLAIN_KEY = "\xa9lyr"


def read_embedded_lyrics(path: Path | str) -> Optional[str]:
    """Return the plain lyrics embedded in ``path``, or None if absent or unreadable."""
    path = Path(path)
    ext = path.suffix.lower()
    try:
        if ext == ".mp3":
            try:
                tags = ID3(path)
            except ID3NoHeaderError:
                return None
            frames = tags.getall("USLT")
            return _norm(str(frames[0].text)) if frames else None

        if ext in (".m4a", ".mp4"):
            values = (MP4(path).tags or {}).get(MP4_PLAIN_KEY)
            return _norm(values[0]) if values else None

        audio_cls = _VORBIS_CLASSES.get(ext)
        if audio_cls is not None:
            values = audio_cls(path).get(VORBIS_PLAIN_KEY)
            return _norm(values[0]) if values else None

        audio = MutagenFile(path, easy=True)
        if audio is None:
            return None
        values = audio.get("lyrics")
        return _norm(values[0]) if values else None
    except (MutagenError, OSError):
        return None


def write_embedded_lyrics(path: Path | str, text: str) -> None:
    """
    Embed plain lyrics depending on file extension:
      - .mp3            -> ID3 USLT
      - .flac           -> Vorbis comment UNSYNCEDLYRICS
      - .ogg/.oga/.opus -> Vorbis comment UNSYNCEDLYRICS
      - .m4a/.mp4       -> MP4 ©lyr
    Empty text removes the field.
    """
    path = Path(path)
    try:
        _embed(path, _norm(text))
    except (MutagenError, OSError) as exc:
        raise LyricsExportError(f"Cannot embed lyrics into {path}: {exc}") from exc


def _embed(path: Path, plain: Optional[str]) -> None:
    ext = path.suffix.lower()
    if ext == ".mp3":
        _embed_mp3(path, plain)
        return
    if ext in (".m4a", ".mp4"):
        _embed_mp4(path, plain)
        return
    audio_cls = _VORBIS_CLASSES.get(ext)
    if audio_cls is not None:
        _embed_vorbis_comment(audio_cls, path, plain)
        return

    # Fallback: a text-only lyrics field if mutagen supports it.
    audio = MutagenFile(path, easy=True)
    if audio is None:
        return
    if plain:
        audio["lyrics"] = [plain]
    elif "lyrics" in audio:
        del audio["lyrics"]
    audio.save()


def _norm(s: Optional[str]) -> Optional[str]:
    """Normalize optional strings (strip + convert empty to None)."""
    if not s:
        return None
    s = s.strip()
    return s or None


def _embed_vorbis_comment(audio_cls, path: Path, plain: Optional[str]) -> None:
    audio = audio_cls(path)
    if plain:
        audio[VORBIS_PLAIN_KEY] = [plain]
    elif VORBIS_PLAIN_KEY in audio:
        del audio[VORBIS_PLAIN_KEY]
    audio.save()


def _embed_mp3(path: Path, plain: Optional[str]) -> None:
    try:
        tags = ID3(path)
    except ID3NoHeaderError:
        tags = ID3()

    tags.delall("USLT")
    if plain:
        # ID3 requires a 3-letter language code; "und" is undefined.
        tags.add(USLT(encoding=3, lang="und", desc="", text=plain))
    tags.save(path)


def _embed_mp4(path: Path, plain: Optional[str]) -> None:
    audio = MP4(path)
    if plain:
        audio[MP4_PLAIN_KEY] = [plain]
    elif MP4_PLAIN_KEY in audio:
        del audio[MP4_PLAIN_KEY]
    audio.save()


_VORBIS_CLASSES = {
    ".flac": FLAC,
    ".ogg": OggVorbis,
    ".oga": OggVorbis,
    ".opus": OggOpus,
}
