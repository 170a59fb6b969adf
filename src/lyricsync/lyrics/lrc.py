"""LRC reading and writing.

Only the parts of the format lyricsync inspects are handled:

- ``[mm:ss.xx]`` timestamps, several per line allowed
- ``[ti:]``, ``[ar:]``, ``[offset:]`` (milliseconds) and ``[source:]`` tags
- translations written as ``[mm:ss.xx][tr]text`` (or ``[tr:lang]``) after the
  line they translate
"""

from __future__ import annotations

import re

from lyricsync.exceptions import TranscriptParseError
from lyricsync.models import LyricsLine, LyricsMetadata, Transcript

_TS_RE = re.compile(
    r"""
    \[                        # opening bracket
    (?P<min>\d+)              # minutes
    :
    (?P<sec>[0-5]?\d)         # seconds
    (?:[.:](?P<frac>\d{1,3}))?  # optional fractional seconds
    \]                        # closing bracket
    """,
    re.VERBOSE,
)
_TAG_RE = re.compile(r"^\[(?P<key>[A-Za-z]+):(?P<value>.*)\]$")
_TRANSLATION_RE = re.compile(r"^\[tr(?::[^\]]*)?\]")
_BLANK_RUNS_RE = re.compile(r"\n{3,}")


def _ts_to_seconds(match: re.Match[str]) -> float:
    minutes = int(match.group("min"))
    seconds = int(match.group("sec"))
    frac = match.group("frac")
    millis = 0
    if frac:
        # "5" -> 500ms, "05" -> 50ms, "005" -> 5ms
        millis = int(frac.ljust(3, "0"))
    return minutes * 60 + seconds + millis / 1000.0


def _seconds_to_ts(seconds: float) -> str:
    """Format seconds as mm:ss.xx (centiseconds)."""
    centis = max(0, int(round(seconds * 100)))
    total_s, cs = divmod(centis, 100)
    m, s = divmod(total_s, 60)
    return f"{m:02d}:{s:02d}.{cs:02d}"


def parse_lrc(text: str) -> Transcript:
    """Parse LRC text into a :class:`Transcript`.

    Raises:
        TranscriptParseError: if the text holds no timed line.
    """
    lines: list[LyricsLine] = []
    translations: dict[float, str] = {}
    tags: dict[str, str] = {}

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue

        stamps: list[float] = []
        pos = 0
        while True:
            match = _TS_RE.match(line, pos)
            if not match:
                break
            stamps.append(_ts_to_seconds(match))
            pos = match.end()

        if not stamps:
            tag = _TAG_RE.match(line)
            if tag:
                tags[tag.group("key").lower()] = tag.group("value").strip()
            continue

        content = line[pos:].strip()
        translation = _TRANSLATION_RE.match(content)
        if translation:
            for stamp in stamps:
                translations[stamp] = content[translation.end():].strip()
            continue

        for stamp in stamps:
            lines.append(LyricsLine(timestamp=stamp, content=content))

    if not lines:
        raise TranscriptParseError("No timed lyric lines found")

    if translations:
        attached: set[float] = set()
        merged = []
        for line in sorted(lines, key=lambda item: item.timestamp):
            if line.timestamp in translations and line.timestamp not in attached:
                attached.add(line.timestamp)
                line = LyricsLine(line.timestamp, line.content, translations[line.timestamp])
            merged.append(line)
        lines = merged

    try:
        offset = int(tags.get("offset") or 0) / 1000.0
    except ValueError:
        offset = 0.0

    metadata = LyricsMetadata(
        source=tags.get("source", ""),
        title=tags.get("ti", ""),
        artist=tags.get("ar", ""),
    )
    return Transcript(lines=lines, metadata=metadata, offset=offset)


def format_lrc(transcript: Transcript) -> str:
    """Render ``transcript`` back to LRC text, tags first."""
    out = [
        f"[ti:{transcript.metadata.title}]",
        f"[ar:{transcript.metadata.artist}]",
    ]
    if transcript.metadata.source:
        out.append(f"[source:{transcript.metadata.source}]")
    offset_ms = int(round(transcript.offset * 1000))
    if offset_ms:
        out.append(f"[offset:{offset_ms}]")

    for line in transcript.lines:
        stamp = _seconds_to_ts(line.timestamp)
        out.append(f"[{stamp}]{line.content}")
        if line.translation:
            out.append(f"[{stamp}][tr]{line.translation}")
    return "\n".join(out) + "\n"


def export_plain_text(transcript: Transcript, *, with_translation: bool = False) -> str:
    """Render plain, untimed lyrics suitable for a player's lyrics field."""
    parts = []
    for line in transcript.lines:
        content = line.content
        if with_translation and line.translation:
            content += "\n" + line.translation
        parts.append(content)
    joined = _BLANK_RUNS_RE.sub("\n\n", "\n".join(parts))
    return joined.strip() + "\n"
