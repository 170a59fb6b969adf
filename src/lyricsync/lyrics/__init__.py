"""Transcript parsing, caching and arbitration."""

from .arbitration import should_replace
from .lrc import export_plain_text, format_lrc, parse_lrc
from .store import TranscriptStore

__all__ = [
    "TranscriptStore",
    "export_plain_text",
    "format_lrc",
    "parse_lrc",
    "should_replace",
]
