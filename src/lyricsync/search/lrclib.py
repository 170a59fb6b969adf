"""LRCLIB lyrics provider."""

from __future__ import annotations

import re
import unicodedata
from difflib import SequenceMatcher
from typing import Any

import requests

from lyricsync.config import DEFAULT_LRCLIB_URL
from lyricsync.exceptions import ProviderError, TranscriptParseError
from lyricsync.lyrics.lrc import parse_lrc
from lyricsync.models import Transcript
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)

LRCLIB_SOURCE = "LRCLIB"
USER_AGENT = "lyricsync/0.1"
# Seconds of duration mismatch at which the duration score bottoms out.
DURATION_TOLERANCE = 10.0


def prepare_input(value: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    normalized = unicodedata.normalize("NFKD", value or "")
    prepared = "".join(c for c in normalized if not unicodedata.combining(c))
    prepared = re.sub(r"[`~!@#$%^&*()_|+\-=?;:\",.<>{}\[\]\\\/]", " ", prepared)
    prepared = re.sub(r"[’']", "", prepared)
    return re.sub(r"\s+", " ", prepared.lower()).strip()


def _similarity(a: str, b: str) -> float:
    a, b = prepare_input(a), prepare_input(b)
    if not a and not b:
        return 1.0
    return SequenceMatcher(None, a, b).ratio()


def rank_candidate(
    item: dict[str, Any], title: str, artist: str, duration: float
) -> float:
    """Score an LRCLIB record against the query, between 0.0 and 1.0."""
    title_score = _similarity(item.get("trackName") or "", title)
    artist_score = _similarity(item.get("artistName") or "", artist)

    item_duration = float(item.get("duration") or 0.0)
    if duration > 0 and item_duration > 0:
        duration_score = max(0.0, 1.0 - abs(item_duration - duration) / DURATION_TOLERANCE)
    else:
        duration_score = 0.5

    return round(0.4 * title_score + 0.3 * artist_score + 0.3 * duration_score, 4)


class LrcLibProvider:
    """Query ``/api/search`` and turn synced results into candidate transcripts."""

    name = LRCLIB_SOURCE

    def __init__(
        self,
        base_url: str = DEFAULT_LRCLIB_URL,
        *,
        session: requests.Session | None = None,
        limit: int = 5,
        timeout: float = 15.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self.limit = limit
        self.timeout = timeout

    def _query(self, title: str, artist: str, duration: float) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"track_name": title}
        if artist:
            params["artist_name"] = artist
        if duration and duration > 0:
            params["duration"] = int(round(duration))
        try:
            response = self.session.get(
                f"{self.base_url}/api/search", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError(f"LRCLIB search failed: {exc}") from exc
        return data if isinstance(data, list) else []

    def search(self, title: str, artist: str, duration: float) -> list[Transcript]:
        """Return synced candidates stamped with the query's title and artist."""
        candidates: list[Transcript] = []
        for item in self._query(title, artist, duration)[: self.limit]:
            if not isinstance(item, dict):
                continue
            synced = item.get("syncedLyrics")
            if not isinstance(synced, str) or not synced.strip() or item.get("instrumental"):
                continue
            try:
                transcript = parse_lrc(synced)
                rank = rank_candidate(item, title, artist, duration)
            except (TranscriptParseError, TypeError, ValueError) as exc:
                logger.debug("Skipping LRCLIB record %s: %s", item.get("id"), exc)
                continue
            transcript.stamp(LRCLIB_SOURCE, title, artist)
            transcript.rank = rank
            candidates.append(transcript)
        return candidates
