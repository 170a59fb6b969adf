"""Choosing between a current transcript and a newly arrived candidate."""

from __future__ import annotations

from lyricsync.models import Transcript


def should_replace(
    current: Transcript | None, candidate: Transcript, preferred_source: str
) -> bool:
    """Return True when ``candidate`` should become the current transcript.

    A candidate from the preferred source always beats one that is not, and a
    non-preferred candidate never beats a preferred one, whatever their ranks.
    Within the same preference standing the candidate must rank strictly
    higher; ties keep the current transcript.
    """
    if current is None:
        return True

    current_is_preferred = current.metadata.source == preferred_source
    candidate_is_preferred = candidate.metadata.source == preferred_source
    if current_is_preferred != candidate_is_preferred:
        return candidate_is_preferred

    return candidate.rank > current.rank
