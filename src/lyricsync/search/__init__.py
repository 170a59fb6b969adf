"""Remote lyrics search."""

from .lrclib import LrcLibProvider
from .remote import RemoteSearch, run_search

__all__ = ["LrcLibProvider", "RemoteSearch", "run_search"]
