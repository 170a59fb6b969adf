"""Track resolution, position synchronization and the owning controller."""

from .controller import SyncController
from .resolver import ResolutionState, TrackResolver
from .synchronizer import PositionSynchronizer

__all__ = ["PositionSynchronizer", "ResolutionState", "SyncController", "TrackResolver"]
