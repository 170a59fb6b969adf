"""Multi-provider lyrics search running off the owner thread."""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from PySide6.QtCore import QObject, QThread, Signal

from lyricsync.exceptions import ProviderError
from lyricsync.models import Transcript
from lyricsync.utils.logging import get_logger

logger = get_logger(__name__)


class LyricsProvider(Protocol):
    name: str

    def search(self, title: str, artist: str, duration: float) -> list[Transcript]:
        ...


def run_search(
    providers: Sequence[LyricsProvider],
    title: str,
    artist: str,
    duration: float,
    on_candidate: Callable[[Transcript], None],
) -> list[Transcript]:
    """Query every provider in turn, reporting each candidate as it is found.

    A failing provider is logged and skipped so the others still answer.
    """
    results: list[Transcript] = []
    for provider in providers:
        try:
            candidates = provider.search(title, artist, duration)
        except ProviderError as exc:
            logger.warning("%s: %s", provider.name, exc)
            continue
        for candidate in candidates:
            results.append(candidate)
            on_candidate(candidate)
    return results


class SearchWorker(QThread):
    candidateFound = Signal(object)    # Transcript
    completed = Signal(object)         # list[Transcript]

    def __init__(
        self,
        providers: Sequence[LyricsProvider],
        title: str,
        artist: str,
        duration: float,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._providers = list(providers)
        self.title = title
        self.artist = artist
        self.duration = duration

    def run(self) -> None:
        results = run_search(
            self._providers, self.title, self.artist, self.duration, self.candidateFound.emit
        )
        self.completed.emit(results)


class RemoteSearch(QObject):
    """Dispatch searches to a worker thread and relay results to the owner.

    Signals are emitted from the worker thread and reach receivers living in
    the owner's thread through queued connections, so slots never run
    concurrently with the owner's own state changes.
    """

    candidateReceived = Signal(object)   # Transcript
    searchCompleted = Signal(object)     # list[Transcript]

    def __init__(self, providers: Sequence[LyricsProvider], parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.providers = list(providers)
        self._workers: set[SearchWorker] = set()

    def search(self, title: str, artist: str, duration: float) -> None:
        if not self.providers:
            self.searchCompleted.emit([])
            return
        logger.debug("Searching lyrics for %r by %r (%.0fs)", title, artist, duration)
        worker = SearchWorker(self.providers, title, artist, duration)
        worker.candidateFound.connect(self.candidateReceived)
        worker.completed.connect(self.searchCompleted)
        worker.finished.connect(self._forget)
        self._workers.add(worker)
        worker.start()

    def _forget(self) -> None:
        # Queued onto this object's thread.
        worker = self.sender()
        if worker in self._workers:
            self._workers.discard(worker)
            worker.deleteLater()

    def pending(self) -> int:
        """Return the number of searches still running."""
        return len(self._workers)

    def shutdown(self) -> None:
        """Wait for in-flight searches; their late results are still delivered."""
        for worker in list(self._workers):
            worker.wait()
