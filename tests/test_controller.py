from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_transcript

from lyricsync.audio.player import PlaybackState
from lyricsync.models import SOURCE_IMPORT, SOURCE_LOCAL, Track
from lyricsync.sync.resolver import ResolutionState


@pytest.fixture
def events():
    def attach(controller) -> list[tuple[str, object]]:
        log: list[tuple[str, object]] = []
        controller.transcriptChanged.connect(lambda t: log.append(("transcript", t)))
        controller.lineChanged.connect(lambda i: log.append(("line", i)))
        return log

    return attach


def test_track_change_clears_before_cache_hit(make_controller, events, fake_player, store, song_track) -> None:
    cached = make_transcript()
    store.save(cached)
    store.saved.clear()
    controller = make_controller(load_sidecar=False)
    log = events(controller)

    fake_player.change_track(song_track)

    assert log[:2] == [("transcript", None), ("line", None)]
    assert log[2][0] == "transcript" and log[2][1] is controller.transcript
    assert log[3] == ("line", 0)
    assert controller.resolution_state is ResolutionState.RESOLVED
    assert store.saved == []


def test_excluded_track_is_left_without_lyrics(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller(excluded_track_ids=frozenset({song_track.identifier}))

    fake_player.change_track(song_track)
    fake_searcher.deliver(make_transcript())

    assert controller.transcript is None
    assert controller.line_index is None
    assert controller.resolution_state is ResolutionState.IDLE
    assert fake_searcher.queries == []


def test_sidecar_is_committed_without_caching(make_controller, fake_player, store, song_track) -> None:
    song_track.audio_path.with_suffix(".lrc").write_text("[00:00.00]Beside", encoding="utf-8")
    controller = make_controller()

    fake_player.change_track(song_track)

    assert controller.transcript is not None
    assert controller.transcript.source == SOURCE_LOCAL
    assert store.saved == []


def test_remote_candidate_is_accepted_and_cached(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)
    assert fake_searcher.queries == [("Song", "Artist", 200.0)]
    assert controller.resolution_state is ResolutionState.RESOLVING

    candidate = make_transcript(rank=0.5)
    fake_searcher.deliver(candidate)

    assert controller.transcript is candidate
    assert controller.resolution_state is ResolutionState.RESOLVED
    assert store.saved == [candidate]
    assert store.load("Song", "Artist") is not None


def test_stale_candidate_is_discarded(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)

    fake_searcher.deliver(make_transcript(title="Previous Song"))

    assert controller.transcript is None
    assert controller.resolution_state is ResolutionState.RESOLVING
    assert store.saved == []


def test_preferred_source_keeps_lower_ranked_transcript(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller(preferred_source="ProviderX")
    fake_player.change_track(song_track)
    preferred = make_transcript("ProviderX", rank=5)
    other = make_transcript("ProviderY", rank=9)

    fake_searcher.deliver(preferred, other)

    assert controller.transcript is preferred


def test_higher_rank_replaces_current(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)
    first = make_transcript("ProviderY", rank=0.3)
    better = make_transcript("ProviderZ", rank=0.8)

    fake_searcher.deliver(first, better)

    assert controller.transcript is better
    assert store.saved == [first, better]


def test_same_transcript_twice_is_idempotent(make_controller, events, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)
    log = events(controller)
    candidate = make_transcript()

    fake_searcher.deliver(candidate)
    fake_searcher.deliver(candidate)

    assert [event for event in log if event[0] == "transcript"] == [("transcript", candidate)]
    assert store.saved == [candidate]


def test_line_changes_follow_position_ticks(make_controller, events, fake_player, store, song_track) -> None:
    store.save(make_transcript())
    controller = make_controller(load_sidecar=False)
    log = events(controller)
    fake_player.change_track(song_track)
    log.clear()

    for tick in (5.0, 12.0, 12.0, 25.0):
        fake_player.position = tick
        controller.synchronizer.poll()

    assert log == [("line", 1), ("line", 2)]


def test_offset_change_shifts_lookup_and_is_persisted(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    offsets: list[float] = []
    controller.offsetChanged.connect(offsets.append)
    fake_player.change_track(song_track)
    fake_searcher.deliver(make_transcript())
    fake_player.position = 11.0
    controller.synchronizer.poll()
    assert controller.line_index == 1

    controller.offset = -2.0

    assert controller.line_index == 0
    assert offsets[-1] == -2.0
    assert store.load("Song", "Artist").offset == -2.0


def test_offset_change_without_transcript_is_ignored(make_controller, store) -> None:
    controller = make_controller()

    controller.offset = 3.0

    assert controller.offset == 0.0
    assert store.saved == []


def test_import_replaces_current_lyrics(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller(preferred_source="ProviderX")
    fake_player.change_track(song_track)
    fake_searcher.deliver(make_transcript("ProviderX", rank=10))

    assert controller.import_transcript("[ti:Whatever]\n[00:02.00]Imported") is True

    transcript = controller.transcript
    assert transcript.source == SOURCE_IMPORT
    assert (transcript.metadata.title, transcript.metadata.artist) == ("Song", "Artist")
    assert store.load("Song", "Artist").lines[0].content == "Imported"


def test_import_failure_leaves_state_untouched(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller()
    assert controller.import_transcript("[00:01.00]No track yet") is False

    fake_player.change_track(song_track)
    current = make_transcript()
    fake_searcher.deliver(current)

    assert controller.import_transcript("not lyrics at all") is False
    assert controller.transcript is current


def test_search_completion_exports_when_player_has_no_lyrics(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller(auto_export=True)
    fake_player.change_track(song_track)

    fake_searcher.deliver(make_transcript())

    assert fake_player.displayed == "A\nB\nC\n"
    assert controller.export_to_player(overwrite=False) is False
    assert controller.export_to_player(overwrite=True) is True
    assert len(fake_player.displayed_writes) == 2


def test_auto_export_never_overwrites_existing_player_lyrics(make_controller, fake_player, fake_searcher, song_track) -> None:
    make_controller(auto_export=True)
    fake_player.displayed = "already there"
    fake_player.change_track(song_track)

    fake_searcher.deliver(make_transcript())

    assert fake_player.displayed_writes == []


def test_export_without_lyrics_is_skipped(make_controller, fake_player) -> None:
    controller = make_controller()

    assert controller.export_to_player(overwrite=True) is False
    assert fake_player.displayed_writes == []


def test_polling_follows_playback_state(make_controller, fake_player) -> None:
    controller = make_controller()
    states: list = []
    controller.playbackStateChanged.connect(states.append)

    fake_player.set_state(PlaybackState.PLAYING)
    assert controller.synchronizer.is_running() is True

    fake_player.set_state(PlaybackState.PAUSED)
    assert controller.synchronizer.is_running() is False
    assert states == [PlaybackState.PLAYING, PlaybackState.PAUSED]


@pytest.mark.parametrize("quit_with_player", [True, False])
def test_player_quit_requests_application_quit(make_controller, fake_player, song_track, quit_with_player) -> None:
    controller = make_controller(launch_quit_with_player=quit_with_player)
    requests: list[bool] = []
    controller.quitRequested.connect(lambda: requests.append(True))
    fake_player.change_track(song_track)

    fake_player.quit()

    assert requests == ([True] if quit_with_player else [])
    assert controller.track is None


def test_cache_write_failure_does_not_block_commit(make_controller, fake_player, fake_searcher, store, song_track, tmp_path: Path) -> None:
    controller = make_controller()
    blocker = tmp_path / "blocked"
    blocker.write_text("", encoding="utf-8")
    store.directory = blocker / "lyrics"
    fake_player.change_track(song_track)

    candidate = make_transcript()
    fake_searcher.deliver(candidate)

    assert controller.transcript is candidate


def test_filter_patterns_apply_on_commit(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller(filter_patterns=("^B$",))
    fake_player.change_track(song_track)

    fake_searcher.deliver(make_transcript())

    assert [line.content for line in controller.transcript.lines] == ["A", "C"]


def test_empty_metadata_is_still_searched(make_controller, fake_player, fake_searcher) -> None:
    controller = make_controller()
    fake_player.change_track(Track(identifier="anon"))

    fake_searcher.deliver(make_transcript(title="", artist=""))

    assert fake_searcher.queries == [("", "", 0.0)]
    assert controller.transcript is not None


def test_long_title_cache_miss_still_searches(make_controller, fake_player, fake_searcher, store) -> None:
    store.save(make_transcript())
    controller = make_controller()
    title = "歌" * 100

    fake_player.change_track(Track(identifier="long", title=title, artist="Artist"))
    candidate = make_transcript(title=title)
    fake_searcher.deliver(candidate)

    assert fake_searcher.queries == [(title, "Artist", 0.0)]
    assert controller.transcript is candidate
    assert store.load(title, "Artist") is not None
