from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from conftest import make_transcript

from lyricsync.audio.loader import track_id_for
from lyricsync.cli import apply_offset_when_ready, main


def test_exclude_records_track_ids(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("LYRICSYNC_LYRICS_DIR", raising=False)
    audio = tmp_path / "my_song.mp3"
    audio.write_bytes(b"ID3")
    config = tmp_path / "settings.json"

    result = CliRunner().invoke(main, [str(audio), "--exclude", "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert "Excluded My Song" in result.output
    saved = json.loads(config.read_text(encoding="utf-8"))
    assert saved["excluded_track_ids"] == [track_id_for(audio)]


def test_empty_folder_is_an_error(tmp_path: Path) -> None:
    result = CliRunner().invoke(main, [str(tmp_path), "--config", str(tmp_path / "s.json")])

    assert result.exit_code != 0
    assert "No audio files found" in result.output


def test_broken_settings_file_is_reported(tmp_path: Path) -> None:
    audio = tmp_path / "song.mp3"
    audio.write_bytes(b"ID3")
    config = tmp_path / "settings.json"
    config.write_text("{oops", encoding="utf-8")

    result = CliRunner().invoke(main, [str(audio), "--config", str(config)])

    assert result.exit_code != 0
    assert "Cannot read settings file" in result.output


def test_offset_waits_for_remote_lyrics(make_controller, fake_player, fake_searcher, store, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)

    apply_offset_when_ready(controller, -1.5)
    assert controller.offset == 0.0

    fake_searcher.deliver(make_transcript())
    assert controller.offset == -1.5
    assert store.load("Song", "Artist").offset == -1.5


def test_offset_applies_to_current_lyrics(make_controller, fake_player, fake_searcher, song_track) -> None:
    controller = make_controller()
    fake_player.change_track(song_track)
    fake_searcher.deliver(make_transcript())

    apply_offset_when_ready(controller, 0.75)

    assert controller.offset == 0.75
