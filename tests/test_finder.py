"""Tests for combo search across replay directories."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from combo_finder.config import Config
from combo_finder.errors import PathNotFoundError, ReplayError
from combo_finder.filters import PlayerInfo
from combo_finder.finder import find_targets, partition, process_replay, target_path
from combo_finder.models import Combo
from combo_finder.replay import MatchInfo
from tests.frames import build_kill


def make_replays(replay_dir: Path, count: int) -> list[Path]:
    """Create empty .slp files."""
    paths = [replay_dir / f"Game_{i:03d}.slp" for i in range(count)]
    for path in paths:
        path.touch()
    return paths


def make_info(path: Path) -> MatchInfo:
    return MatchInfo(
        path=path,
        low=PlayerInfo(port=0, character="fox", name="Phoenix", code="PDL#637"),
        high=PlayerInfo(port=1, character="falco", name="Admiral", code="ADMI#105"),
    )


def test_find_targets_recurses(tmp_replay_dir: Path) -> None:
    """Replays in nested directories are found; other files are ignored."""
    nested = tmp_replay_dir / "2024" / "march"
    nested.mkdir(parents=True)
    (tmp_replay_dir / "a.slp").touch()
    (tmp_replay_dir / "b.slpz").touch()
    (nested / "c.slp").touch()
    (tmp_replay_dir / "notes.txt").touch()
    (tmp_replay_dir / "combos.json").touch()

    targets = find_targets(tmp_replay_dir)

    assert sorted(p.name for p in targets) == ["a.slp", "b.slpz", "c.slp"]


def test_find_targets_single_file(tmp_replay_dir: Path) -> None:
    """A replay file path is its own only target."""
    replay = tmp_replay_dir / "a.slp"
    replay.touch()

    assert find_targets(replay) == [replay]
    assert find_targets(tmp_replay_dir / "missing") == []


def test_find_targets_skips_unreadable_directory(tmp_replay_dir: Path) -> None:
    """A directory that can't be listed doesn't hide its siblings."""
    locked = tmp_replay_dir / "locked"
    locked.mkdir()
    (locked / "hidden.slp").touch()
    (tmp_replay_dir / "a.slp").touch()
    (tmp_replay_dir / "b.slp").touch()
    real_scandir = os.scandir

    def scandir(path: Path) -> object:
        if Path(path) == locked:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    with patch("combo_finder.finder.os.scandir", side_effect=scandir):
        targets = find_targets(tmp_replay_dir)

    assert sorted(p.name for p in targets) == ["a.slp", "b.slp"]


def test_find_targets_skips_entry_that_fails_to_stat(tmp_replay_dir: Path) -> None:
    """An entry whose type can't be read is skipped."""
    (tmp_replay_dir / "a.slp").touch()
    broken = MagicMock()
    broken.path = str(tmp_replay_dir / "broken.slp")
    broken.is_dir.side_effect = OSError("stale file handle")
    real_scandir = os.scandir

    def scandir(path: Path) -> MagicMock:
        with real_scandir(path) as it:
            entries = [*it, broken]
        listing = MagicMock()
        listing.__enter__.return_value = iter(entries)
        return listing

    with patch("combo_finder.finder.os.scandir", side_effect=scandir):
        targets = find_targets(tmp_replay_dir)

    assert [p.name for p in targets] == ["a.slp"]


@pytest.mark.parametrize("count", [8, 9, 15, 16, 17, 103])
def test_partition_is_exhaustive_and_balanced(count: int) -> None:
    """Eight contiguous slices cover every target, sizes differ by at most one."""
    targets = [Path(f"/replays/{i}.slp") for i in range(count)]

    slices = partition(targets)

    assert len(slices) == 8
    assert [p for s in slices for p in s] == targets
    sizes = [len(s) for s in slices]
    assert max(sizes) - min(sizes) <= 1
    # The longer slices come first
    assert sizes == sorted(sizes, reverse=True)


def test_process_replay_finds_kill(tmp_replay_dir: Path) -> None:
    """Kill combos by either player are found."""
    replay = tmp_replay_dir / "game.slp"
    attacker, defender = build_kill(attacker_character="fox", defender_character="falco")

    with (
        patch("combo_finder.finder.read_match_info", return_value=make_info(replay)),
        patch("combo_finder.finder.read_timelines", return_value=(attacker, defender)),
    ):
        combos = process_replay(replay, Config(lead_in=30))

    assert combos == [Combo(path=replay, start=30, end=85)]


def test_process_replay_applies_filters(tmp_replay_dir: Path) -> None:
    """Only orientations that pass the filters are scanned."""
    replay = tmp_replay_dir / "game.slp"
    attacker, defender = build_kill()

    with (
        patch("combo_finder.finder.read_match_info", return_value=make_info(replay)),
        patch("combo_finder.finder.read_timelines", return_value=(attacker, defender)) as timelines,
    ):
        # Falco (high port) as player: only the orientation with no kills runs
        assert process_replay(replay, Config(player_code="ADMI")) == []
        # Nobody matches: frames are never decoded
        timelines.reset_mock()
        assert process_replay(replay, Config(player_name="Nobody")) == []
        timelines.assert_not_called()


def test_process_replay_skips_unreadable(tmp_replay_dir: Path) -> None:
    """A replay that fails to parse yields no combos."""
    replay = tmp_replay_dir / "game.slp"

    with patch("combo_finder.finder.read_match_info", side_effect=ReplayError("bad")):
        assert process_replay(replay, Config()) == []


def test_target_path_missing() -> None:
    """A missing path is an error before any work starts."""
    with pytest.raises(PathNotFoundError):
        target_path(Config(), Path("/nonexistent/replays"))


def test_target_path_skips_corrupt_files(tmp_replay_dir: Path) -> None:
    """Corrupt replays don't abort the run."""
    (tmp_replay_dir / "corrupt.slp").write_bytes(b"not a replay")
    (tmp_replay_dir / "empty.slp").touch()

    assert target_path(Config(), tmp_replay_dir) == []


def test_target_path_reports_progress(tmp_replay_dir: Path) -> None:
    """Total is reported first, then one update per replay."""
    make_replays(tmp_replay_dir, 3)
    calls: list[tuple[int, int]] = []

    with patch("combo_finder.finder.process_replay", return_value=[]):
        target_path(Config(), tmp_replay_dir, lambda done, total: calls.append((done, total)))

    assert calls == [(0, 3), (1, 3), (2, 3), (3, 3)]


def fake_process(path: Path, config: Config, thresholds: object = None) -> list[Combo]:
    return [Combo(path=path, start=0, end=100)]


@pytest.mark.parametrize("count", [5, 8, 21])
def test_target_path_collects_every_replay(tmp_replay_dir: Path, count: int) -> None:
    """Sequential and parallel runs return a combo from every replay."""
    paths = make_replays(tmp_replay_dir, count)
    calls: list[tuple[int, int]] = []

    with patch("combo_finder.finder.process_replay", side_effect=fake_process):
        combos = target_path(
            Config(), tmp_replay_dir, lambda done, total: calls.append((done, total))
        )

    assert {c.path for c in combos} == set(paths)
    assert len(combos) == count
    assert calls[0] == (0, count)
    assert sorted(done for done, _ in calls[1:]) == list(range(1, count + 1))


def test_target_path_is_deterministic(tmp_replay_dir: Path) -> None:
    """Two runs over the same replays find the same set of combos."""
    make_replays(tmp_replay_dir, 12)

    with patch("combo_finder.finder.process_replay", side_effect=fake_process):
        first = target_path(Config(), tmp_replay_dir)
        second = target_path(Config(), tmp_replay_dir)

    assert set(first) == set(second)


def test_target_path_worker_failure_is_fatal(tmp_replay_dir: Path) -> None:
    """An unexpected error in a worker fails the run."""
    make_replays(tmp_replay_dir, 10)

    with patch("combo_finder.finder.process_replay", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            target_path(Config(), tmp_replay_dir)
