"""Kill combo search across a directory of replays."""

import logging
import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from combo_finder.config import Config
from combo_finder.detector import Thresholds, find_kill_combos
from combo_finder.errors import PathNotFoundError, ReplayError
from combo_finder.filters import passes
from combo_finder.models import Combo
from combo_finder.replay import REPLAY_EXTENSIONS, read_match_info, read_timelines

logger = logging.getLogger(__name__)

WORKER_COUNT = 8

ProgressCallback = Callable[[int, int], None]


def is_replay_file(path: Path) -> bool:
    """Whether a path has a replay file extension."""
    return path.suffix in REPLAY_EXTENSIONS


def find_targets(root: Path) -> list[Path]:
    """Recursively list replay files under ``root``.

    Directories that can't be listed and entries that fail to stat are
    skipped. If ``root`` is itself a replay file it is the only target.
    """
    if root.is_file():
        return [root] if is_replay_file(root) else []

    targets: list[Path] = []
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", root, e)
        return targets

    for entry in entries:
        path = Path(entry.path)
        try:
            if entry.is_dir():
                targets.extend(find_targets(path))
            elif entry.is_file() and is_replay_file(path):
                targets.append(path)
        except OSError as e:
            logger.debug("Skipping unreadable entry %s: %s", path, e)

    return targets


def partition(targets: Sequence[Path], count: int = WORKER_COUNT) -> list[list[Path]]:
    """Split targets into ``count`` contiguous slices.

    Slice sizes differ by at most one; the first ``len(targets) % count``
    slices get the extra file.
    """
    chunk, extra = divmod(len(targets), count)

    slices: list[list[Path]] = []
    start = 0
    for i in range(count):
        size = chunk + 1 if i < extra else chunk
        slices.append(list(targets[start:start + size]))
        start += size

    return slices


def process_replay(
    replay_path: Path,
    config: Config,
    thresholds: Thresholds | None = None,
) -> list[Combo]:
    """Find kill combos in one replay, for either player.

    A replay that can't be read contributes no combos.
    """
    if thresholds is None:
        thresholds = Thresholds.from_strictness(config.strictness)

    try:
        info = read_match_info(replay_path)

        low_passes = passes(config, info.low, info.high)
        high_passes = passes(config, info.high, info.low)
        if not (low_passes or high_passes):
            return []

        low_frames, high_frames = read_timelines(replay_path, info)
    except ReplayError as e:
        logger.debug("Skipping %s: %s", replay_path, e)
        return []

    combos: list[Combo] = []
    if low_passes:
        combos.extend(find_kill_combos(low_frames, high_frames, config, replay_path, thresholds))
    if high_passes:
        combos.extend(find_kill_combos(high_frames, low_frames, config, replay_path, thresholds))

    return combos


class _Progress:
    """Thread-safe completed-file counter feeding a progress callback."""

    def __init__(self, total: int, callback: ProgressCallback | None) -> None:
        self.total = total
        self._callback = callback
        self._completed = 0
        self._lock = threading.Lock()

        if self._callback is not None:
            self._callback(0, total)

    def advance(self) -> None:
        if self._callback is None:
            return
        with self._lock:
            self._completed += 1
            self._callback(self._completed, self.total)


def _process_slice(
    targets: Sequence[Path],
    config: Config,
    thresholds: Thresholds,
    progress: _Progress,
) -> list[Combo]:
    combos: list[Combo] = []
    for target in targets:
        combos.extend(process_replay(target, config, thresholds))
        progress.advance()
    return combos


def target_path(
    config: Config,
    path: Path,
    progress_callback: ProgressCallback | None = None,
) -> list[Combo]:
    """Find kill combos in a replay file or every replay under a directory.

    Fewer than ``WORKER_COUNT`` replays are processed on the calling thread.
    Otherwise the replays are split into ``WORKER_COUNT`` slices, one per
    worker. The order of the returned combos is not guaranteed.

    Args:
        config: Detection settings
        path: Replay file or directory
        progress_callback: Called with (0, total) once the replays are
            listed, then with (completed, total) after each replay

    Returns:
        All combos found

    Raises:
        PathNotFoundError: If ``path`` does not exist
    """
    if not path.exists():
        raise PathNotFoundError(path)

    thresholds = Thresholds.from_strictness(config.strictness)

    targets = find_targets(path)
    logger.info("Found %d replay files under %s", len(targets), path)
    progress = _Progress(len(targets), progress_callback)

    if len(targets) < WORKER_COUNT:
        combos = _process_slice(targets, config, thresholds, progress)
    else:
        slices = partition(targets, WORKER_COUNT)
        with ThreadPoolExecutor(max_workers=WORKER_COUNT) as executor:
            futures = [
                executor.submit(_process_slice, s, config, thresholds, progress)
                for s in slices
            ]
            # A failed worker fails the whole run
            combos = [combo for future in futures for combo in future.result()]

    logger.info("Found %d combos in %d replays", len(combos), len(targets))
    return combos
