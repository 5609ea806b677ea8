"""Replay reading for .slp files."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from slippi import Game

from combo_finder.errors import ReplayError
from combo_finder.filters import PlayerInfo, normalize_character
from combo_finder.states import Frame

logger = logging.getLogger(__name__)

REPLAY_EXTENSIONS = frozenset({".slp", ".slpz"})

# In-game character names that differ from their character select name
_CHARACTER_ALIASES: dict[str, str] = {
    "popo": "iceclimbers",
    "nana": "iceclimbers",
}


@dataclass(frozen=True)
class MatchInfo:
    """The two players of a 1v1 replay, ordered by port."""

    path: Path
    low: PlayerInfo
    high: PlayerInfo


def get_character_name(char: Enum | int) -> str:
    """Get normalized character name from a character enum (CSS or in-game)."""
    if not isinstance(char, Enum):
        return str(char)
    name = normalize_character(char.name)
    return _CHARACTER_ALIASES.get(name, name)


def _load_game(replay_path: Path, skip_frames: bool) -> Game:
    if replay_path.suffix == ".slpz":
        raise ReplayError(f"Compressed replays are not supported: {replay_path}")

    try:
        return Game(replay_path, skip_frames=skip_frames)
    except Exception as e:
        # py-slippi raises a variety of errors on truncated or corrupt files
        raise ReplayError(f"Could not parse {replay_path}: {e}") from e


def _occupied_ports(game: Game, replay_path: Path) -> list[tuple[int, Any]]:
    """(port, start player) for each occupied port, lowest port first."""
    if game.start is None:
        raise ReplayError(f"Replay has no start data: {replay_path}")

    players = [(i, p) for i, p in enumerate(game.start.players) if p is not None]
    if len(players) != 2:
        raise ReplayError(f"Not a 1v1 replay ({len(players)} players): {replay_path}")

    return players


def _player_info(game: Game, port: int, player: Any) -> PlayerInfo:
    name = ""
    code = ""
    if game.metadata is not None and game.metadata.players is not None:
        meta_player = game.metadata.players[port]
        if meta_player is not None and meta_player.netplay is not None:
            name = meta_player.netplay.name or ""
            code = meta_player.netplay.code or ""

    return PlayerInfo(
        port=port,
        character=get_character_name(player.character),
        name=name,
        code=code,
    )


def read_match_info(replay_path: Path) -> MatchInfo:
    """Read the players of a replay without decoding its frames.

    Raises:
        ReplayError: If the file cannot be parsed or is not a 1v1 match
    """
    game = _load_game(replay_path, skip_frames=True)
    (low_port, low_player), (high_port, high_player) = _occupied_ports(game, replay_path)

    return MatchInfo(
        path=replay_path,
        low=_player_info(game, low_port, low_player),
        high=_player_info(game, high_port, high_player),
    )


def read_timelines(
    replay_path: Path,
    info: MatchInfo,
) -> tuple[list[Frame], list[Frame]]:
    """Decode the frame timelines of both players.

    Index ``i`` of each timeline is the replay's frame ``i - 123``.

    Returns:
        (low port frames, high port frames), always the same length

    Raises:
        ReplayError: If the file cannot be parsed or a frame is missing data
    """
    game = _load_game(replay_path, skip_frames=False)

    timelines: tuple[list[Frame], list[Frame]] = ([], [])
    # (state, frames spent in it) per port, for replays without state_age
    runs: list[tuple[int, int]] = [(-1, 0), (-1, 0)]

    for frame in game.frames:
        for i, port in enumerate((info.low.port, info.high.port)):
            port_data = frame.ports[port]
            post = port_data.leader.post if port_data is not None else None
            if post is None:
                raise ReplayError(
                    f"Missing data for port {port} on frame {frame.index}: {replay_path}"
                )

            state = int(post.state)
            prev_state, age = runs[i]
            age = age + 1 if state == prev_state else 0
            runs[i] = (state, age)

            timelines[i].append(
                Frame(
                    character=get_character_name(post.character),
                    state=state,
                    anim_frame=post.state_age if post.state_age is not None else float(age),
                    percent=float(post.damage),
                )
            )

    logger.debug("Decoded %d frames from %s", len(timelines[0]), replay_path)
    return timelines
