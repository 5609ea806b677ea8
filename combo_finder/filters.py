"""Player and character filters for matches."""

from dataclasses import dataclass
from typing import Callable

from combo_finder.config import Config


def normalize_connect_code(code: str) -> str:
    """Normalize connect code to uppercase with hash separator.

    Accepts both dash (-) and hash (#) separators, returns hash format.
    Examples: "PDL-637" -> "PDL#637", "pdl#637" -> "PDL#637"
    """
    return code.upper().replace("-", "#")


def normalize_character(name: str) -> str:
    """Normalize a character name for comparison.

    Examples: "Captain Falcon" -> "captainfalcon", "ICE_CLIMBERS" -> "iceclimbers"
    """
    return name.lower().replace("_", "").replace(" ", "").replace("-", "")


@dataclass(frozen=True)
class PlayerInfo:
    """Identity of one player in a match."""

    port: int
    character: str
    name: str
    code: str


@dataclass(frozen=True)
class Constraint:
    """An optional filter value with a comparison.

    An absent constraint (``value is None``) always passes.
    """

    value: str | None
    compare: Callable[[str, str], bool]

    def passes(self, actual: str) -> bool:
        if self.value is None:
            return True
        return self.compare(self.value, actual)

    @classmethod
    def equals(cls, value: str | None) -> "Constraint":
        """Character constraint: normalized equality."""
        return cls(
            None if value is None else normalize_character(value),
            lambda expected, actual: expected == normalize_character(actual),
        )

    @classmethod
    def contains(cls, value: str | None) -> "Constraint":
        """Display name constraint: substring containment."""
        return cls(value, lambda expected, actual: expected in actual)

    @classmethod
    def contains_code(cls, value: str | None) -> "Constraint":
        """Connect code constraint: substring of the normalized code."""
        return cls(
            None if value is None else normalize_connect_code(value),
            lambda expected, actual: expected in normalize_connect_code(actual),
        )


def side_passes(
    info: PlayerInfo,
    character: str | None,
    name: str | None,
    code: str | None,
) -> bool:
    """Check one side of a match against its configured constraints."""
    return (
        Constraint.equals(character).passes(info.character)
        and Constraint.contains(name).passes(info.name)
        and Constraint.contains_code(code).passes(info.code)
    )


def passes(config: Config, player: PlayerInfo, opponent: PlayerInfo) -> bool:
    """Whether a match passes the filters with ``player`` attacking ``opponent``."""
    return side_passes(
        player, config.player_character, config.player_name, config.player_code
    ) and side_passes(
        opponent, config.opponent_character, config.opponent_name, config.opponent_code
    )


def character_matches(expected: str | None, actual: str) -> bool:
    """Per-frame character check (Zelda and Sheik can transform mid-match)."""
    return Constraint.equals(expected).passes(actual)
