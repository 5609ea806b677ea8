"""Kill combo detection over a match's frame timelines."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from combo_finder.config import Config
from combo_finder.filters import character_matches
from combo_finder.models import Combo
from combo_finder.states import BroadState, Frame

# Defender states that mean the attacker is still in contact
_HIT_STATES = frozenset({BroadState.HITSTUN, BroadState.GROUND, BroadState.ATTACK})

# Defender states that count toward "the defender is free to act"
_DEFENDER_ACTING_STATES = frozenset({
    BroadState.ATTACK,
    BroadState.GENERIC_INACTIONABLE,
    BroadState.SPECIAL,
})

# Attacker states that reset the grab streak and may count as an attack
_ATTACK_STATES = frozenset({BroadState.ATTACK, BroadState.SPECIAL})


def _round(value: float) -> int:
    """Round half away from zero (values here are never negative)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Thresholds:
    """Detection thresholds derived from a strictness value."""

    max_defender_consecutive_actionable: int
    max_attacker_total_hitstun: int
    max_attacker_consecutive_grabs: int
    min_attacker_attacks: int
    min_defender_damage: float

    @classmethod
    def from_strictness(cls, strictness: float) -> "Thresholds":
        """Interpolate thresholds linearly. 0 is least strict, 1 is most strict."""
        if not 0.0 <= strictness <= 1.0:
            raise ValueError(f"strictness must be between 0 and 1, got {strictness}")

        return cls(
            max_defender_consecutive_actionable=_round(35.0 - 10.0 * strictness),
            max_attacker_total_hitstun=_round(65.0 - 10.0 * strictness),
            max_attacker_consecutive_grabs=_round(6.0 - 4.0 * strictness),
            min_attacker_attacks=_round(3.0 + 6.0 * strictness),
            min_defender_damage=float(_round(20.0 + 40.0 * strictness)),
        )


def _find_last_hit_end(defender: Sequence[Frame]) -> int | None:
    for f in range(len(defender) - 1, -1, -1):
        if defender[f].broad_state in _HIT_STATES:
            return f
    return None


def _find_first_hit(
    attacker: Sequence[Frame],
    defender: Sequence[Frame],
    last_hit_end: int,
    thresholds: Thresholds,
) -> int | None:
    defender_actionable = thresholds.max_defender_consecutive_actionable
    attacker_hitstun = thresholds.max_attacker_total_hitstun
    first_hit: int | None = None

    for f in range(last_hit_end - 1, -1, -1):
        attacker_state = attacker[f].broad_state
        defender_state = defender[f].broad_state

        if defender_state == BroadState.HITSTUN:
            first_hit = f

        if defender_state in _DEFENDER_ACTING_STATES or defender_state.is_actionable:
            defender_actionable -= 1
        else:
            defender_actionable = thresholds.max_defender_consecutive_actionable

        if attacker_state == BroadState.HITSTUN:
            attacker_hitstun -= 1

        if attacker_hitstun == 0 or defender_actionable == 0:
            break

    return first_hit


def combo_start(
    attacker: Sequence[Frame],
    defender: Sequence[Frame],
    thresholds: Thresholds,
) -> int | None:
    """Find where a combo ending on the last frame most plausibly started.

    Scans backward from the end of the window for the defender's last hit,
    then further back for the earliest hitstun frame before the chain breaks
    (the defender acting for too long, or the attacker taking too much
    hitstun). The candidate is then pruned on damage dealt, grab stalling and
    number of attacks.

    Args:
        attacker: Attacker frames up to the kill (same length as defender)
        defender: Defender frames up to the kill
        thresholds: Thresholds for this run

    Returns:
        Index of the first frame of the combo, or None if no combo qualifies
    """
    last_hit_end = _find_last_hit_end(defender)
    if last_hit_end is None:
        # Never hit before dying (self-destruct)
        return None

    first_hit = _find_first_hit(attacker, defender, last_hit_end, thresholds)
    if first_hit is None:
        return None

    # Damage is measured from the frame before the first hit
    baseline = defender[first_hit - 1] if first_hit > 0 else defender[0]
    damage_dealt = defender[-1].percent - baseline.percent
    if damage_dealt < thresholds.min_defender_damage:
        return None

    consecutive_grabs = thresholds.max_attacker_consecutive_grabs
    attacks = 0
    for frame in attacker[first_hit:last_hit_end]:
        if frame.is_grab_start:
            consecutive_grabs -= 1

        if frame.broad_state in _ATTACK_STATES:
            consecutive_grabs = thresholds.max_attacker_consecutive_grabs
            # Count each action once, just after its startup frame
            if frame.anim_frame == 1.0:
                attacks += 1

        if consecutive_grabs == 0:
            return None

    if attacks < thresholds.min_attacker_attacks:
        return None

    return first_hit


def find_kill_combos(
    attacker: Sequence[Frame],
    defender: Sequence[Frame],
    config: Config,
    path: Path,
    thresholds: Thresholds | None = None,
) -> list[Combo]:
    """Find every kill combo by ``attacker`` on ``defender`` in one match.

    Each run of dead frames on the defender is one kill. The combo window is
    padded by the configured lead-in and lead-out and clamped to the match.
    """
    if thresholds is None:
        thresholds = Thresholds.from_strictness(config.strictness)

    frame_count = len(attacker)
    combos: list[Combo] = []

    f = 0
    while f < frame_count:
        if defender[f].broad_state != BroadState.DEAD:
            f += 1
            continue

        # Checked per kill as well as per match: Zelda and Sheik transform
        if character_matches(config.player_character, attacker[f].character) and character_matches(
            config.opponent_character, defender[f].character
        ):
            start = combo_start(attacker[:f], defender[:f], thresholds)
            if start is not None:
                combos.append(
                    Combo(
                        path=path,
                        start=max(0, start - config.lead_in),
                        end=min(frame_count, f + config.lead_out),
                    )
                )

        # Skip the rest of this death
        f += 1
        while f < frame_count and defender[f].broad_state == BroadState.DEAD:
            f += 1

    return combos
