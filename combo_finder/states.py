"""Melee action states and their broad classification."""

from dataclasses import dataclass, field
from enum import Enum


class ActionState:
    """Melee action state constants (subset relevant for combo detection)."""

    DEAD_DOWN = 0  # First of the eleven death states
    DEAD_LAST = 10  # DEAD_UP_FALL_HIT_CAMERA_ICE
    SLEEP = 11  # Off screen between stocks
    REBIRTH = 12  # Respawn platform descending
    REBIRTH_WAIT = 13  # Waiting on respawn platform

    WAIT = 14  # Standing
    RUN_BRAKE = 23
    KNEE_BEND = 24  # Jump squat
    FALL_AERIAL_B = 34
    FALL_SPECIAL = 35  # Helpless fall (after recovery move or air dodge)
    FALL_SPECIAL_B = 37
    DAMAGE_FALL = 38  # Tumble falling
    SQUAT = 39
    LANDING = 42
    LANDING_FALL_SPECIAL = 43

    ATTACK_11 = 44  # First jab
    LANDING_AIR_LW = 74  # Last aerial landing lag state

    DAMAGE_HI_1 = 75  # First hitstun state
    DAMAGE_FLY_ROLL = 91  # Last hitstun state

    GUARD_ON = 178
    GUARD_REFLECT = 182

    DOWN_BOUND_U = 183  # Missed tech, face up
    PASSIVE_CEIL = 204  # Ceiling tech, last knockdown/tech state

    SHIELD_BREAK_FLY = 205
    FURA_FURA = 211  # Dazed

    CATCH = 212  # Standing grab
    CATCH_PULL = 213
    CATCH_DASH = 214  # Dash grab
    CATCH_DASH_PULL = 215
    CATCH_WAIT = 216
    CATCH_ATTACK = 217  # Pummel
    CATCH_CUT = 218
    THROW_F = 219
    THROW_LW = 222

    CAPTURE_PULLED_HI = 223  # First "being held" state
    CAPTURE_LAST = 232

    ESCAPE_F = 233  # Roll forward
    ESCAPE_AIR = 236  # Air dodge
    LANDING_ESCAPE_AIR = 238

    THROWN_F = 239
    THROWN_LW_WOMEN = 243

    CLIFF_CATCH = 252  # Grabbing ledge
    CLIFF_ESCAPE_QUICK = 263  # Last ledge option state

    SPECIAL_START = 341  # Character-specific states begin here


class BroadState(Enum):
    """Coarse category of an action state."""

    DEAD = "dead"
    HITSTUN = "hitstun"
    GROUND = "ground"
    ATTACK = "attack"
    GENERIC_INACTIONABLE = "generic_inactionable"
    SPECIAL = "special"

    # Standard actionable states
    IDLE = "idle"
    MOVEMENT = "movement"
    AIRBORNE = "airborne"
    SHIELD = "shield"
    DODGE = "dodge"
    LEDGE = "ledge"

    @property
    def is_actionable(self) -> bool:
        """Whether a player in this state is free to act."""
        return self in ACTIONABLE_STATES


ACTIONABLE_STATES = frozenset({
    BroadState.IDLE,
    BroadState.MOVEMENT,
    BroadState.AIRBORNE,
    BroadState.SHIELD,
    BroadState.DODGE,
    BroadState.LEDGE,
})

# Grab attempts (standing and dash). A grab is not an attack: it only
# counts toward the consecutive-grab limit.
GRAB_STATES = frozenset({ActionState.CATCH, ActionState.CATCH_DASH})

_GRAB_HOLD_STATES = frozenset({
    ActionState.CATCH,
    ActionState.CATCH_PULL,
    ActionState.CATCH_DASH,
    ActionState.CATCH_DASH_PULL,
    ActionState.CATCH_WAIT,
    ActionState.CATCH_CUT,
})

# Ordered (first, last, category) ranges, checked after the special cases
_RANGES: list[tuple[int, int, BroadState]] = [
    (ActionState.DEAD_DOWN, ActionState.DEAD_LAST, BroadState.DEAD),
    (ActionState.SLEEP, ActionState.REBIRTH_WAIT, BroadState.GENERIC_INACTIONABLE),
    (ActionState.WAIT, ActionState.RUN_BRAKE, BroadState.MOVEMENT),
    (ActionState.KNEE_BEND, ActionState.FALL_AERIAL_B, BroadState.AIRBORNE),
    (ActionState.FALL_SPECIAL, ActionState.FALL_SPECIAL_B, BroadState.GENERIC_INACTIONABLE),
    (ActionState.DAMAGE_FALL, ActionState.DAMAGE_FALL, BroadState.HITSTUN),
    (ActionState.SQUAT, ActionState.LANDING, BroadState.IDLE),
    (ActionState.LANDING_FALL_SPECIAL, ActionState.LANDING_FALL_SPECIAL, BroadState.GENERIC_INACTIONABLE),
    (ActionState.ATTACK_11, ActionState.LANDING_AIR_LW, BroadState.ATTACK),
    (ActionState.DAMAGE_HI_1, ActionState.DAMAGE_FLY_ROLL, BroadState.HITSTUN),
    (ActionState.GUARD_ON, ActionState.GUARD_REFLECT, BroadState.SHIELD),
    (ActionState.DOWN_BOUND_U, ActionState.PASSIVE_CEIL, BroadState.GROUND),
    (ActionState.SHIELD_BREAK_FLY, ActionState.FURA_FURA, BroadState.GENERIC_INACTIONABLE),
    (ActionState.CATCH_ATTACK, ActionState.CATCH_ATTACK, BroadState.ATTACK),
    (ActionState.THROW_F, ActionState.THROW_LW, BroadState.ATTACK),
    (ActionState.CAPTURE_PULLED_HI, ActionState.CAPTURE_LAST, BroadState.HITSTUN),
    (ActionState.ESCAPE_F, ActionState.LANDING_ESCAPE_AIR, BroadState.DODGE),
    (ActionState.THROWN_F, ActionState.THROWN_LW_WOMEN, BroadState.HITSTUN),
    (ActionState.CLIFF_CATCH, ActionState.CLIFF_ESCAPE_QUICK, BroadState.LEDGE),
]


def classify(state: int) -> BroadState:
    """Map a raw action state id to its broad state."""
    if state == ActionState.WAIT:
        return BroadState.IDLE
    if state in _GRAB_HOLD_STATES:
        return BroadState.GENERIC_INACTIONABLE
    if state >= ActionState.SPECIAL_START:
        return BroadState.SPECIAL

    for first, last, category in _RANGES:
        if first <= state <= last:
            return category

    return BroadState.GENERIC_INACTIONABLE


@dataclass(frozen=True)
class Frame:
    """One player's state on a single frame.

    ``broad_state`` is derived from ``state`` at construction so the
    detection loops never reclassify.
    """

    character: str
    state: int
    anim_frame: float
    percent: float
    broad_state: BroadState = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "broad_state", classify(self.state))

    @property
    def is_grab_start(self) -> bool:
        """First frame of a grab attempt."""
        return self.state in GRAB_STATES and self.anim_frame == 0.0
