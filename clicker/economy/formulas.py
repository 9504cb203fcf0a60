"""Progression math decoupled from the runtime objects."""
from __future__ import annotations

import math

GOAL_BASE = 50
GOAL_GROWTH = 1.5
BOOST_BASE_THRESHOLD = 10.0
BOOST_MIN_THRESHOLD = 5.0
BOOST_THRESHOLD_STEP = 1.0
RARE_BASE_CHANCE = 0.05
RARE_TIERS = (
    (0.002, 50),
    (0.01, 10),
    (1.0, 3),
)


def stage_goal(stage: int) -> int:
    stage = max(1, int(stage))
    # Epsilon absorbs float error so exact products floor to themselves.
    return math.floor(GOAL_BASE * GOAL_GROWTH ** (stage - 1) + 1e-9)


def upgrade_effect(base_effect: float, level_multiplier: float, level: int, active: bool = True) -> float:
    if not active or level <= 0:
        return 0.0
    return base_effect * level_multiplier ** level


def activation_threshold(level: int) -> float:
    level = max(1, int(level))
    return max(BOOST_MIN_THRESHOLD, BOOST_BASE_THRESHOLD - (level - 1) * BOOST_THRESHOLD_STEP)


def rare_chance(rainbow_effect: float, lucky_tail_effect: float = 0.0) -> float:
    """Chance that one click also drops a rare item.

    The upgrade bonus is scaled by the lucky tail when that is held.
    """

    bonus = max(0.0, rainbow_effect)
    if lucky_tail_effect > 0.0:
        bonus *= lucky_tail_effect
    return min(1.0, RARE_BASE_CHANCE + bonus)


def rare_value(roll: float) -> int:
    """Units a rare item is worth for a tier roll in ``[0, 1)``."""

    for threshold, value in RARE_TIERS:
        if roll < threshold:
            return value
    return RARE_TIERS[-1][1]


def split_at_goal(current: int, units: int, goal: int) -> tuple[int, int]:
    """Split ``units`` into (to_plate, to_overflow) given ``current`` on the plate."""

    units = max(0, int(units))
    room = max(0, goal - current)
    to_plate = min(units, room)
    return to_plate, units - to_plate


__all__ = [
    "stage_goal",
    "upgrade_effect",
    "activation_threshold",
    "split_at_goal",
    "rare_chance",
    "rare_value",
    "RARE_BASE_CHANCE",
    "GOAL_BASE",
    "GOAL_GROWTH",
]
