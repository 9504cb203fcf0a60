"""Stage phases and the rules attached to them."""
from __future__ import annotations

from enum import Enum


class Phase(Enum):
    MENU = "menu"
    COUNTING_DOWN = "counting_down"
    PLAYING = "playing"
    GOAL_REACHED = "goal_reached"
    TIME_UP = "time_up"
    RESOLVING = "resolving"
    UPGRADE_SELECTION = "upgrade_selection"
    STAGE_CHOICE = "stage_choice"
    SUSPENDED = "suspended"
    COMPLETE = "complete"
    GAME_OVER = "game_over"

    @property
    def in_play(self) -> bool:
        """Clicks count and the stage clock runs."""

        return self in IN_PLAY_PHASES

    @property
    def at_boundary(self) -> bool:
        """Safe point for saving and loading."""

        return self in BOUNDARY_PHASES


IN_PLAY_PHASES = frozenset({Phase.PLAYING, Phase.GOAL_REACHED})

BOUNDARY_PHASES = frozenset(
    {
        Phase.MENU,
        Phase.STAGE_CHOICE,
        Phase.GAME_OVER,
        Phase.COMPLETE,
        Phase.SUSPENDED,
    }
)


__all__ = ["Phase", "IN_PLAY_PHASES", "BOUNDARY_PHASES"]
