"""Headless stage scene: forwards input to the controller, shows state in the caption."""
from __future__ import annotations

from typing import Callable, Dict, Optional

import pygame

from clicker.engine.input import InputMapper
from clicker.engine.scene import Scene
from clicker.stage.controller import StageController
from clicker.stage.phases import Phase


class StageScene(Scene):
    """Drives one :class:`StageController` from mapped input actions."""

    def on_enter(self, **kwargs) -> None:
        self.controller: StageController = kwargs["controller"]
        self.input: InputMapper = kwargs.get("input") or InputMapper()
        self._caption: Optional[str] = None
        self._handlers: Dict[str, Callable[[], object]] = {
            "click": self.controller.on_manual_click,
            "choose_1": lambda: self._choose(0),
            "choose_2": lambda: self._choose(1),
            "choose_3": lambda: self._choose(2),
            "skip": self.controller.skip_upgrade,
            "continue": self.controller.continue_to_next_stage,
            "start": self.controller.start,
            "suspend": self.controller.suspend,
            "retry": self.controller.retry,
            "new_game": self.controller.new_game,
            "resume": self.controller.resume_suspended,
            "quit": self._request_quit,
        }

    def handle_event(self, event: pygame.event.Event) -> None:
        self.input.handle_event(event)

    def update(self, dt: float) -> None:
        for action in self.input.consume():
            self.dispatch(action)
        self.controller.on_frame_tick(dt)
        self._refresh_caption()

    def dispatch(self, action: str) -> None:
        handler = self._handlers.get(action)
        if handler:
            handler()

    def status_line(self) -> str:
        c = self.controller
        phase = c.phase
        if phase is Phase.COUNTING_DOWN:
            return f"Stage {c.current_stage} - starting in {c.countdown_remaining:.0f}"
        if phase.in_play:
            boost = " BOOST" if c.boost.is_boosted else ""
            return (
                f"Stage {c.current_stage} - {c.produced}/{c.stage_goal}"
                f" (+{c.overflow}) - {c.remaining_time:.1f}s{boost}"
            )
        if phase is Phase.UPGRADE_SELECTION:
            names = ", ".join(f"{i + 1}:{d.name}" for i, d in enumerate(c.offered_choices))
            return f"Pick an upgrade - {names} - S: skip"
        if phase is Phase.STAGE_CHOICE:
            return f"Stage {c.current_stage} cleared - C: next, P: suspend"
        if phase is Phase.GAME_OVER:
            return f"Game over on stage {c.current_stage} - R: retry, N: new game"
        if phase is Phase.COMPLETE:
            return f"All stages cleared! {c.lifetime_produced} produced - N: new game"
        if phase is Phase.SUSPENDED:
            return "Suspended - progress saved"
        return f"Plate Clicker - stage {c.current_stage} - Enter: start, L: resume"

    def _choose(self, index: int) -> None:
        choices = self.controller.offered_choices
        if 0 <= index < len(choices):
            self.controller.choose_upgrade(choices[index].kind)

    def _request_quit(self) -> None:
        self.quit_requested = True

    def _refresh_caption(self) -> None:
        caption = self.status_line()
        if caption != self._caption and pygame.display.get_init():
            pygame.display.set_caption(caption)
        self._caption = caption


__all__ = ["StageScene"]
