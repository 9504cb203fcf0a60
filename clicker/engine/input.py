"""Input mapping and rebind support."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pygame

DEFAULT_BINDINGS = {
    "click": ["BUTTON_LEFT", "K_SPACE"],
    "choose_1": ["K_1"],
    "choose_2": ["K_2"],
    "choose_3": ["K_3"],
    "skip": ["K_s"],
    "continue": ["K_c"],
    "suspend": ["K_p"],
    "retry": ["K_r"],
    "start": ["K_RETURN"],
    "new_game": ["K_n"],
    "resume": ["K_l"],
    "quit": ["K_ESCAPE"],
}

MOUSE_BUTTONS = {
    "BUTTON_LEFT": 0,
    "BUTTON_MIDDLE": 1,
    "BUTTON_RIGHT": 2,
}


@dataclass
class InputBindings:
    """Runtime structure representing current bindings."""

    actions: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_BINDINGS.items()})

    @classmethod
    def load(cls, path: Path) -> "InputBindings":
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            return cls()
        actions = {k: list(v) for k, v in DEFAULT_BINDINGS.items()}
        actions.update({k: list(v) for k, v in data.get("bindings", {}).items()})
        return cls(actions=actions)

    def save(self, path: Path) -> None:
        path.write_text(json.dumps({"bindings": self.actions}, indent=2))


class InputMapper:
    """Turns pygame events into press actions.

    Clicks are edge-triggered: every button or key press queues one
    action, so rapid tapping is never collapsed into a held state.
    """

    def __init__(self, bindings: Optional[InputBindings] = None) -> None:
        self.bindings = bindings or InputBindings()
        self._pressed: List[str] = []

    def actions_for(self, binding: str) -> List[str]:
        return [action for action, keys in self.bindings.actions.items() if binding in keys]

    def handle_event(self, event: pygame.event.Event) -> List[str]:
        binding = None
        if event.type == pygame.KEYDOWN:
            binding = f"K_{pygame.key.name(event.key)}"
        elif event.type == pygame.MOUSEBUTTONDOWN:
            for name, idx in MOUSE_BUTTONS.items():
                if idx == event.button - 1:
                    binding = name
                    break
        if binding is None:
            return []
        actions = self.actions_for(binding)
        if not actions and binding.startswith("K_"):
            actions = self.actions_for(binding.upper())
        self._pressed.extend(actions)
        return actions

    def consume(self) -> List[str]:
        pressed, self._pressed = self._pressed, []
        return pressed


__all__ = ["InputMapper", "InputBindings", "DEFAULT_BINDINGS"]
