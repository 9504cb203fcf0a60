"""Scene registry for the pygame shell."""
from __future__ import annotations

from typing import Dict, Optional, Type

import pygame


class Scene:
    """One screen of the shell. Subclasses override the hooks they need."""

    def __init__(self, manager: "SceneManager") -> None:
        self.manager = manager
        self.quit_requested = False

    def on_enter(self, **kwargs) -> None:  # pragma: no cover - hooks
        pass

    def on_exit(self) -> None:  # pragma: no cover - hooks
        pass

    def handle_event(self, event: pygame.event.Event) -> None:
        pass

    def update(self, dt: float) -> None:
        pass


class SceneManager:
    """Holds the registered scenes and forwards events and ticks to the active one."""

    def __init__(self) -> None:
        self._scenes: Dict[str, Type[Scene]] = {}
        self._active: Optional[Scene] = None
        self.context: Dict[str, object] = {}

    def register(self, name: str, scene_cls: Type[Scene]) -> None:
        self._scenes[name] = scene_cls

    def activate(self, name: str, **kwargs) -> Scene:
        if name not in self._scenes:
            raise KeyError(f"Scene '{name}' is not registered")
        if self._active:
            self._active.on_exit()
        scene = self._scenes[name](self)
        scene.on_enter(**{**self.context, **kwargs})
        self._active = scene
        return scene

    def set_context(self, **kwargs) -> None:
        self.context.update(kwargs)

    def active(self) -> Optional[Scene]:
        return self._active

    @property
    def should_quit(self) -> bool:
        return self._active is not None and self._active.quit_requested

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._active:
            self._active.handle_event(event)

    def update(self, dt: float) -> None:
        if self._active:
            self._active.update(dt)


__all__ = ["Scene", "SceneManager"]
