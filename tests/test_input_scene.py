"""Input mapping and the headless stage scene."""
from __future__ import annotations

import json
import random
from typing import Optional

import pygame

from clicker.config import GameConfig
from clicker.engine.input import DEFAULT_BINDINGS, InputBindings, InputMapper
from clicker.engine.scene import SceneManager
from clicker.stage.controller import StageController
from clicker.stage.phases import Phase
from clicker.ui.stage_scene import StageScene


def _mouse_down(button: int = 1) -> pygame.event.Event:
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=button, pos=(0, 0))


def _scene(mapper: Optional[InputMapper] = None) -> StageScene:
    controller = StageController.from_config(GameConfig(countdown_seconds=0.0), rng=random.Random(4))
    manager = SceneManager()
    manager.register("stage", StageScene)
    return manager.activate("stage", controller=controller, input=mapper or InputMapper())


def test_bindings_load_merges_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"bindings": {"click": ["BUTTON_RIGHT"]}}))
    bindings = InputBindings.load(path)
    assert bindings.actions["click"] == ["BUTTON_RIGHT"]
    assert bindings.actions["skip"] == DEFAULT_BINDINGS["skip"]
    out = tmp_path / "saved.json"
    bindings.save(out)
    assert json.loads(out.read_text())["bindings"]["click"] == ["BUTTON_RIGHT"]


def test_mouse_press_queues_click() -> None:
    mapper = InputMapper()
    assert mapper.handle_event(_mouse_down()) == ["click"]
    assert mapper.handle_event(_mouse_down(3)) == []
    assert mapper.handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(0, 0))) == []
    assert mapper.consume() == ["click"]
    assert mapper.consume() == []


def test_key_press_matches_either_case(monkeypatch) -> None:
    names = {pygame.K_SPACE: "space", pygame.K_1: "1", pygame.K_s: "s"}
    monkeypatch.setattr(pygame.key, "name", lambda key, *args: names[key])
    mapper = InputMapper()
    for key in names:
        mapper.handle_event(pygame.event.Event(pygame.KEYDOWN, key=key))
    assert mapper.consume() == ["click", "choose_1", "skip"]


def test_scene_forwards_clicks_and_ticks() -> None:
    scene = _scene()
    scene.dispatch("start")
    assert scene.controller.phase is Phase.PLAYING
    scene.handle_event(_mouse_down())
    scene.handle_event(_mouse_down())
    scene.update(0.5)
    assert scene.controller.produced == 2
    assert scene.controller.remaining_time == 29.5
    assert scene.status_line().startswith("Stage 1 - 2/50")


def test_scene_upgrade_selection_by_number() -> None:
    scene = _scene()
    controller = scene.controller
    controller.start()
    for _ in range(50):
        controller.on_manual_click()
    for _ in range(62):
        controller.on_frame_tick(0.5)
    assert controller.phase is Phase.UPGRADE_SELECTION
    assert scene.status_line().startswith("Pick an upgrade")
    picked = controller.offered_choices[0].kind
    scene.dispatch("choose_1")
    assert controller.phase is Phase.STAGE_CHOICE
    assert controller.catalog.level_of(picked) == 1
    scene.dispatch("continue")
    assert controller.current_stage == 2


def test_quit_action_sets_flag() -> None:
    scene = _scene()
    assert not scene.quit_requested
    scene.dispatch("quit")
    assert scene.quit_requested
    scene.dispatch("not_an_action")
