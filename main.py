"""Entry point for Plate Clicker."""
from __future__ import annotations

import pygame

from clicker.config import SETTINGS_PATH, GameConfig
from clicker.engine.clock import SystemClock
from clicker.engine.input import InputBindings, InputMapper
from clicker.engine.logger import init_logger
from clicker.engine.loop import FixedTimestepLoop
from clicker.engine.scene import SceneManager
from clicker.save import FileBackend
from clicker.stage.controller import StageController
from clicker.ui.stage_scene import StageScene


def main() -> None:
    config = GameConfig.load(SETTINGS_PATH)
    logger = init_logger(SETTINGS_PATH)
    pygame.init()
    pygame.display.set_mode((480, 120))
    pygame.display.set_caption("Plate Clicker")

    controller = StageController.from_config(
        config,
        game_logger=logger,
        backend=FileBackend(config.save_directory),
        clock=SystemClock(),
    )
    input_mapper = InputMapper(InputBindings.load(SETTINGS_PATH))

    manager = SceneManager()
    manager.register("stage", StageScene)
    manager.set_context(controller=controller, input=input_mapper, logger=logger)
    manager.activate("stage")

    clock = pygame.time.Clock()
    loop: FixedTimestepLoop

    def process_events() -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                loop.stop()
                return
            manager.handle_event(event)
        if manager.should_quit:
            loop.stop()

    def render(alpha: float) -> None:
        pygame.display.flip()
        clock.tick(120)

    loop = FixedTimestepLoop(
        manager.update,
        render=render,
        process_events=process_events,
        fixed_hz=config.sim_hz,
    )
    logger.channel("stage").info("Plate Clicker ready, %d upgrades in catalog", len(controller.catalog))
    loop.run()
    pygame.quit()


if __name__ == "__main__":
    main()
