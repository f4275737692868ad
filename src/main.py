"""Entry point for the Color Lines puzzle.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, set_background_color

from colorlines.constants import BACKGROUND_COLOR
from colorlines.world import create_world
from colorlines.events.bus import EVENT_TICK, EventBus, EVENT_MOUSE_PRESS
from colorlines.systems.animation import AnimationSystem
from colorlines.systems.input import InputSystem
from colorlines.systems.render import RenderSystem
from colorlines.systems.restart_confirm_system import RestartConfirmSystem
from colorlines.systems.save_system import JsonFileStore, SaveSystem
from colorlines.systems.turn_system import TurnSystem

logger = logging.getLogger(__name__)


class ColorLinesWindow(Window):
    def __init__(self, save_path=None):
        super().__init__(600, 800, "Color Lines", resizable=True)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world()

        # Engine systems
        self.turn_system = TurnSystem(self.world, self.event_bus, deferred_moves=True)
        self.restart_confirm_system = RestartConfirmSystem(self.world, self.event_bus)
        store = JsonFileStore(save_path or JsonFileStore.default_path())
        self.save_system = SaveSystem(self.world, self.event_bus, store)

        # Interface systems
        self.animation_system = AnimationSystem(self.world, self.event_bus)
        self.render_system = RenderSystem(self.world, self.event_bus, self)
        self.input_system = InputSystem(self.event_bus, self, self.world)

        if not self.save_system.load_game():
            logger.info("No saved game to resume")
        set_background_color(BACKGROUND_COLOR)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button, modifiers=modifiers)

    def on_close(self):
        self.turn_system.shutdown()
        super().on_close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ColorLinesWindow()
    run()

if __name__ == "__main__":
    main()
