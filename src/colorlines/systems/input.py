from colorlines.components.game_state import TurnPhase
from colorlines.events.bus import (
    EventBus,
    EVENT_CELL_CLICK,
    EVENT_MOUSE_PRESS,
    EVENT_PREVIEW_TOGGLE,
    EVENT_RESTART_CANCELLED,
    EVENT_RESTART_CONFIRMED,
    EVENT_RESTART_REQUEST,
    EVENT_UNDO_REQUEST,
)
from colorlines.systems.state_utils import get_config, get_game_state, get_undo_snapshot
from colorlines.ui.layout import compute_layout

MOUSE_BUTTON_LEFT = 1


class InputSystem:
    """Translates raw mouse presses into game intents on the bus."""
    def __init__(self, event_bus: EventBus, window, world):
        self.event_bus = event_bus
        self.window = window
        self.world = world
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def layout(self):
        config = get_config(self.world)
        return compute_layout(self.window.width, self.window.height, config.board_size, config.preview_length)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        button = kwargs.get('button', MOUSE_BUTTON_LEFT)
        if x is None or y is None or button != MOUSE_BUTTON_LEFT:
            return
        layout = self.layout()
        phase = get_game_state(self.world).phase
        # While the dialog is up, only its buttons respond.
        if phase == TurnPhase.RESTART_CONFIRM:
            choice = layout.dialog_button_at(x, y)
            if choice == "yes":
                self.event_bus.emit(EVENT_RESTART_CONFIRMED)
            elif choice == "no":
                self.event_bus.emit(EVENT_RESTART_CANCELLED)
            return
        if phase == TurnPhase.MOVING:
            return
        target = layout.button_at(x, y)
        if target == "restart":
            self.event_bus.emit(EVENT_RESTART_REQUEST)
            return
        if target == "eye":
            self.event_bus.emit(EVENT_PREVIEW_TOGGLE)
            return
        if target == "undo":
            if get_undo_snapshot(self.world) is not None:
                self.event_bus.emit(EVENT_UNDO_REQUEST)
            return
        cell = layout.cell_at(x, y)
        if cell is not None:
            self.event_bus.emit(EVENT_CELL_CLICK, row=cell[0], col=cell[1])
