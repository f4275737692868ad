from esper import World

from colorlines.components.game_state import TurnPhase
from colorlines.events.bus import (
    EventBus,
    EVENT_RESTART_CANCELLED,
    EVENT_RESTART_CONFIRMED,
    EVENT_RESTART_REQUEST,
)
from colorlines.systems.state_utils import get_game_state
from colorlines.utils.game_state import set_turn_phase


class RestartConfirmSystem:
    """Gates restarts behind a confirmation dialog.

    A finished game restarts straight away; otherwise the request parks the game in
    RESTART_CONFIRM until the player confirms or cancels.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_RESTART_REQUEST, self.on_restart_request)
        self.event_bus.subscribe(EVENT_RESTART_CANCELLED, self.on_restart_cancelled)
        self.event_bus.subscribe(EVENT_RESTART_CONFIRMED, self.on_restart_confirmed)

    @property
    def dialog_open(self) -> bool:
        return get_game_state(self.world).phase == TurnPhase.RESTART_CONFIRM

    def on_restart_request(self, sender, **kwargs):
        state = get_game_state(self.world)
        if state.phase == TurnPhase.MOVING or self.dialog_open:
            return
        if state.game_over:
            self.event_bus.emit(EVENT_RESTART_CONFIRMED)
            return
        set_turn_phase(self.world, self.event_bus, TurnPhase.RESTART_CONFIRM)

    def on_restart_cancelled(self, sender, **kwargs):
        if self.dialog_open:
            set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)

    def on_restart_confirmed(self, sender, **kwargs):
        # TurnSystem performs the restart; this only closes the dialog.
        if self.dialog_open:
            set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)
