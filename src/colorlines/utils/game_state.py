from __future__ import annotations

from esper import World

from colorlines.components.game_state import TurnPhase
from colorlines.events.bus import EVENT_PHASE_CHANGED, EventBus
from colorlines.systems.state_utils import get_game_state


def set_turn_phase(world: World, event_bus: EventBus, phase: TurnPhase) -> None:
    """Update the turn phase and emit a change event when it differs."""

    state = get_game_state(world)
    previous = state.phase
    if previous == phase:
        return
    state.phase = phase
    if phase not in (TurnPhase.SELECTED, TurnPhase.MOVING):
        state.selected = None
    event_bus.emit(EVENT_PHASE_CHANGED, previous=previous, phase=phase)
