"""Game state resource describing the current turn phase and session flags."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class TurnPhase(Enum):
    """Turn engine phases; RESTART_CONFIRM gates destructive resets at the boundary."""
    IDLE = auto()
    SELECTED = auto()
    MOVING = auto()
    RESTART_CONFIRM = auto()


@dataclass
class GameState:
    """Singleton component storing phase, selection and the generator seed."""
    phase: TurnPhase = TurnPhase.IDLE
    selected: Optional[Tuple[int, int]] = None
    game_over: bool = False
    preview_visible: bool = True
    rng_seed: int = 0
