import logging
from typing import Callable, Dict

from blinker import Signal

logger = logging.getLogger(__name__)


class EventBus:
    """Named blinker signals shared by every system of one game.

    Handlers are called as ``fn(bus, **payload)``.
    """

    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn: Callable) -> Callable:
        # Systems are often built without being stored, so hold handlers strongly.
        self._signals.setdefault(name, Signal(name)).connect(fn, weak=False)
        return fn

    def unsubscribe(self, name: str, fn: Callable) -> None:
        sig = self._signals.get(name)
        if sig is not None:
            sig.disconnect(fn)

    def emit(self, name: str, **payload) -> int:
        """Deliver ``payload`` to the handlers of ``name``; returns how many ran."""
        sig = self._signals.get(name)
        if sig is None or not sig.receivers:
            logger.debug("No handlers for %s", name)
            return 0
        return len(sig.send(self, **payload))


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                        # payload: dt=float
EVENT_CHECKPOINT = "checkpoint"            # payload: reason=str


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"          # payload: x, y, button
EVENT_CELL_CLICK = "cell_click"            # payload: row, col
EVENT_UNDO_REQUEST = "undo_request"        # payload: None
EVENT_PREVIEW_TOGGLE = "preview_toggle"    # payload: None
EVENT_RESTART_REQUEST = "restart_request"  # payload: None
EVENT_RESTART_CONFIRMED = "restart_confirmed"  # payload: None
EVENT_RESTART_CANCELLED = "restart_cancelled"  # payload: None


# ============================================================================
# PIECE & BOARD MECHANICS
# ============================================================================
EVENT_PIECE_SELECTED = "piece_selected"            # payload: row, col
EVENT_PIECE_DESELECTED = "piece_deselected"        # payload: reason=str
EVENT_MOVE_INVALID = "move_invalid"                # payload: src=(r,c), dst=(r,c), reason=str
EVENT_PIECE_MOVE_REQUEST = "piece_move_request"    # payload: src=(r,c), dst=(r,c), path=[(r,c),...], color=str
EVENT_PIECE_MOVE_DO = "piece_move_do"              # payload: src=(r,c), dst=(r,c)
EVENT_PIECE_MOVED = "piece_moved"                  # payload: src=(r,c), dst=(r,c), path=[(r,c),...], color=str
EVENT_RUNS_CLEARED = "runs_cleared"                # payload: positions=[(r,c),...], colors=[(r,c,color),...], score=int, runs=int, combo=int, source=str
EVENT_PIECES_SPAWNED = "pieces_spawned"            # payload: pieces=[(r,c,color),...]
EVENT_PREVIEW_CHANGED = "preview_changed"          # payload: pieces=[color,...]


# ============================================================================
# ANIMATION
# ============================================================================
EVENT_ANIMATION_START = "animation_start"          # payload: kind=str, items=list
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str, items=list


# ============================================================================
# SCORING & GAME FLOW
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"      # payload: score=int, best_score=int, combo=int, delta=int
EVENT_TURN_COMPLETED = "turn_completed"    # payload: result=TurnResult
EVENT_GAME_OVER = "game_over"              # payload: score=int, best_score=int
EVENT_GAME_STARTED = "game_started"        # payload: reason=str
EVENT_UNDO_APPLIED = "undo_applied"        # payload: score=int, combo=int
EVENT_PHASE_CHANGED = "phase_changed"      # payload: previous=TurnPhase, phase=TurnPhase
