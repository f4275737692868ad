from dataclasses import dataclass

from colorlines.components.board import Board

@dataclass(slots=True)
class UndoSnapshot:
    """Single-level undo record taken right before a committed move.

    ``board`` is always an independent clone of the live board.
    """
    board: Board
    score: int = 0
    combo: int = 0
