"""Error taxonomy for the rules engine.

None of these reach the shell during normal play: the turn engine validates
gestures before touching the board, and the persistence codec swallows
``CorruptSave`` field by field.
"""
from typing import Tuple


class ColorLinesError(Exception):
    """Base class for engine errors."""


class OutOfBounds(ColorLinesError, IndexError):
    """A coordinate outside the board grid."""

    def __init__(self, pos: Tuple[int, int], size: int):
        super().__init__(f"position {pos} outside {size}x{size} board")
        self.pos = pos
        self.size = size


class InvalidMove(ColorLinesError):
    """A move with no path, onto an occupied cell, or onto itself."""


class CorruptSave(ColorLinesError):
    """A persisted record (or one of its fields) that cannot be decoded."""
