from dataclasses import dataclass

@dataclass(slots=True)
class Duration:
    """Length in seconds of one animation step (a whole fade, or one cell of a move)."""
    seconds: float
