from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class Piece:
    """A colored piece on the board or in the preview queue.

    Carries only its palette color name; RGB lookup lives in the Palette component.
    Two pieces of the same color are interchangeable.
    """
    color: str
