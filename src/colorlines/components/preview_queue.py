from dataclasses import dataclass, field
from typing import List

from colorlines.components.piece import Piece

@dataclass(slots=True)
class PreviewQueue:
    """Ordered lookahead of the pieces spawned after the next non-scoring turn."""
    pieces: List[Piece] = field(default_factory=list)
    length: int = 3

    def colors(self) -> List[str]:
        return [piece.color for piece in self.pieces]
