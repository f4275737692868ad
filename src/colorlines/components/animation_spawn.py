from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class SpawnAnimation:
    """Fade-in of a freshly spawned piece; alpha runs 0 -> 1."""
    pos: Tuple[int,int]
    color: str
    alpha: float = 0.0
