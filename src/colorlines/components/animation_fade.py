from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class FadeAnimation:
    """Fade-out of a removed piece; alpha runs 1 -> 0."""
    pos: Tuple[int,int]
    color: str
    alpha: float = 1.0
