from dataclasses import dataclass, field
from typing import List, Tuple

@dataclass(slots=True)
class MoveAnimation:
    """A piece travelling along its path, one cell per ``Duration`` step.

    ``index`` is the path segment currently traversed and ``timer`` the time spent in it.
    """
    path: List[Tuple[int,int]] = field(default_factory=list)
    color: str = ""
    index: int = 0
    timer: float = 0.0

    @property
    def src(self) -> Tuple[int,int]:
        return self.path[0]

    @property
    def dst(self) -> Tuple[int,int]:
        return self.path[-1]

    def position(self, step: float) -> Tuple[float,float]:
        """Fractional (row, col) of the piece given the per-cell ``step`` time."""
        if self.index >= len(self.path) - 1:
            return self.dst
        t = min(self.timer / step, 1.0) if step > 0 else 1.0
        (r0, c0), (r1, c1) = self.path[self.index], self.path[self.index + 1]
        return r0 + (r1 - r0) * t, c0 + (c1 - c0) * t
