from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from colorlines.components.piece import Piece
from colorlines.errors import InvalidMove, OutOfBounds

Position = Tuple[int, int]


@dataclass(slots=True)
class Board:
    """Square grid of optional pieces, addressed by 1-based ``(row, col)``.

    Only occupied cells are stored in ``cells``; a missing key is an empty cell.
    """
    size: int = 9
    cells: Dict[Position, Piece] = field(default_factory=dict)

    # -- queries ------------------------------------------------------------

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 1 <= row <= self.size and 1 <= col <= self.size

    def check_bounds(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise OutOfBounds(pos, self.size)

    def is_empty(self, pos: Position) -> bool:
        self.check_bounds(pos)
        return pos not in self.cells

    def piece_at(self, pos: Position) -> Optional[Piece]:
        self.check_bounds(pos)
        return self.cells.get(pos)

    def is_full(self) -> bool:
        return len(self.cells) >= self.size * self.size

    def positions(self) -> Iterator[Position]:
        """Row-major iteration over every cell."""
        for row in range(1, self.size + 1):
            for col in range(1, self.size + 1):
                yield (row, col)

    def empty_cells(self) -> Set[Position]:
        return {pos for pos in self.positions() if pos not in self.cells}

    def sorted_empty_cells(self) -> List[Position]:
        # Spawn placement draws from this list; a stable order keeps seeded games reproducible.
        return [pos for pos in self.positions() if pos not in self.cells]

    def occupied(self) -> List[Tuple[Position, Piece]]:
        return [(pos, self.cells[pos]) for pos in self.positions() if pos in self.cells]

    # -- mutation -----------------------------------------------------------

    def place(self, pos: Position, piece: Piece) -> None:
        if not self.is_empty(pos):
            raise InvalidMove(f"cell {pos} already holds a piece")
        self.cells[pos] = piece

    def remove(self, pos: Position) -> Optional[Piece]:
        self.check_bounds(pos)
        return self.cells.pop(pos, None)

    def clear(self) -> None:
        self.cells.clear()

    def clone(self) -> Board:
        # Piece is frozen, so copying the mapping is a full deep copy.
        return Board(size=self.size, cells=dict(self.cells))
