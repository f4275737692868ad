from __future__ import annotations

import random
from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple

from colorlines.components.board import Board, Position
from colorlines.components.piece import Piece

ColorEntry = Tuple[int, int, str]

# Fixed BFS neighbour order: down, up, right, left.
NEIGHBOUR_STEPS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def find_path(board: Board, start: Position, target: Position) -> Optional[List[Position]]:
    """Shortest orthogonal path from ``start`` to ``target`` through empty cells.

    ``start`` is the search origin and may hold a piece; every other cell on the path
    must be empty. Returns the path with both ends included, ``[start]`` when
    ``start == target`` is an empty cell, or ``None`` when ``target`` is occupied or
    unreachable. Ties between equally short paths follow frontier insertion order.
    """
    board.check_bounds(start)
    board.check_bounds(target)
    if not board.is_empty(target):
        return None
    previous: Dict[Position, Optional[Position]] = {start: None}
    frontier = deque([start])
    while frontier:
        current = frontier.popleft()
        if current == target:
            path: List[Position] = []
            step: Optional[Position] = current
            while step is not None:
                path.append(step)
                step = previous[step]
            path.reverse()
            return path
        row, col = current
        for d_row, d_col in NEIGHBOUR_STEPS:
            nxt = (row + d_row, col + d_col)
            if nxt in previous or not board.in_bounds(nxt):
                continue
            if nxt in board.cells:
                continue
            previous[nxt] = current
            frontier.append(nxt)
    return None


def generate_preview(colors: Sequence[str], count: int, rng: random.Random) -> List[Piece]:
    """Draw ``count`` pieces, each color independent and uniform over ``colors``."""
    return [Piece(rng.choice(list(colors))) for _ in range(count)]


def spawn_pieces(board: Board, pieces: Sequence[Piece], rng: random.Random) -> List[ColorEntry]:
    """Drop ``pieces`` into random empty cells, stopping early once the board fills.

    Returns ``(row, col, color)`` entries in spawn order.
    """
    spawned: List[ColorEntry] = []
    for piece in pieces:
        empties = board.sorted_empty_cells()
        if not empties:
            break
        pos = empties[rng.randrange(len(empties))]
        board.place(pos, piece)
        spawned.append((pos[0], pos[1], piece.color))
    return spawned


def initial_fill(board: Board, colors: Sequence[str], count: int, rng: random.Random) -> List[ColorEntry]:
    """Seed an empty board for a new game with ``count`` random pieces."""
    return spawn_pieces(board, generate_preview(colors, count, rng), rng)


def remove_positions(board: Board, positions: Sequence[Position]) -> List[ColorEntry]:
    """Clear ``positions`` and return what was removed as ``(row, col, color)``."""
    removed: List[ColorEntry] = []
    for pos in sorted(positions):
        piece = board.remove(pos)
        if piece is not None:
            removed.append((pos[0], pos[1], piece.color))
    return removed
