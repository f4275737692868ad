from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from colorlines.components.board import Board, Position
from colorlines.constants import RUN_BASE_SCORE, RUN_BONUS_FACTOR, RUN_LENGTH

# Horizontal, vertical, diagonal down-right, diagonal up-right (row grows downwards).
RUN_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (-1, 1))


@dataclass(frozen=True, slots=True)
class RunScan:
    """Outcome of one full-board scan for qualifying runs."""
    removed_positions: FrozenSet[Position] = frozenset()
    total_score: int = 0
    run_count: int = 0
    runs: Tuple[Tuple[Position, ...], ...] = field(default_factory=tuple)


def run_score(length: int, run_length: int = RUN_LENGTH) -> int:
    """Points for a single run: 5 -> 10, 6 -> 12, 7 -> 18, 8 -> 28, 9 -> 42."""
    if length < run_length:
        return 0
    return RUN_BASE_SCORE + RUN_BONUS_FACTOR * (length - run_length) ** 2


def detect_runs(board: Board, run_length: int = RUN_LENGTH) -> RunScan:
    """Find every maximal same-color run of at least ``run_length`` on four axes.

    A cell only starts a run when the cell behind it on that axis is off the board,
    empty or another color, so each maximal run is reported exactly once. The board
    is not modified.
    """
    cells = board.cells
    removed: set[Position] = set()
    runs: List[Tuple[Position, ...]] = []
    total = 0
    for pos, piece in board.occupied():
        row, col = pos
        for d_row, d_col in RUN_DIRECTIONS:
            behind = cells.get((row - d_row, col - d_col))
            if behind is not None and behind.color == piece.color:
                continue
            run: List[Position] = []
            cursor = pos
            while board.in_bounds(cursor):
                current = cells.get(cursor)
                if current is None or current.color != piece.color:
                    break
                run.append(cursor)
                cursor = (cursor[0] + d_row, cursor[1] + d_col)
            if len(run) >= run_length:
                runs.append(tuple(run))
                removed.update(run)
                total += run_score(len(run), run_length)
    return RunScan(
        removed_positions=frozenset(removed),
        total_score=total,
        run_count=len(runs),
        runs=tuple(runs),
    )
