from __future__ import annotations

from typing import Sequence

from esper import World

from colorlines.components.piece import Piece
from colorlines.events.bus import EventBus, EVENT_TICK
from colorlines.systems.state_utils import board_from_colors, get_config, get_preview, replace_board

COLOR_CODES = {
    'R': 'red',
    'G': 'green',
    'B': 'blue',
    'Y': 'yellow',
    'M': 'magenta',
    'C': 'cyan',
}


def set_board(world: World, rows: Sequence[str]) -> None:
    """Replace the board from one string per row; letters are color codes, '.' is empty."""

    size = get_config(world).board_size
    assert len(rows) == size, f"expected {size} rows"
    colors = {}
    for r, line in enumerate(rows, start=1):
        assert len(line) == size, f"row {r} must have {size} cells"
        for c, code in enumerate(line, start=1):
            if code != '.':
                colors[(r, c)] = COLOR_CODES[code]
    replace_board(world, board_from_colors(size, colors))


def set_preview(world: World, codes: str) -> None:
    get_preview(world).pieces = [Piece(COLOR_CODES[code]) for code in codes]


def capture(bus: EventBus, name: str) -> list[dict]:
    """Record every payload emitted for ``name``."""

    received: list[dict] = []
    bus.subscribe(name, lambda sender, **payload: received.append(payload))
    return received


def drive_ticks(bus: EventBus, count: int = 10, dt: float = 0.05) -> None:
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)
