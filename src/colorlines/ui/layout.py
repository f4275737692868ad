import math
from dataclasses import dataclass
from typing import Optional, Tuple

from colorlines.constants import (
    BAR_LABEL_WIDTH,
    BOARD_MAX_HEIGHT_PCT,
    BOARD_MAX_WIDTH_PCT,
    BOARD_SIZE,
    BOARD_TOP_PCT,
    DIALOG_HEIGHT,
    MIN_CELL_SIZE,
    PREVIEW_LENGTH,
)

PREVIEW_SPACING = 10


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle in arcade window coordinates (origin bottom-left)."""
    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.bottom + self.height / 2

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.bottom <= y <= self.top


@dataclass(frozen=True, slots=True)
class BoardLayout:
    window_width: int
    window_height: int
    board_size: int
    cell_size: int
    origin_x: float
    # Window y of the board's top edge; row 1 is the top row.
    board_top: float
    eye_button: Rect
    undo_button: Rect
    restart_button: Rect
    score_bar: Rect
    best_bar: Rect
    preview_slots: Tuple[Rect, ...]
    dialog: Rect
    dialog_yes: Rect
    dialog_no: Rect

    @property
    def board_rect(self) -> Rect:
        span = self.board_size * self.cell_size
        return Rect(self.origin_x, self.board_top - span, span, span)

    def cell_rect(self, row: int, col: int) -> Rect:
        return Rect(
            self.origin_x + (col - 1) * self.cell_size,
            self.board_top - row * self.cell_size,
            self.cell_size,
            self.cell_size,
        )

    def cell_center(self, row: float, col: float) -> Tuple[float, float]:
        """Center of a cell; fractional rows/cols interpolate between cells."""
        x = self.origin_x + (col - 0.5) * self.cell_size
        y = self.board_top - (row - 0.5) * self.cell_size
        return x, y

    def cell_at(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        col = math.floor((x - self.origin_x) / self.cell_size) + 1
        row = math.floor((self.board_top - y) / self.cell_size) + 1
        if 1 <= row <= self.board_size and 1 <= col <= self.board_size:
            return row, col
        return None

    def button_at(self, x: float, y: float) -> Optional[str]:
        for name, rect in (
            ("restart", self.restart_button),
            ("eye", self.eye_button),
            ("undo", self.undo_button),
        ):
            if rect.contains(x, y):
                return name
        return None

    def dialog_button_at(self, x: float, y: float) -> Optional[str]:
        if self.dialog_yes.contains(x, y):
            return "yes"
        if self.dialog_no.contains(x, y):
            return "no"
        return None


def compute_layout(
    window_width: int,
    window_height: int,
    board_size: int = BOARD_SIZE,
    preview_length: int = PREVIEW_LENGTH,
) -> BoardLayout:
    """Lay the board, buttons, score bars and restart dialog out for a window size.

    Geometry is worked out top-down (as a player reads the screen) and flipped into
    arcade's bottom-left coordinates by ``_flip``.
    """
    max_cell_w = window_width * BOARD_MAX_WIDTH_PCT / board_size
    max_cell_h = window_height * BOARD_MAX_HEIGHT_PCT / board_size
    cell = max(int(min(max_cell_w, max_cell_h)), MIN_CELL_SIZE)
    span = board_size * cell
    offset_x = math.floor((window_width - span) / 2)
    offset_y = math.floor(window_height * BOARD_TOP_PCT)

    def _flip(x: float, y: float, w: float, h: float) -> Rect:
        return Rect(x, window_height - y - h, w, h)

    button = cell * 0.8
    toolbar_y = offset_y - cell * 1.5
    eye = _flip(offset_x, toolbar_y, button, button)
    undo = _flip(offset_x + span - button, toolbar_y, button, button)
    restart_y = offset_y + span + math.floor(cell * 0.25)
    restart_h = math.floor(cell * 0.8)
    restart = _flip(offset_x, restart_y, span, restart_h)

    bar_w = max(span - BAR_LABEL_WIDTH, 1)
    bar_h = math.floor(cell * 0.4)
    gap = math.floor(cell * 0.25)
    bar_x = offset_x + span - bar_w - 1
    score_y = restart_y + restart_h + gap
    score_bar = _flip(bar_x, score_y, bar_w, bar_h)
    best_bar = _flip(bar_x, score_y + bar_h + gap, bar_w, bar_h)

    total = preview_length * cell + (preview_length - 1) * PREVIEW_SPACING
    preview_x = (window_width - total) / 2
    slots = tuple(
        _flip(preview_x + i * (cell + PREVIEW_SPACING), toolbar_y, cell, cell)
        for i in range(preview_length)
    )

    dlg_w = span * 0.8
    dlg_x = (window_width - dlg_w) / 2
    dlg_y = (window_height - DIALOG_HEIGHT) / 2
    choice_w = (dlg_w - 60) / 2
    choice_y = dlg_y + DIALOG_HEIGHT - 40
    return BoardLayout(
        window_width=window_width,
        window_height=window_height,
        board_size=board_size,
        cell_size=cell,
        origin_x=offset_x,
        board_top=window_height - offset_y,
        eye_button=eye,
        undo_button=undo,
        restart_button=restart,
        score_bar=score_bar,
        best_bar=best_bar,
        preview_slots=slots,
        dialog=_flip(dlg_x, dlg_y, dlg_w, DIALOG_HEIGHT),
        dialog_yes=_flip(dlg_x + 20, choice_y, choice_w, 30),
        dialog_no=_flip(dlg_x + 40 + choice_w, choice_y, choice_w, 30),
    )
