from __future__ import annotations

import math
from typing import Dict, List, Tuple

from colorlines.components.animation_fade import FadeAnimation
from colorlines.components.animation_move import MoveAnimation
from colorlines.components.animation_spawn import SpawnAnimation
from colorlines.components.duration import Duration
from colorlines.constants import BALL_PADDING, CELL_COLOR, SELECTION_BOUNCE_SPEED
from colorlines.systems.state_utils import get_board, get_game_state, get_palette
from colorlines.ui.layout import BoardLayout

BEVEL = 3


def shade(color: Tuple[int, int, int], factor: float) -> Tuple[int, int, int]:
    return tuple(max(0, min(255, int(c * factor))) for c in color)


class BoardRenderer:
    """Draws the grid, resting pieces, fades and the travelling piece."""

    def __init__(self, render_system, padding: int = BALL_PADDING):
        self.rs = render_system
        self.world = render_system.world
        self._padding = padding

    def render(self, arcade, layout: BoardLayout, headless: bool) -> List[Dict]:
        """Draw one frame of the board; returns the ball layout for hit tests and tests."""
        palette = get_palette(self.world)
        board = get_board(self.world)
        state = get_game_state(self.world)
        radius = max(layout.cell_size / 2 - self._padding, 2)
        balls: List[Dict] = []

        if not headless:
            self._draw_cells(arcade, layout)

        spawn_alpha = {spawn.pos: spawn.alpha for _, spawn in self.world.get_component(SpawnAnimation)}
        moving_from = None
        for _, move in self.world.get_component(MoveAnimation):
            moving_from = move.src

        for (row, col), piece in board.occupied():
            if (row, col) == moving_from:
                continue
            cx, cy = layout.cell_center(row, col)
            if state.selected == (row, col):
                cy += abs(math.sin(self.rs.time * SELECTION_BOUNCE_SPEED)) * layout.cell_size * 0.08
            alpha = spawn_alpha.get((row, col), 1.0)
            balls.append({"kind": "piece", "pos": (row, col), "center": (cx, cy), "radius": radius, "color": piece.color, "alpha": alpha})

        for _, fade in self.world.get_component(FadeAnimation):
            cx, cy = layout.cell_center(*fade.pos)
            balls.append({"kind": "fade", "pos": fade.pos, "center": (cx, cy), "radius": radius, "color": fade.color, "alpha": fade.alpha})

        for ent, move in self.world.get_component(MoveAnimation):
            row, col = move.position(self.world.component_for_entity(ent, Duration).seconds)
            cx, cy = layout.cell_center(row, col)
            balls.append({"kind": "move", "pos": (row, col), "center": (cx, cy), "radius": radius, "color": move.color, "alpha": 1.0})

        if headless:
            return balls
        for ball in balls:
            self.draw_ball(arcade, ball["center"], ball["radius"], palette.rgb_for(ball["color"]), ball["alpha"])
        return balls

    def draw_ball(self, arcade, center, radius: float, rgb, alpha: float = 1.0) -> None:
        x, y = center
        a = int(255 * max(0.0, min(alpha, 1.0)))
        r, g, b = rgb
        arcade.draw_circle_filled(x, y, radius, (r, g, b, a))
        # Highlight toward the top-left gives the ball some volume.
        hr, hg, hb = shade(rgb, 1.4)
        arcade.draw_circle_filled(x - radius * 0.3, y + radius * 0.3, radius * 0.3, (hr, hg, hb, a))
        arcade.draw_circle_outline(x, y, radius, (0, 0, 0, a), 1)

    def _draw_cells(self, arcade, layout: BoardLayout) -> None:
        light = shade(CELL_COLOR, 1.3)
        dark = shade(CELL_COLOR, 0.6)
        for row in range(1, layout.board_size + 1):
            for col in range(1, layout.board_size + 1):
                cell = layout.cell_rect(row, col)
                arcade.draw_lrbt_rectangle_filled(cell.left, cell.right, cell.bottom, cell.top, CELL_COLOR)
                arcade.draw_line(cell.left, cell.top - 1, cell.right, cell.top - 1, light, BEVEL)
                arcade.draw_line(cell.left + 1, cell.bottom, cell.left + 1, cell.top, light, BEVEL)
                arcade.draw_line(cell.left, cell.bottom + 1, cell.right, cell.bottom + 1, dark, BEVEL)
                arcade.draw_line(cell.right - 1, cell.bottom, cell.right - 1, cell.top, dark, BEVEL)
                arcade.draw_lrbt_rectangle_outline(cell.left, cell.right, cell.bottom, cell.top, (0, 0, 0), 1)
