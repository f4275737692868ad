from typing import Any, Dict

from esper import World

from colorlines.components.game_state import TurnPhase
from colorlines.constants import BUTTON_COLOR, CELL_COLOR
from colorlines.events.bus import EVENT_TICK, EventBus
from colorlines.rendering.board_renderer import BoardRenderer, shade
from colorlines.systems.state_utils import (
    get_config,
    get_game_state,
    get_palette,
    get_preview,
    get_score_board,
    get_undo_snapshot,
)
from colorlines.ui.layout import BoardLayout, Rect, compute_layout

DISABLED_ICON_COLOR = (90, 90, 90)
COMBO_COLOR = (255, 255, 0)


class RenderSystem:
    def __init__(self, world: World, event_bus: EventBus, window):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.time = 0.0
        self._board_renderer = BoardRenderer(self)
        # Frame summary kept even when headless so tests can inspect what would be drawn.
        self.last_frame: Dict[str, Any] = {}

    def on_tick(self, sender, **kwargs):
        self.time += kwargs.get('dt', 1/60)

    def layout(self) -> BoardLayout:
        config = get_config(self.world)
        return compute_layout(self.window.width, self.window.height, config.board_size, config.preview_length)

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        layout = self.layout()
        state = get_game_state(self.world)
        scores = get_score_board(self.world)
        undo_enabled = get_undo_snapshot(self.world) is not None
        preview = get_preview(self.world).colors() if state.preview_visible else []
        combo_badge = f"x{scores.combo}" if scores.combo > 1 else None
        dialog_open = state.phase == TurnPhase.RESTART_CONFIRM

        balls = self._board_renderer.render(arcade, layout, headless)
        self.last_frame = {
            "balls": balls,
            "preview": preview,
            "undo_enabled": undo_enabled,
            "preview_visible": state.preview_visible,
            "combo_badge": combo_badge,
            "score_fraction": self._score_fraction(scores.score, scores.best_score),
            "game_over": state.game_over,
            "dialog_open": dialog_open,
        }
        if headless:
            return

        self._draw_button(arcade, layout.eye_button)
        self._draw_eye_icon(arcade, layout.eye_button, closed=not state.preview_visible)
        self._draw_button(arcade, layout.undo_button)
        self._draw_undo_icon(arcade, layout.undo_button, undo_enabled)
        palette = get_palette(self.world)
        for slot, color in zip(layout.preview_slots, preview):
            self._board_renderer.draw_ball(arcade, slot.center, slot.width / 2 - 5, palette.rgb_for(color))

        self._draw_button(arcade, layout.restart_button)
        cx, cy = layout.restart_button.center
        arcade.draw_text("Restart", cx, cy, arcade.color.WHITE, 14, anchor_x="center", anchor_y="center")
        self._draw_bar(arcade, layout.score_bar, f"Current Score: {scores.score}", self.last_frame["score_fraction"])
        if combo_badge:
            arcade.draw_text(
                combo_badge,
                layout.score_bar.right - 5,
                layout.score_bar.center[1],
                COMBO_COLOR,
                12,
                anchor_x="right",
                anchor_y="center",
            )
        self._draw_bar(arcade, layout.best_bar, f"Best Score: {scores.best_score}", 1.0)
        if state.game_over:
            self._draw_banner(arcade, layout, "Game Over")
        if dialog_open:
            self._draw_dialog(arcade, layout)

    @staticmethod
    def _score_fraction(score: int, best: int) -> float:
        if best <= 0:
            return 0.0
        return min(score / best, 1.0)

    def _draw_button(self, arcade, rect: Rect, color=BUTTON_COLOR) -> None:
        arcade.draw_lrbt_rectangle_filled(rect.left, rect.right, rect.bottom, rect.top, color)
        arcade.draw_line(rect.left, rect.top - 1, rect.right, rect.top - 1, shade(color, 1.3), 3)
        arcade.draw_line(rect.left, rect.bottom + 1, rect.right, rect.bottom + 1, shade(color, 0.6), 3)
        arcade.draw_lrbt_rectangle_outline(rect.left, rect.right, rect.bottom, rect.top, (0, 0, 0), 1)

    def _draw_eye_icon(self, arcade, rect: Rect, closed: bool) -> None:
        cx, cy = rect.center
        w = rect.width * 0.7
        arcade.draw_ellipse_outline(cx, cy, w, w * 0.5, arcade.color.WHITE, 2)
        arcade.draw_circle_filled(cx, cy, w * 0.15, arcade.color.WHITE)
        if closed:
            arcade.draw_line(rect.left + 4, rect.bottom + 4, rect.right - 4, rect.top - 4, arcade.color.WHITE, 2)

    def _draw_undo_icon(self, arcade, rect: Rect, enabled: bool) -> None:
        color = arcade.color.WHITE if enabled else DISABLED_ICON_COLOR
        cx, cy = rect.center
        radius = rect.width * 0.3
        arcade.draw_arc_outline(cx, cy, radius * 2, radius * 2, color, 0, 270, 2)
        arcade.draw_triangle_filled(
            cx + radius, cy + radius * 0.4,
            cx + radius - radius * 0.4, cy,
            cx + radius + radius * 0.4, cy,
            color,
        )

    def _draw_bar(self, arcade, rect: Rect, label: str, fraction: float) -> None:
        arcade.draw_lrbt_rectangle_filled(rect.left, rect.right, rect.bottom, rect.top, (0, 0, 0))
        if fraction > 0:
            arcade.draw_lrbt_rectangle_filled(rect.left, rect.left + rect.width * fraction, rect.bottom, rect.top, CELL_COLOR)
        arcade.draw_lrbt_rectangle_outline(rect.left, rect.right, rect.bottom, rect.top, arcade.color.WHITE, 1)
        arcade.draw_text(label, rect.left - 10, rect.center[1], arcade.color.WHITE, 12, anchor_x="right", anchor_y="center")

    def _draw_banner(self, arcade, layout: BoardLayout, text: str) -> None:
        board = layout.board_rect
        cx, cy = board.center
        arcade.draw_lrbt_rectangle_filled(board.left, board.right, cy - 30, cy + 30, (0, 0, 0, 180))
        arcade.draw_text(text, cx, cy, arcade.color.WHITE, 24, anchor_x="center", anchor_y="center")

    def _draw_dialog(self, arcade, layout: BoardLayout) -> None:
        d = layout.dialog
        arcade.draw_lrbt_rectangle_filled(d.left, d.right, d.bottom, d.top, (40, 40, 40))
        arcade.draw_lrbt_rectangle_outline(d.left, d.right, d.bottom, d.top, arcade.color.WHITE, 2)
        arcade.draw_text("Start a new game?", d.center[0], d.top - 25, arcade.color.WHITE, 14, anchor_x="center", anchor_y="center")
        for rect, label in ((layout.dialog_yes, "Yes"), (layout.dialog_no, "No")):
            self._draw_button(arcade, rect)
            bx, by = rect.center
            arcade.draw_text(label, bx, by, arcade.color.WHITE, 12, anchor_x="center", anchor_y="center")
