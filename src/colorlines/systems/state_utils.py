from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from esper import World

from colorlines.components.board import Board, Position
from colorlines.components.game_config import GameConfig
from colorlines.components.game_state import GameState, TurnPhase
from colorlines.components.palette import Palette
from colorlines.components.piece import Piece
from colorlines.components.preview_queue import PreviewQueue
from colorlines.components.score_board import ScoreBoard
from colorlines.components.undo_snapshot import UndoSnapshot


def state_entity(world: World) -> int:
    """Return the entity carrying the game's singleton components."""
    for entity, _ in world.get_component(GameConfig):
        return entity
    raise RuntimeError("GameConfig not found; build the world with create_world()")


def get_config(world: World) -> GameConfig:
    return world.component_for_entity(state_entity(world), GameConfig)


def get_palette(world: World) -> Palette:
    return world.component_for_entity(state_entity(world), Palette)


def get_game_state(world: World) -> GameState:
    return world.component_for_entity(state_entity(world), GameState)


def get_board(world: World) -> Board:
    return world.component_for_entity(state_entity(world), Board)


def get_preview(world: World) -> PreviewQueue:
    return world.component_for_entity(state_entity(world), PreviewQueue)


def get_score_board(world: World) -> ScoreBoard:
    return world.component_for_entity(state_entity(world), ScoreBoard)


def get_undo_snapshot(world: World) -> Optional[UndoSnapshot]:
    entity = state_entity(world)
    if world.has_component(entity, UndoSnapshot):
        return world.component_for_entity(entity, UndoSnapshot)
    return None


def set_undo_snapshot(world: World, snapshot: UndoSnapshot) -> None:
    """Store ``snapshot`` as the only undo level, replacing any previous one."""
    entity = state_entity(world)
    if world.has_component(entity, UndoSnapshot):
        world.remove_component(entity, UndoSnapshot)
    world.add_component(entity, snapshot)


def clear_undo_snapshot(world: World) -> None:
    entity = state_entity(world)
    if world.has_component(entity, UndoSnapshot):
        world.remove_component(entity, UndoSnapshot)


def replace_board(world: World, board: Board) -> None:
    """Swap the live board for ``board`` (used by undo and load)."""
    entity = state_entity(world)
    world.remove_component(entity, Board)
    world.add_component(entity, board)


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the whole game, handed to the shell for drawing."""
    board_size: int
    cells: Dict[Position, str]
    preview: Tuple[str, ...]
    score: int
    best_score: int
    combo: int
    can_undo: bool
    game_over: bool
    preview_visible: bool
    phase: TurnPhase
    selected: Optional[Position]
    rng_seed: int

    def color_at(self, pos: Position) -> Optional[str]:
        return self.cells.get(pos)


def get_snapshot(world: World) -> GameSnapshot:
    board = get_board(world)
    state = get_game_state(world)
    scores = get_score_board(world)
    return GameSnapshot(
        board_size=board.size,
        cells={pos: piece.color for pos, piece in board.occupied()},
        preview=tuple(get_preview(world).colors()),
        score=scores.score,
        best_score=scores.best_score,
        combo=scores.combo,
        can_undo=get_undo_snapshot(world) is not None,
        game_over=state.game_over,
        preview_visible=state.preview_visible,
        phase=state.phase,
        selected=state.selected,
        rng_seed=state.rng_seed,
    )


def board_from_colors(size: int, colors: Dict[Position, str]) -> Board:
    """Build a board from a ``pos -> color name`` mapping."""
    board = Board(size=size)
    for pos, color in colors.items():
        board.place(pos, Piece(color))
    return board
