from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from esper import World

from colorlines.components.board import Board, Position
from colorlines.components.game_state import TurnPhase
from colorlines.components.undo_snapshot import UndoSnapshot
from colorlines.events.bus import (
    EventBus,
    EVENT_CELL_CLICK,
    EVENT_CHECKPOINT,
    EVENT_GAME_OVER,
    EVENT_GAME_STARTED,
    EVENT_MOVE_INVALID,
    EVENT_PIECE_DESELECTED,
    EVENT_PIECE_MOVE_DO,
    EVENT_PIECE_MOVE_REQUEST,
    EVENT_PIECE_MOVED,
    EVENT_PIECE_SELECTED,
    EVENT_PIECES_SPAWNED,
    EVENT_PREVIEW_CHANGED,
    EVENT_PREVIEW_TOGGLE,
    EVENT_RESTART_CONFIRMED,
    EVENT_RUNS_CLEARED,
    EVENT_SCORE_CHANGED,
    EVENT_TURN_COMPLETED,
    EVENT_UNDO_APPLIED,
    EVENT_UNDO_REQUEST,
)
from colorlines.systems.board_ops import (
    ColorEntry,
    find_path,
    generate_preview,
    initial_fill,
    remove_positions,
    spawn_pieces,
)
from colorlines.systems.match import detect_runs
from colorlines.systems.state_utils import (
    GameSnapshot,
    clear_undo_snapshot,
    get_board,
    get_config,
    get_game_state,
    get_palette,
    get_preview,
    get_score_board,
    get_snapshot,
    get_undo_snapshot,
    replace_board,
    set_undo_snapshot,
)
from colorlines.utils.game_state import set_turn_phase
from colorlines.world import fresh_seed

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnResult:
    """What one move attempt did, in enough detail for the shell to animate it.

    ``pending`` marks a valid move whose commit waits for the shell's traversal.
    """
    committed: bool = False
    pending: bool = False
    reason: Optional[str] = None
    src: Optional[Position] = None
    dst: Optional[Position] = None
    path: List[Position] = field(default_factory=list)
    color: Optional[str] = None
    removed: List[ColorEntry] = field(default_factory=list)
    score_gained: int = 0
    runs: int = 0
    combo: int = 0
    spawned: List[ColorEntry] = field(default_factory=list)
    spawn_cleared: List[ColorEntry] = field(default_factory=list)
    game_over: bool = False


class TurnSystem:
    """Owns every mutation of the game state.

    Flow of a turn:
      - ``select_cell`` on a piece selects it; on an empty cell it moves the selection.
      - With ``deferred_moves`` the engine enters MOVING and emits EVENT_PIECE_MOVE_REQUEST;
        the shell answers with EVENT_PIECE_MOVE_DO once its traversal finishes.
      - ``commit_move`` applies the whole turn atomically: relocate, clear runs and score,
        or spawn from the preview, then game-over check and checkpoint.
    """
    def __init__(self, world: World, event_bus: EventBus, *, deferred_moves: bool = False):
        self.world = world
        self.event_bus = event_bus
        self.deferred_moves = deferred_moves
        self.event_bus.subscribe(EVENT_CELL_CLICK, self.on_cell_click)
        self.event_bus.subscribe(EVENT_PIECE_MOVE_DO, self.on_move_do)
        self.event_bus.subscribe(EVENT_UNDO_REQUEST, self.on_undo_request)
        self.event_bus.subscribe(EVENT_RESTART_CONFIRMED, self.on_restart_confirmed)
        self.event_bus.subscribe(EVENT_PREVIEW_TOGGLE, self.on_preview_toggle)

    # -- queries --------------------------------------------------------------

    def is_game_over(self) -> bool:
        return get_game_state(self.world).game_over

    def get_snapshot(self) -> GameSnapshot:
        return get_snapshot(self.world)

    # -- event handlers -------------------------------------------------------

    def on_cell_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.select_cell((row, col))

    def on_move_do(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        if get_game_state(self.world).phase != TurnPhase.MOVING:
            return
        self.commit_move(tuple(src), tuple(dst))

    def on_undo_request(self, sender, **kwargs):
        self.undo()

    def on_restart_confirmed(self, sender, **kwargs):
        self.restart()

    def on_preview_toggle(self, sender, **kwargs):
        self.toggle_preview()

    # -- selection ------------------------------------------------------------

    def select_cell(self, pos: Position) -> Optional[TurnResult]:
        """Select a piece, or move the current selection onto an empty cell.

        Returns the move attempt's result when the gesture targeted an empty cell.
        """
        state = get_game_state(self.world)
        if state.game_over or state.phase in (TurnPhase.MOVING, TurnPhase.RESTART_CONFIRM):
            return None
        board = get_board(self.world)
        if not board.in_bounds(pos):
            logger.warning("Ignoring selection outside the board: %s", pos)
            return None
        if not board.is_empty(pos):
            state.selected = pos
            set_turn_phase(self.world, self.event_bus, TurnPhase.SELECTED)
            self.event_bus.emit(EVENT_PIECE_SELECTED, row=pos[0], col=pos[1])
            return None
        if state.phase == TurnPhase.SELECTED and state.selected is not None:
            return self.attempt_move(pos)
        return None

    def deselect(self, reason: str) -> None:
        state = get_game_state(self.world)
        previous = state.selected
        state.selected = None
        if state.phase in (TurnPhase.SELECTED, TurnPhase.MOVING):
            set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)
        if previous is not None:
            self.event_bus.emit(EVENT_PIECE_DESELECTED, reason=reason)

    def attempt_move(self, target: Position) -> TurnResult:
        """Move the selected piece to ``target``, deferring the commit if configured."""
        state = get_game_state(self.world)
        src = state.selected
        if src is None:
            return TurnResult(reason="no_selection", dst=target)
        path, reason = self._route(src, target)
        if path is None:
            self._reject(src, target, reason)
            return TurnResult(reason=reason, src=src, dst=target)
        if not self.deferred_moves:
            return self.commit_move(src, target)
        color = get_board(self.world).cells[src].color
        set_turn_phase(self.world, self.event_bus, TurnPhase.MOVING)
        self.event_bus.emit(EVENT_PIECE_MOVE_REQUEST, src=src, dst=target, path=list(path), color=color)
        return TurnResult(pending=True, src=src, dst=target, path=list(path), color=color)

    # -- turn -----------------------------------------------------------------

    def commit_move(self, src: Position, dst: Position) -> TurnResult:
        """Apply one full turn; an invalid move deselects and changes nothing else."""
        state = get_game_state(self.world)
        if state.game_over:
            return TurnResult(reason="game_over", src=src, dst=dst)
        path, reason = self._route(src, dst)
        if path is None:
            self._reject(src, dst, reason)
            return TurnResult(reason=reason, src=src, dst=dst)

        board = get_board(self.world)
        scores = get_score_board(self.world)
        config = get_config(self.world)
        set_undo_snapshot(self.world, UndoSnapshot(board=board.clone(), score=scores.score, combo=scores.combo))

        piece = board.remove(src)
        board.place(dst, piece)
        result = TurnResult(committed=True, src=src, dst=dst, path=path, color=piece.color)
        self.event_bus.emit(EVENT_PIECE_MOVED, src=src, dst=dst, path=list(path), color=piece.color)

        scan = detect_runs(board, config.run_length)
        if scan.total_score > 0:
            result.removed = remove_positions(board, sorted(scan.removed_positions))
            scores.combo += scan.run_count
            gained = scan.total_score * scores.combo
            scores.score += gained
            scores.record_best()
            result.score_gained = gained
            result.runs = scan.run_count
            self.event_bus.emit(
                EVENT_RUNS_CLEARED,
                positions=[(r, c) for r, c, _ in result.removed],
                colors=result.removed,
                score=gained,
                runs=scan.run_count,
                combo=scores.combo,
                source="move",
            )
        else:
            scores.combo = 0
            result.spawned = self._spawn_from_preview(board)
            result.spawn_cleared = self._clear_spawn_runs(board)
        result.combo = scores.combo
        self.event_bus.emit(
            EVENT_SCORE_CHANGED,
            score=scores.score,
            best_score=scores.best_score,
            combo=scores.combo,
            delta=result.score_gained,
        )

        state.game_over = board.is_full()
        result.game_over = state.game_over
        set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)
        state.selected = None
        logger.debug(
            "Move %s -> %s: +%d (combo %d), %d spawned",
            src, dst, result.score_gained, scores.combo, len(result.spawned),
        )
        if state.game_over:
            logger.info("Game over with score %d", scores.score)
            self.event_bus.emit(EVENT_GAME_OVER, score=scores.score, best_score=scores.best_score)
        self.event_bus.emit(EVENT_TURN_COMPLETED, result=result)
        self.event_bus.emit(EVENT_CHECKPOINT, reason="move")
        return result

    def undo(self) -> bool:
        """Revert the last committed move; a no-op without a snapshot."""
        state = get_game_state(self.world)
        if state.phase == TurnPhase.MOVING:
            return False
        snapshot = get_undo_snapshot(self.world)
        if snapshot is None:
            return False
        replace_board(self.world, snapshot.board)
        scores = get_score_board(self.world)
        scores.score = snapshot.score
        scores.combo = snapshot.combo
        clear_undo_snapshot(self.world)
        # The future preview is not restored: reseed and draw a new one.
        self._reseed()
        self._refill_preview()
        state.game_over = get_board(self.world).is_full()
        self.deselect("undo")
        set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)
        logger.debug("Undo restored score %d, combo %d", scores.score, scores.combo)
        self.event_bus.emit(EVENT_UNDO_APPLIED, score=scores.score, combo=scores.combo)
        self.event_bus.emit(
            EVENT_SCORE_CHANGED,
            score=scores.score,
            best_score=scores.best_score,
            combo=scores.combo,
            delta=0,
        )
        self.event_bus.emit(EVENT_CHECKPOINT, reason="undo")
        return True

    def new_game(self, reason: str = "new_game") -> None:
        """Replace the current game with a fresh one; the best score survives."""
        board = get_board(self.world)
        board.clear()
        scores = get_score_board(self.world)
        scores.score = 0
        scores.combo = 0
        clear_undo_snapshot(self.world)
        state = get_game_state(self.world)
        state.game_over = False
        state.selected = None
        set_turn_phase(self.world, self.event_bus, TurnPhase.IDLE)

        config = get_config(self.world)
        palette = get_palette(self.world)
        spawned = initial_fill(board, palette.names(), config.preview_length, self.world.random)
        self._refill_preview()
        logger.info("Started a new game (%s)", reason)
        self.event_bus.emit(EVENT_GAME_STARTED, reason=reason)
        if spawned:
            self.event_bus.emit(EVENT_PIECES_SPAWNED, pieces=spawned)
        self.event_bus.emit(
            EVENT_SCORE_CHANGED,
            score=0,
            best_score=scores.best_score,
            combo=0,
            delta=0,
        )
        self.event_bus.emit(EVENT_CHECKPOINT, reason=reason)

    def restart(self) -> None:
        self.new_game(reason="restart")

    def toggle_preview(self) -> bool:
        state = get_game_state(self.world)
        state.preview_visible = not state.preview_visible
        self.event_bus.emit(EVENT_CHECKPOINT, reason="preview_toggle")
        return state.preview_visible

    def shutdown(self) -> None:
        """Final checkpoint before the shell exits; a finished game is replaced first."""
        if self.is_game_over():
            self.new_game(reason="quit")
            return
        self.event_bus.emit(EVENT_CHECKPOINT, reason="quit")

    # -- helpers --------------------------------------------------------------

    def _route(self, src: Position, dst: Position) -> Tuple[Optional[List[Position]], Optional[str]]:
        board = get_board(self.world)
        if not (board.in_bounds(src) and board.in_bounds(dst)):
            return None, "out_of_bounds"
        if board.is_empty(src):
            return None, "empty_source"
        if src == dst:
            return None, "same_cell"
        if not board.is_empty(dst):
            return None, "occupied_target"
        path = find_path(board, src, dst)
        if path is None:
            return None, "no_path"
        return path, None

    def _reject(self, src: Position, dst: Position, reason: Optional[str]) -> None:
        logger.debug("Rejected move %s -> %s (%s)", src, dst, reason)
        self.event_bus.emit(EVENT_MOVE_INVALID, src=src, dst=dst, reason=reason)
        self.deselect(reason or "invalid_move")

    def _spawn_from_preview(self, board: Board) -> List[ColorEntry]:
        preview = get_preview(self.world)
        spawned = spawn_pieces(board, preview.pieces, self.world.random)
        self._refill_preview()
        if spawned:
            self.event_bus.emit(EVENT_PIECES_SPAWNED, pieces=spawned)
        return spawned

    def _clear_spawn_runs(self, board: Board) -> List[ColorEntry]:
        # Runs completed by spawned pieces vanish without score or combo.
        scan = detect_runs(board, get_config(self.world).run_length)
        if not scan.removed_positions:
            return []
        cleared = remove_positions(board, sorted(scan.removed_positions))
        self.event_bus.emit(
            EVENT_RUNS_CLEARED,
            positions=[(r, c) for r, c, _ in cleared],
            colors=cleared,
            score=0,
            runs=scan.run_count,
            combo=get_score_board(self.world).combo,
            source="spawn",
        )
        return cleared

    def _refill_preview(self) -> None:
        preview = get_preview(self.world)
        preview.pieces = generate_preview(get_palette(self.world).names(), preview.length, self.world.random)
        self.event_bus.emit(EVENT_PREVIEW_CHANGED, pieces=preview.colors())

    def _reseed(self) -> None:
        state = get_game_state(self.world)
        state.rng_seed = fresh_seed()
        self.world.random.seed(state.rng_seed)
