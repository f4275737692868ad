"""Versioned save-record schema for a whole game.

Record layout (version 1)::

    {
        "version": 1,
        "board": [[color | null, ...], ...],      # board_size rows of board_size cells
        "preview": [color, ...],
        "score": int, "best_score": int, "combo": int,
        "undo": {"board": [[...]], "score": int, "combo": int} | null,
        "game_over": bool, "preview_visible": bool,
        "rng_seed": int, "rng_state": [int, [int, ...], float | null] | null
    }

``deserialize`` never raises: a record that is not a mapping, has another version,
or carries no usable board yields a fresh game (keeping a valid best score); every
other field is validated on its own and falls back to its default.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from esper import World

from colorlines.components.board import Board
from colorlines.components.game_state import TurnPhase
from colorlines.components.piece import Piece
from colorlines.components.undo_snapshot import UndoSnapshot
from colorlines.constants import SAVE_FORMAT_VERSION
from colorlines.errors import CorruptSave
from colorlines.systems.board_ops import generate_preview, initial_fill
from colorlines.systems.state_utils import (
    clear_undo_snapshot,
    get_board,
    get_config,
    get_game_state,
    get_palette,
    get_preview,
    get_score_board,
    get_undo_snapshot,
    replace_board,
    set_undo_snapshot,
)
from colorlines.world import fresh_seed

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


@dataclass(slots=True)
class RestoredGame:
    """Decoded game ready to be installed into a world with ``apply_restored``.

    ``fresh`` is True when the record was unusable and a new game was generated.
    """
    board: Board
    preview: List[Piece]
    score: int = 0
    best_score: int = 0
    combo: int = 0
    undo: Optional[UndoSnapshot] = None
    game_over: bool = False
    preview_visible: bool = True
    rng_seed: int = 0
    rng_state: Optional[tuple] = None
    fresh: bool = False


# -- encoding -------------------------------------------------------------------


def _encode_board(board: Board) -> List[List[Optional[str]]]:
    grid: List[List[Optional[str]]] = []
    for row in range(1, board.size + 1):
        line: List[Optional[str]] = []
        for col in range(1, board.size + 1):
            piece = board.cells.get((row, col))
            line.append(piece.color if piece is not None else None)
        grid.append(line)
    return grid


def _encode_rng_state(rng: random.Random) -> list:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def serialize(world: World) -> dict:
    """Snapshot every persisted field of the world's game into a JSON-ready dict."""
    state = get_game_state(world)
    scores = get_score_board(world)
    undo = get_undo_snapshot(world)
    return {
        "version": SAVE_FORMAT_VERSION,
        "board": _encode_board(get_board(world)),
        "preview": get_preview(world).colors(),
        "score": scores.score,
        "best_score": scores.best_score,
        "combo": scores.combo,
        "undo": None if undo is None else {
            "board": _encode_board(undo.board),
            "score": undo.score,
            "combo": undo.combo,
        },
        "game_over": state.game_over,
        "preview_visible": state.preview_visible,
        "rng_seed": state.rng_seed,
        "rng_state": _encode_rng_state(world.random),
    }


# -- field validators -----------------------------------------------------------


def _int_field(record: Record, key: str) -> int:
    value = record.get(key)
    # bool is an int subclass but never a valid counter
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        if key in record:
            logger.warning("Save field %r is invalid (%r); using 0", key, value)
        return 0
    return value


def _bool_field(record: Record, key: str, default: bool) -> bool:
    value = record.get(key)
    if isinstance(value, bool):
        return value
    return default


def _decode_board(raw: Any, size: int, palette: Sequence[str]) -> Board:
    if not isinstance(raw, list) or len(raw) != size:
        raise CorruptSave(f"board must be a list of {size} rows")
    board = Board(size=size)
    for row_index, line in enumerate(raw, start=1):
        if not isinstance(line, list) or len(line) != size:
            raise CorruptSave(f"board row {row_index} must hold {size} cells")
        for col_index, cell in enumerate(line, start=1):
            # Unknown colors degrade to an empty cell
            if isinstance(cell, str) and cell in palette:
                board.cells[(row_index, col_index)] = Piece(cell)
    return board


def _decode_preview(raw: Any, length: int, palette: Sequence[str]) -> List[Piece]:
    if not isinstance(raw, list):
        return []
    pieces = [Piece(color) for color in raw if isinstance(color, str) and color in palette]
    return pieces[:length]


def _decode_undo(raw: Any, size: int, palette: Sequence[str]) -> Optional[UndoSnapshot]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise CorruptSave("undo must be a mapping")
    board = _decode_board(raw.get("board"), size, palette)
    return UndoSnapshot(board=board, score=_int_field(raw, "score"), combo=_int_field(raw, "combo"))


def _decode_rng_state(raw: Any) -> Optional[tuple]:
    if raw is None:
        return None
    if not isinstance(raw, list) or len(raw) != 3:
        raise CorruptSave("rng_state must be [version, internal, gauss_next]")
    version, internal, gauss_next = raw
    if not isinstance(internal, list) or not all(isinstance(v, int) and not isinstance(v, bool) for v in internal):
        raise CorruptSave("rng_state internal state must be a list of ints")
    if gauss_next is not None and not isinstance(gauss_next, (int, float)):
        raise CorruptSave("rng_state gauss_next must be a number or null")
    state = (version, tuple(internal), gauss_next)
    # Let random validate the shape before it reaches a live generator.
    try:
        random.Random().setstate(state)
    except (TypeError, ValueError, OverflowError) as exc:
        raise CorruptSave("rng_state rejected by the generator") from exc
    return state


# -- decoding -------------------------------------------------------------------


def fresh_game(
    *,
    board_size: int,
    preview_length: int,
    palette: Sequence[str],
    best_score: int = 0,
    seed: Optional[int] = None,
) -> RestoredGame:
    """A newly initialized game: initial fill plus a fresh preview."""
    rng_seed = fresh_seed() if seed is None else seed
    rng = random.Random(rng_seed)
    board = Board(size=board_size)
    initial_fill(board, palette, preview_length, rng)
    preview = generate_preview(palette, preview_length, rng)
    return RestoredGame(
        board=board,
        preview=preview,
        best_score=best_score,
        rng_seed=rng_seed,
        rng_state=rng.getstate(),
        fresh=True,
    )


def deserialize(
    record: Any,
    *,
    board_size: int,
    preview_length: int,
    palette: Sequence[str],
) -> RestoredGame:
    """Decode ``record`` (possibly ``None`` or garbage) into a playable game."""
    palette = list(palette)
    if not isinstance(record, Mapping):
        if record is not None:
            logger.warning("Save record is not a mapping (%s); starting fresh", type(record).__name__)
        return fresh_game(board_size=board_size, preview_length=preview_length, palette=palette)
    if record.get("version", SAVE_FORMAT_VERSION) != SAVE_FORMAT_VERSION:
        logger.warning("Unsupported save version %r; starting fresh", record.get("version"))
        return fresh_game(board_size=board_size, preview_length=preview_length, palette=palette)

    score = _int_field(record, "score")
    best_score = max(_int_field(record, "best_score"), score)
    try:
        board = _decode_board(record.get("board"), board_size, palette)
    except CorruptSave as exc:
        logger.warning("Save board unusable (%s); starting fresh", exc)
        return fresh_game(
            board_size=board_size,
            preview_length=preview_length,
            palette=palette,
            best_score=best_score,
        )

    try:
        undo = _decode_undo(record.get("undo"), board_size, palette)
    except CorruptSave as exc:
        logger.warning("Dropping unusable undo snapshot: %s", exc)
        undo = None

    seed = record.get("rng_seed")
    if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
        seed = fresh_seed()
    try:
        rng_state = _decode_rng_state(record.get("rng_state"))
    except CorruptSave as exc:
        logger.warning("Reseeding generator: %s", exc)
        rng_state = None

    rng = random.Random(seed)
    if rng_state is not None:
        rng.setstate(rng_state)
    preview = _decode_preview(record.get("preview"), preview_length, palette)
    if len(preview) < preview_length:
        preview.extend(generate_preview(palette, preview_length - len(preview), rng))

    return RestoredGame(
        board=board,
        preview=preview,
        score=score,
        best_score=best_score,
        combo=_int_field(record, "combo"),
        undo=undo,
        game_over=_bool_field(record, "game_over", board.is_full()),
        preview_visible=_bool_field(record, "preview_visible", True),
        rng_seed=seed,
        rng_state=rng.getstate(),
    )


def deserialize_into(world: World, record: Any) -> RestoredGame:
    """Decode ``record`` with the world's rule settings and install the result."""
    config = get_config(world)
    restored = deserialize(
        record,
        board_size=config.board_size,
        preview_length=config.preview_length,
        palette=get_palette(world).names(),
    )
    apply_restored(world, restored)
    return restored


def apply_restored(world: World, restored: RestoredGame) -> None:
    replace_board(world, restored.board)
    get_preview(world).pieces = list(restored.preview)
    scores = get_score_board(world)
    scores.score = restored.score
    scores.best_score = restored.best_score
    scores.combo = restored.combo
    if restored.undo is None:
        clear_undo_snapshot(world)
    else:
        set_undo_snapshot(world, restored.undo)
    state = get_game_state(world)
    state.game_over = restored.game_over
    state.preview_visible = restored.preview_visible
    state.rng_seed = restored.rng_seed
    state.selected = None
    state.phase = TurnPhase.IDLE
    rng = random.Random(restored.rng_seed)
    if restored.rng_state is not None:
        rng.setstate(restored.rng_state)
    setattr(world, "random", rng)

