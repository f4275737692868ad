import json
import random

from colorlines.constants import PALETTE
from colorlines.events.bus import EventBus
from colorlines.systems.board_ops import find_path, generate_preview
from colorlines.systems.persistence_codec import deserialize, deserialize_into, serialize
from colorlines.systems.state_utils import (
    get_board,
    get_game_state,
    get_snapshot,
    get_undo_snapshot,
)
from colorlines.systems.turn_system import TurnSystem
from colorlines.world import create_world

NAMES = list(PALETTE)


def _decode(record):
    return deserialize(record, board_size=9, preview_length=3, palette=NAMES)


def _empty_grid():
    return [[None] * 9 for _ in range(9)]


def _play_one_move(turns, world):
    board = get_board(world)
    src = board.occupied()[0][0]
    dst = next(pos for pos in board.sorted_empty_cells() if find_path(board, src, pos))
    turns.select_cell(src)
    return turns.select_cell(dst)


def test_round_trip_restores_identical_game():
    bus = EventBus()
    world = create_world(seed=99)
    turns = TurnSystem(world, bus)
    turns.new_game()
    _play_one_move(turns, world)
    turns.toggle_preview()

    record = json.loads(json.dumps(serialize(world)))
    restored_world = create_world(seed=5)
    restored = deserialize_into(restored_world, record)

    assert not restored.fresh
    assert get_snapshot(restored_world) == get_snapshot(world)
    assert get_undo_snapshot(restored_world).board.cells == get_undo_snapshot(world).board.cells
    # The generator continues from the same point.
    assert restored_world.random.getstate() == world.random.getstate()


def test_restored_game_continues_identically():
    bus = EventBus()
    world = create_world(seed=42)
    turns = TurnSystem(world, bus)
    turns.new_game()
    record = json.loads(json.dumps(serialize(world)))

    other_bus = EventBus()
    other = create_world(seed=1)
    other_turns = TurnSystem(other, other_bus)
    deserialize_into(other, record)

    _play_one_move(turns, world)
    _play_one_move(other_turns, other)
    assert get_snapshot(other) == get_snapshot(world)


def test_missing_or_garbage_record_gives_fresh_game():
    for record in (None, "not a save", 17, [1, 2, 3], {"version": 99}):
        restored = _decode(record)
        assert restored.fresh
        assert len(restored.board.cells) == 3
        assert len(restored.preview) == 3
        assert restored.score == 0


def test_unusable_board_keeps_best_score():
    restored = _decode({"version": 1, "board": [[None] * 3], "best_score": 250, "score": 40})
    assert restored.fresh
    assert restored.best_score == 250
    assert restored.score == 0


def test_fields_degrade_independently():
    grid = _empty_grid()
    grid[0][0] = "red"
    grid[0][1] = "ultraviolet"
    grid[8][8] = 7
    record = {
        "version": 1,
        "board": grid,
        "preview": ["blue", "nope"],
        "score": -5,
        "best_score": True,
        "combo": "lots",
        "undo": {"board": "broken"},
        "game_over": "yes",
        "preview_visible": False,
        "rng_seed": 12,
        "rng_state": [3, ["x"], None],
    }
    restored = _decode(record)
    assert not restored.fresh
    assert restored.board.cells.keys() == {(1, 1)}
    assert restored.preview[0].color == "blue"
    assert len(restored.preview) == 3
    assert (restored.score, restored.best_score, restored.combo) == (0, 0, 0)
    assert restored.undo is None
    assert restored.game_over is False
    assert restored.preview_visible is False
    assert restored.rng_seed == 12


def test_best_score_never_below_score():
    grid = _empty_grid()
    restored = _decode({"version": 1, "board": grid, "score": 80, "best_score": 10})
    assert restored.best_score == 80


def test_game_over_defaults_to_full_board():
    grid = [["green"] * 9 for _ in range(9)]
    restored = _decode({"version": 1, "board": grid})
    assert restored.game_over is True


def test_invalid_seed_is_replaced():
    restored = _decode({"version": 1, "board": _empty_grid(), "rng_seed": "abc"})
    assert isinstance(restored.rng_seed, int)
    assert restored.rng_seed >= 0


def test_restore_resets_selection_and_phase():
    bus = EventBus()
    world = create_world(seed=3)
    turns = TurnSystem(world, bus)
    turns.new_game()
    record = serialize(world)
    turns.select_cell(get_board(world).occupied()[0][0])
    deserialize_into(world, record)
    assert get_game_state(world).selected is None


def test_out_of_range_generator_state_reseeds_from_seed():
    out_of_range = (
        [3, [-1] * 624 + [624], None],
        [3, [1] * 624 + [2 ** 70], None],
    )
    for rng_state in out_of_range:
        record = {"version": 1, "board": _empty_grid(), "rng_seed": 1, "rng_state": rng_state}
        restored = _decode(record)
        assert not restored.fresh
        assert restored.rng_seed == 1
        # The backfilled preview is drawn from a generator seeded with rng_seed.
        expected = random.Random(1)
        generate_preview(NAMES, 3, expected)
        assert restored.rng_state == expected.getstate()
        assert [p.color for p in restored.preview] == [
            p.color for p in generate_preview(NAMES, 3, random.Random(1))
        ]
