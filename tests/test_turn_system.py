from collections import Counter

from colorlines.components.game_state import TurnPhase
from colorlines.events.bus import (
    EventBus,
    EVENT_CHECKPOINT,
    EVENT_GAME_OVER,
    EVENT_MOVE_INVALID,
    EVENT_PIECE_SELECTED,
    EVENT_RUNS_CLEARED,
    EVENT_SCORE_CHANGED,
)
from colorlines.systems.state_utils import (
    get_board,
    get_game_state,
    get_preview,
    get_score_board,
    get_snapshot,
    get_undo_snapshot,
)
from colorlines.systems.turn_system import TurnSystem
from colorlines.world import create_world
from tests.helpers import capture, set_board, set_preview

EMPTY_ROW = '.........'

# 5x5 board where moving (5,4) -> (5,5) scores nothing and leaves (1,5) and (5,4) empty.
SPAWN_RUN_ROWS = ['YYYY.', 'RGBMC', 'GBMCR', 'BMCRG', 'MCRG.']
LAST_MOVE_ROWS = ['CRGB.', 'RGBMC', 'GBMCR', 'BMCRG', 'MCRG.']


def _setup(**kwargs):
    bus = EventBus()
    world = create_world(seed=kwargs.pop('seed', 7), **kwargs)
    turns = TurnSystem(world, bus)
    return bus, world, turns


def _move(turns, src, dst):
    turns.select_cell(src)
    return turns.select_cell(dst)


def test_selecting_a_piece_enters_selected_phase():
    bus, world, turns = _setup()
    set_board(world, ['R........'] + [EMPTY_ROW] * 8)
    selected = capture(bus, EVENT_PIECE_SELECTED)
    turns.select_cell((1, 1))
    state = get_game_state(world)
    assert state.phase == TurnPhase.SELECTED
    assert state.selected == (1, 1)
    assert selected == [{'row': 1, 'col': 1}]


def test_selecting_another_piece_reanchors():
    bus, world, turns = _setup()
    set_board(world, ['R.......B'] + [EMPTY_ROW] * 8)
    turns.select_cell((1, 1))
    turns.select_cell((1, 9))
    assert get_game_state(world).selected == (1, 9)


def test_empty_click_without_selection_does_nothing():
    bus, world, turns = _setup()
    set_board(world, ['R........'] + [EMPTY_ROW] * 8)
    assert turns.select_cell((5, 5)) is None
    assert get_game_state(world).phase == TurnPhase.IDLE
    assert get_undo_snapshot(world) is None


def test_out_of_range_selection_is_ignored():
    bus, world, turns = _setup()
    set_board(world, ['R........'] + [EMPTY_ROW] * 8)
    assert turns.select_cell((0, 4)) is None
    assert turns.select_cell((10, 10)) is None
    assert get_game_state(world).phase == TurnPhase.IDLE


def test_scoring_move_clears_run_and_skips_spawn():
    bus, world, turns = _setup()
    set_board(world, ['RRRR.....', EMPTY_ROW, '....R....'] + [EMPTY_ROW] * 6)
    set_preview(world, 'GBY')
    cleared = capture(bus, EVENT_RUNS_CLEARED)
    checkpoints = capture(bus, EVENT_CHECKPOINT)

    result = _move(turns, (3, 5), (1, 5))

    assert result.committed
    assert result.score_gained == 10
    assert result.runs == 1
    assert result.spawned == []
    assert len(result.removed) == 5
    assert not get_board(world).cells
    scores = get_score_board(world)
    assert (scores.score, scores.combo, scores.best_score) == (10, 1, 10)
    # Preview is only consumed by a non-scoring turn.
    assert get_preview(world).colors() == ['green', 'blue', 'yellow']
    assert cleared[-1]['source'] == 'move'
    assert cleared[-1]['score'] == 10
    assert checkpoints[-1]['reason'] == 'move'
    state = get_game_state(world)
    assert state.phase == TurnPhase.IDLE and state.selected is None


def test_consecutive_scoring_turns_build_combo():
    bus, world, turns = _setup()
    set_board(world, [
        'RRRR.....',
        EMPTY_ROW,
        '....R....',
        EMPTY_ROW,
        'BBBB.....',
        EMPTY_ROW,
        '....B....',
        EMPTY_ROW,
        EMPTY_ROW,
    ])
    first = _move(turns, (3, 5), (1, 5))
    second = _move(turns, (7, 5), (5, 5))
    assert first.score_gained == 10 and first.combo == 1
    assert second.score_gained == 20 and second.combo == 2
    assert get_score_board(world).score == 30


def test_non_scoring_move_resets_combo_and_spawns_preview():
    bus, world, turns = _setup()
    set_board(world, ['R........'] + [EMPTY_ROW] * 8)
    set_preview(world, 'GBY')
    get_score_board(world).combo = 3
    score_events = capture(bus, EVENT_SCORE_CHANGED)

    result = _move(turns, (1, 1), (9, 9))

    assert result.committed and result.score_gained == 0
    assert get_score_board(world).combo == 0
    assert [color for _, _, color in result.spawned] == ['green', 'blue', 'yellow']
    board = get_board(world)
    assert board.piece_at((9, 9)).color == 'red'
    assert board.is_empty((1, 1))
    assert Counter(p.color for _, p in board.occupied()) == Counter(['red', 'green', 'blue', 'yellow'])
    assert len(get_preview(world).pieces) == 3
    assert score_events[-1]['combo'] == 0


def test_runs_completed_by_spawns_clear_without_score():
    bus, world, turns = _setup(board_size=5, preview_length=2)
    set_board(world, SPAWN_RUN_ROWS)
    set_preview(world, 'YY')
    get_score_board(world).combo = 2
    cleared = capture(bus, EVENT_RUNS_CLEARED)

    result = _move(turns, (5, 4), (5, 5))

    assert result.committed
    assert result.score_gained == 0
    assert len(result.spawned) == 2
    assert {(r, c) for r, c, _ in result.spawn_cleared} == {(1, c) for c in range(1, 6)}
    scores = get_score_board(world)
    assert scores.score == 0
    assert scores.combo == 0
    assert cleared[-1]['source'] == 'spawn'
    assert cleared[-1]['score'] == 0
    assert len(get_board(world).cells) == 20
    assert not result.game_over


def test_filling_the_board_ends_the_game():
    bus, world, turns = _setup(board_size=5, preview_length=2)
    set_board(world, LAST_MOVE_ROWS)
    set_preview(world, 'YY')
    over = capture(bus, EVENT_GAME_OVER)

    result = _move(turns, (5, 4), (5, 5))

    assert result.game_over
    assert turns.is_game_over()
    assert get_board(world).is_full()
    assert over == [{'score': 0, 'best_score': 0}]
    # Gestures are ignored once the game is over.
    turns.select_cell((1, 1))
    assert get_game_state(world).selected is None


def test_undo_is_allowed_after_game_over():
    bus, world, turns = _setup(board_size=5, preview_length=2)
    set_board(world, LAST_MOVE_ROWS)
    set_preview(world, 'YY')
    _move(turns, (5, 4), (5, 5))
    assert turns.undo()
    assert not turns.is_game_over()
    assert len(get_board(world).cells) == 23
    assert get_board(world).piece_at((5, 4)).color == 'green'


def test_unreachable_target_rejects_and_deselects():
    bus, world, turns = _setup()
    set_board(world, ['RB.......', 'B........'] + [EMPTY_ROW] * 7)
    invalid = capture(bus, EVENT_MOVE_INVALID)
    before = get_snapshot(world)

    result = _move(turns, (1, 1), (5, 5))

    assert not result.committed
    assert result.reason == 'no_path'
    assert invalid == [{'src': (1, 1), 'dst': (5, 5), 'reason': 'no_path'}]
    after = get_snapshot(world)
    assert after.cells == before.cells
    assert after.score == before.score
    assert get_undo_snapshot(world) is None
    state = get_game_state(world)
    assert state.phase == TurnPhase.IDLE and state.selected is None


def test_commit_validates_every_move():
    bus, world, turns = _setup()
    set_board(world, ['RB.......'] + [EMPTY_ROW] * 8)
    assert turns.commit_move((1, 1), (1, 1)).reason == 'same_cell'
    assert turns.commit_move((1, 1), (1, 2)).reason == 'occupied_target'
    assert turns.commit_move((5, 5), (6, 6)).reason == 'empty_source'
    assert turns.commit_move((1, 1), (0, 0)).reason == 'out_of_bounds'
    assert get_undo_snapshot(world) is None
    assert get_board(world).piece_at((1, 1)).color == 'red'


def test_undo_restores_board_score_and_combo():
    bus, world, turns = _setup()
    set_board(world, ['RRRR.....', EMPTY_ROW, '....R...B'] + [EMPTY_ROW] * 6)
    _move(turns, (3, 5), (1, 5))
    before = get_snapshot(world)
    _move(turns, (3, 9), (9, 9))
    assert get_score_board(world).combo == 0

    assert turns.undo()
    after = get_snapshot(world)
    assert after.cells == before.cells
    assert (after.score, after.combo) == (10, 1)
    assert not after.can_undo
    assert len(after.preview) == 3
    # Single-level undo.
    assert not turns.undo()


def test_undo_without_history_is_noop():
    bus, world, turns = _setup()
    assert not turns.undo()


def test_best_score_survives_new_game():
    bus, world, turns = _setup()
    set_board(world, ['RRRR.....', EMPTY_ROW, '....R....'] + [EMPTY_ROW] * 6)
    _move(turns, (3, 5), (1, 5))
    turns.new_game()
    scores = get_score_board(world)
    assert (scores.score, scores.combo, scores.best_score) == (0, 0, 10)
    assert len(get_board(world).cells) == 3
    assert len(get_preview(world).pieces) == 3
    assert get_undo_snapshot(world) is None


def test_same_seed_gives_same_game():
    snapshots = []
    for _ in range(2):
        bus, world, turns = _setup(seed=1234)
        turns.new_game()
        snapshots.append(get_snapshot(world))
    assert snapshots[0] == snapshots[1]


def test_toggle_preview_checkpoints():
    bus, world, turns = _setup()
    checkpoints = capture(bus, EVENT_CHECKPOINT)
    assert turns.toggle_preview() is False
    assert get_game_state(world).preview_visible is False
    assert turns.toggle_preview() is True
    assert [c['reason'] for c in checkpoints] == ['preview_toggle', 'preview_toggle']


def test_shutdown_replaces_finished_game():
    bus, world, turns = _setup(board_size=5, preview_length=2)
    set_board(world, LAST_MOVE_ROWS)
    set_preview(world, 'YY')
    _move(turns, (5, 4), (5, 5))
    checkpoints = capture(bus, EVENT_CHECKPOINT)
    turns.shutdown()
    assert not turns.is_game_over()
    assert len(get_board(world).cells) == 2
    assert checkpoints[-1]['reason'] == 'quit'


def test_shutdown_keeps_running_game():
    bus, world, turns = _setup()
    set_board(world, ['R........'] + [EMPTY_ROW] * 8)
    checkpoints = capture(bus, EVENT_CHECKPOINT)
    turns.shutdown()
    assert get_board(world).piece_at((1, 1)).color == 'red'
    assert [c['reason'] for c in checkpoints] == ['quit']


def test_red_run_completed_from_below():
    bus, world, turns = _setup()
    set_board(world, ['RRRR.....', 'R........'] + [EMPTY_ROW] * 7)
    set_preview(world, 'GGG')
    cleared = capture(bus, EVENT_RUNS_CLEARED)

    result = _move(turns, (2, 1), (1, 5))

    assert result.path[0] == (2, 1) and result.path[-1] == (1, 5)
    assert set(cleared[0]['positions']) == {(1, c) for c in range(1, 6)}
    assert get_score_board(world).score == 10
    assert get_score_board(world).combo == 1
    assert result.spawned == []
    assert not get_board(world).cells
