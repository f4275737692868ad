from colorlines.components.game_state import TurnPhase
from colorlines.events.bus import EventBus, EVENT_PIECE_MOVE_REQUEST
from colorlines.systems.animation import AnimationSystem
from colorlines.systems.render import RenderSystem
from colorlines.systems.state_utils import get_game_state, get_score_board
from colorlines.world import create_world
from tests.helpers import set_board, set_preview

EMPTY_ROW = '.........'


class DummyWindow:
    def __init__(self, width=600, height=800):
        self.width = width
        self.height = height


def _setup():
    bus = EventBus()
    world = create_world(seed=2)
    AnimationSystem(world, bus)
    render = RenderSystem(world, bus, DummyWindow())
    set_board(world, ['RG.......', EMPTY_ROW, '....B....'] + [EMPTY_ROW] * 6)
    set_preview(world, 'CMY')
    return bus, world, render


def test_headless_frame_lists_pieces():
    bus, world, render = _setup()
    render.process()
    frame = render.last_frame
    assert sorted(ball['pos'] for ball in frame['balls']) == [(1, 1), (1, 2), (3, 5)]
    assert frame['preview'] == ['cyan', 'magenta', 'yellow']
    assert frame['undo_enabled'] is False
    assert frame['combo_badge'] is None
    assert frame['dialog_open'] is False


def test_hidden_preview_and_combo_badge():
    bus, world, render = _setup()
    get_game_state(world).preview_visible = False
    scores = get_score_board(world)
    scores.combo = 3
    scores.score = 50
    scores.best_score = 100
    get_game_state(world).phase = TurnPhase.RESTART_CONFIRM
    render.process()
    frame = render.last_frame
    assert frame['preview'] == []
    assert frame['combo_badge'] == 'x3'
    assert frame['score_fraction'] == 0.5
    assert frame['dialog_open'] is True


def test_travelling_piece_leaves_its_source():
    bus, world, render = _setup()
    bus.emit(EVENT_PIECE_MOVE_REQUEST, src=(1, 1), dst=(2, 1), path=[(1, 1), (2, 1)], color='red')
    render.process()
    balls = render.last_frame["balls"]
    resting = [ball["pos"] for ball in balls if ball["kind"] == "piece"]
    assert (1, 1) not in resting
    assert [ball["color"] for ball in balls if ball["kind"] == "move"] == ["red"]
