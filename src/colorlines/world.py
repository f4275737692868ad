import random
from typing import Mapping, Tuple

from esper import World

from colorlines.components.board import Board
from colorlines.components.game_config import GameConfig
from colorlines.components.game_state import GameState
from colorlines.components.palette import Palette
from colorlines.components.preview_queue import PreviewQueue
from colorlines.components.score_board import ScoreBoard
from colorlines.constants import BOARD_SIZE, PALETTE, PREVIEW_LENGTH, RUN_LENGTH


def fresh_seed() -> int:
    """Draw a new 32-bit generator seed from system entropy."""
    return random.SystemRandom().getrandbits(32)


def create_world(
    *,
    board_size: int = BOARD_SIZE,
    preview_length: int = PREVIEW_LENGTH,
    palette: Mapping[str, Tuple[int, int, int]] | None = None,
    seed: int | None = None,
) -> World:
    """Build a world holding one empty game.

    All game state sits on a single entity (config, palette, board, preview, score,
    phase). The board starts empty; ``TurnSystem.new_game`` or a restored save fills it.
    """
    if board_size < 1:
        raise ValueError("board_size must be positive")
    if preview_length < 1:
        raise ValueError("preview_length must be positive")
    world = World()
    rng_seed = fresh_seed() if seed is None else int(seed)
    setattr(world, "random", random.Random(rng_seed))

    world.create_entity(
        GameConfig(board_size=board_size, preview_length=preview_length, run_length=RUN_LENGTH),
        Palette(colors=dict(palette if palette is not None else PALETTE)),
        GameState(rng_seed=rng_seed),
        Board(size=board_size),
        PreviewQueue(length=preview_length),
        ScoreBoard(),
    )
    return world
