from dataclasses import dataclass

from colorlines.constants import BOARD_SIZE, PREVIEW_LENGTH, RUN_LENGTH

@dataclass(slots=True)
class GameConfig:
    """Per-world rule settings the shell may override at world creation."""
    board_size: int = BOARD_SIZE
    preview_length: int = PREVIEW_LENGTH
    run_length: int = RUN_LENGTH
