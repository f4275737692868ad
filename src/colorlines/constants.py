BOARD_SIZE = 9
PREVIEW_LENGTH = 3
# Winning run length is fixed; GameConfig carries it but callers never override it.
RUN_LENGTH = 5

# Score for one qualifying run: RUN_BASE_SCORE + RUN_BONUS_FACTOR * (length - RUN_LENGTH) ** 2
RUN_BASE_SCORE = 10
RUN_BONUS_FACTOR = 2

# Palette name -> RGB. Order matters for deterministic draws from a seeded generator.
PALETTE = {
    'red': (255, 0, 0),
    'green': (0, 255, 0),
    'blue': (0, 0, 255),
    'yellow': (255, 255, 0),
    'magenta': (255, 0, 255),
    'cyan': (0, 255, 255),
}

SAVE_FILE_NAME = "colorlines_save.json"
SAVE_FORMAT_VERSION = 1

# Animation timings (seconds)
MOVE_CELL_DURATION = 0.03
FADE_OUT_DURATION = 0.1
FADE_IN_DURATION = 0.2
SELECTION_BOUNCE_SPEED = 15.0

# Layout ratios relative to window size.
BOARD_MAX_WIDTH_PCT = 0.9
BOARD_MAX_HEIGHT_PCT = 0.65
BOARD_TOP_PCT = 0.15
MIN_CELL_SIZE = 20
BALL_PADDING = 5
BAR_LABEL_WIDTH = 135
DIALOG_HEIGHT = 100

BACKGROUND_COLOR = (128, 128, 128)
CELL_COLOR = (169, 170, 169)
BUTTON_COLOR = (128, 128, 128)
