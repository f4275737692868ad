import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from tests.helpers import capture, drive_ticks, set_board, set_preview

__all__ = [
    "capture",
    "drive_ticks",
    "set_board",
    "set_preview",
]
