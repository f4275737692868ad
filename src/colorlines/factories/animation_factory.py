from esper import World
from colorlines.components.animation_move import MoveAnimation
from colorlines.components.animation_fade import FadeAnimation
from colorlines.components.animation_spawn import SpawnAnimation
from colorlines.components.duration import Duration
from colorlines.constants import FADE_IN_DURATION, FADE_OUT_DURATION, MOVE_CELL_DURATION
from typing import Tuple, List, Sequence

ColorItem = Tuple[int, int, str]

class AnimationFactory:
    def __init__(self, world: World):
        self.world = world

    def create_move(self, path: Sequence[Tuple[int,int]], color: str, duration: float = MOVE_CELL_DURATION) -> int:
        """One entity per travelling piece; ``duration`` is the time spent per path step."""
        return self.world.create_entity(
            MoveAnimation(path=[tuple(p) for p in path], color=color),
            Duration(duration),
        )

    def create_fade_group(self, items: Sequence[ColorItem], duration: float = FADE_OUT_DURATION) -> List[int]:
        ents = []
        for row, col, color in items:
            ents.append(self.world.create_entity(FadeAnimation(pos=(row, col), color=color), Duration(duration)))
        return ents

    def create_spawn_group(self, items: Sequence[ColorItem], duration: float = FADE_IN_DURATION) -> List[int]:
        ents = []
        for row, col, color in items:
            ents.append(self.world.create_entity(SpawnAnimation(pos=(row, col), color=color), Duration(duration)))
        return ents
