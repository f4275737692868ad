from typing import List, Optional, Tuple

from esper import World

from colorlines.components.animation_fade import FadeAnimation
from colorlines.components.animation_move import MoveAnimation
from colorlines.components.animation_spawn import SpawnAnimation
from colorlines.components.duration import Duration
from colorlines.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_ANIMATION_START,
    EVENT_GAME_STARTED,
    EVENT_PIECE_MOVE_DO,
    EVENT_PIECE_MOVE_REQUEST,
    EVENT_PIECES_SPAWNED,
    EVENT_RUNS_CLEARED,
    EVENT_TICK,
    EVENT_UNDO_APPLIED,
)
from colorlines.factories.animation_factory import AnimationFactory


class AnimationSystem:
    """Drives timing of animations; each animation is its own entity.

    A move animation walks the piece along its path and, on arrival, asks the engine
    to commit the move with EVENT_PIECE_MOVE_DO. Fades are purely cosmetic.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.factory = AnimationFactory(world)
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_PIECE_MOVE_REQUEST, self.on_move_request)
        event_bus.subscribe(EVENT_RUNS_CLEARED, self.on_runs_cleared)
        event_bus.subscribe(EVENT_PIECES_SPAWNED, self.on_pieces_spawned)
        event_bus.subscribe(EVENT_GAME_STARTED, self.on_board_replaced)
        event_bus.subscribe(EVENT_UNDO_APPLIED, self.on_board_replaced)

    # -- queries --------------------------------------------------------------

    def move_position(self) -> Optional[Tuple[float, float]]:
        """Fractional (row, col) of the travelling piece, or None when nothing moves."""
        for ent, move in self.world.get_component(MoveAnimation):
            return move.position(self.world.component_for_entity(ent, Duration).seconds)
        return None

    def is_busy(self) -> bool:
        return any(True for _ in self.world.get_component(MoveAnimation))

    # -- event handlers -------------------------------------------------------

    def on_move_request(self, sender, **kwargs):
        path = kwargs.get('path')
        color = kwargs.get('color')
        if not path or self.is_busy():
            return
        self.factory.create_move(path, color)
        self.event_bus.emit(EVENT_ANIMATION_START, kind='move', items=list(path))

    def on_runs_cleared(self, sender, **kwargs):
        items = kwargs.get('colors', [])
        if items:
            self.factory.create_fade_group(items)
            self.event_bus.emit(EVENT_ANIMATION_START, kind='fade', items=[(r, c) for r, c, _ in items])

    def on_pieces_spawned(self, sender, **kwargs):
        items = kwargs.get('pieces', [])
        if items:
            self.factory.create_spawn_group(items)
            self.event_bus.emit(EVENT_ANIMATION_START, kind='spawn', items=[(r, c) for r, c, _ in items])

    def on_board_replaced(self, sender, **kwargs):
        # Fades belong to the board that was just replaced.
        self._delete_all(FadeAnimation)
        self._delete_all(SpawnAnimation)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        self._advance_fades(dt)
        self._advance_spawns(dt)
        self._advance_move(dt)

    # -- progression ----------------------------------------------------------

    def _advance_fades(self, dt: float) -> None:
        fades = list(self.world.get_component(FadeAnimation))
        if not fades:
            return
        for ent, fade in fades:
            d = self.world.component_for_entity(ent, Duration)
            fade.alpha = max(fade.alpha - dt / d.seconds, 0.0)
        if all(fade.alpha <= 0.0 for _, fade in fades):
            positions = [fade.pos for _, fade in fades]
            for ent, _ in fades:
                self.world.delete_entity(ent, immediate=True)
            self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind='fade', items=positions)

    def _advance_spawns(self, dt: float) -> None:
        spawns = list(self.world.get_component(SpawnAnimation))
        if not spawns:
            return
        for ent, spawn in spawns:
            d = self.world.component_for_entity(ent, Duration)
            spawn.alpha = min(spawn.alpha + dt / d.seconds, 1.0)
        if all(spawn.alpha >= 1.0 for _, spawn in spawns):
            positions = [spawn.pos for _, spawn in spawns]
            for ent, _ in spawns:
                self.world.delete_entity(ent, immediate=True)
            self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind='spawn', items=positions)

    def _advance_move(self, dt: float) -> None:
        moves = list(self.world.get_component(MoveAnimation))
        if not moves:
            return
        ent, move = moves[0]
        step = self.world.component_for_entity(ent, Duration).seconds
        last = len(move.path) - 1
        move.timer += dt
        while move.index < last and move.timer >= step:
            move.timer -= step
            move.index += 1
        if move.index < last:
            return
        src, dst, path = move.src, move.dst, list(move.path)
        # Remove first: committing the move may start new fades on this same tick.
        self.world.delete_entity(ent, immediate=True)
        self.event_bus.emit(EVENT_PIECE_MOVE_DO, src=src, dst=dst)
        self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind='move', items=path)

    def _delete_all(self, comp_type) -> None:
        ents: List[int] = [ent for ent, _ in self.world.get_component(comp_type)]
        for ent in ents:
            self.world.delete_entity(ent, immediate=True)
