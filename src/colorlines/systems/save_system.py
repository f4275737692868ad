from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from esper import World

from colorlines.constants import SAVE_FILE_NAME
from colorlines.events.bus import (
    EventBus,
    EVENT_CHECKPOINT,
    EVENT_GAME_STARTED,
    EVENT_PIECES_SPAWNED,
    EVENT_PREVIEW_CHANGED,
    EVENT_SCORE_CHANGED,
)
from colorlines.systems.persistence_codec import deserialize_into, serialize
from colorlines.systems.state_utils import get_board, get_preview, get_score_board

logger = logging.getLogger(__name__)


class SaveStore(Protocol):
    """Single-slot store for one opaque save record."""

    def save(self, record: dict) -> None: ...

    def load(self) -> Optional[Any]: ...


class JsonFileStore:
    """Keeps the save record as a JSON document on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @staticmethod
    def default_path() -> Path:
        return Path(__file__).resolve().parents[3] / "data" / SAVE_FILE_NAME

    def save(self, record: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(record, handle, indent=2)

    def load(self) -> Optional[Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Save file %s is unreadable (%s); ignoring it", self.path, exc)
            return None


class MemoryStore:
    """In-process store; keeps a JSON round-tripped copy so it behaves like a file."""

    def __init__(self, record: Any = None):
        self.record = record
        self.writes = 0

    def save(self, record: dict) -> None:
        self.record = json.loads(json.dumps(record))
        self.writes += 1

    def load(self) -> Optional[Any]:
        return self.record


class SaveSystem:
    """Writes a checkpoint of the whole game whenever the engine asks for one."""

    def __init__(self, world: World, event_bus: EventBus, store: SaveStore):
        self.world = world
        self.event_bus = event_bus
        self.store = store
        self.event_bus.subscribe(EVENT_CHECKPOINT, self.on_checkpoint)

    def on_checkpoint(self, sender, **kwargs):
        self.save_game(kwargs.get("reason", "checkpoint"))

    def save_game(self, reason: str = "checkpoint") -> None:
        try:
            self.store.save(serialize(self.world))
        except OSError as exc:
            # Checkpoints are fire-and-forget; the next one retries with the full state.
            logger.error("Checkpoint (%s) failed: %s", reason, exc)
            return
        logger.debug("Checkpoint saved (%s)", reason)

    def load_game(self) -> bool:
        """Restore the stored game into the world; returns False if a fresh game was made."""
        restored = deserialize_into(self.world, self.store.load())
        scores = get_score_board(self.world)
        reason = "fresh" if restored.fresh else "loaded"
        logger.info("Game %s (score %d, best %d)", reason, scores.score, scores.best_score)
        self.event_bus.emit(EVENT_GAME_STARTED, reason=reason)
        if restored.fresh:
            spawned = [(r, c, piece.color) for (r, c), piece in get_board(self.world).occupied()]
            self.event_bus.emit(EVENT_PIECES_SPAWNED, pieces=spawned)
        self.event_bus.emit(EVENT_PREVIEW_CHANGED, pieces=get_preview(self.world).colors())
        self.event_bus.emit(
            EVENT_SCORE_CHANGED,
            score=scores.score,
            best_score=scores.best_score,
            combo=scores.combo,
            delta=0,
        )
        if restored.fresh:
            self.event_bus.emit(EVENT_CHECKPOINT, reason="fresh")
        return not restored.fresh
