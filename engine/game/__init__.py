"""Round state machine and orchestration."""

from engine.game import actions
from engine.game.engine import RoundEngine, Step
from engine.game.events import EventEmitter, EventType, GameEvent
from engine.game.state import GameState, create_initial_state
from engine.game.table import Table

__all__ = [
    "actions",
    "RoundEngine",
    "Step",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "GameState",
    "create_initial_state",
    "Table",
]
