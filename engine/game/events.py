"""Round events - the side channel between the engine and the renderer."""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """What happened during a step. Values are stable wire names."""

    # Wallet
    BET_CHANGED = "bet_changed"
    BALANCE_SYNCED = "balance_synced"

    # Round lifecycle
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"
    ROUND_FORCED = "round_forced"

    # Shoe
    CARD_DEALT = "card_dealt"
    SHOE_SHUFFLED = "shoe_shuffled"

    INSURANCE_OFFERED = "insurance_offered"
    INSURANCE_TAKEN = "insurance_taken"
    INSURANCE_DECLINED = "insurance_declined"

    # Player
    PLAYER_HIT = "player_hit"
    PLAYER_STAND = "player_stand"
    PLAYER_DOUBLE = "player_double"
    PLAYER_SPLIT = "player_split"
    PLAYER_BUSTS = "player_busts"
    PLAYER_BLACKJACK = "player_blackjack"

    # Dealer
    DEALER_REVEALS = "dealer_reveals"
    DEALER_HITS = "dealer_hits"
    DEALER_STANDS = "dealer_stands"
    DEALER_BUSTS = "dealer_busts"
    DEALER_BLACKJACK = "dealer_blackjack"
    DEALER_DRAW_LIMIT = "dealer_draw_limit"

    INVALID_ACTION = "invalid_action"


@dataclass(frozen=True)
class GameEvent:
    """
    One thing a renderer may want to animate or announce.

    Events carry presentation (card reveals, totals, rejection reasons) so the
    game state itself stays authoritative data only.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        details = ", ".join(f"{key}={value}" for key, value in self.data.items())
        return f"{self.event_type.value}({details})"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Fan-out of round events to listeners.

    Listeners register for one event type, or for every event with
    ``event_type=None``. The most recent events are kept for late joiners.
    """

    def __init__(self, history_limit: int = 500) -> None:
        self._listeners: defaultdict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._recent: deque[GameEvent] = deque(maxlen=history_limit)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Register ``handler`` for ``event_type`` (all events when None)."""
        self._listeners[event_type].append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Remove a handler; unknown handlers are ignored."""
        listeners = self._listeners.get(event_type)
        if listeners and handler in listeners:
            listeners.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """
        Deliver an event to typed listeners first, then catch-all listeners.

        A listener that raises is logged and skipped. The round has already
        moved on and the other listeners still need the event.
        """
        self._recent.append(event)
        targets = [*self._listeners.get(event.event_type, ()), *self._listeners.get(None, ())]
        for listener in targets:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, event.event_type.value)

    def emit_all(self, events: Iterable[GameEvent]) -> None:
        for event in events:
            self.emit(event)

    @property
    def history(self) -> list[GameEvent]:
        """Recent events, oldest first."""
        return list(self._recent)

    def clear_history(self) -> None:
        self._recent.clear()


def new_event(event_type: EventType, **data: Any) -> GameEvent:
    """Create an event without emitting it."""
    return GameEvent(event_type=event_type, data=data)
