"""Table orchestrator - owns the live round and sequences the dealer turn."""

import logging
from decimal import Decimal
from random import Random
from uuid import uuid4

from config import config
from engine.game.actions import (
    Action,
    AddChip,
    ClearBet,
    Deal,
    DealerPlay,
    Double,
    ForceRoundEnd,
    Hit,
    Insurance,
    NewRound,
    RevealHole,
    SetBalance,
    SetBet,
    SetProcessing,
    Split,
    Stand,
    UndoChip,
)
from engine.game.engine import RoundEngine
from engine.game.events import EventEmitter, EventHandler, EventType
from engine.game.state import GameState, create_initial_state
from engine.phase import Phase
from engine.rules import TableRules
from engine.schemas import GameSnapshot
from engine.validation import AvailableActions, available_actions

logger = logging.getLogger(__name__)


def default_rules() -> TableRules:
    """Table rules built from the environment configuration."""
    table = config.table
    return TableRules(
        deck_count=table.deck_count,
        reshuffle_threshold=table.reshuffle_threshold,
        dealer_hits_soft_17=table.dealer_hits_soft_17,
        max_dealer_draws=table.max_dealer_draws,
    )


class Table:
    """
    A single blackjack seat.

    Holds the current state and feeds actions through the round engine.
    Status messages and events are published here, not stored in the state.
    When a round reaches the dealer's turn the table reveals the hole card and
    plays the dealer out, guarding against a second dealer turn starting while
    one is in flight.
    """

    def __init__(
        self,
        balance: Decimal | int | float | None = None,
        rules: TableRules | None = None,
        rng: Random | None = None,
        auto_dealer: bool = True,
    ) -> None:
        """
        Initialize a table.

        Args:
            balance: Starting wallet balance (defaults to configuration)
            rules: Table rules (defaults to configuration)
            rng: Random number generator for reproducible shoes
            auto_dealer: Play the dealer turn as soon as it is reached
        """
        rng = rng or Random()
        if balance is None:
            balance = config.table.starting_balance

        self.engine = RoundEngine(rng=rng)
        self.events = EventEmitter()
        self.auto_dealer = auto_dealer
        self.message = "Place your bet"
        self.round_id: str | None = None
        self._state = create_initial_state(balance, rules or default_rules(), rng)
        self._dealer_in_flight = False

    @property
    def state(self) -> GameState:
        """Current round snapshot."""
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def balance(self) -> Decimal:
        return self._state.balance

    @property
    def available_actions(self) -> AvailableActions:
        return available_actions(self._state)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    def dispatch(self, action: Action) -> bool:
        """
        Apply an action to the live round.

        Returns:
            True if the action was accepted
        """
        step = self.engine.step(self._state, action)
        self._state = step.state
        if step.message is not None:
            self.message = step.message
        if step.accepted and action.trigger == Deal.trigger:
            self.round_id = str(uuid4())

        self.events.emit_all(step.events)

        if (
            step.accepted
            and self.auto_dealer
            and self._state.phase == Phase.DEALER_TURN
        ):
            self.play_dealer_turn()
        return step.accepted

    def play_dealer_turn(self) -> bool:
        """
        Reveal the hole card and run the dealer to settlement.

        Returns:
            True if the round was settled by this call
        """
        if self._dealer_in_flight or self._state.phase != Phase.DEALER_TURN:
            logger.debug("Dealer turn skipped in phase %s", self._state.phase.name)
            return False

        self._dealer_in_flight = True
        try:
            self.dispatch(SetProcessing(True))
            self.dispatch(RevealHole())
            settled = self.dispatch(DealerPlay())
        finally:
            self.dispatch(SetProcessing(False))
            self._dealer_in_flight = False
        return settled

    def sync_balance(self, balance: Decimal | int | float) -> bool:
        """Mirror the authoritative wallet balance; only between rounds."""
        if self._state.phase != Phase.IDLE:
            logger.debug("Balance sync deferred during %s", self._state.phase.name)
            return False
        return self.dispatch(SetBalance(balance))

    def snapshot(self) -> GameSnapshot:
        """Renderer-facing view of the round."""
        return GameSnapshot.from_state(self._state, self.message, self.round_id)

    # Convenience wrappers

    def set_bet(self, amount: Decimal | int | float) -> bool:
        return self.dispatch(SetBet(amount))

    def add_chip(self, value: Decimal | int | float) -> bool:
        return self.dispatch(AddChip(value))

    def undo_chip(self, value: Decimal | int | float) -> bool:
        return self.dispatch(UndoChip(value))

    def clear_bet(self) -> bool:
        return self.dispatch(ClearBet())

    def deal(self) -> bool:
        return self.dispatch(Deal())

    def insurance(self, accept: bool) -> bool:
        return self.dispatch(Insurance(accept))

    def hit(self) -> bool:
        return self.dispatch(Hit())

    def stand(self) -> bool:
        return self.dispatch(Stand())

    def double(self) -> bool:
        return self.dispatch(Double())

    def split(self) -> bool:
        return self.dispatch(Split())

    def new_round(self) -> bool:
        return self.dispatch(NewRound())

    def force_round_end(self) -> bool:
        return self.dispatch(ForceRoundEnd())
