"""Pydantic snapshots of a round for renderers."""

from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict

from engine.cards import Card
from engine.hand import Hand, calculate_hand_total
from engine.settlement import HandOutcome, RoundResult
from engine.validation import AvailableActions, available_actions

if TYPE_CHECKING:
    from engine.game.state import GameState


class CardSchema(BaseModel):
    """Card representation."""

    index: int
    rank: str
    suit: str
    value: int

    @classmethod
    def from_card(cls, card: Card) -> "CardSchema":
        return cls(
            index=card.index,
            rank=str(card.rank),
            suit=card.suit.label,
            value=card.value,
        )


class HandSchema(BaseModel):
    """Player hand representation."""

    cards: list[CardSchema]
    total: int
    is_soft: bool
    bet: Decimal
    is_doubled: bool
    is_split: bool
    is_stood: bool
    is_busted: bool
    is_blackjack: bool
    insurance_bet: Decimal

    @classmethod
    def from_hand(cls, hand: Hand) -> "HandSchema":
        return cls(
            cards=[CardSchema.from_card(card) for card in hand.cards],
            total=hand.total,
            is_soft=hand.is_soft,
            bet=hand.bet,
            is_doubled=hand.is_doubled,
            is_split=hand.is_split,
            is_stood=hand.is_stood,
            is_busted=hand.is_busted,
            is_blackjack=hand.is_blackjack,
            insurance_bet=hand.insurance_bet,
        )


class HandOutcomeSchema(BaseModel):
    """Settled hand."""

    hand_index: int
    result: Literal["win", "lose", "push", "blackjack"]
    payout: Decimal
    dealer_total: int
    player_total: int

    @classmethod
    def from_outcome(cls, outcome: HandOutcome) -> "HandOutcomeSchema":
        return cls(
            hand_index=outcome.hand_index,
            result=outcome.result.value,
            payout=outcome.payout,
            dealer_total=outcome.dealer_total,
            player_total=outcome.player_total,
        )


class RoundResultSchema(BaseModel):
    """Round result."""

    outcomes: list[HandOutcomeSchema]
    total_payout: Decimal
    insurance_payout: Decimal

    @classmethod
    def from_result(cls, result: RoundResult) -> "RoundResultSchema":
        return cls(
            outcomes=[HandOutcomeSchema.from_outcome(o) for o in result.outcomes],
            total_payout=result.total_payout,
            insurance_payout=result.insurance_payout,
        )


class AvailableActionsSchema(BaseModel):
    """Enabled controls."""

    model_config = ConfigDict(from_attributes=True)

    can_deal: bool
    can_hit: bool
    can_stand: bool
    can_double: bool
    can_split: bool
    can_insurance: bool
    can_new_round: bool


class GameSnapshot(BaseModel):
    """
    What a renderer may see of a round.

    The hole card stays hidden (and out of the dealer total) until it is
    revealed, and the shoe order is never exposed.
    """

    phase: str
    round_id: str | None = None
    message: str
    dealer_cards: list[CardSchema]
    dealer_hidden_cards: int
    dealer_total: int
    dealer_hole_revealed: bool
    player_hands: list[HandSchema]
    active_hand_index: int
    balance: Decimal
    pending_bet: Decimal
    cards_remaining: int
    round_result: RoundResultSchema | None = None
    actions: AvailableActionsSchema

    @classmethod
    def from_state(
        cls,
        state: "GameState",
        message: str = "",
        round_id: str | None = None,
    ) -> "GameSnapshot":
        """Build a snapshot from a game state."""
        visible = list(state.dealer_hand)
        if not state.dealer_hole_revealed:
            visible = visible[:1]

        actions: AvailableActions = available_actions(state)
        return cls(
            phase=state.phase.name,
            round_id=round_id,
            message=message,
            dealer_cards=[CardSchema.from_card(card) for card in visible],
            dealer_hidden_cards=len(state.dealer_hand) - len(visible),
            dealer_total=calculate_hand_total(visible).total,
            dealer_hole_revealed=state.dealer_hole_revealed,
            player_hands=[HandSchema.from_hand(hand) for hand in state.player_hands],
            active_hand_index=state.active_hand_index,
            balance=state.balance,
            pending_bet=state.pending_bet,
            cards_remaining=state.cards_remaining,
            round_result=(
                RoundResultSchema.from_result(state.round_result)
                if state.round_result is not None
                else None
            ),
            actions=AvailableActionsSchema.model_validate(actions),
        )
