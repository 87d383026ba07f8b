"""Action eligibility predicates. Pure functions, no side effects."""

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

from engine.cards import Card
from engine.hand import Hand
from engine.phase import Phase

if TYPE_CHECKING:
    from engine.game.state import GameState


def can_split(hand: Hand, balance: Decimal) -> bool:
    """Two cards of equal rank (or both worth 10), not yet split, stake covered."""
    if len(hand.cards) != 2 or hand.is_split:
        return False
    if balance < hand.bet:
        return False
    return hand.is_pair


def can_double(hand: Hand, balance: Decimal) -> bool:
    """Two cards, not yet doubled, stake covered."""
    if len(hand.cards) != 2 or hand.is_doubled:
        return False
    return balance >= hand.bet


def can_insurance(dealer_cards: Sequence[Card], phase: Phase) -> bool:
    """Insurance is offered only in the INSURANCE phase against an Ace up-card."""
    if phase != Phase.INSURANCE or not dealer_cards:
        return False
    return dealer_cards[0].is_ace


@dataclass(frozen=True)
class AvailableActions:
    """Which controls a renderer should enable."""

    can_deal: bool = False
    can_hit: bool = False
    can_stand: bool = False
    can_double: bool = False
    can_split: bool = False
    can_insurance: bool = False
    can_new_round: bool = False


def available_actions(state: "GameState") -> AvailableActions:
    """
    Summarize the legal player actions for a state.

    Everything is disabled while the advisory processing/animation lock is
    held, even though the engine itself would still accept the action.
    """
    if state.is_processing or state.is_animating:
        return AvailableActions()

    hand = state.active_hand
    in_turn = state.phase == Phase.PLAYER_TURN and hand is not None

    return AvailableActions(
        can_deal=(
            state.phase == Phase.IDLE
            and Decimal(0) < state.pending_bet <= state.balance
        ),
        can_hit=in_turn and hand.is_playable,
        can_stand=in_turn and not hand.is_stood,
        can_double=in_turn and hand.is_playable and can_double(hand, state.balance),
        can_split=in_turn and hand.is_playable and can_split(hand, state.balance),
        can_insurance=can_insurance(state.dealer_hand, state.phase),
        can_new_round=state.phase == Phase.ROUND_END,
    )
