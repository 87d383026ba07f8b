"""Round settlement - per-hand outcome and payout."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from engine.cards import Card
from engine.hand import Hand, calculate_hand_total, is_blackjack
from engine.money import ZERO, to_money

# Insurance returns the stake plus 2:1
INSURANCE_RETURN = Decimal(3)
DEFAULT_BLACKJACK_PAYOUT = Decimal("1.5")


class HandResult(str, Enum):
    """Outcome of a single player hand."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandOutcome:
    """Settled result of one player hand."""

    hand_index: int
    result: HandResult
    payout: Decimal
    dealer_total: int
    player_total: int


@dataclass(frozen=True)
class RoundResult:
    """Settled result of a whole round. `total_payout` includes insurance."""

    outcomes: tuple[HandOutcome, ...]
    total_payout: Decimal
    insurance_payout: Decimal

    @property
    def main_outcome(self) -> HandOutcome | None:
        """Outcome of the first hand, which drives the status message."""
        return self.outcomes[0] if self.outcomes else None


def settle_hand(
    hand: Hand,
    dealer_total: int,
    dealer_blackjack: bool,
    blackjack_payout: Decimal = DEFAULT_BLACKJACK_PAYOUT,
) -> tuple[HandResult, Decimal, int]:
    """
    Settle one hand against the dealer.

    Returns:
        (result, payout, player_total); payout includes the returned stake
    """
    player_total = hand.total
    player_blackjack = is_blackjack(hand.cards) and not hand.is_split
    bet = hand.bet

    if player_total > 21:
        return HandResult.LOSE, ZERO, player_total
    if player_blackjack and not dealer_blackjack:
        return HandResult.BLACKJACK, to_money(bet + bet * blackjack_payout), player_total
    if dealer_blackjack and not player_blackjack:
        return HandResult.LOSE, ZERO, player_total
    if dealer_total > 21 or player_total > dealer_total:
        return HandResult.WIN, to_money(bet * 2), player_total
    if player_total < dealer_total:
        return HandResult.LOSE, ZERO, player_total
    return HandResult.PUSH, to_money(bet), player_total


def settle_hands(
    dealer_cards: Sequence[Card],
    player_hands: Sequence[Hand],
    blackjack_payout: Decimal = DEFAULT_BLACKJACK_PAYOUT,
) -> RoundResult:
    """
    Settle every player hand against the final dealer hand.

    Insurance resolves first and independently: it returns three times the
    insurance stake on a dealer blackjack and nothing otherwise.
    """
    dealer_total = calculate_hand_total(dealer_cards).total
    dealer_blackjack = is_blackjack(dealer_cards)

    insurance_payout = ZERO
    if dealer_blackjack:
        for hand in player_hands:
            if hand.insurance_bet > 0:
                insurance_payout = to_money(
                    insurance_payout + hand.insurance_bet * INSURANCE_RETURN
                )

    outcomes = []
    hands_payout = ZERO
    for i, hand in enumerate(player_hands):
        result, payout, player_total = settle_hand(
            hand, dealer_total, dealer_blackjack, blackjack_payout
        )
        hands_payout = to_money(hands_payout + payout)
        outcomes.append(
            HandOutcome(
                hand_index=i,
                result=result,
                payout=payout,
                dealer_total=dealer_total,
                player_total=player_total,
            )
        )

    return RoundResult(
        outcomes=tuple(outcomes),
        total_payout=to_money(hands_payout + insurance_payout),
        insurance_payout=insurance_payout,
    )


def describe_result(result: RoundResult) -> str:
    """Status line for a settled round, driven by the first hand."""
    outcome = result.main_outcome
    if outcome is None:
        return "Round complete"
    return {
        HandResult.BLACKJACK: "Blackjack! You win!",
        HandResult.WIN: "You win!",
        HandResult.PUSH: "Push - Bet returned",
    }.get(outcome.result, "Dealer wins")
