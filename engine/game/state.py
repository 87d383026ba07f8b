"""Round state snapshot."""

from dataclasses import dataclass, field
from decimal import Decimal
from random import Random

from engine.cards import Card
from engine.hand import Hand
from engine.money import ZERO, to_money
from engine.phase import Phase
from engine.rules import TableRules
from engine.settlement import RoundResult
from engine.shoe import Shoe, create_shoe


@dataclass(frozen=True)
class GameState:
    """
    Complete, immutable snapshot of one round.

    Every accepted action produces a new instance. The advisory lock flags
    are excluded from equality so duplicate dispatch can be checked by
    comparing states.
    """

    phase: Phase = Phase.IDLE
    shoe: Shoe = ()
    dealer_hand: tuple[Card, ...] = ()
    dealer_hole_revealed: bool = False
    player_hands: tuple[Hand, ...] = ()
    active_hand_index: int = 0
    balance: Decimal = ZERO
    pending_bet: Decimal = ZERO
    round_result: RoundResult | None = None
    rules: TableRules = field(default_factory=TableRules)
    is_processing: bool = field(default=False, compare=False)
    is_animating: bool = field(default=False, compare=False)

    @property
    def active_hand(self) -> Hand | None:
        """Get the current active hand."""
        if 0 <= self.active_hand_index < len(self.player_hands):
            return self.player_hands[self.active_hand_index]
        return None

    @property
    def dealer_up_card(self) -> Card | None:
        return self.dealer_hand[0] if self.dealer_hand else None

    @property
    def cards_remaining(self) -> int:
        return len(self.shoe)


def create_initial_state(
    balance: Decimal | int | float = Decimal("1000"),
    rules: TableRules | None = None,
    rng: Random | None = None,
) -> GameState:
    """Create an IDLE state with a freshly shuffled shoe."""
    rules = rules or TableRules()
    return GameState(
        shoe=create_shoe(rules.deck_count, rng),
        balance=to_money(balance),
        rules=rules,
    )
