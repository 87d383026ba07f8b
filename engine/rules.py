"""Blackjack table rules."""

from dataclasses import dataclass
from decimal import Decimal

from engine.cards import CARDS_PER_DECK

MAX_DEALER_DRAWS = 10


@dataclass(frozen=True)
class TableRules:
    """
    Blackjack table rules configuration.

    Travels inside the game state so every transition is a function of the
    state and the action alone.
    """

    # Deck configuration
    deck_count: int = 6
    reshuffle_threshold: int = CARDS_PER_DECK  # Fresh shoe below this many cards

    # Dealer rules
    dealer_hits_soft_17: bool = True  # H17 vs S17
    max_dealer_draws: int = MAX_DEALER_DRAWS

    # Blackjack payout (3:2 = 1.5, 6:5 = 1.2)
    blackjack_payout: Decimal = Decimal("1.5")

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.deck_count < 1 or self.deck_count > 8:
            raise ValueError("deck_count must be between 1 and 8")
        if not 1 <= self.reshuffle_threshold <= self.shoe_size:
            raise ValueError("reshuffle_threshold must be between 1 and the shoe size")
        if Decimal(str(self.blackjack_payout)) < 1:
            raise ValueError("blackjack_payout must be at least 1.0")
        if self.max_dealer_draws < 1:
            raise ValueError("max_dealer_draws must be at least 1")

    @property
    def shoe_size(self) -> int:
        """Number of cards in a full shoe."""
        return self.deck_count * CARDS_PER_DECK

    @classmethod
    def hits_soft_17(cls) -> "TableRules":
        """Six decks, dealer hits soft 17 (house default)."""
        return cls(deck_count=6, dealer_hits_soft_17=True)

    @classmethod
    def stands_soft_17(cls) -> "TableRules":
        """Six decks, dealer stands on all 17s."""
        return cls(deck_count=6, dealer_hits_soft_17=False)
