"""Hand evaluation for blackjack."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Iterator, NamedTuple

from engine.cards import Card
from engine.money import ZERO


class HandTotal(NamedTuple):
    """Best total of a set of cards."""

    total: int
    is_soft: bool


def calculate_hand_total(cards: Iterable[Card]) -> HandTotal:
    """
    Calculate the best hand value.

    Aces start at 11 and are reduced to 1 one at a time while the hand
    would bust. The total is soft when an Ace is still counted as 11.
    """
    total = 0
    aces = 0

    for card in cards:
        total += card.value
        if card.is_ace:
            aces += 1

    # Reduce aces from 11 to 1 as needed
    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return HandTotal(total, aces > 0 and total <= 21)


def is_blackjack(cards: Iterable[Card]) -> bool:
    """Check for a natural: exactly 2 cards totalling 21."""
    cards = tuple(cards)
    return len(cards) == 2 and calculate_hand_total(cards).total == 21


def is_busted(cards: Iterable[Card]) -> bool:
    """Check if the cards total more than 21."""
    return calculate_hand_total(cards).total > 21


@dataclass(frozen=True)
class Hand:
    """
    Immutable player hand.

    The flags are recorded when the hand changes rather than derived, so a
    split 21 stays `is_blackjack=False` and a doubled hand stays stood.
    """

    cards: tuple[Card, ...] = ()
    bet: Decimal = ZERO
    is_doubled: bool = False
    is_split: bool = False
    is_stood: bool = False
    is_busted: bool = False
    is_blackjack: bool = False
    insurance_bet: Decimal = ZERO

    @classmethod
    def deal(cls, cards: Iterable[Card], bet: Decimal) -> "Hand":
        """Create the opening hand of a round."""
        cards = tuple(cards)
        return cls(cards=cards, bet=bet, is_blackjack=is_blackjack(cards))

    def with_card(self, card: Card) -> "Hand":
        """Return a copy with one more card; a bust also stands the hand."""
        cards = self.cards + (card,)
        busted = is_busted(cards)
        return replace(
            self,
            cards=cards,
            is_busted=busted,
            is_stood=self.is_stood or busted,
        )

    @property
    def total(self) -> int:
        return calculate_hand_total(self.cards).total

    @property
    def is_soft(self) -> bool:
        return calculate_hand_total(self.cards).is_soft

    @property
    def is_playable(self) -> bool:
        """A hand still takes actions until it stands or busts."""
        return not (self.is_stood or self.is_busted)

    @property
    def is_pair(self) -> bool:
        """Two cards that may be split: same rank, or both worth 10."""
        if len(self.cards) != 2:
            return False
        first, second = self.cards
        return first.rank == second.rank or (first.value == 10 and second.value == 10)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        if self.is_blackjack:
            label = "BLACKJACK"
        elif self.is_busted:
            label = f"BUST {self.total}"
        else:
            label = f"soft {self.total}" if self.is_soft else str(self.total)
        return " ".join(map(str, self.cards)) + f" [{label}]"
