"""Card model - cards are slots in a multi-deck arena, identified by index."""

import re
from dataclasses import dataclass
from enum import Enum

CARDS_PER_DECK = 52
RANKS_PER_SUIT = 13

_SUIT_SYMBOLS = "♠♥♦♣"
_RANK_LABELS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
_RANK_POINTS = (11, 2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 10, 10)


class Suit(Enum):
    """Card suits, in index order."""

    SPADES = 0
    HEARTS = 1
    DIAMONDS = 2
    CLUBS = 3

    def __str__(self) -> str:
        return _SUIT_SYMBOLS[self.value]

    @property
    def label(self) -> str:
        """Lowercase suit name ('spades', 'hearts', ...)."""
        return self.name.lower()


class Rank(Enum):
    """Card ranks, in index order (Ace first)."""

    ACE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7
    NINE = 8
    TEN = 9
    JACK = 10
    QUEEN = 11
    KING = 12

    def __str__(self) -> str:
        return _RANK_LABELS[self.value]

    @property
    def blackjack_value(self) -> int:
        """Points before soft-ace adjustment: Ace 11, faces 10."""
        return _RANK_POINTS[self.value]

    @property
    def is_ace(self) -> bool:
        return self is Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        return self.value >= Rank.TEN.value


# Rank then suit, e.g. "10D", "TD", "A♠", "kh"
_CARD_PATTERN = re.compile(r"(10|[2-9TJQKA])([SHDC♠♥♦♣])")
_RANK_BY_LABEL = {label: Rank(i) for i, label in enumerate(_RANK_LABELS)} | {"T": Rank.TEN}
_SUIT_BY_LETTER = {letter: Suit(i) for i, letter in enumerate("SHDC")} | {
    symbol: Suit(i) for i, symbol in enumerate(_SUIT_SYMBOLS)
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    Only the arena index is stored. Rank, suit and value are derived, so two
    physical decks never produce cards with the same identity.
    """

    index: int

    def __str__(self) -> str:
        return str(self.rank) + str(self.suit)

    def __repr__(self) -> str:
        return f"Card(index={self.index}, {self}, deck={self.deck})"

    @property
    def rank(self) -> Rank:
        return Rank(self.index % RANKS_PER_SUIT)

    @property
    def suit(self) -> Suit:
        return Suit(self.index % CARDS_PER_DECK // RANKS_PER_SUIT)

    @property
    def deck(self) -> int:
        """Which physical deck of the shoe this card belongs to."""
        return self.index // CARDS_PER_DECK

    @property
    def value(self) -> int:
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank is Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        return self.rank.is_ten_value

    @classmethod
    def from_string(cls, text: str, deck: int = 0) -> "Card":
        """
        Parse a card name such as 'AS', '10d', 'TD' or 'k♥'.

        Args:
            text: Rank followed by a suit letter or symbol, any case
            deck: Physical deck within the shoe the card comes from

        Raises:
            ValueError: If the name or deck is not valid
        """
        match = _CARD_PATTERN.fullmatch(text.strip().upper())
        if match is None:
            raise ValueError(f"Invalid card string: {text!r}")
        if deck < 0:
            raise ValueError(f"Invalid deck: {deck}")

        rank = _RANK_BY_LABEL[match.group(1)]
        suit = _SUIT_BY_LETTER[match.group(2)]
        return cls(deck * CARDS_PER_DECK + suit.value * RANKS_PER_SUIT + rank.value)


def create_card(index: int) -> Card:
    """Build the card stored at an arena index."""
    return Card(index)
