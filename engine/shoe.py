"""Shoe management - an ordered tuple of arena indices drawn from the front."""

from random import Random
from typing import NamedTuple

from engine.cards import CARDS_PER_DECK, Card, create_card

Shoe = tuple[int, ...]


class Draw(NamedTuple):
    """Result of drawing one card."""

    card: Card
    shoe: Shoe
    reshuffled: bool


def create_shoe(deck_count: int = 6, rng: Random | None = None) -> Shoe:
    """
    Build a freshly shuffled shoe.

    Args:
        deck_count: Number of decks in the shoe
        rng: Random number generator for shuffling

    Returns:
        A uniformly shuffled permutation of the arena indices 0..deck_count*52-1
    """
    if deck_count < 1:
        raise ValueError("Shoe must have at least 1 deck")

    rng = rng or Random()
    cards = list(range(deck_count * CARDS_PER_DECK))
    # Random.shuffle is an in-place Fisher-Yates
    rng.shuffle(cards)
    return tuple(cards)


def ensure_cards(
    shoe: Shoe,
    minimum: int,
    deck_count: int,
    rng: Random | None = None,
) -> tuple[Shoe, bool]:
    """Replace the shoe with a fresh one when fewer than `minimum` cards remain."""
    if len(shoe) < minimum:
        return create_shoe(deck_count, rng), True
    return shoe, False


def draw_card(
    shoe: Shoe,
    deck_count: int = 6,
    reshuffle_threshold: int = CARDS_PER_DECK,
    rng: Random | None = None,
) -> Draw:
    """
    Draw the front card, reshuffling first if the shoe is below the threshold.

    This is the between-rounds draw rule. Draws inside a round go through
    `ensure_cards` with the number of cards actually needed, so a hand is not
    split across two shoes. Reshuffling discards every remaining card.
    """
    shoe, reshuffled = ensure_cards(shoe, max(reshuffle_threshold, 1), deck_count, rng)
    return Draw(create_card(shoe[0]), shoe[1:], reshuffled)
