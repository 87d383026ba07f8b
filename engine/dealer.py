"""Dealer drawing policy."""

import logging
from dataclasses import dataclass
from random import Random
from typing import Iterable

from engine.cards import Card
from engine.hand import calculate_hand_total
from engine.rules import TableRules
from engine.shoe import Shoe, ensure_cards

logger = logging.getLogger(__name__)


def should_dealer_hit(cards: Iterable[Card], hits_soft_17: bool) -> bool:
    """Dealer hits below 17, and on soft 17 when the table says so."""
    total, is_soft = calculate_hand_total(cards)
    if total < 17:
        return True
    if total == 17 and is_soft and hits_soft_17:
        return True
    return False


@dataclass(frozen=True)
class DealerPlay:
    """Outcome of the dealer's draw loop."""

    cards: tuple[Card, ...]
    shoe: Shoe
    drawn: tuple[Card, ...]
    reshuffled: bool
    hit_draw_limit: bool


def play_dealer(
    cards: tuple[Card, ...],
    shoe: Shoe,
    rules: TableRules,
    rng: Random | None = None,
) -> DealerPlay:
    """
    Draw for the dealer until the policy stands or the draw cap is reached.

    The cap only guards termination against a corrupted shoe; reaching it
    stops the dealer without failing the round.
    """
    drawn: list[Card] = []
    reshuffled = False

    while should_dealer_hit(cards, rules.dealer_hits_soft_17):
        if len(drawn) >= rules.max_dealer_draws:
            break
        shoe, fresh = ensure_cards(shoe, 1, rules.deck_count, rng)
        reshuffled = reshuffled or fresh
        card = Card(shoe[0])
        shoe = shoe[1:]
        cards = cards + (card,)
        drawn.append(card)
        logger.debug(
            "Dealer draw #%d: %s, total %d",
            len(drawn),
            card,
            calculate_hand_total(cards).total,
        )

    hit_limit = len(drawn) >= rules.max_dealer_draws and should_dealer_hit(
        cards, rules.dealer_hits_soft_17
    )
    if hit_limit:
        logger.warning(
            "Dealer stopped at the %d-draw safety limit with total %d",
            rules.max_dealer_draws,
            calculate_hand_total(cards).total,
        )

    return DealerPlay(
        cards=cards,
        shoe=shoe,
        drawn=tuple(drawn),
        reshuffled=reshuffled,
        hit_draw_limit=hit_limit,
    )
