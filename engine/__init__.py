"""Blackjack round engine - 100% UI-agnostic."""

from engine.cards import Card, Rank, Suit, create_card
from engine.dealer import should_dealer_hit
from engine.hand import Hand, calculate_hand_total, is_blackjack, is_busted
from engine.phase import Phase
from engine.rules import TableRules
from engine.settlement import HandOutcome, HandResult, RoundResult, settle_hands
from engine.shoe import create_shoe, draw_card
from engine.validation import can_double, can_insurance, can_split

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "create_card",
    "should_dealer_hit",
    "Hand",
    "calculate_hand_total",
    "is_blackjack",
    "is_busted",
    "Phase",
    "TableRules",
    "HandOutcome",
    "HandResult",
    "RoundResult",
    "settle_hands",
    "create_shoe",
    "draw_card",
    "can_double",
    "can_insurance",
    "can_split",
]
