"""Pytest fixtures for round engine tests."""

from dataclasses import replace
from decimal import Decimal
from random import Random

import pytest

from engine.cards import Card
from engine.game import RoundEngine, create_initial_state
from engine.game.actions import Deal
from engine.hand import Hand
from engine.rules import TableRules

# Filler after a rigged sequence; keeps the shoe above the reshuffle threshold
FILLER = Card.from_string("2C").index


def _cards(*names: str) -> tuple[Card, ...]:
    return tuple(Card.from_string(name) for name in names)


def _rigged_shoe(*names: str, length: int = 312) -> tuple[int, ...]:
    front = [card.index for card in _cards(*names)]
    return tuple(front + [FILLER] * max(length - len(front), 0))


def _hand(*names: str, bet: Decimal | int = 10, **flags) -> Hand:
    return replace(Hand.deal(_cards(*names), Decimal(bet)), **flags)


@pytest.fixture
def make_cards():
    """Build cards from strings like 'AS', '10H', 'KD'."""
    return _cards


@pytest.fixture
def rigged_shoe():
    """Build a shoe that deals the named cards first, padded with filler."""
    return _rigged_shoe


@pytest.fixture
def make_hand():
    """Build a player hand from card strings."""
    return _hand


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def rules():
    """Default table rules."""
    return TableRules()


@pytest.fixture
def engine(rng):
    """Round engine with a seeded shuffle."""
    return RoundEngine(rng=rng)


@pytest.fixture
def idle_state(rules, rng):
    """A fresh IDLE state with a 1000 balance."""
    return create_initial_state(Decimal("1000"), rules, rng)


@pytest.fixture
def dealt(engine, idle_state):
    """
    Deal a round from a rigged shoe and return the step.

    Cards are drawn player, dealer, player, dealer, then any extra cards in
    order for hits, splits and dealer draws.
    """

    def _deal(*names: str, bet: Decimal | int = 10, balance: Decimal | int = 1000):
        state = replace(
            idle_state,
            shoe=_rigged_shoe(*names),
            balance=Decimal(balance),
            pending_bet=Decimal(bet),
        )
        return engine.step(state, Deal())

    return _deal


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return _hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return _hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return _hand("10S", "6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return _hand("8S", "8H")
