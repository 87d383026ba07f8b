"""Tests for the round engine reducer."""

from dataclasses import replace
from decimal import Decimal

import pytest

from engine.game.actions import (
    AddChip,
    AnimationComplete,
    AnimationStart,
    ClearBet,
    Deal,
    DealerPlay,
    Double,
    ForceRoundEnd,
    Hit,
    Insurance,
    NewRound,
    RevealHole,
    SetBalance,
    SetBet,
    SetProcessing,
    Split,
    Stand,
    UndoChip,
)
from engine.game.events import EventType
from engine.phase import Phase
from engine.rules import TableRules
from engine.settlement import HandResult


def event_types(step):
    return [event.event_type for event in step.events]


class TestBetting:
    """Tests for chip and bet actions."""

    def test_add_chips(self, engine, idle_state):
        state = engine.reduce(idle_state, AddChip(25))
        state = engine.reduce(state, AddChip(Decimal("5.50")))
        assert state.pending_bet == Decimal("30.50")
        assert state.balance == Decimal("1000")

    def test_add_chip_rounds_to_cents(self, engine, idle_state):
        state = engine.reduce(idle_state, AddChip(0.1))
        state = engine.reduce(state, AddChip(0.2))
        assert state.pending_bet == Decimal("0.30")

    def test_add_chip_over_balance_rejected(self, engine, idle_state):
        state = engine.reduce(idle_state, AddChip(900))
        step = engine.step(state, AddChip(200))
        assert not step.accepted
        assert step.state is state

    def test_add_chip_non_positive_rejected(self, engine, idle_state):
        assert not engine.step(idle_state, AddChip(0)).accepted
        assert not engine.step(idle_state, AddChip(-5)).accepted

    @pytest.mark.parametrize(
        "action",
        [
            AddChip(float("nan")),
            AddChip(float("inf")),
            SetBet(float("nan")),
            SetBet(Decimal("-Infinity")),
            UndoChip(float("inf")),
            AddChip("ten"),
        ],
    )
    def test_non_finite_amount_is_noop(self, engine, idle_state, action):
        step = engine.step(idle_state, action)
        assert not step.accepted
        assert step.state is idle_state
        assert event_types(step) == [EventType.INVALID_ACTION]

    def test_undo_chip_clamps_at_zero(self, engine, idle_state):
        state = engine.reduce(idle_state, AddChip(10))
        state = engine.reduce(state, UndoChip(25))
        assert state.pending_bet == Decimal("0")

    def test_clear_and_set_bet(self, engine, idle_state):
        state = engine.reduce(idle_state, SetBet(40))
        assert state.pending_bet == Decimal("40")
        state = engine.reduce(state, ClearBet())
        assert state.pending_bet == Decimal("0")
        assert not engine.step(state, SetBet(5000)).accepted

    def test_betting_only_when_idle(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        assert state.phase == Phase.PLAYER_TURN
        for action in (AddChip(5), UndoChip(5), ClearBet(), SetBet(5)):
            assert engine.step(state, action).state is state


class TestDeal:
    """Tests for the opening deal."""

    def test_normal_deal(self, dealt):
        step = dealt("10S", "9H", "9D", "8C")
        state = step.state
        assert step.accepted
        assert state.phase == Phase.PLAYER_TURN
        assert [str(c) for c in state.player_hands[0].cards] == ["10♠", "9♦"]
        assert [str(c) for c in state.dealer_hand] == ["9♥", "8♣"]
        assert state.balance == Decimal("990")
        assert state.pending_bet == Decimal("0")
        assert not state.dealer_hole_revealed
        assert state.round_result is None
        assert len(state.shoe) == 308
        assert step.message == "Your turn"

    def test_hole_card_hidden_in_events(self, dealt):
        step = dealt("10S", "9H", "9D", "8C")
        dealt_cards = [e.data["card"] for e in step.events if e.event_type == EventType.CARD_DEALT]
        assert dealt_cards == ["10♠", "9♥", "9♦", "??"]

    def test_deal_without_bet_rejected(self, engine, idle_state):
        step = engine.step(idle_state, Deal())
        assert not step.accepted
        assert step.state is idle_state
        assert event_types(step) == [EventType.INVALID_ACTION]

    def test_deal_over_balance_rejected(self, engine, idle_state):
        state = replace(idle_state, pending_bet=Decimal("50"), balance=Decimal("40"))
        assert engine.step(state, Deal()).state is state

    def test_deal_reshuffles_short_shoe(self, engine, idle_state):
        state = replace(idle_state, shoe=tuple(range(10)), pending_bet=Decimal("10"))
        step = engine.step(state, Deal())
        assert EventType.SHOE_SHUFFLED in event_types(step)
        assert len(step.state.shoe) == 308

    def test_player_blackjack_settles_immediately(self, dealt):
        step = dealt("AS", "9H", "KD", "8C")
        state = step.state
        assert state.phase == Phase.ROUND_END
        assert state.dealer_hole_revealed
        outcome = state.round_result.outcomes[0]
        assert outcome.result == HandResult.BLACKJACK
        assert outcome.payout == Decimal("25")
        assert state.balance == Decimal("1015")
        assert step.message == "Blackjack! You win!"

    def test_dealer_blackjack_settles_immediately(self, dealt):
        step = dealt("10S", "KH", "9D", "AC")
        state = step.state
        assert state.phase == Phase.ROUND_END
        assert state.round_result.outcomes[0].result == HandResult.LOSE
        assert state.balance == Decimal("990")
        assert step.message == "Dealer wins"
        assert EventType.DEALER_BLACKJACK in event_types(step)

    def test_both_blackjack_push(self, dealt):
        step = dealt("AS", "KH", "QD", "AC")
        assert step.state.round_result.outcomes[0].result == HandResult.PUSH
        assert step.state.balance == Decimal("1000")
        assert step.message == "Push - Bet returned"

    def test_player_blackjack_against_ace_skips_insurance(self, dealt):
        step = dealt("AS", "AH", "KD", "7C")
        assert step.state.phase == Phase.ROUND_END
        assert step.state.round_result.outcomes[0].result == HandResult.BLACKJACK


class TestInsurance:
    """Tests for the insurance decision."""

    def test_offered_on_ace(self, dealt):
        step = dealt("10S", "AH", "9D", "7C")
        assert step.state.phase == Phase.INSURANCE
        assert step.message == "Insurance?"
        assert EventType.INSURANCE_OFFERED in event_types(step)

    def test_accept_debits_half_bet(self, engine, dealt):
        state = dealt("10S", "AH", "9D", "7C").state
        step = engine.step(state, Insurance(accept=True))
        assert step.state.phase == Phase.PLAYER_TURN
        assert step.state.player_hands[0].insurance_bet == Decimal("5")
        assert step.state.balance == Decimal("985")
        assert not step.state.dealer_hole_revealed

    def test_decline(self, engine, dealt):
        state = dealt("10S", "AH", "9D", "7C").state
        step = engine.step(state, Insurance(accept=False))
        assert step.state.phase == Phase.PLAYER_TURN
        assert step.state.balance == Decimal("990")
        assert event_types(step) == [EventType.INSURANCE_DECLINED]

    def test_accept_without_funds_rejected(self, engine, dealt):
        state = dealt("10S", "AH", "9D", "7C", bet=10, balance=14).state
        assert state.balance == Decimal("4")
        assert engine.step(state, Insurance(accept=True)).state is state

    def test_insurance_pays_on_dealer_blackjack(self, engine, dealt):
        state = dealt("10S", "AH", "9D", "KC").state
        state = engine.reduce(state, Insurance(accept=True))
        state = engine.reduce(state, Stand())
        assert state.phase == Phase.DEALER_TURN
        state = engine.reduce(state, DealerPlay())
        result = state.round_result
        assert result.insurance_payout == Decimal("15")
        assert result.outcomes[0].payout == Decimal("0")
        assert state.balance == Decimal("1000")

    def test_insurance_outside_phase_rejected(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        assert engine.step(state, Insurance(accept=True)).state is state


class TestPlayerActions:
    """Tests for hit, stand, double and split."""

    def test_hit_stays_on_hand(self, engine, dealt):
        state = dealt("5S", "9H", "6D", "8C", "2H").state
        step = engine.step(state, Hit())
        assert step.state.phase == Phase.PLAYER_TURN
        assert step.state.player_hands[0].total == 13
        assert step.state.active_hand_index == 0

    def test_hit_bust_skips_dealer_draws(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C", "5H").state
        step = engine.step(state, Hit())
        hand = step.state.player_hands[0]
        assert hand.is_busted and hand.is_stood
        assert step.state.phase == Phase.DEALER_TURN
        assert EventType.PLAYER_BUSTS in event_types(step)

        step = engine.step(step.state, DealerPlay())
        assert step.state.phase == Phase.ROUND_END
        assert len(step.state.dealer_hand) == 2
        assert step.state.round_result.outcomes[0].result == HandResult.LOSE
        assert step.state.round_result.outcomes[0].payout == Decimal("0")
        assert step.state.balance == Decimal("990")
        assert step.message == "You bust - Dealer wins"

    def test_stand_then_dealer_busts(self, engine, dealt):
        state = dealt("10S", "10H", "9D", "4C", "KH").state
        state = engine.reduce(state, Stand())
        assert state.phase == Phase.DEALER_TURN
        step = engine.step(state, DealerPlay())
        assert [e for e in event_types(step) if e == EventType.DEALER_HITS] == [EventType.DEALER_HITS]
        assert EventType.DEALER_BUSTS in event_types(step)
        outcome = step.state.round_result.outcomes[0]
        assert outcome.result == HandResult.WIN
        assert outcome.payout == Decimal("20")
        assert outcome.dealer_total == 24
        assert step.state.balance == Decimal("1010")
        assert step.message == "You win!"

    def test_stand_twice_rejected(self, engine, dealt):
        state = dealt("10S", "10H", "9D", "4C").state
        state = engine.reduce(state, Stand())
        assert engine.step(state, Stand()).state is state

    def test_double(self, engine, dealt):
        state = dealt("5S", "10H", "6D", "7C", "KH").state
        step = engine.step(state, Double())
        hand = step.state.player_hands[0]
        assert hand.is_doubled and hand.is_stood
        assert hand.bet == Decimal("20")
        assert hand.total == 21
        assert step.state.balance == Decimal("980")
        assert step.state.phase == Phase.DEALER_TURN

        state = engine.reduce(step.state, DealerPlay())
        assert state.round_result.outcomes[0].payout == Decimal("40")
        assert state.balance == Decimal("1020")

    def test_double_without_funds_rejected(self, engine, dealt):
        state = dealt("5S", "10H", "6D", "7C", bet=10, balance=15).state
        assert engine.step(state, Double()).state is state

    def test_double_after_hit_rejected(self, engine, dealt):
        state = dealt("2S", "10H", "3D", "7C", "4H").state
        state = engine.reduce(state, Hit())
        assert engine.step(state, Double()).state is state

    def test_split(self, engine, dealt):
        state = dealt("8S", "10H", "8D", "7C", "3H", "2C").state
        step = engine.step(state, Split())
        hands = step.state.player_hands
        assert len(hands) == 2
        assert [str(c) for c in hands[0].cards] == ["8♠", "3♥"]
        assert [str(c) for c in hands[1].cards] == ["8♦", "2♣"]
        assert all(hand.is_split and hand.bet == Decimal("10") for hand in hands)
        assert step.state.active_hand_index == 0
        assert step.state.balance == Decimal("980")
        assert step.state.phase == Phase.PLAYER_TURN

    def test_split_hands_play_independently(self, engine, dealt):
        state = dealt("8S", "10H", "8D", "7C", "3H", "2C", "9S").state
        state = engine.reduce(state, Split())

        step = engine.step(state, Stand())
        assert step.state.active_hand_index == 1
        assert step.state.phase == Phase.PLAYER_TURN
        assert step.message == "Playing hand 2"

        state = engine.reduce(step.state, Double())
        assert state.player_hands[1].total == 19
        assert state.player_hands[1].bet == Decimal("20")
        assert state.phase == Phase.DEALER_TURN

        state = engine.reduce(state, DealerPlay())
        results = [o.result for o in state.round_result.outcomes]
        assert results == [HandResult.LOSE, HandResult.WIN]
        assert state.balance == Decimal("1010")

    def test_split_bust_advances(self, engine, dealt):
        state = dealt("KS", "10H", "QD", "7C", "5H", "9C", "KC").state
        state = engine.reduce(state, Split())
        state = engine.reduce(state, Hit())
        assert state.player_hands[0].is_busted
        assert state.active_hand_index == 1
        assert state.phase == Phase.PLAYER_TURN

    def test_split_21_not_blackjack(self, engine, dealt):
        state = dealt("AS", "10H", "AD", "7C", "KH", "5C").state
        state = engine.reduce(state, Split())
        assert state.player_hands[0].total == 21
        assert not state.player_hands[0].is_blackjack

    def test_resplit_rejected(self, engine, dealt):
        state = dealt("8S", "10H", "8D", "7C", "8H", "2C").state
        state = engine.reduce(state, Split())
        assert state.player_hands[0].is_pair
        assert engine.step(state, Split()).state is state

    def test_split_without_funds_rejected(self, engine, dealt):
        state = dealt("8S", "10H", "8D", "7C", bet=10, balance=15).state
        assert engine.step(state, Split()).state is state


class TestDealerPlay:
    """Tests for the dealer turn."""

    def test_dealer_hits_soft_17(self, engine, dealt):
        state = engine.reduce(dealt("10S", "6H", "9D", "AC", "4D").state, Stand())
        state = engine.reduce(state, DealerPlay())
        assert state.round_result.outcomes[0].dealer_total == 21
        assert state.round_result.outcomes[0].result == HandResult.LOSE

    def test_dealer_stands_soft_17(self, engine, dealt):
        state = dealt("10S", "6H", "9D", "AC", "4D").state
        state = replace(state, rules=TableRules.stands_soft_17())
        state = engine.reduce(engine.reduce(state, Stand()), DealerPlay())
        assert state.round_result.outcomes[0].dealer_total == 17
        assert state.round_result.outcomes[0].result == HandResult.WIN

    def test_draw_limit(self, engine, dealt):
        state = dealt("10S", "2H", "9D", "2C", "2D", "2S", "2H").state
        state = replace(state, rules=replace(state.rules, max_dealer_draws=2))
        step = engine.step(engine.reduce(state, Stand()), DealerPlay())
        assert EventType.DEALER_DRAW_LIMIT in event_types(step)
        assert step.state.phase == Phase.ROUND_END
        assert len(step.state.dealer_hand) == 4
        assert step.state.round_result.outcomes[0].result == HandResult.WIN

    def test_dealer_play_outside_turn_rejected(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        assert engine.step(state, DealerPlay()).state is state

    def test_reveal_hole(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        step = engine.step(state, RevealHole())
        assert step.state.dealer_hole_revealed
        assert step.state.phase == Phase.PLAYER_TURN
        assert step.events[0].data["card"] == "8♣"
        assert engine.step(step.state, RevealHole()).state is step.state


class TestRoundLifecycle:
    """Tests for forced settlement, new rounds and flags."""

    def test_hit_outside_turn_is_noop(self, engine, idle_state):
        step = engine.step(idle_state, Hit())
        assert step.state is idle_state
        assert step.state == idle_state
        assert not step.accepted

    @pytest.mark.parametrize("action", [Hit(), Stand(), Double(), Split(), DealerPlay()])
    def test_duplicate_dispatch_after_settlement(self, engine, dealt, action):
        state = dealt("AS", "9H", "KD", "8C").state
        assert engine.reduce(state, action) == state

    def test_force_round_end(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        step = engine.step(state, ForceRoundEnd())
        assert step.state.phase == Phase.ROUND_END
        assert step.state.dealer_hole_revealed
        assert step.state.round_result.outcomes[0].result == HandResult.WIN
        assert step.state.balance == Decimal("1010")
        assert step.message == "Round ended"
        assert event_types(step)[0] == EventType.ROUND_FORCED

    def test_force_round_end_credits_once(self, engine, dealt):
        state = engine.reduce(dealt("10S", "9H", "9D", "8C").state, ForceRoundEnd())
        assert engine.step(state, ForceRoundEnd()).state is state

    def test_force_round_end_from_idle(self, engine, idle_state):
        state = engine.reduce(idle_state, ForceRoundEnd())
        assert state.phase == Phase.ROUND_END
        assert state.round_result.outcomes == ()
        assert state.balance == idle_state.balance

    def test_new_round(self, engine, dealt):
        state = dealt("AS", "9H", "KD", "8C").state
        step = engine.step(state, NewRound())
        fresh = step.state
        assert fresh.phase == Phase.IDLE
        assert fresh.player_hands == ()
        assert fresh.dealer_hand == ()
        assert fresh.round_result is None
        assert not fresh.dealer_hole_revealed
        assert fresh.balance == Decimal("1015")
        assert step.message == "Place your bet"

    def test_new_round_reshuffles_short_shoe(self, engine, dealt):
        state = replace(dealt("AS", "9H", "KD", "8C").state, shoe=tuple(range(20)))
        step = engine.step(state, NewRound())
        assert len(step.state.shoe) == 312
        assert EventType.SHOE_SHUFFLED in event_types(step)

    def test_set_balance(self, engine, dealt):
        state = dealt("10S", "9H", "9D", "8C").state
        state = engine.reduce(state, SetBalance(Decimal("123.456")))
        assert state.balance == Decimal("123.46")
        assert state.phase == Phase.PLAYER_TURN
        assert not engine.step(state, SetBalance(-1)).accepted

    @pytest.mark.parametrize("balance", [float("nan"), Decimal("Infinity"), Decimal("NaN")])
    def test_set_balance_non_finite_is_noop(self, engine, idle_state, balance):
        step = engine.step(idle_state, SetBalance(balance))
        assert not step.accepted
        assert step.state is idle_state

    def test_flags_do_not_affect_equality(self, engine, idle_state):
        busy = engine.reduce(idle_state, SetProcessing(True))
        assert busy.is_processing
        assert busy == idle_state
        animating = engine.reduce(idle_state, AnimationStart())
        assert animating.is_animating
        assert not engine.reduce(animating, AnimationComplete()).is_animating

    def test_full_round_balance_accounting(self, engine, idle_state, rigged_shoe):
        state = replace(idle_state, shoe=rigged_shoe("10S", "10H", "9D", "7C"))
        state = engine.reduce(state, AddChip(25))
        state = engine.reduce(state, Deal())
        assert state.balance == Decimal("975")
        state = engine.reduce(state, Stand())
        state = engine.reduce(state, RevealHole())
        state = engine.reduce(state, DealerPlay())
        assert state.balance == Decimal("1025")
        state = engine.reduce(state, NewRound())
        assert state.phase == Phase.IDLE
        assert state.balance == Decimal("1025")
