"""Blackjack round engine - a pure reducer over immutable game states."""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from random import Random
from typing import Callable

from engine.cards import Card
from engine.dealer import play_dealer
from engine.game.actions import (
    Action,
    AddChip,
    Insurance,
    SetBalance,
    SetBet,
    SetProcessing,
    UndoChip,
)
from engine.game.events import EventType, GameEvent, new_event
from engine.game.state import GameState
from engine.hand import Hand, calculate_hand_total, is_blackjack
from engine.money import ZERO, to_money
from engine.phase import Phase, allowed_destinations
from engine.rules import TableRules
from engine.settlement import describe_result, settle_hands
from engine.shoe import Shoe, ensure_cards
from engine.validation import can_double, can_insurance, can_split

logger = logging.getLogger(__name__)

# Cards needed for the opening deal: player, dealer, player, dealer
OPENING_CARDS = 4


@dataclass(frozen=True)
class Step:
    """
    Result of dispatching one action.

    A rejected step carries the very same state object it was given.
    """

    state: GameState
    accepted: bool
    events: tuple[GameEvent, ...] = ()
    message: str | None = None


class RoundEngine:
    """
    Blackjack round state machine.

    `reduce(state, action)` is the whole interface: it validates the action
    against the current phase, then returns a new state. Invalid actions never
    raise; they return the input state unchanged.

    The random source is injected so shuffles are reproducible under test.
    """

    def __init__(self, rng: Random | None = None) -> None:
        """
        Initialize the engine.

        Args:
            rng: Random number generator used whenever the shoe is reshuffled
        """
        self._rng = rng or Random()
        self._handlers: dict[str, Callable[[GameState, Action], Step]] = {
            "set_bet": self._set_bet,
            "add_chip": self._add_chip,
            "undo_chip": self._undo_chip,
            "clear_bet": self._clear_bet,
            "deal": self._deal,
            "insurance": self._insurance,
            "hit": self._hit,
            "stand": self._stand,
            "double": self._double,
            "split": self._split,
            "reveal_hole": self._reveal_hole,
            "dealer_play": self._dealer_play,
            "force_round_end": self._force_round_end,
            "new_round": self._new_round,
            "set_balance": self._set_balance,
            "set_processing": self._set_processing,
            "animation_start": self._animation_start,
            "animation_complete": self._animation_complete,
        }

    def reduce(self, state: GameState, action: Action) -> GameState:
        """Apply an action and return the resulting state."""
        return self.step(state, action).state

    def step(self, state: GameState, action: Action) -> Step:
        """Apply an action, reporting acceptance, events and status message."""
        trigger = action.trigger
        destinations = allowed_destinations(trigger, state.phase)
        if not destinations:
            return self._reject(state, action, f"not allowed during {state.phase}")

        logger.debug("[%s] %s", state.phase.name, trigger)
        step = self._handlers[trigger](state, action)

        if step.accepted and step.state.phase not in destinations:
            logger.error(
                "%s tried to move %s to %s; keeping the previous state",
                trigger,
                state.phase.name,
                step.state.phase.name,
            )
            return self._reject(state, action, "illegal phase transition")
        return step

    # Betting

    def _set_bet(self, state: GameState, action: SetBet) -> Step:
        try:
            amount = to_money(action.amount)
        except ValueError as exc:
            return self._reject(state, action, str(exc))
        if amount < 0:
            return self._reject(state, action, "bet cannot be negative")
        if amount > state.balance:
            return self._reject(state, action, "bet exceeds balance")
        return self._bet_changed(state, amount)

    def _add_chip(self, state: GameState, action: AddChip) -> Step:
        try:
            value = to_money(action.value)
        except ValueError as exc:
            return self._reject(state, action, str(exc))
        if value <= 0:
            return self._reject(state, action, "chip value must be positive")
        if state.pending_bet + value > state.balance:
            return self._reject(state, action, "bet exceeds balance")
        return self._bet_changed(state, to_money(state.pending_bet + value))

    def _undo_chip(self, state: GameState, action: UndoChip) -> Step:
        try:
            value = to_money(action.value)
        except ValueError as exc:
            return self._reject(state, action, str(exc))
        if value <= 0:
            return self._reject(state, action, "chip value must be positive")
        return self._bet_changed(state, max(ZERO, to_money(state.pending_bet - value)))

    def _clear_bet(self, state: GameState, action: Action) -> Step:
        return self._bet_changed(state, ZERO)

    def _bet_changed(self, state: GameState, pending_bet: Decimal) -> Step:
        return self._accept(
            replace(state, pending_bet=pending_bet),
            [new_event(EventType.BET_CHANGED, pending_bet=pending_bet)],
        )

    # Dealing

    def _deal(self, state: GameState, action: Action) -> Step:
        bet = state.pending_bet
        if bet <= 0:
            return self._reject(state, action, "no bet placed")
        if bet > state.balance:
            return self._reject(state, action, "bet exceeds balance")

        rules = state.rules
        events: list[GameEvent] = []
        minimum = max(rules.reshuffle_threshold, OPENING_CARDS)
        dealt, shoe = self._draw(state.shoe, rules, OPENING_CARDS, minimum, events)
        player_1, dealer_1, player_2, dealer_2 = dealt

        events.append(new_event(EventType.ROUND_STARTED, bet=bet))
        for card, to, hidden in (
            (player_1, "player", False),
            (dealer_1, "dealer", False),
            (player_2, "player", False),
            (dealer_2, "dealer", True),
        ):
            events.append(
                new_event(
                    EventType.CARD_DEALT,
                    to=to,
                    hand_index=0,
                    card="??" if hidden else str(card),
                )
            )

        hand = Hand.deal((player_1, player_2), bet)
        dealer_hand = (dealer_1, dealer_2)
        dealer_blackjack = is_blackjack(dealer_hand)

        if hand.is_blackjack:
            events.append(new_event(EventType.PLAYER_BLACKJACK, hand_index=0))

        if dealer_1.is_ace and not hand.is_blackjack:
            phase, message = Phase.INSURANCE, "Insurance?"
            events.append(
                new_event(EventType.INSURANCE_OFFERED, amount=to_money(bet / 2))
            )
        elif hand.is_blackjack or dealer_blackjack:
            phase, message = Phase.ROUND_END, None
        else:
            phase, message = Phase.PLAYER_TURN, "Your turn"

        dealt_state = replace(
            state,
            phase=phase,
            shoe=shoe,
            dealer_hand=dealer_hand,
            dealer_hole_revealed=False,
            player_hands=(hand,),
            active_hand_index=0,
            balance=to_money(state.balance - bet),
            pending_bet=ZERO,
            round_result=None,
        )

        if phase == Phase.ROUND_END:
            dealt_state = self._settle(dealt_state, events)
            message = describe_result(dealt_state.round_result)

        return self._accept(dealt_state, events, message)

    def _insurance(self, state: GameState, action: Insurance) -> Step:
        if not can_insurance(state.dealer_hand, state.phase) or not state.player_hands:
            return self._reject(state, action, "insurance not offered")

        hand = state.player_hands[0]
        if not action.accept:
            return self._accept(
                replace(state, phase=Phase.PLAYER_TURN),
                [new_event(EventType.INSURANCE_DECLINED)],
                "Your turn",
            )

        amount = to_money(hand.bet / 2)
        if amount > state.balance:
            return self._reject(state, action, "insurance exceeds balance")

        insured = replace(hand, insurance_bet=amount)
        return self._accept(
            replace(
                state,
                phase=Phase.PLAYER_TURN,
                player_hands=(insured,) + state.player_hands[1:],
                balance=to_money(state.balance - amount),
            ),
            [new_event(EventType.INSURANCE_TAKEN, amount=amount)],
            "Your turn",
        )

    # Player actions

    def _hit(self, state: GameState, action: Action) -> Step:
        hand = state.active_hand
        if hand is None or not hand.is_playable:
            return self._reject(state, action, "active hand is finished")

        index = state.active_hand_index
        events: list[GameEvent] = []
        (card,), shoe = self._draw(state.shoe, state.rules, 1, 1, events)
        updated = hand.with_card(card)

        events.append(new_event(EventType.CARD_DEALT, to="player", hand_index=index, card=str(card)))
        events.append(new_event(EventType.PLAYER_HIT, hand_index=index, total=updated.total))

        hit_state = replace(state, shoe=shoe, player_hands=self._put(state, updated))
        if not updated.is_busted:
            return self._accept(hit_state, events, "Your turn")

        events.append(new_event(EventType.PLAYER_BUSTS, hand_index=index, total=updated.total))
        advanced, message = self._advance(hit_state)
        return self._accept(advanced, events, message)

    def _stand(self, state: GameState, action: Action) -> Step:
        hand = state.active_hand
        if hand is None or hand.is_stood:
            return self._reject(state, action, "active hand already stood")

        index = state.active_hand_index
        stood = replace(hand, is_stood=True)
        advanced, message = self._advance(
            replace(state, player_hands=self._put(state, stood))
        )
        return self._accept(
            advanced,
            [new_event(EventType.PLAYER_STAND, hand_index=index, total=stood.total)],
            message,
        )

    def _double(self, state: GameState, action: Action) -> Step:
        hand = state.active_hand
        if hand is None or not hand.is_playable or not can_double(hand, state.balance):
            return self._reject(state, action, "cannot double")

        index = state.active_hand_index
        events: list[GameEvent] = []
        (card,), shoe = self._draw(state.shoe, state.rules, 1, 1, events)
        doubled = replace(
            hand.with_card(card),
            bet=to_money(hand.bet * 2),
            is_doubled=True,
            is_stood=True,
        )

        events.append(new_event(EventType.CARD_DEALT, to="player", hand_index=index, card=str(card)))
        events.append(
            new_event(
                EventType.PLAYER_DOUBLE,
                hand_index=index,
                total=doubled.total,
                bet=doubled.bet,
            )
        )
        if doubled.is_busted:
            events.append(new_event(EventType.PLAYER_BUSTS, hand_index=index, total=doubled.total))

        advanced, message = self._advance(
            replace(
                state,
                shoe=shoe,
                player_hands=self._put(state, doubled),
                balance=to_money(state.balance - hand.bet),
            )
        )
        return self._accept(advanced, events, message)

    def _split(self, state: GameState, action: Action) -> Step:
        hand = state.active_hand
        if hand is None or not hand.is_playable or not can_split(hand, state.balance):
            return self._reject(state, action, "cannot split")

        index = state.active_hand_index
        events: list[GameEvent] = []
        (card_1, card_2), shoe = self._draw(state.shoe, state.rules, 2, 2, events)

        # The insurance stake stays with the first hand so it is still settled
        first = Hand(
            cards=(hand.cards[0], card_1),
            bet=hand.bet,
            is_split=True,
            insurance_bet=hand.insurance_bet,
        )
        second = Hand(cards=(hand.cards[1], card_2), bet=hand.bet, is_split=True)
        hands = state.player_hands[:index] + (first, second) + state.player_hands[index + 1 :]

        events.append(new_event(EventType.CARD_DEALT, to="player", hand_index=index, card=str(card_1)))
        events.append(new_event(EventType.CARD_DEALT, to="player", hand_index=index + 1, card=str(card_2)))
        events.append(
            new_event(
                EventType.PLAYER_SPLIT,
                hand_index=index,
                hand1_total=first.total,
                hand2_total=second.total,
            )
        )

        return self._accept(
            replace(
                state,
                shoe=shoe,
                player_hands=hands,
                balance=to_money(state.balance - hand.bet),
            ),
            events,
            f"Playing hand {index + 1}",
        )

    # Dealer

    def _reveal_hole(self, state: GameState, action: Action) -> Step:
        if state.dealer_hole_revealed:
            return self._reject(state, action, "hole card already revealed")
        logger.debug("Revealing dealer hole card")
        return self._accept(
            replace(state, dealer_hole_revealed=True),
            self._reveal_events(state),
        )

    def _dealer_play(self, state: GameState, action: Action) -> Step:
        events = [] if state.dealer_hole_revealed else self._reveal_events(state)

        if all(hand.is_busted for hand in state.player_hands):
            logger.debug("All player hands busted, dealer does not draw")
            settled = self._settle(replace(state, dealer_hole_revealed=True), events)
            return self._accept(settled, events, "You bust - Dealer wins")

        play = play_dealer(state.dealer_hand, state.shoe, state.rules, self._rng)
        if play.reshuffled:
            events.append(new_event(EventType.SHOE_SHUFFLED, deck_count=state.rules.deck_count))

        cards = state.dealer_hand
        for card in play.drawn:
            cards = cards + (card,)
            events.append(new_event(EventType.CARD_DEALT, to="dealer", card=str(card)))
            events.append(
                new_event(EventType.DEALER_HITS, total=calculate_hand_total(cards).total)
            )

        if play.hit_draw_limit:
            events.append(
                new_event(EventType.DEALER_DRAW_LIMIT, draws=len(play.drawn))
            )

        dealer_total = calculate_hand_total(play.cards).total
        if dealer_total > 21:
            events.append(new_event(EventType.DEALER_BUSTS, total=dealer_total))
        else:
            events.append(new_event(EventType.DEALER_STANDS, total=dealer_total))

        logger.debug(
            "Dealer finished with %d cards, total %d", len(play.cards), dealer_total
        )
        settled = self._settle(
            replace(
                state,
                shoe=play.shoe,
                dealer_hand=play.cards,
                dealer_hole_revealed=True,
            ),
            events,
        )
        return self._accept(settled, events, describe_result(settled.round_result))

    # Round lifecycle

    def _force_round_end(self, state: GameState, action: Action) -> Step:
        # Payout is credited once, on entering ROUND_END
        if state.phase == Phase.ROUND_END:
            return self._reject(state, action, "round already settled")

        logger.info("Forcing round end from %s", state.phase.name)
        events = [new_event(EventType.ROUND_FORCED, phase=state.phase.name)]
        if not state.dealer_hole_revealed:
            events.extend(self._reveal_events(state))
        settled = self._settle(replace(state, dealer_hole_revealed=True), events)
        return self._accept(replace(settled, is_processing=False), events, "Round ended")

    def _new_round(self, state: GameState, action: Action) -> Step:
        events: list[GameEvent] = []
        rules = state.rules
        shoe, reshuffled = ensure_cards(
            state.shoe, rules.reshuffle_threshold, rules.deck_count, self._rng
        )
        if reshuffled:
            events.append(new_event(EventType.SHOE_SHUFFLED, deck_count=rules.deck_count))

        return self._accept(
            replace(
                state,
                phase=Phase.IDLE,
                shoe=shoe,
                dealer_hand=(),
                dealer_hole_revealed=False,
                player_hands=(),
                active_hand_index=0,
                pending_bet=ZERO,
                round_result=None,
                is_processing=False,
                is_animating=False,
            ),
            events,
            "Place your bet",
        )

    # External synchronization

    def _set_balance(self, state: GameState, action: SetBalance) -> Step:
        try:
            balance = to_money(action.balance)
        except ValueError as exc:
            return self._reject(state, action, str(exc))
        if balance < 0:
            return self._reject(state, action, "balance cannot be negative")
        return self._accept(
            replace(state, balance=balance),
            [new_event(EventType.BALANCE_SYNCED, balance=balance)],
        )

    def _set_processing(self, state: GameState, action: SetProcessing) -> Step:
        return self._accept(replace(state, is_processing=bool(action.value)))

    def _animation_start(self, state: GameState, action: Action) -> Step:
        return self._accept(replace(state, is_animating=True))

    def _animation_complete(self, state: GameState, action: Action) -> Step:
        return self._accept(replace(state, is_animating=False))

    # Helpers

    def _draw(
        self,
        shoe: Shoe,
        rules: TableRules,
        count: int,
        minimum: int,
        events: list[GameEvent],
    ) -> tuple[tuple[Card, ...], Shoe]:
        """Take `count` cards off the front, reshuffling below `minimum` first."""
        shoe, reshuffled = ensure_cards(shoe, max(minimum, count), rules.deck_count, self._rng)
        if reshuffled:
            logger.debug("Reshuffled a %d-deck shoe", rules.deck_count)
            events.append(new_event(EventType.SHOE_SHUFFLED, deck_count=rules.deck_count))
        return tuple(Card(index) for index in shoe[:count]), shoe[count:]

    @staticmethod
    def _put(state: GameState, hand: Hand) -> tuple[Hand, ...]:
        """Replace the active hand."""
        hands = list(state.player_hands)
        hands[state.active_hand_index] = hand
        return tuple(hands)

    @staticmethod
    def _advance(state: GameState) -> tuple[GameState, str | None]:
        """
        Move to the next playable hand after the active one.

        Returns the new state and its status message. When no playable hand
        remains the turn passes to the dealer.
        """
        for i in range(state.active_hand_index + 1, len(state.player_hands)):
            if state.player_hands[i].is_playable:
                return replace(state, active_hand_index=i), f"Playing hand {i + 1}"
        return replace(state, phase=Phase.DEALER_TURN), "Dealer's turn"

    @staticmethod
    def _reveal_events(state: GameState) -> list[GameEvent]:
        if len(state.dealer_hand) < 2:
            return []
        return [
            new_event(
                EventType.DEALER_REVEALS,
                card=str(state.dealer_hand[1]),
                total=calculate_hand_total(state.dealer_hand).total,
            )
        ]

    def _settle(self, state: GameState, events: list[GameEvent]) -> GameState:
        """Enter ROUND_END: compute the result and credit it exactly once."""
        result = settle_hands(
            state.dealer_hand, state.player_hands, state.rules.blackjack_payout
        )
        if is_blackjack(state.dealer_hand):
            events.append(new_event(EventType.DEALER_BLACKJACK))

        balance = to_money(state.balance + result.total_payout)
        events.append(
            new_event(
                EventType.ROUND_ENDED,
                outcomes=[outcome.result.value for outcome in result.outcomes],
                total_payout=result.total_payout,
                insurance_payout=result.insurance_payout,
                balance=balance,
            )
        )
        logger.info(
            "Round settled: payout %s (insurance %s), balance %s",
            result.total_payout,
            result.insurance_payout,
            balance,
        )
        return replace(
            state,
            phase=Phase.ROUND_END,
            dealer_hole_revealed=True,
            round_result=result,
            balance=balance,
        )

    def _accept(
        self,
        state: GameState,
        events: list[GameEvent] | None = None,
        message: str | None = None,
    ) -> Step:
        return Step(state=state, accepted=True, events=tuple(events or ()), message=message)

    def _reject(self, state: GameState, action: Action, reason: str) -> Step:
        logger.debug("[%s] %s rejected: %s", state.phase.name, action.trigger, reason)
        return Step(
            state=state,
            accepted=False,
            events=(
                new_event(
                    EventType.INVALID_ACTION,
                    action=action.trigger,
                    phase=state.phase.name,
                    reason=reason,
                ),
            ),
        )
