"""Round phases and the table of legal phase transitions."""

from enum import Enum, auto

from transitions import Machine


class Phase(Enum):
    """
    Round state machine phases.

    Flow: IDLE → (DEALING) → INSURANCE | PLAYER_TURN | ROUND_END
          → PLAYER_TURN → DEALER_TURN → ROUND_END → IDLE

    DEALING happens within a single DEAL step and is never a resting phase.
    """

    IDLE = auto()
    DEALING = auto()
    INSURANCE = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    ROUND_END = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def state_name(self) -> str:
        """Name of this phase inside the transition machine."""
        return self.name.lower()


STATES = [p.state_name for p in Phase]

# Actions that only synchronize flags or visibility; legal in every phase
PHASE_AGNOSTIC_TRIGGERS = (
    "reveal_hole",
    "set_balance",
    "set_processing",
    "animation_start",
    "animation_complete",
)

TRANSITIONS = [
    # Betting
    {"trigger": "set_bet", "source": "idle", "dest": "idle"},
    {"trigger": "add_chip", "source": "idle", "dest": "idle"},
    {"trigger": "undo_chip", "source": "idle", "dest": "idle"},
    {"trigger": "clear_bet", "source": "idle", "dest": "idle"},
    # Dealing resolves straight into insurance, play, or settlement
    {"trigger": "deal", "source": "idle", "dest": "insurance"},
    {"trigger": "deal", "source": "idle", "dest": "player_turn"},
    {"trigger": "deal", "source": "idle", "dest": "round_end"},
    {"trigger": "insurance", "source": "insurance", "dest": "player_turn"},
    # Player actions stay in the turn or hand over to the dealer
    {"trigger": "hit", "source": "player_turn", "dest": "player_turn"},
    {"trigger": "hit", "source": "player_turn", "dest": "dealer_turn"},
    {"trigger": "stand", "source": "player_turn", "dest": "player_turn"},
    {"trigger": "stand", "source": "player_turn", "dest": "dealer_turn"},
    {"trigger": "double", "source": "player_turn", "dest": "player_turn"},
    {"trigger": "double", "source": "player_turn", "dest": "dealer_turn"},
    {"trigger": "split", "source": "player_turn", "dest": "player_turn"},
    {"trigger": "dealer_play", "source": "dealer_turn", "dest": "round_end"},
    # Recovery and reset
    {"trigger": "force_round_end", "source": "*", "dest": "round_end"},
    {"trigger": "new_round", "source": "*", "dest": "idle"},
] + [
    {"trigger": trigger, "source": state, "dest": state}
    for trigger in PHASE_AGNOSTIC_TRIGGERS
    for state in STATES
]

# Declarative transition table; no model is attached, the reducer only queries it
PHASE_MACHINE = Machine(
    model=None,
    states=STATES,
    transitions=TRANSITIONS,
    initial="idle",
    auto_transitions=False,
)


def allowed_destinations(trigger: str, phase: Phase) -> set[Phase]:
    """Phases a trigger may lead to from the given phase (empty if illegal)."""
    return {
        Phase[t.dest.upper()]
        for t in PHASE_MACHINE.get_transitions(trigger=trigger, source=phase.state_name)
    }


def can_trigger(trigger: str, phase: Phase) -> bool:
    """Check if an action is legal in the given phase."""
    return bool(allowed_destinations(trigger, phase))


def is_valid_transition(from_phase: Phase, to_phase: Phase) -> bool:
    """
    Check if any action moves a round between two phases.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return bool(
        PHASE_MACHINE.get_transitions(
            source=from_phase.state_name, dest=to_phase.state_name
        )
    )
