"""Actions accepted by the round engine."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Union


@dataclass(frozen=True)
class SetBet:
    """Replace the pending bet."""

    amount: Decimal | int | float
    trigger: ClassVar[str] = "set_bet"


@dataclass(frozen=True)
class AddChip:
    """Add a chip to the pending bet."""

    value: Decimal | int | float
    trigger: ClassVar[str] = "add_chip"


@dataclass(frozen=True)
class UndoChip:
    """Take a chip back off the pending bet."""

    value: Decimal | int | float
    trigger: ClassVar[str] = "undo_chip"


@dataclass(frozen=True)
class ClearBet:
    trigger: ClassVar[str] = "clear_bet"


@dataclass(frozen=True)
class Deal:
    trigger: ClassVar[str] = "deal"


@dataclass(frozen=True)
class Insurance:
    """Accept or decline the insurance side bet."""

    accept: bool
    trigger: ClassVar[str] = "insurance"


@dataclass(frozen=True)
class Hit:
    trigger: ClassVar[str] = "hit"


@dataclass(frozen=True)
class Stand:
    trigger: ClassVar[str] = "stand"


@dataclass(frozen=True)
class Double:
    trigger: ClassVar[str] = "double"


@dataclass(frozen=True)
class Split:
    trigger: ClassVar[str] = "split"


@dataclass(frozen=True)
class RevealHole:
    trigger: ClassVar[str] = "reveal_hole"


@dataclass(frozen=True)
class DealerPlay:
    trigger: ClassVar[str] = "dealer_play"


@dataclass(frozen=True)
class ForceRoundEnd:
    """Settle the round with whatever hands exist. Recovery escape hatch."""

    trigger: ClassVar[str] = "force_round_end"


@dataclass(frozen=True)
class NewRound:
    trigger: ClassVar[str] = "new_round"


@dataclass(frozen=True)
class SetBalance:
    """Mirror the authoritative wallet balance."""

    balance: Decimal | int | float
    trigger: ClassVar[str] = "set_balance"


@dataclass(frozen=True)
class SetProcessing:
    value: bool
    trigger: ClassVar[str] = "set_processing"


@dataclass(frozen=True)
class AnimationStart:
    trigger: ClassVar[str] = "animation_start"


@dataclass(frozen=True)
class AnimationComplete:
    trigger: ClassVar[str] = "animation_complete"


Action = Union[
    SetBet,
    AddChip,
    UndoChip,
    ClearBet,
    Deal,
    Insurance,
    Hit,
    Stand,
    Double,
    Split,
    RevealHole,
    DealerPlay,
    ForceRoundEnd,
    NewRound,
    SetBalance,
    SetProcessing,
    AnimationStart,
    AnimationComplete,
]
