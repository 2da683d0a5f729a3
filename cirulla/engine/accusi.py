"""Accusi: bonuses declared from a player's 3-card hand."""

from enum import Enum
from typing import Optional, Sequence

from cirulla.engine.card import Card

ACCUSO_HAND_SIZE = 3
CIRULLA_MAX_SUM = 9


class AccusoType(str, Enum):
    """Declarable hand patterns."""

    CIRULLA = "cirulla"
    DECINO = "decino"

    @property
    def points(self) -> int:
        return 10 if self is AccusoType.DECINO else 3


def _is_accuso_hand(hand: Optional[Sequence[Card]]) -> bool:
    return hand is not None and len(hand) == ACCUSO_HAND_SIZE


def is_cirulla(hand: Optional[Sequence[Card]]) -> bool:
    """Cirulla: the three cards sum to 9 or less, the Matta counting as 1."""
    if not _is_accuso_hand(hand):
        return False
    return sum(1 if c.is_matta else c.value for c in hand) <= CIRULLA_MAX_SUM


def is_decino(hand: Optional[Sequence[Card]]) -> bool:
    """Decino: three cards of equal rank, or a pair completed by the Matta."""
    if not _is_accuso_hand(hand):
        return False
    others = [c for c in hand if not c.is_matta]
    if len(others) == 3:
        return others[0].rank == others[1].rank == others[2].rank
    if len(others) == 2:
        return others[0].rank == others[1].rank
    return False


def best_accuso(hand: Optional[Sequence[Card]]) -> Optional[AccusoType]:
    """The most valuable accuso a hand qualifies for (Decino beats Cirulla)."""
    if is_decino(hand):
        return AccusoType.DECINO
    if is_cirulla(hand):
        return AccusoType.CIRULLA
    return None
