"""
End-of-smazzata scoring ("punteggio").

Seven independent categories, summed per player:
scope, Sette Bello, Denari (>= 6, unique max), Carte (>= 21, unique max),
Primiera (unique max), Grande (Denari 8-9-10 = 5) and Piccola
(Denari 1-2-3 = 3, +1 for each of Denari 4, 5, 6).
Ties award nothing. Accusi are added by the round manager, not here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from cirulla.engine.card import Card, Suit
from cirulla.engine.game_state import GameState

DENARI_MIN = 6
CARTE_MIN = 21
GRANDE_RANKS = frozenset({8, 9, 10})
GRANDE_POINTS = 5
PICCOLA_RANKS = frozenset({1, 2, 3})
PICCOLA_EXTRA_RANKS = (4, 5, 6)
PICCOLA_POINTS = 3


@dataclass
class ScoreBreakdown:
    """Per-category detail of one player's smazzata score."""

    scope: int = 0
    sette_bello: int = 0
    denari_count: int = 0
    denari: int = 0
    cards_count: int = 0
    carte: int = 0
    primiera_score: int = 0
    primiera: int = 0
    grande: int = 0
    piccola: int = 0

    @property
    def total(self) -> int:
        return (
            self.scope
            + self.sette_bello
            + self.denari
            + self.carte
            + self.primiera
            + self.grande
            + self.piccola
        )


def primiera_score(cards: Iterable[Card]) -> int:
    """Sum over the four suits of the best primiera value held (0 for a missing suit)."""
    best = {suit: 0 for suit in Suit}
    for card in cards:
        best[card.suit] = max(best[card.suit], card.primiera_value)
    return sum(best.values())


def _unique_max(values: Sequence[int], minimum: int = 0) -> Optional[int]:
    """Index of the strictly highest value, if it reaches ``minimum``; None on ties."""
    top = max(values)
    if top < minimum or values.count(top) != 1:
        return None
    return values.index(top)


def _piccola_points(denari_ranks: set) -> int:
    if not PICCOLA_RANKS <= denari_ranks:
        return 0
    return PICCOLA_POINTS + sum(1 for r in PICCOLA_EXTRA_RANKS if r in denari_ranks)


def score_breakdown(state: GameState) -> List[ScoreBreakdown]:
    """Category-by-category scores for every player. Does not mutate the state."""
    players = state.players
    details = [ScoreBreakdown() for _ in players]

    for p, d in zip(players, details):
        d.scope = p.scopa_count
        d.sette_bello = 1 if any(c.is_sette_bello for c in p.captured) else 0
        d.denari_count = sum(1 for c in p.captured if c.suit == Suit.DENARI)
        d.cards_count = len(p.captured)
        d.primiera_score = primiera_score(p.captured)

        denari_ranks = {c.rank for c in p.captured if c.suit == Suit.DENARI}
        d.grande = GRANDE_POINTS if GRANDE_RANKS <= denari_ranks else 0
        d.piccola = _piccola_points(denari_ranks)

    winner = _unique_max([d.denari_count for d in details], DENARI_MIN)
    if winner is not None:
        details[winner].denari = 1

    winner = _unique_max([d.cards_count for d in details], CARTE_MIN)
    if winner is not None:
        details[winner].carte = 1

    winner = _unique_max([d.primiera_score for d in details])
    if winner is not None:
        details[winner].primiera = 1

    return details


def calculate_smazzata_scores(state: GameState) -> List[int]:
    """Points per player (same index order) for the seven scoring categories."""
    return [d.total for d in score_breakdown(state)]
