"""Heuristic computer player."""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from cirulla.engine import Card, GameState, Move, PlayerView, Suit
from cirulla.engine.rules import CAPTURE_TOTAL

# Easy picks a random capture this often, otherwise any random move
EASY_CAPTURE_CHANCE = 0.7


class Difficulty(str, Enum):
    """AI strength."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class _Board:
    """What the AI looks at: public table info plus its own hand."""

    table: List[Card]
    hand: List[Card]
    deck_size: int
    hand_sizes: Dict[int, int]

    @classmethod
    def from_state(cls, state: GameState, player_index: int) -> "_Board":
        return cls(
            table=list(state.table),
            hand=list(state.players[player_index].hand),
            deck_size=len(state.deck),
            hand_sizes={p.index: len(p.hand) for p in state.players},
        )

    @classmethod
    def from_view(cls, view: PlayerView) -> "_Board":
        return cls(
            table=list(view.table),
            hand=list(view.my_hand),
            deck_size=view.deck_size,
            hand_sizes=dict(view.num_cards_per_player),
        )

    @property
    def is_last_play(self) -> bool:
        return self.deck_size == 0 and all(n <= 1 for n in self.hand_sizes.values())


def _is_protected(card: Card) -> bool:
    return card.is_sette_bello or card.is_matta


def _is_scoring_card(card: Card) -> bool:
    return card.rank == 7 or card.suit == Suit.DENARI


def _opens_sweep(board: _Board, card: Card) -> bool:
    """True if discarding ``card`` leaves a table the next player can take whole.

    A table worth up to 10 falls to a single equal/sum capture, one worth
    up to 14 to a sum-to-15 capture.
    """
    total = sum(c.value for c in board.table) + card.value
    return total < CAPTURE_TOTAL


class CirullaAI:
    """Rule-of-thumb move chooser; no search, no learning."""

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.MEDIUM,
        seed: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self.difficulty = Difficulty(difficulty)
        self._rng = random.Random(seed)
        self._name = name or f"ai-{self.difficulty.value}"

    @property
    def name(self) -> str:
        return self._name

    def get_move(
        self,
        player_view: PlayerView,
        legal_moves: list[Move],
        player_index: int,
        state: Optional[GameState] = None,
    ) -> Move | None:
        if state is not None:
            board = _Board.from_state(state, player_index)
        else:
            board = _Board.from_view(player_view)
        return self._choose(board, legal_moves)

    def choose_move(
        self,
        state: GameState,
        player_index: int,
        candidates: Optional[Sequence[Move]],
    ) -> Move | None:
        """Pick one of ``candidates`` for ``player_index``; None only when there are none."""
        return self._choose(_Board.from_state(state, player_index), candidates)

    def _choose(self, board: _Board, candidates: Optional[Sequence[Move]]) -> Move | None:
        if not candidates:
            return None
        candidates = list(candidates)
        if len(candidates) == 1:
            return candidates[0]

        captures = [m for m in candidates if m.is_capture]

        if self.difficulty == Difficulty.EASY:
            if captures and self._rng.random() < EASY_CAPTURE_CHANCE:
                return self._rng.choice(captures)
            return self._rng.choice(candidates)

        if captures:
            return max(captures, key=lambda m: self._capture_rank(board, m))
        return min(candidates, key=lambda m: self._discard_rank(board, m.played_card))

    def _capture_rank(self, board: _Board, move: Move) -> tuple:
        """Higher is better. max() keeps the first of equal ranks."""
        taken = move.captured_cards
        sette_bello = any(c.is_sette_bello for c in taken)
        denari = any(c.suit == Suit.DENARI for c in taken)
        if self.difficulty == Difficulty.HARD:
            scopa = (
                len(taken) == len(board.table)
                and len(board.hand) > 1
                and not board.is_last_play
            )
            return (sette_bello, scopa, denari, len(taken))
        return (sette_bello, denari, len(taken))

    def _discard_rank(self, board: _Board, card: Card) -> tuple:
        """Lower is a better card to throw away."""
        if self.difficulty == Difficulty.HARD:
            return (_is_protected(card), _is_scoring_card(card), _opens_sweep(board, card), card.value)
        return (_is_protected(card), _is_scoring_card(card), card.value)
