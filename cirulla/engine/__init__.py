"""Game engine for Cirulla."""

from cirulla.engine.accusi import AccusoType, best_accuso, is_cirulla, is_decino
from cirulla.engine.card import Card, Suit
from cirulla.engine.deck import create_deck
from cirulla.engine.errors import DealError, InvalidOperationError
from cirulla.engine.game_state import GameState, PlayerState, PlayerView
from cirulla.engine.round_manager import RoundConfig, RoundManager, RoundPhase
from cirulla.engine.rules import (
    Move,
    MoveType,
    apply_move,
    create_new_game,
    deal_initial_cards,
    get_matching_moves_from_selection,
    get_valid_moves,
    try_get_move_from_selection,
)
from cirulla.engine.scoring import (
    ScoreBreakdown,
    calculate_smazzata_scores,
    primiera_score,
    score_breakdown,
)

__all__ = [
    "Card",
    "Suit",
    "create_deck",
    "DealError",
    "InvalidOperationError",
    "GameState",
    "PlayerState",
    "PlayerView",
    "Move",
    "MoveType",
    "apply_move",
    "create_new_game",
    "deal_initial_cards",
    "get_matching_moves_from_selection",
    "get_valid_moves",
    "try_get_move_from_selection",
    "AccusoType",
    "best_accuso",
    "is_cirulla",
    "is_decino",
    "ScoreBreakdown",
    "calculate_smazzata_scores",
    "primiera_score",
    "score_breakdown",
    "RoundConfig",
    "RoundManager",
    "RoundPhase",
]
