"""Unit tests for game history logging."""

import random

from cirulla.engine import (
    AccusoType,
    Card,
    GameState,
    Move,
    MoveType,
    PlayerView,
    RoundConfig,
    RoundManager,
    apply_move,
    create_new_game,
    get_valid_moves,
)
from cirulla.engine.card import cards


def test_history_records_deal():
    state = create_new_game(2, seed=42)
    assert len(state.history) == 1
    assert f"player_{state.dealer_index} dealt" in state.history[0]


def test_history_records_play():
    state = create_new_game(2, seed=42)
    move = get_valid_moves(state, state.current_player)[0]
    apply_move(state, move)

    assert len(state.history) == 2
    assert f"player_{move.player_index} played" in state.history[-1]
    assert str(move.played_card) in state.history[-1]


def test_history_records_scopa():
    state = GameState(2)
    state.players[0].hand = cards("5D")
    state.players[1].hand = cards("9S")
    state.table = cards("5B")
    apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))

    assert "capturing 5 of Bastoni" in state.history[0]
    assert state.history[-1] == "player_0 made SCOPA!"


def test_history_records_accuso():
    state = GameState(2)
    state.players[1].hand = cards("1D 2S 3B")
    manager = RoundManager(state, config=RoundConfig(auto_declare_accusi=False))
    assert manager.try_player_accuso(1, AccusoType.CIRULLA)
    assert "player_1 declared CIRULLA" in state.history[-1]


def test_history_persists_across_turns():
    state = create_new_game(2, seed=7)
    first = state.current_player
    for _ in range(2):
        apply_move(state, get_valid_moves(state, state.current_player)[0])

    played = [h for h in state.history if " played " in h]
    assert len(played) == 2
    assert played[0].startswith(f"player_{first} played")
    assert played[1].startswith(f"player_{1 - first} played")


def test_player_view_hides_other_hands():
    state = create_new_game(3, seed=5, dealer_index=0)
    rng = random.Random(0)
    apply_move(state, rng.choice(get_valid_moves(state, state.current_player)))
    view = PlayerView.from_state(state, 1)

    assert view.my_hand == state.players[1].hand
    assert view.num_cards_per_player == {p.index: len(p.hand) for p in state.players}
    assert view.deck_size == len(state.deck)
    assert view.history == state.history[-10:]
    assert not hasattr(view, "hands")
