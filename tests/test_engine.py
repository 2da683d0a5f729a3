"""Unit tests for the game engine."""

import pytest
from cirulla.engine import (
    Card,
    DealError,
    GameState,
    InvalidOperationError,
    Move,
    MoveType,
    Suit,
    apply_move,
    create_deck,
    create_new_game,
    deal_initial_cards,
    get_valid_moves,
)
from cirulla.engine.card import RANKS, cards


def _ordered_deck() -> list[Card]:
    return [Card(suit, rank) for suit in Suit for rank in RANKS]


def _state(hand: str, table: str, deck: str = "", other_hand: str = "") -> GameState:
    state = GameState(2)
    state.players[0].hand = cards(hand)
    state.players[1].hand = cards(other_hand)
    state.table = cards(table)
    state.deck = cards(deck)
    return state


def test_create_deck_size() -> None:
    deck = create_deck(seed=42)
    assert len(deck) == 40
    assert len(set(deck)) == 40


def test_create_deck_reproducible() -> None:
    d1 = create_deck(seed=123)
    d2 = create_deck(seed=123)
    assert [c.code for c in d1] == [c.code for c in d2]


def test_card_properties() -> None:
    assert Card(Suit.COPPE, 7).is_matta
    assert not Card(Suit.DENARI, 7).is_matta
    assert Card(Suit.DENARI, 7).is_sette_bello
    assert Card(Suit.SPADE, 1).is_ace
    assert [Card(Suit.BASTONI, r).primiera_value for r in RANKS] == [16, 12, 13, 14, 15, 18, 21, 10, 10, 10]
    assert Card.parse("10s") == Card(Suit.SPADE, 10)
    assert str(Card.parse("1D")) == "Ace of Denari"


def test_card_rejects_bad_values() -> None:
    with pytest.raises(ValueError):
        Card(Suit.DENARI, 11)
    with pytest.raises(ValueError):
        Card(Suit.DENARI, 0)
    with pytest.raises(ValueError):
        Card.parse("7X")


def test_create_new_game() -> None:
    state = create_new_game(4, seed=1)
    assert all(len(p.hand) == 3 for p in state.players)
    assert len(state.table) == 4
    assert len(state.deck) == 40 - 4 * 3 - 4
    assert state.current_player == (state.dealer_index - 1 + 4) % 4
    assert not state.round_ended
    assert state.last_capture_player == -1


def test_create_new_game_reproducible() -> None:
    s1 = create_new_game(3, seed=9)
    s2 = create_new_game(3, seed=9)
    assert s1.dealer_index == s2.dealer_index
    assert s1.table == s2.table
    assert [p.hand for p in s1.players] == [p.hand for p in s2.players]


@pytest.mark.parametrize("num_players", [1, 5])
def test_create_new_game_rejects_player_count(num_players: int) -> None:
    with pytest.raises(ValueError):
        create_new_game(num_players, seed=1)


def test_deal_never_leaves_two_aces_on_table() -> None:
    for seed in range(60):
        state = create_new_game(4, seed=seed)
        assert sum(1 for c in state.table if c.is_ace) < 2


def test_deal_follows_turn_order_from_dealer_left() -> None:
    state = create_new_game(2, dealer_index=0, deck=_ordered_deck())
    # Dealer 0, so player 1 receives the first card
    assert state.players[1].hand == cards("1D 3D 5D")
    assert state.players[0].hand == cards("2D 4D 6D")
    assert state.table == cards("7D 8D 9D 10D")
    assert state.current_player == 1


def test_deal_redone_when_table_has_two_aces() -> None:
    front = cards("10D 10C 9D 9C 8D 8C 1D 1C 5B 6B")
    rest = [c for c in _ordered_deck() if c not in front]
    state = create_new_game(2, seed=4, dealer_index=0, deck=front + rest)
    assert sum(1 for c in state.table if c.is_ace) < 2
    dealt = [c for p in state.players for c in p.hand] + state.table + state.deck
    assert sorted(c.code for c in dealt) == sorted(c.code for c in _ordered_deck())


def test_deal_gives_up_after_max_attempts() -> None:
    with pytest.raises(DealError):
        deal_initial_cards(GameState(2), max_attempts=0)


def test_deal_rejects_duplicate_cards() -> None:
    deck = _ordered_deck()
    deck[5] = deck[0]
    with pytest.raises(ValueError):
        create_new_game(2, dealer_index=0, deck=deck)


def test_example_capture_15_of_two_cards() -> None:
    state = _state(hand="6D", table="4B 5S")
    moves = get_valid_moves(state, 0)
    assert len(moves) == 1
    assert moves[0].move_type == MoveType.CAPTURE_15
    assert moves[0].captures_same(cards("5S 4B"))


def test_forced_capture_excludes_play_only() -> None:
    state = _state(hand="5D 9C", table="5B")
    moves = get_valid_moves(state, 0)
    assert moves == [Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B"))]


def test_play_only_when_nothing_captures() -> None:
    state = _state(hand="9C 10S", table="2B")
    moves = get_valid_moves(state, 0)
    assert [m.move_type for m in moves] == [MoveType.PLAY_ONLY, MoveType.PLAY_ONLY]
    assert {m.played_card for m in moves} == set(cards("9C 10S"))


def test_ace_on_empty_table_is_play_only() -> None:
    state = _state(hand="1D", table="")
    moves = get_valid_moves(state, 0)
    assert moves == [Move(0, Card.parse("1D"), MoveType.PLAY_ONLY)]


def test_ace_takes_table_ace() -> None:
    state = _state(hand="1D", table="1B 5S")
    moves = get_valid_moves(state, 0)
    assert moves == [Move(0, Card.parse("1D"), MoveType.ACE_CAPTURE, cards("1B"))]


def test_ace_takes_whole_table_without_aces() -> None:
    state = _state(hand="1D", table="4B 6S 9C")
    moves = get_valid_moves(state, 0)
    assert len(moves) == 1
    assert moves[0].move_type == MoveType.ACE_CAPTURE
    assert moves[0].captures_same(cards("4B 6S 9C"))


def test_one_ace_capture_per_table_ace() -> None:
    state = _state(hand="1D", table="1B 1S 4C")
    moves = get_valid_moves(state, 0)
    assert len(moves) == 2
    assert {m.captured_cards for m in moves} == {(Card.parse("1B"),), (Card.parse("1S"),)}


def test_matta_offers_every_interpretation() -> None:
    state = _state(hand="7C", table="3B 4S")
    moves = get_valid_moves(state, 0)
    by_type = {}
    for m in moves:
        by_type.setdefault(m.move_type, []).append(m)
    assert len(by_type[MoveType.CAPTURE_EQUAL]) == 2
    assert len(by_type[MoveType.ACE_CAPTURE]) == 1
    assert len(by_type[MoveType.CAPTURE_SUM]) == 1
    assert len(by_type[MoveType.CAPTURE_15]) == 1
    assert len(moves) == 5
    assert MoveType.PLAY_ONLY not in by_type


@pytest.mark.parametrize(
    "table, expected",
    [
        ("1B 5S", [("1B",)]),
        ("1B 1S 4C", [("1B",), ("1S",)]),
        ("4B 6S", [("4B", "6S")]),
    ],
)
def test_matta_plays_as_ace(table: str, expected: list) -> None:
    state = _state(hand="7C", table=table)
    aces = [m for m in get_valid_moves(state, 0) if m.move_type == MoveType.ACE_CAPTURE]
    assert sorted(tuple(sorted(c.code for c in m.captured_cards)) for m in aces) == sorted(
        tuple(sorted(codes)) for codes in expected
    )


def test_matta_on_empty_table_is_play_only() -> None:
    state = _state(hand="7C", table="")
    assert get_valid_moves(state, 0) == [Move(0, Card.parse("7C"), MoveType.PLAY_ONLY)]


def test_matta_on_table_counts_as_seven() -> None:
    state = _state(hand="7D", table="7C")
    assert get_valid_moves(state, 0) == [Move(0, Card.parse("7D"), MoveType.CAPTURE_EQUAL, cards("7C"))]
    state = _state(hand="8D", table="7C")
    assert get_valid_moves(state, 0) == [Move(0, Card.parse("8D"), MoveType.CAPTURE_15, cards("7C"))]


def test_equal_ranks_give_distinct_subsets() -> None:
    state = _state(hand="8D", table="4B 4S 3C")
    moves = get_valid_moves(state, 0)
    sums = [m for m in moves if m.move_type == MoveType.CAPTURE_SUM]
    assert len(sums) == 1 and sums[0].captures_same(cards("4B 4S"))
    fifteens = [m for m in moves if m.move_type == MoveType.CAPTURE_15]
    # 15 - 8 = 7: {4B, 3C} and {4S, 3C}
    assert len(fifteens) == 2


def test_generated_captures_add_up() -> None:
    for seed in range(30):
        state = create_new_game(4, seed=seed)
        for idx in range(4):
            for move in get_valid_moves(state, idx):
                card = move.played_card
                if card.is_matta or card.is_ace:
                    continue
                total = sum(c.value for c in move.captured_cards)
                if move.move_type == MoveType.CAPTURE_SUM:
                    assert total == card.value and len(move.captured_cards) >= 2
                elif move.move_type == MoveType.CAPTURE_15:
                    assert total + card.value == 15
                elif move.move_type == MoveType.CAPTURE_EQUAL:
                    assert total == card.value
                if move.is_capture:
                    assert move.captured_cards


def test_no_play_only_when_any_capture_exists() -> None:
    for seed in range(30):
        state = create_new_game(3, seed=seed)
        for idx in range(3):
            moves = get_valid_moves(state, idx)
            if any(m.is_capture for m in moves):
                assert all(m.move_type != MoveType.PLAY_ONLY for m in moves)


def test_apply_capture() -> None:
    state = _state(hand="5D 9C", table="5B 2S", deck="10D", other_hand="4S")
    apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))
    assert state.players[0].hand == cards("9C")
    assert sorted(c.code for c in state.players[0].captured) == ["5B", "5D"]
    assert state.table == cards("2S")
    assert state.last_capture_player == 0
    assert state.players[0].scopa_count == 0
    assert state.current_player == 1


def test_apply_play_only() -> None:
    state = _state(hand="9C 10S", table="2B", deck="10D")
    apply_move(state, Move(0, Card.parse("9C"), MoveType.PLAY_ONLY))
    assert state.table == cards("2B 9C")
    assert state.players[0].hand == cards("10S")
    assert state.last_capture_player == -1


def test_scopa_when_table_cleared() -> None:
    state = _state(hand="5D 9C", table="5B", deck="10D")
    apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))
    assert state.players[0].scopa_count == 1
    assert state.players[0].scopa_cards == cards("5D")


def test_scopa_with_empty_deck_while_hands_remain() -> None:
    state = _state(hand="5D", table="5B", other_hand="9S")
    apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))
    assert state.players[0].scopa_count == 1


def test_no_scopa_on_last_play() -> None:
    state = _state(hand="5D", table="5B")
    apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))
    assert state.players[0].scopa_count == 0
    assert state.players[0].scopa_cards == []


def test_apply_rejects_card_not_in_hand() -> None:
    state = _state(hand="5D", table="5B", deck="10D")
    with pytest.raises(InvalidOperationError):
        apply_move(state, Move(0, Card.parse("5C"), MoveType.CAPTURE_EQUAL, cards("5B")))
    assert state.table == cards("5B")
    assert state.players[0].hand == cards("5D")


def test_apply_rejects_capture_not_on_table() -> None:
    state = _state(hand="5D 9C", table="5B", deck="10D")
    with pytest.raises(InvalidOperationError):
        apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5S")))
    assert state.players[0].hand == cards("5D 9C")
    assert state.players[0].captured == []
    assert state.current_player == 0


def test_apply_rejects_after_round_end() -> None:
    state = _state(hand="5D", table="5B", deck="10D")
    state.round_ended = True
    with pytest.raises(InvalidOperationError):
        apply_move(state, Move(0, Card.parse("5D"), MoveType.CAPTURE_EQUAL, cards("5B")))


def test_removing_missing_card_raises() -> None:
    state = _state(hand="5D", table="5B")
    with pytest.raises(InvalidOperationError):
        state.remove_from_table(Card.parse("9S"))
    with pytest.raises(InvalidOperationError):
        state.players[0].remove_from_hand(Card.parse("9S"))
    with pytest.raises(InvalidOperationError):
        state.add_to_table(Card.parse("5B"))


def test_move_validation_and_equality() -> None:
    with pytest.raises(ValueError):
        Move(0, Card.parse("5D"), MoveType.PLAY_ONLY, cards("5B"))
    with pytest.raises(ValueError):
        Move(0, Card.parse("5D"), MoveType.CAPTURE_SUM)
    a = Move(0, Card.parse("7D"), MoveType.CAPTURE_SUM, cards("3B 4S"))
    b = Move(0, Card.parse("7D"), MoveType.CAPTURE_SUM, cards("4S 3B"))
    assert a == b
    assert hash(a) == hash(b)
    assert a != Move(0, Card.parse("7D"), MoveType.CAPTURE_15, cards("3B 4S"))
