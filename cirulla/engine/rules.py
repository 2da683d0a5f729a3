"""Cirulla rules: dealing, legal moves and state transitions."""

import random
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from cirulla.engine.card import Card
from cirulla.engine.deck import create_deck
from cirulla.engine.errors import DealError, InvalidOperationError
from cirulla.engine.game_state import GameState, card_from_list, card_to_list

HAND_SIZE = 3
TABLE_SIZE = 4
CAPTURE_TOTAL = 15
MAX_DEAL_ATTEMPTS = 100


class MoveType(str, Enum):
    """Kinds of move a player can make."""

    PLAY_ONLY = "play_only"  # no capture, card goes on the table
    CAPTURE_EQUAL = "capture_equal"  # one table card of equal value
    CAPTURE_SUM = "capture_sum"  # 2+ table cards summing to the played value
    CAPTURE_15 = "capture_15"  # table cards that reach 15 with the played card
    ACE_CAPTURE = "ace_capture"  # Ace rule: one table Ace, or the whole table


@dataclass(frozen=True, eq=False)
class Move:
    """A move: the played card plus the table cards it takes.

    Equality is structural; captured cards compare as a multiset.
    """

    player_index: int
    played_card: Card
    move_type: MoveType
    captured_cards: Tuple[Card, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "captured_cards", tuple(self.captured_cards))
        if self.move_type == MoveType.PLAY_ONLY and self.captured_cards:
            raise ValueError("PlayOnly moves cannot capture cards")
        if self.move_type != MoveType.PLAY_ONLY and not self.captured_cards:
            raise ValueError(f"{self.move_type.value} move must capture at least one card")

    @property
    def is_capture(self) -> bool:
        return self.move_type != MoveType.PLAY_ONLY

    def captures_same(self, cards: Iterable[Card]) -> bool:
        return Counter(self.captured_cards) == Counter(cards)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return (
            self.player_index == other.player_index
            and self.move_type == other.move_type
            and self.played_card == other.played_card
            and self.captures_same(other.captured_cards)
        )

    def __hash__(self) -> int:
        return hash((
            self.player_index,
            self.move_type,
            self.played_card,
            frozenset(Counter(self.captured_cards).items()),
        ))

    def __str__(self) -> str:
        if not self.is_capture:
            return f"player_{self.player_index} played {self.played_card}"
        taken = ", ".join(str(c) for c in self.captured_cards)
        return f"player_{self.player_index} played {self.played_card} capturing {taken} [{self.move_type.value}]"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_index": self.player_index,
            "suit": self.played_card.suit.value,
            "rank": self.played_card.rank,
            "move_type": self.move_type.value,
            "captured": [card_to_list(c) for c in self.captured_cards],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Move":
        return cls(
            player_index=int(d["player_index"]),
            played_card=card_from_list([d["suit"], d["rank"]]),
            move_type=MoveType(d["move_type"]),
            captured_cards=tuple(card_from_list(c) for c in d.get("captured", [])),
        )


def deal_hands(state: GameState, count: int = HAND_SIZE) -> None:
    """Deal ``count`` cards to each player, one at a time, starting left of the dealer.

    Stops early if the deck runs out.
    """
    order = [state.first_to_play()]
    while len(order) < state.num_players:
        order.append(state.next_player(order[-1]))

    for _ in range(count):
        for idx in order:
            if not state.deck:
                return
            state.players[idx].add_to_hand(state.draw())


def deal_initial_cards(
    state: GameState,
    rng: Optional[random.Random] = None,
    deck: Optional[Sequence[Card]] = None,
    max_attempts: int = MAX_DEAL_ATTEMPTS,
) -> None:
    """Deal 3 cards to each player and 4 to the table.

    If the table ends up with two or more Aces the whole deal is redone. A
    given ``deck`` is used in its order for the first attempt and reshuffled
    on retries. Raises DealError when no valid deal was found.
    """
    rng = rng or random.Random()

    for attempt in range(1, max_attempts + 1):
        for player in state.players:
            player.hand.clear()
        state.table.clear()

        if deck is None:
            cards = create_deck(rng=rng)
        else:
            cards = list(deck)
            if attempt > 1:
                rng.shuffle(cards)
        if len(set(cards)) != len(cards):
            raise ValueError("Deck contains duplicate cards")
        if len(cards) < state.num_players * HAND_SIZE + TABLE_SIZE:
            raise ValueError(f"Deck too small for {state.num_players} players: {len(cards)} cards")
        state.deck = cards

        deal_hands(state)
        for _ in range(TABLE_SIZE):
            state.add_to_table(state.draw())

        if sum(1 for c in state.table if c.is_ace) < 2:
            break
    else:
        raise DealError(f"No valid deal after {max_attempts} attempts")

    state.current_player = state.first_to_play()
    state.log(
        f"player_{state.dealer_index} dealt; table: {', '.join(str(c) for c in state.table)}"
    )


def create_new_game(
    num_players: int = 4,
    seed: Optional[int] = None,
    dealer_index: Optional[int] = None,
    deck: Optional[Sequence[Card]] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Create a smazzata state and perform the initial deal."""
    rng = rng or random.Random(seed)
    state = GameState(num_players=num_players)
    if dealer_index is None:
        dealer_index = rng.randrange(num_players)
    elif not 0 <= dealer_index < num_players:
        raise ValueError(f"Invalid dealer index: {dealer_index}")
    state.dealer_index = dealer_index
    deal_initial_cards(state, rng=rng, deck=deck)
    return state


def _table_subsets(table: Sequence[Card], max_sum: int = CAPTURE_TOTAL - 1) -> List[Tuple[Tuple[Card, ...], int]]:
    """All non-empty subsets of table cards whose values sum to at most ``max_sum``.

    Subsets are taken over physical cards, so equal ranks give distinct subsets.
    Returned smallest first.
    """
    found: List[Tuple[Tuple[Card, ...], int]] = []

    def extend(start: int, chosen: Tuple[Card, ...], total: int) -> None:
        for i in range(start, len(table)):
            subtotal = total + table[i].value
            if subtotal > max_sum:
                continue
            subset = chosen + (table[i],)
            found.append((subset, subtotal))
            extend(i + 1, subset, subtotal)

    extend(0, (), 0)
    found.sort(key=lambda item: len(item[0]))
    return found


def _ace_moves(state: GameState, player_index: int, card: Card) -> List[Move]:
    """Ace rule: take one table Ace (one move per Ace), else the whole table."""
    aces = [c for c in state.table if c.is_ace]
    if aces:
        return [Move(player_index, card, MoveType.ACE_CAPTURE, (ace,)) for ace in aces]
    if state.table:
        return [Move(player_index, card, MoveType.ACE_CAPTURE, tuple(state.table))]
    return []


def _matta_moves(state: GameState, player_index: int, card: Card, subsets) -> List[Move]:
    """Every capture the Matta can realise for some value in 1..10."""
    moves = [Move(player_index, card, MoveType.CAPTURE_EQUAL, (t,)) for t in state.table]
    moves.extend(_ace_moves(state, player_index, card))

    for subset, total in subsets:
        if len(subset) < 2:
            continue
        # Matta worth ``total`` takes the subset as a sum
        if 1 <= total <= 10:
            moves.append(Move(player_index, card, MoveType.CAPTURE_SUM, subset))
        # Matta worth ``15 - total`` completes 15
        if 1 <= CAPTURE_TOTAL - total <= 10:
            moves.append(Move(player_index, card, MoveType.CAPTURE_15, subset))
    return moves


def _card_moves(state: GameState, player_index: int, card: Card, subsets) -> List[Move]:
    value = card.value
    moves = [
        Move(player_index, card, MoveType.CAPTURE_EQUAL, (t,))
        for t in state.table
        if t.value == value
    ]
    for subset, total in subsets:
        if len(subset) >= 2 and total == value:
            moves.append(Move(player_index, card, MoveType.CAPTURE_SUM, subset))
    for subset, total in subsets:
        if total == CAPTURE_TOTAL - value:
            moves.append(Move(player_index, card, MoveType.CAPTURE_15, subset))
    return moves


def get_valid_moves(state: GameState, player_index: int) -> List[Move]:
    """Return all legal moves for a player.

    Forced capture: PlayOnly moves are offered only when no card in the hand
    can capture anything.
    """
    if state.round_ended:
        return []

    hand = state.players[player_index].hand
    subsets = _table_subsets(state.table)

    moves: List[Move] = []
    seen = set()
    for card in hand:
        if card.is_matta:
            candidates = _matta_moves(state, player_index, card, subsets)
        elif card.is_ace:
            candidates = _ace_moves(state, player_index, card)
        else:
            candidates = _card_moves(state, player_index, card, subsets)
        for move in candidates:
            if move not in seen:
                seen.add(move)
                moves.append(move)

    if not moves:
        moves = [Move(player_index, card, MoveType.PLAY_ONLY) for card in hand]

    return moves


def apply_move(state: GameState, move: Move) -> None:
    """Apply a move in place.

    Everything is validated before the state is touched, so a rejected move
    leaves the state unchanged.
    """
    if state.round_ended:
        raise InvalidOperationError("The smazzata has ended; no further moves")

    player = state.players[move.player_index]
    if move.played_card not in player.hand:
        raise InvalidOperationError(
            f"Player {move.player_index} does not have {move.played_card} in hand"
        )
    missing = Counter(move.captured_cards) - Counter(state.table)
    if missing:
        raise InvalidOperationError(
            f"Not on the table: {', '.join(str(c) for c in missing)}"
        )

    player.remove_from_hand(move.played_card)

    if not move.is_capture:
        state.add_to_table(move.played_card)
        state.log(str(move))
    else:
        for card in move.captured_cards:
            state.remove_from_table(card)
        player.add_captured([move.played_card, *move.captured_cards])
        state.last_capture_player = move.player_index
        state.log(str(move))

        if not state.table and not state.is_exhausted():
            player.scopa_count += 1
            player.scopa_cards.append(move.played_card)
            state.log(f"player_{move.player_index} made SCOPA!")

    state.advance_turn()


def try_get_move_from_selection(
    state: GameState,
    player_index: int,
    played_card: Card,
    selected_table_cards: Optional[Iterable[Card]],
) -> Tuple[bool, Optional[Move]]:
    """Validate a manual selection of table cards for a played card.

    Returns (True, move) with the generator's own Move when the selection
    matches one candidate exactly (order-independent); an empty selection
    matches only a legal PlayOnly. Otherwise (False, None).
    """
    selection = list(selected_table_cards or [])
    for move in get_valid_moves(state, player_index):
        if move.played_card != played_card:
            continue
        if not move.is_capture:
            if not selection:
                return True, move
            continue
        if move.captures_same(selection):
            return True, move
    return False, None


_SELECTION_PRIORITY = (
    MoveType.CAPTURE_EQUAL,
    MoveType.CAPTURE_15,
    MoveType.CAPTURE_SUM,
    MoveType.ACE_CAPTURE,
)


def get_matching_moves_from_selection(
    state: GameState,
    player_index: int,
    played_card: Card,
    selected_table_cards: Optional[Iterable[Card]],
) -> List[Move]:
    """All candidates matching a selection, so a UI can offer the alternatives.

    With an empty selection and several captures available, only the moves of
    the highest-priority type present are returned
    (CaptureEqual, Capture15, CaptureSum, AceCapture).
    """
    selection = list(selected_table_cards or [])
    matches: List[Move] = []
    for move in get_valid_moves(state, player_index):
        if move.played_card != played_card:
            continue
        if not move.is_capture:
            if not selection:
                matches.append(move)
        elif not selection or move.captures_same(selection):
            matches.append(move)

    if not selection and len(matches) > 1:
        for move_type in _SELECTION_PRIORITY:
            of_type = [m for m in matches if m.move_type == move_type]
            if of_type:
                return of_type
    return matches
