"""Game state for Cirulla."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from cirulla.engine.card import Card, Suit
from cirulla.engine.errors import InvalidOperationError

MIN_PLAYERS = 2
MAX_PLAYERS = 4


def card_to_list(card: Card) -> list:
    return [card.suit.value, card.rank]


def card_from_list(data: list) -> Card:
    suit, rank = data
    return Card(suit=Suit(suit), rank=int(rank))


def _remove_card(cards: List[Card], card: Card, where: str) -> None:
    try:
        cards.remove(card)
    except ValueError:
        raise InvalidOperationError(f"{card} is not in {where}") from None


@dataclass
class PlayerState:
    """Mutable state of one seat for the current smazzata."""

    index: int
    hand: List[Card] = field(default_factory=list)
    captured: List[Card] = field(default_factory=list)
    scopa_count: int = 0
    scopa_cards: List[Card] = field(default_factory=list)  # played card of each scopa
    accusi_points: int = 0
    total_score: int = 0  # across smazzate, only ever incremented
    declared_accusi: List[tuple] = field(default_factory=list)  # (AccusoType name, hand codes)

    def add_to_hand(self, card: Card) -> None:
        if card in self.hand:
            raise InvalidOperationError(f"{card} is already in player {self.index}'s hand")
        self.hand.append(card)

    def remove_from_hand(self, card: Card) -> None:
        _remove_card(self.hand, card, f"player {self.index}'s hand")

    def add_captured(self, cards: Iterable[Card]) -> None:
        self.captured.extend(cards)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "hand": [card_to_list(c) for c in self.hand],
            "captured": [card_to_list(c) for c in self.captured],
            "scopa_count": self.scopa_count,
            "scopa_cards": [card_to_list(c) for c in self.scopa_cards],
            "accusi_points": self.accusi_points,
            "total_score": self.total_score,
            "declared_accusi": [[name, list(hand)] for name, hand in self.declared_accusi],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PlayerState":
        return cls(
            index=int(d["index"]),
            hand=[card_from_list(c) for c in d.get("hand", [])],
            captured=[card_from_list(c) for c in d.get("captured", [])],
            scopa_count=int(d.get("scopa_count", 0)),
            scopa_cards=[card_from_list(c) for c in d.get("scopa_cards", [])],
            accusi_points=int(d.get("accusi_points", 0)),
            total_score=int(d.get("total_score", 0)),
            declared_accusi=[(name, tuple(hand)) for name, hand in d.get("declared_accusi", [])],
        )


@dataclass
class GameState:
    """Mutable Cirulla state for one smazzata.

    The deck is drawn from the front. Turns move from ``idx`` to
    ``(idx - 1 + n) % n``, the same direction cards are dealt in.
    """

    num_players: int
    deck: List[Card] = field(default_factory=list)
    table: List[Card] = field(default_factory=list)
    players: List[PlayerState] = field(default_factory=list)
    current_player: int = 0
    dealer_index: int = 0
    last_capture_player: int = -1  # -1 = nobody captured yet
    round_ended: bool = False
    history: List[str] = field(default_factory=list)  # Log of events

    def __post_init__(self) -> None:
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(
                f"Cirulla is played by {MIN_PLAYERS}-{MAX_PLAYERS} players, got {self.num_players}"
            )
        if not self.players:
            self.players = [PlayerState(index=i) for i in range(self.num_players)]
        elif len(self.players) != self.num_players:
            raise ValueError("players list does not match num_players")

    def next_player(self, index: int) -> int:
        return (index - 1 + self.num_players) % self.num_players

    def first_to_play(self) -> int:
        """The player to the dealer's left, who receives cards and plays first."""
        return self.next_player(self.dealer_index)

    def advance_turn(self) -> None:
        self.current_player = self.next_player(self.current_player)

    def add_to_table(self, card: Card) -> None:
        if card in self.table:
            raise InvalidOperationError(f"{card} is already on the table")
        self.table.append(card)

    def remove_from_table(self, card: Card) -> None:
        _remove_card(self.table, card, "the table")

    def draw(self) -> Card:
        if not self.deck:
            raise InvalidOperationError("Cannot draw from an empty deck")
        return self.deck.pop(0)

    def hands_empty(self) -> bool:
        return all(not p.hand for p in self.players)

    def is_exhausted(self) -> bool:
        """True when every card has been played: empty deck and empty hands."""
        return not self.deck and self.hands_empty()

    def log(self, event: str) -> None:
        self.history.append(event)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the state into JSON-compatible lists and scalars."""
        return {
            "num_players": self.num_players,
            "deck": [card_to_list(c) for c in self.deck],
            "table": [card_to_list(c) for c in self.table],
            "players": [p.to_dict() for p in self.players],
            "current_player": self.current_player,
            "dealer_index": self.dealer_index,
            "last_capture_player": self.last_capture_player,
            "round_ended": self.round_ended,
            "history": list(self.history),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameState":
        return cls(
            num_players=int(d["num_players"]),
            deck=[card_from_list(c) for c in d.get("deck", [])],
            table=[card_from_list(c) for c in d.get("table", [])],
            players=[PlayerState.from_dict(p) for p in d["players"]],
            current_player=int(d.get("current_player", 0)),
            dealer_index=int(d.get("dealer_index", 0)),
            last_capture_player=int(d.get("last_capture_player", -1)),
            round_ended=bool(d.get("round_ended", False)),
            history=list(d.get("history", [])),
        )


@dataclass
class PlayerView:
    """Filtered game state visible to a single player.

    Contains only that player's hand and public info.
    """

    player_index: int
    my_hand: List[Card]
    table: List[Card]
    my_captured: List[Card]
    current_player: int
    dealer_index: int
    deck_size: int
    num_cards_per_player: Dict[int, int]  # player -> hand size
    captured_counts: Dict[int, int]
    scopa_counts: Dict[int, int]
    accusi_points: Dict[int, int]
    total_scores: Dict[int, int]
    history: List[str]  # Recent game events

    @classmethod
    def from_state(cls, state: GameState, player_index: int) -> "PlayerView":
        """Create a player view from full game state, hiding other players' hands."""
        players = state.players
        return cls(
            player_index=player_index,
            my_hand=list(players[player_index].hand),
            table=list(state.table),
            my_captured=list(players[player_index].captured),
            current_player=state.current_player,
            dealer_index=state.dealer_index,
            deck_size=len(state.deck),
            num_cards_per_player={p.index: len(p.hand) for p in players},
            captured_counts={p.index: len(p.captured) for p in players},
            scopa_counts={p.index: p.scopa_count for p in players},
            accusi_points={p.index: p.accusi_points for p in players},
            total_scores={p.index: p.total_score for p in players},
            history=list(state.history[-10:]),  # Last 10 events
        )
