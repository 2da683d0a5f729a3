"""Card and Suit types for the Italian 40-card deck."""

from dataclasses import dataclass
from enum import Enum


class Suit(str, Enum):
    """Card suits."""

    DENARI = "denari"
    COPPE = "coppe"
    BASTONI = "bastoni"
    SPADE = "spade"

    @property
    def code(self) -> str:
        return self.value[0].upper()


RANKS = tuple(range(1, 11))

RANK_NAMES = {1: "Ace", 8: "Fante", 9: "Cavallo", 10: "Re"}

PRIMIERA_VALUES = {
    7: 21,
    6: 18,
    1: 16,
    5: 15,
    4: 14,
    3: 13,
    2: 12,
    8: 10,
    9: 10,
    10: 10,
}

_SUIT_BY_CODE = {s.code: s for s in Suit}


@dataclass(frozen=True)
class Card:
    """A card of the Italian deck.

    rank is 1-10: 1 = Ace, 2-7 numerals, 8 = Fante, 9 = Cavallo, 10 = Re.
    The 7 of Coppe is the Matta (wild when played from hand).
    """

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit!r}")
        if not isinstance(self.rank, int) or self.rank not in RANKS:
            raise ValueError(f"Invalid rank {self.rank!r}. Must be 1-10.")

    @property
    def value(self) -> int:
        """Arithmetic value used for equal/sum/15 captures."""
        return self.rank

    @property
    def is_ace(self) -> bool:
        return self.rank == 1

    @property
    def is_matta(self) -> bool:
        return self.suit == Suit.COPPE and self.rank == 7

    @property
    def is_sette_bello(self) -> bool:
        return self.suit == Suit.DENARI and self.rank == 7

    @property
    def primiera_value(self) -> int:
        return PRIMIERA_VALUES[self.rank]

    @property
    def code(self) -> str:
        """Short form such as '7D' or '10S'."""
        return f"{self.rank}{self.suit.code}"

    @classmethod
    def parse(cls, text: str) -> "Card":
        """Build a card from its short form ('7D', '1c', '10S')."""
        text = text.strip().upper()
        if len(text) < 2 or text[-1] not in _SUIT_BY_CODE or not text[:-1].isdigit():
            raise ValueError(f"Invalid card code: {text!r}")
        return cls(suit=_SUIT_BY_CODE[text[-1]], rank=int(text[:-1]))

    def __str__(self) -> str:
        name = RANK_NAMES.get(self.rank, str(self.rank))
        return f"{name} of {self.suit.value.capitalize()}"


def cards(codes: str) -> list[Card]:
    """Parse a whitespace-separated list of card codes."""
    return [Card.parse(c) for c in codes.split()]
