"""Deck creation and shuffling."""

import random
from typing import List, Optional

from cirulla.engine.card import RANKS, Card, Suit


def create_deck(seed: int | None = None, rng: Optional[random.Random] = None) -> List[Card]:
    """Create the 40-card Italian deck, shuffled.

    - 4 suits x ranks 1-10 (Ace .. Re)
    - Total: 40 cards, each combination exactly once

    Shuffling uses ``rng`` when given, otherwise a ``random.Random(seed)``.
    """
    cards: List[Card] = [Card(suit=suit, rank=rank) for suit in Suit for rank in RANKS]

    if rng is None:
        rng = random.Random(seed)
    rng.shuffle(cards)

    return cards
