"""Smazzata orchestration: deal, accusi, redeals, settlement and cappotto."""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from cirulla.engine import rules
from cirulla.engine.accusi import AccusoType, best_accuso, is_cirulla, is_decino
from cirulla.engine.card import RANKS, Card, Suit
from cirulla.engine.errors import InvalidOperationError
from cirulla.engine.game_state import GameState
from cirulla.engine.rules import Move
from cirulla.engine.scoring import calculate_smazzata_scores


class RoundPhase(str, Enum):
    """Lifecycle of one smazzata."""

    DEALT = "dealt"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass
class RoundConfig:
    """Table rules that vary between groups of players."""

    # Sum of the opening table -> points for the dealer, who sweeps the table
    dealer_bonus: Dict[int, int] = field(default_factory=lambda: {15: 1, 30: 1})
    # When True a Matta on the opening table may count as any value 1-10
    dealer_matta_wild: bool = False
    cappotto_suit: Suit = Suit.DENARI
    cappotto_points: int = 1000
    auto_declare_accusi: bool = True


class RoundManager:
    """Drives one smazzata over a GameState it owns."""

    def __init__(
        self,
        state: GameState,
        rng: Optional[random.Random] = None,
        config: Optional[RoundConfig] = None,
    ):
        if state is None:
            raise ValueError("RoundManager needs a GameState")
        self.state = state
        self.config = config or RoundConfig()
        self._rng = rng or random.Random()
        self._moves_played = 0
        self.cappotto_player: Optional[int] = None
        self.last_scores: Optional[List[int]] = None

    @property
    def phase(self) -> RoundPhase:
        if self.state.round_ended:
            return RoundPhase.ENDED
        return RoundPhase.PLAYING if self._moves_played else RoundPhase.DEALT

    @property
    def is_over(self) -> bool:
        return self.state.round_ended

    def start_smazzata(self, deck: Optional[Sequence[Card]] = None) -> None:
        """Deal, declare accusi for every hand, then check the dealer's opening bonus."""
        state = self.state
        rules.deal_initial_cards(state, rng=self._rng, deck=deck)
        state.round_ended = False
        state.last_capture_player = -1
        for player in state.players:
            player.accusi_points = 0
            player.declared_accusi.clear()
        self._moves_played = 0
        self.cappotto_player = None
        self.last_scores = None

        if self.config.auto_declare_accusi:
            self.auto_declare_accusi()
        self.process_dealer_bonus()

    def valid_moves(self) -> List[Move]:
        return rules.get_valid_moves(self.state, self.state.current_player)

    def process_dealer_bonus(self) -> int:
        """Award the dealer's opening bonus if the table sums to a bonus target.

        Returns the points awarded (0 when the table does not qualify).
        Only valid right after the deal, before any move.
        """
        if self.phase != RoundPhase.DEALT:
            raise InvalidOperationError("The dealer bonus can only be checked before the first move")
        state = self.state
        table = state.table
        if not table:
            return 0

        if self.config.dealer_matta_wild and any(c.is_matta for c in table):
            base = sum(c.value for c in table if not c.is_matta)
            totals = [base + v for v in RANKS]
        else:
            totals = [sum(c.value for c in table)]

        points = next((self.config.dealer_bonus[t] for t in totals if t in self.config.dealer_bonus), 0)
        if not points:
            return 0

        dealer = state.players[state.dealer_index]
        dealer.accusi_points += points
        swept = list(table)
        dealer.add_captured(swept)
        table.clear()
        state.last_capture_player = state.dealer_index
        state.log(
            f"player_{state.dealer_index} (dealer) takes the opening table "
            f"({', '.join(str(c) for c in swept)}) for {points} point(s)"
        )
        return points

    def _claimed_on_current_hand(self, player_index: int) -> int:
        player = self.state.players[player_index]
        hand = frozenset(c.code for c in player.hand)
        return max(
            (AccusoType[name].points for name, codes in player.declared_accusi if frozenset(codes) == hand),
            default=0,
        )

    def try_player_accuso(self, player_index: int, accuso_type: AccusoType) -> bool:
        """Declare an accuso for a player's current hand.

        Succeeds only if the hand qualifies and nothing worth as much was
        already claimed on this hand; a Decino after a Cirulla adds the
        difference. Returns False (changing nothing) otherwise.
        """
        accuso_type = AccusoType(accuso_type)
        state = self.state
        if state.round_ended:
            return False

        player = state.players[player_index]
        checker = is_decino if accuso_type == AccusoType.DECINO else is_cirulla
        if not checker(player.hand):
            return False

        claimed = self._claimed_on_current_hand(player_index)
        if accuso_type.points <= claimed:
            return False

        player.accusi_points += accuso_type.points - claimed
        player.declared_accusi.append((accuso_type.name, tuple(c.code for c in player.hand)))
        state.log(
            f"player_{player_index} declared {accuso_type.name} "
            f"({', '.join(str(c) for c in player.hand)})"
        )
        return True

    def auto_declare_accusi(self) -> List[Tuple[int, AccusoType]]:
        """Declare the best accuso of every hand; Decino takes priority over Cirulla."""
        declared = []
        for player in self.state.players:
            accuso = best_accuso(player.hand)
            if accuso is not None and self.try_player_accuso(player.index, accuso):
                declared.append((player.index, accuso))
        return declared

    def apply_move(self, move: Move) -> None:
        """Apply a move, then handle cappotto, redeals and the end of the smazzata."""
        state = self.state
        rules.apply_move(state, move)
        self._moves_played += 1

        winner = self._find_cappotto()
        if winner is not None:
            self._award_cappotto(winner)
            return

        if not state.hands_empty():
            return

        if state.deck:
            rules.deal_hands(state)
            state.log(f"new hands dealt, {len(state.deck)} cards left in the deck")
            if self.config.auto_declare_accusi:
                self.auto_declare_accusi()
        else:
            self.end_smazzata()

    def end_smazzata(self) -> List[int]:
        """Settle the smazzata and add the points to every player's total.

        Remaining table cards go to the last player who captured. Returns the
        smazzata points per player (category points plus accusi).
        """
        state = self.state
        if state.round_ended:
            raise InvalidOperationError("The smazzata has already ended")

        if state.table and state.last_capture_player >= 0:
            taker = state.players[state.last_capture_player]
            taker.add_captured(state.table)
            state.log(f"player_{taker.index} takes the last {len(state.table)} table card(s)")
            state.table.clear()

        winner = self._find_cappotto()
        if winner is not None:
            return self._award_cappotto(winner)

        points = calculate_smazzata_scores(state)
        for i, player in enumerate(state.players):
            points[i] += player.accusi_points
            player.total_score += points[i]

        state.round_ended = True
        self.last_scores = points
        state.log("smazzata over: " + ", ".join(f"player_{i} +{p}" for i, p in enumerate(points)))
        return points

    def _find_cappotto(self) -> Optional[int]:
        """Index of a player holding all ten cards of the cappotto suit, if any."""
        suit = self.config.cappotto_suit
        for player in self.state.players:
            ranks = {c.rank for c in player.captured if c.suit == suit}
            if len(ranks) == len(RANKS):
                return player.index
        return None

    def _award_cappotto(self, winner: int) -> List[int]:
        state = self.state
        bonus = self.config.cappotto_points
        state.players[winner].total_score += bonus
        state.round_ended = True
        self.cappotto_player = winner
        self.last_scores = [bonus if i == winner else 0 for i in range(state.num_players)]
        state.log(f"player_{winner} made CAPPOTTO!")
        return self.last_scores
