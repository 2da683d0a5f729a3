"""Match runner: smazzate until someone reaches the target score."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from cirulla.engine import GameState, PlayerView, RoundConfig, RoundManager

if TYPE_CHECKING:
    from cirulla.agent.protocol import AgentProtocol

DEFAULT_TARGET_SCORE = 51


@dataclass
class MatchConfig:
    """Match-level settings."""

    target_score: int = DEFAULT_TARGET_SCORE
    max_smazzate: int = 100
    round_config: RoundConfig = field(default_factory=RoundConfig)


@dataclass
class MatchResult:
    """Result of a completed match."""

    winner: Optional[str]
    totals: tuple[int, ...]
    num_smazzate: int
    num_turns: int
    cappotto: bool
    player_ids: tuple[str, ...]


def _unique_leader(totals: list[int]) -> Optional[int]:
    top = max(totals)
    if totals.count(top) != 1:
        return None
    return totals.index(top)


class GameRunner:
    """Runs a Cirulla match to completion.

    Seats follow the order of ``agents``; the first dealer is drawn from the
    seeded RNG and the deal passes to the next player after each smazzata.
    """

    def __init__(
        self,
        agents: dict[str, "AgentProtocol"],
        seed: Optional[int] = None,
        config: Optional[MatchConfig] = None,
        on_smazzata_end: Optional[Callable[[int, RoundManager], None]] = None,
    ):
        self._agents = agents
        self._seed = seed
        self._config = config or MatchConfig()
        self._on_smazzata_end = on_smazzata_end
        self.last_state: Optional[GameState] = None

    def _play_smazzata(self, manager: RoundManager, player_ids: list[str]) -> int:
        """Play one smazzata to its end; returns the number of moves made."""
        state = manager.state
        num_turns = 0
        while not manager.is_over:
            idx = state.current_player
            legal = manager.valid_moves()
            if not legal:
                manager.end_smazzata()
                break

            agent = self._agents[player_ids[idx]]
            player_view = PlayerView.from_state(state, idx)
            move = agent.get_move(player_view, legal, idx, state)
            if move is None or move not in legal:
                move = legal[0]

            manager.apply_move(move)
            num_turns += 1
        return num_turns

    def run(self) -> MatchResult:
        """Run the match and return the result."""
        player_ids = list(self._agents.keys())
        n = len(player_ids)
        rng = random.Random(self._seed)
        dealer = rng.randrange(n)
        totals = [0] * n
        num_turns = 0
        winner: Optional[int] = None
        cappotto = False

        num_smazzate = 0
        while num_smazzate < self._config.max_smazzate:
            num_smazzate += 1
            state = GameState(num_players=n, dealer_index=dealer)
            for player, total in zip(state.players, totals):
                player.total_score = total

            manager = RoundManager(state, rng=rng, config=self._config.round_config)
            manager.start_smazzata()
            num_turns += self._play_smazzata(manager, player_ids)

            self.last_state = state
            totals = [p.total_score for p in state.players]
            if self._on_smazzata_end is not None:
                self._on_smazzata_end(num_smazzate, manager)

            if manager.cappotto_player is not None:
                winner = manager.cappotto_player
                cappotto = True
                break

            leader = _unique_leader(totals)
            if leader is not None and totals[leader] >= self._config.target_score:
                winner = leader
                break

            dealer = state.next_player(dealer)

        return MatchResult(
            winner=player_ids[winner] if winner is not None else None,
            totals=tuple(totals),
            num_smazzate=num_smazzate,
            num_turns=num_turns,
            cappotto=cappotto,
            player_ids=tuple(player_ids),
        )
