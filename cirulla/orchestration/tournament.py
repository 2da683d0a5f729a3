"""Tournament - run many matches and aggregate results."""

import random
from collections import defaultdict
from typing import Any, Optional

from cirulla.orchestration.game_runner import GameRunner, MatchConfig


def run_tournament(
    agents: dict[str, Any],
    num_games: int = 100,
    seed: int | None = None,
    config: Optional[MatchConfig] = None,
) -> dict[str, int]:
    """Play ``num_games`` matches between the same agents.

    Seating is reversed every other match so nobody keeps the same
    neighbours throughout.

    Returns:
        Dict mapping player_id to number of wins (players with no wins
        are listed with 0).
    """
    player_ids = list(agents.keys())
    wins: dict[str, int] = defaultdict(int)
    for pid in player_ids:
        wins[pid] = 0

    rng = random.Random(seed)
    for g in range(num_games):
        order = player_ids if g % 2 == 0 else list(reversed(player_ids))
        ordered_agents = {pid: agents[pid] for pid in order}
        runner = GameRunner(ordered_agents, seed=rng.randint(0, 2**31 - 1), config=config)
        result = runner.run()
        if result.winner:
            wins[result.winner] += 1

    return dict(wins)
