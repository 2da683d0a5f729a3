"""Simulate a match with random agents against a hard AI."""

import random
from typing import Optional

from cirulla.agents import CirullaAI, Difficulty
from cirulla.engine import GameState, Move, PlayerView
from cirulla.orchestration.game_runner import GameRunner


class RandomAgent:
    def __init__(self, name, seed=None):
        self.name = name
        self._rng = random.Random(seed)

    def get_move(
        self,
        view: PlayerView,
        moves: list[Move],
        player_index: int,
        state: Optional[GameState] = None,
    ) -> Move | None:
        if not moves:
            return None

        # Log the last event to see the game progress
        if view.history:
            print(f"> {view.history[-1]}")

        # Prefer captures to make the match interesting
        captures = [m for m in moves if m.is_capture]
        return self._rng.choice(captures or moves)


def main():
    agents = {
        "p1": RandomAgent("Bot1", seed=1),
        "p2": CirullaAI(Difficulty.HARD, seed=2),
        "p3": RandomAgent("Bot3", seed=3),
        "p4": CirullaAI(Difficulty.MEDIUM, seed=4),
    }

    runner = GameRunner(agents, seed=42)
    result = runner.run()

    print(f"Match finished! Winner: {result.winner}")
    print(f"Totals: {dict(zip(result.player_ids, result.totals))}")
    print(f"Smazzate: {result.num_smazzate}, turns: {result.num_turns}")

    if runner.last_state is not None:
        print("\nLast smazzata:")
        for event in runner.last_state.history:
            print(f"  {event}")


if __name__ == "__main__":
    main()
