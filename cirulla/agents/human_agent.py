"""Human agent - reads moves from terminal."""

from typing import Optional

from cirulla.engine import GameState, Move, PlayerView


def describe_move(move: Move) -> str:
    """Short one-line label for a move, without the player."""
    if not move.is_capture:
        return f"PLAY {move.played_card}"
    taken = ", ".join(str(c) for c in move.captured_cards)
    return f"PLAY {move.played_card} -> take {taken} [{move.move_type.value}]"


class HumanAgent:
    """Agent that prompts the human for input via terminal."""

    def __init__(self, name: str = "human"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get_move(
        self,
        player_view: PlayerView,
        legal_moves: list[Move],
        player_index: int,
        state: Optional[GameState] = None,
    ) -> Move | None:
        if not legal_moves:
            return None

        print("\n--- Your turn ---")
        print("Table:", ", ".join(str(c) for c in player_view.table) or "(empty)")
        print("Your hand:", ", ".join(str(c) for c in player_view.my_hand))
        print(f"Captured: {len(player_view.my_captured)} cards, scope: {player_view.scopa_counts[player_index]}")
        print("\nLegal moves:")
        for i, m in enumerate(legal_moves):
            print(f"  {i}: {describe_move(m)}")

        while True:
            try:
                raw = input("Enter number: ").strip()
                idx = int(raw)
                if 0 <= idx < len(legal_moves):
                    return legal_moves[idx]
            except ValueError:
                pass
            except EOFError:
                return None
            print("Invalid. Try again.")
