"""Agent protocol - interface that AI, LLM and human agents implement."""

from typing import Optional, Protocol

from cirulla.engine import GameState, Move, PlayerView


class AgentProtocol(Protocol):
    """Interface for Cirulla-playing agents."""

    @property
    def name(self) -> str:
        """Display name for the agent."""
        ...

    def get_move(
        self,
        player_view: PlayerView,
        legal_moves: list[Move],
        player_index: int,
        state: Optional[GameState] = None,
    ) -> Move | None:
        """Choose a move given the player view and legal moves.

        Args:
            player_view: Filtered view with only this player's hand and public info.
            legal_moves: List of valid moves to choose from.
            player_index: This agent's seat.
            state: Full state, passed by the runner for agents that simulate
                the next player (the heuristic AI). Others should ignore it.

        Returns:
            One of the legal moves, or None to let the runner pick the first.
        """
        ...
