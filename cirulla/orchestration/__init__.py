"""Match orchestration."""

from cirulla.orchestration.game_runner import GameRunner, MatchConfig, MatchResult
from cirulla.orchestration.tournament import run_tournament

__all__ = ["GameRunner", "MatchConfig", "MatchResult", "run_tournament"]
