"""CLI entry point."""

from __future__ import annotations

from typing import Optional

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(help="Cirulla (51) with heuristic, LLM and human agents")


def _parse_agents(
    agent_specs: str,
    llm_provider: str,
    llm_model: str,
    seed: Optional[int] = None,
) -> dict[str, "AgentProtocol"]:
    from cirulla.agent.protocol import AgentProtocol
    from cirulla.agents.ai_agent import CirullaAI, Difficulty
    from cirulla.agents.human_agent import HumanAgent
    from cirulla.agents.llm_agent import LLMAgent

    parts = [s.strip().lower() for s in agent_specs.split(",") if s.strip()]
    if not 2 <= len(parts) <= 4:
        raise typer.BadParameter(f"Cirulla needs 2-4 players, got {len(parts)}.")

    agents: dict[str, AgentProtocol] = {}
    for i, part in enumerate(parts):
        pid = f"player_{i}"
        kind, _, option = part.partition(":")

        if kind == "ai":
            try:
                difficulty = Difficulty(option or Difficulty.MEDIUM.value)
            except ValueError:
                raise typer.BadParameter(f"Unknown AI difficulty: {option}. Use easy, medium or hard.") from None
            ai_seed = None if seed is None else seed + i
            agents[pid] = CirullaAI(difficulty, seed=ai_seed, name=f"AI_{i}_{difficulty.value}")
        elif kind == "llm":
            agents[pid] = LLMAgent(provider=llm_provider, model=option or llm_model)
        elif kind == "human":
            agents[pid] = HumanAgent(name=f"Human_{i}")
        else:
            raise typer.BadParameter(f"Unknown agent type: {kind}. Use 'ai', 'llm' or 'human'.")
    return agents


def _print_smazzata(number: int, manager) -> None:
    from cirulla.engine import score_breakdown

    state = manager.state
    typer.echo(f"\n=== Smazzata {number} (dealer player_{state.dealer_index}) ===")
    if manager.cappotto_player is not None:
        typer.echo(f"  player_{manager.cappotto_player} made CAPPOTTO!")
    else:
        for p, d in zip(state.players, score_breakdown(state)):
            typer.echo(
                f"  player_{p.index}: scope {d.scope}, settebello {d.sette_bello}, "
                f"denari {d.denari_count} (+{d.denari}), carte {d.cards_count} (+{d.carte}), "
                f"primiera {d.primiera_score} (+{d.primiera}), grande +{d.grande}, "
                f"piccola +{d.piccola}, accusi +{p.accusi_points}"
            )
    typer.echo("  Totals: " + ", ".join(f"player_{p.index}={p.total_score}" for p in state.players))


@app.command()
def play(
    agents: str = typer.Option(
        "ai:hard,human",
        "--agents",
        "-a",
        help="Comma-separated: ai[:easy|medium|hard], human, llm or llm:model_name (e.g. ai:hard,human,llm:llama3)",
    ),
    target: int = typer.Option(51, "--target", "-t", help="Score needed to win the match"),
    llm_provider: str = typer.Option(
        "openrouter",
        "--llm-provider",
        "-p",
        help="LLM provider: openrouter, groq, ollama or huggingface",
    ),
    llm_model: str = typer.Option(
        "openai/gpt-4o-mini",
        "--llm-model",
        "-m",
        help="Model name (e.g. openai/gpt-4o-mini, meta-llama/llama-3-8b-instruct)",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
) -> None:
    """Play a single match to the target score."""
    from cirulla.orchestration.game_runner import GameRunner, MatchConfig

    agent_map = _parse_agents(agents, llm_provider, llm_model, seed)
    runner = GameRunner(
        agent_map,
        seed=seed,
        config=MatchConfig(target_score=target),
        on_smazzata_end=_print_smazzata,
    )
    result = runner.run()
    typer.echo(f"\nWinner: {result.winner or 'None (no winner)'}{' by cappotto' if result.cappotto else ''}")
    typer.echo(f"Smazzate: {result.num_smazzate}, turns: {result.num_turns}")


@app.command()
def tournament(
    agents: str = typer.Option(
        "ai:medium,ai:hard",
        "--agents",
        "-a",
        help="Comma-separated agent specs (e.g. ai:easy,ai:hard,llm:gpt-4o)",
    ),
    games: int = typer.Option(100, "--games", "-g", help="Number of matches"),
    target: int = typer.Option(51, "--target", "-t", help="Score needed to win a match"),
    llm_provider: str = typer.Option(
        "openrouter",
        "--llm-provider",
        "-p",
        help="LLM provider: openrouter, groq, ollama or huggingface",
    ),
    llm_model: str = typer.Option(
        "openai/gpt-4o-mini",
        "--llm-model",
        "-m",
        help="Model name",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
) -> None:
    """Run a tournament."""
    from cirulla.orchestration.game_runner import MatchConfig
    from cirulla.orchestration.tournament import run_tournament

    agent_map = _parse_agents(agents, llm_provider, llm_model, seed)
    wins = run_tournament(agent_map, num_games=games, seed=seed, config=MatchConfig(target_score=target))
    typer.echo("Tournament results:")
    for pid, w in sorted(wins.items(), key=lambda x: -x[1]):
        typer.echo(f"  {pid} ({agent_map[pid].name}): {w} wins")


if __name__ == "__main__":
    app()
