"""LLM agent using OpenAI library with OpenRouter, Groq, Ollama or HuggingFace."""

import json
import os
import re
import time
from collections import deque
from typing import Optional

from openai import OpenAI

from cirulla.agents.ai_agent import CirullaAI, Difficulty
from cirulla.agents.human_agent import describe_move
from cirulla.engine import GameState, Move, PlayerView

OLLAMA_BASE = "http://localhost:11434/v1"

# provider -> (base URL, env var holding the API key)
PROVIDERS = {
    "openrouter": ("https://openrouter.ai/api/v1", "OPENROUTER_API_KEY"),
    "groq": ("https://api.groq.com/openai/v1", "GROQ_API_KEY"),
    "huggingface": ("https://router.huggingface.co/v1", "HUGGINGFACE_API_KEY"),
}

MAX_ATTEMPTS = 3

RULES_SUMMARY = """You are playing Cirulla (also called "51"), an Italian card game of the Scopa family.
Objective: score points by capturing cards. A card captures a table card of equal value,
table cards summing to its value, or table cards that together with it make 15.
An Ace takes a table Ace, or the whole table if there is none. The 7 of Coppe (Matta) is wild.
Clearing the table is a scopa (1 point). At the end of each round points go to: each scopa,
the 7 of Denari (Sette Bello), most Denari, most cards, best Primiera (7s, 6s and Aces are best),
Grande (Denari 8-9-10) and Piccola (Denari 1-2-3). First to 51 wins."""


def _format_player_view(pv: PlayerView, player_index: int) -> str:
    """Format player view as text for the LLM."""
    lines = [
        "=== Your hand ===",
        ", ".join(str(c) for c in pv.my_hand),
        "",
        "=== Table ===",
        ", ".join(str(c) for c in pv.table) if pv.table else "empty",
        "",
        "=== Cards left in the deck ===",
        str(pv.deck_size),
        "",
        "=== Players ===",
    ]
    for idx, count in pv.num_cards_per_player.items():
        who = "you" if idx == player_index else f"player_{idx}"
        lines.append(
            f"  {who}: {count} cards in hand, {pv.captured_counts[idx]} captured, "
            f"{pv.scopa_counts[idx]} scope, total score {pv.total_scores[idx]}"
        )
    lines.extend([
        "",
        "=== Dealer ===",
        f"player_{pv.dealer_index}",
        "",
        "=== Game History (last 10 events) ===",
    ])
    if pv.history:
        lines.extend(f"- {h}" for h in pv.history)
    else:
        lines.append("No history yet.")
    return "\n".join(lines)


def _format_legal_moves(moves: list[Move]) -> str:
    """Format legal moves as text."""
    return "\n".join(f"{i}: {describe_move(m)}" for i, m in enumerate(moves))


def _index_to_move(idx: int, moves: list[Move], source: str) -> Move | None:
    if 0 <= idx < len(moves):
        return moves[idx]
    print(f"[_parse_move_response] Index {idx} out of range (0-{len(moves)-1}){source}")
    return None


def _parse_move_response(response: str, moves: list[Move]) -> Move | None:
    """Parse LLM response into a Move."""
    json_match = re.search(r'(\{.*?\})', response, re.DOTALL)
    if json_match:
        json_str = json_match.group(1)
        for candidate in (json_str, json_str.replace("'", '"')):
            try:
                data = json.loads(candidate)
            except (json.JSONDecodeError, ValueError):
                continue
            if isinstance(data, dict) and "move_index" in data:
                try:
                    idx = int(data["move_index"])
                except (TypeError, ValueError):
                    break
                move = _index_to_move(idx, moves, "")
                if move is not None:
                    return move
            break

    match = re.search(r'["\']?move_index["\']?\s*:\s*(\d+)', response, re.IGNORECASE)
    if match:
        move = _index_to_move(int(match.group(1)), moves, " from regex")
        if move is not None:
            return move

    # bare number
    cleaned_response = re.sub(r'[{}\[\]"\'.,:]', ' ', response)
    for word in cleaned_response.split():
        if word.isdigit():
            idx = int(word)
            if 0 <= idx < len(moves):
                return moves[idx]

    return None


def _resolve_provider(provider: str, api_key: Optional[str]) -> tuple[str, str]:
    """Base URL and API key for a provider name."""
    if provider == "ollama":
        return os.environ.get("OLLAMA_BASE_URL", OLLAMA_BASE), "ollama"
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider: {provider}. Choose from {', '.join([*PROVIDERS, 'ollama'])}.")
    base_url, env_var = PROVIDERS[provider]
    key = api_key or os.environ.get(env_var)
    if not key:
        raise ValueError(f"No API key for {provider}: set {env_var} or pass api_key.")
    return base_url, key


class LLMAgent:
    """Agent that uses an LLM to choose moves."""

    def __init__(
        self,
        provider: str = "openrouter",
        model: str = "openai/gpt-4o-mini",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        rate_limit: Optional[float] = None,
        fallback_difficulty: Difficulty = Difficulty.MEDIUM,
    ):
        base_url, key = _resolve_provider(provider, api_key)

        self._client = OpenAI(api_key=key, base_url=base_url)
        self._model = model
        self._timeout = timeout
        self._provider = provider
        self._rate_limit = rate_limit
        self._recent_requests: deque[float] = deque()
        self._fallback = CirullaAI(fallback_difficulty)

        print(f"[{self.name}] Initialized with provider={provider}, base_url={base_url}, timeout={timeout}s, rate_limit={rate_limit or 'None'} rpm")

    @property
    def name(self) -> str:
        return f"llm-{self._model}"

    def _wait_for_rate_limit(self) -> None:
        """Sleep until another request fits in the per-minute budget."""
        if not self._rate_limit:
            return

        window_start = time.time() - 60.0
        while self._recent_requests and self._recent_requests[0] < window_start:
            self._recent_requests.popleft()

        if len(self._recent_requests) >= self._rate_limit:
            wait_time = self._recent_requests[0] - window_start
            print(f"[{self.name}] {len(self._recent_requests)} requests in the last minute, pausing {wait_time:.2f}s")
            time.sleep(wait_time)

        self._recent_requests.append(time.time())

    def _build_prompt(self, player_view: PlayerView, legal_moves: list[Move], player_index: int) -> str:
        return f"""{RULES_SUMMARY}

{_format_player_view(player_view, player_index)}

=== Legal moves ===
{_format_legal_moves(legal_moves)}

INSTRUCTIONS:
Select the best move to win the game.
Respond with a JSON object containing the index of your chosen move.
Example: {{"move_index": 2}}
"""

    def get_move(
        self,
        player_view: PlayerView,
        legal_moves: list[Move],
        player_index: int,
        state: Optional[GameState] = None,
    ) -> Move | None:
        if not legal_moves:
            return None
        if len(legal_moves) == 1:
            return legal_moves[0]

        prompt = self._build_prompt(player_view, legal_moves, player_index)

        for attempt in range(1, MAX_ATTEMPTS + 1):
            start_time = time.time()
            try:
                self._wait_for_rate_limit()

                kwargs = {
                    "model": self._model,
                    "messages": [{"role": "user", "content": prompt}],
                    "timeout": self._timeout,
                }
                if "gpt-4" in self._model or "gpt-3.5" in self._model or "groq" in self._provider:
                    kwargs["response_format"] = {"type": "json_object"}

                print(f"[{self.name}] Attempt {attempt}: Sending request to {self._provider} (timeout={self._timeout}s)...")
                resp = self._client.chat.completions.create(**kwargs)

                duration = time.time() - start_time
                content = resp.choices[0].message.content or ""
                print(f"[{self.name}] Received response in {duration:.2f}s")

                move = _parse_move_response(content, legal_moves)
                if move is not None:
                    return move

                print(f"[{self.name}] Failed to parse move from response:")
                print("-" * 40)
                print(content)
                print("-" * 40)
            except Exception as e:
                duration = time.time() - start_time
                print(f"[{self.name}] Error on attempt {attempt} after {duration:.2f}s: {type(e).__name__}: {e}")

        print(f"[{self.name}] All retries failed. Falling back to {self._fallback.name}.")
        return self._fallback.get_move(player_view, legal_moves, player_index, state)
