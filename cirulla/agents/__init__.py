"""Built-in agents."""

from cirulla.agents.ai_agent import CirullaAI, Difficulty
from cirulla.agents.llm_agent import LLMAgent
from cirulla.agents.human_agent import HumanAgent

__all__ = ["CirullaAI", "Difficulty", "LLMAgent", "HumanAgent"]
