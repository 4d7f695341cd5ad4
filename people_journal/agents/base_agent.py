from abc import ABC, abstractmethod
from typing import Any
import logging

from ..services.llm_provider import LLMProvider

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Base class for agents that turn journal data into a prompt and call the LLM"""

    def __init__(self, llm_provider: LLMProvider):
        self.llm_provider = llm_provider

    @abstractmethod
    def build_prompt(self, *args: Any, **kwargs: Any) -> str:
        """Return the full prompt for this agent"""
        pass

    @abstractmethod
    async def execute(self, **kwargs) -> Any:
        """Execute the agent's main functionality"""
        pass

    async def _call_llm(self, prompt: str) -> str:
        logger.info(
            f"{type(self).__name__} sending {len(prompt)} chars to {self.llm_provider.name}"
        )
        return await self.llm_provider.complete(prompt)
